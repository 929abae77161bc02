"""Sending HTML e-mail through the supported SMTP providers."""

from __future__ import annotations

import smtplib
import ssl

from matrixkit import logx

_CONTENT_TYPE_HTML = "Content-Type: text/html; charset=UTF-8"
_CONTENT_TYPE_PLAIN = "Content-Type: text/plain; charset=UTF-8"
_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def _split_host(host: str) -> tuple[str, int]:
    parts = host.split(":")
    if len(parts) != 2:
        raise ValueError(f"malformed mail server address, expected host:port: {host!r}")
    try:
        port = int(parts[1])
    except ValueError as exc:
        raise ValueError(f"malformed mail server port: {parts[1]!r}") from exc
    return parts[0], port


def _send_starttls(
    host: str, port: int, user: str, secret: str, recipients: list[str], message: bytes
) -> None:
    smtp = smtplib.SMTP(host, port)
    try:
        smtp.ehlo_or_helo_if_needed()
        encrypted = False
        if smtp.has_extn("starttls"):
            smtp.starttls(context=ssl.create_default_context())
            smtp.ehlo()
            encrypted = True
        if smtp.has_extn("auth"):
            if not encrypted and host not in _LOCAL_HOSTS:
                raise smtplib.SMTPException("unencrypted connection")
            smtp.login(user, secret)
        smtp.sendmail(user, recipients, message)
        smtp.quit()
    finally:
        smtp.close()


def _send_implicit_tls(
    host: str, port: int, user: str, secret: str, recipients: list[str], message: bytes
) -> None:
    smtp = smtplib.SMTP_SSL(host, port, context=ssl.create_default_context())
    try:
        smtp.ehlo_or_helo_if_needed()
        if smtp.has_extn("auth"):
            smtp.login(user, secret)
        smtp.sendmail(user, recipients, message)
        smtp.quit()
    finally:
        smtp.close()


def _send_by_qcloud(
    host: str, port: int, user: str, secret: str, to: str, sender_name: str, subject: str, body: str
) -> None:
    headers = {
        "From": f"{sender_name} <{user}>",
        "To": to,
        "Subject": subject,
        "Content-Type": "text/html; charset=UTF-8",
    }
    message = "".join(f"{key}: {value}\r\n" for key, value in headers.items()) + "\r\n" + body
    try:
        _send_implicit_tls(host, port, user, secret, [to], message.encode("utf-8"))
    except (smtplib.SMTPException, OSError) as exc:
        logx.error("Send email error:", exc)
        raise
    logx.info("Send mail success!")


def _send_to_mail(
    user: str,
    sender_name: str,
    secret: str,
    host: str,
    to: str,
    subject: str,
    body: str,
    mail_type: str,
) -> None:
    logx.debug("SendToMail:", {"user": user, "host": host, "to": to, "subject": subject})
    server, port = _split_host(host)
    content_type = _CONTENT_TYPE_HTML if mail_type == "html" else _CONTENT_TYPE_PLAIN
    message = (
        f"To: {to}\r\nFrom: {sender_name}<{user}>\r\nSubject: {subject}\r\n"
        f"{content_type}\r\n\r\n{body}"
    )
    recipients = to.split(";")
    if len(recipients) != 1:
        raise ValueError("sending to several recipients at once is not supported")
    if host.startswith("smtp.126"):
        _send_starttls(server, port, user, secret, recipients, message.encode("utf-8"))
        return
    if host.startswith("smtp.qcloudmail"):
        _send_by_qcloud(server, port, user, secret, recipients[0], sender_name, subject, body)
        return
    raise ValueError("unsupported email server")


def send_html_email(
    email: str,
    subject: str,
    send_user_name: str,
    body: str,
    server_user: str,
    server_pass: str,
    server_host: str,
    code: str = "",
) -> None:
    """Send an HTML message to one recipient.

    Only smtp.126 (STARTTLS) and smtp.qcloudmail (implicit TLS) hosts are
    supported; the host must be given as 'host:port'. Raises ValueError for a
    malformed host, several recipients or an unsupported server, and lets
    SMTP errors propagate. ``code`` is accepted but not used.
    """
    _send_to_mail(
        server_user.strip(),
        send_user_name,
        server_pass.strip(),
        server_host.strip(),
        email,
        subject,
        body,
        "html",
    )