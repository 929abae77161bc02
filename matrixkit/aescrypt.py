"""AES-CFB encryption with a key derived by hashing a passphrase."""

from __future__ import annotations

import hashlib
import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from matrixkit.fastconv import string_to_bytes

BLOCK_SIZE = 16

_AES192 = frozenset({"AES-192", "AES192", "AES-192-CBC", "AES192CBC"})
_AES256 = frozenset({"AES-256", "AES256", "AES-256-CBC", "AES256CBC"})
_PLAIN = frozenset({"NONE", "", "NULL", "NULL-CBC"})


def _derive_key(key: bytes, aes_algor: str) -> bytes:
    """Hash the key to the length the algorithm needs; empty means no encryption.

    Unrecognised algorithm names fall back to AES-128.
    """
    if not key:
        return b""
    name = aes_algor.upper()
    if name in _AES192:
        return hashlib.sha224(key).digest()[:24]
    if name in _AES256:
        return hashlib.sha256(key).digest()
    if name in _PLAIN:
        return b""
    return hashlib.md5(key).digest()


def encrypt(plaintext: bytes, key: str, aes_algor: str) -> bytes:
    """Encrypt with AES-CFB; the result is a random 16-byte IV followed by the ciphertext.

    An empty key or an algorithm of NONE/NULL returns the plaintext unchanged.
    """
    key_bytes = _derive_key(string_to_bytes(key), aes_algor)
    if not key_bytes:
        return bytes(plaintext)
    iv = os.urandom(BLOCK_SIZE)
    encryptor = Cipher(algorithms.AES(key_bytes), modes.CFB(iv)).encryptor()
    return iv + encryptor.update(bytes(plaintext)) + encryptor.finalize()


def decrypt(ciphertext: bytes, key: str, aes_algor: str) -> bytes:
    """Reverse :func:`encrypt`.

    Raises ValueError if encryption is in effect and the input is shorter
    than one block.
    """
    key_bytes = _derive_key(string_to_bytes(key), aes_algor)
    if not key_bytes:
        return bytes(ciphertext)
    if len(ciphertext) < BLOCK_SIZE:
        raise ValueError("ciphertext too short, must be at least 16 bytes")
    data = bytes(ciphertext)
    iv, body = data[:BLOCK_SIZE], data[BLOCK_SIZE:]
    decryptor = Cipher(algorithms.AES(key_bytes), modes.CFB(iv)).decryptor()
    return decryptor.update(body) + decryptor.finalize()