# matrixkit

Small building blocks for backend services: an in-process cache with
per-entry expiry, rate limiters and a circuit breaker, AES encryption
helpers, JSON and JWT helpers, a standard JSON response envelope, a
time-rotated log writer with JSON-lines loggers, a system load sampler, an
SMTP mail helper and an assortment of validation and ID-generation
functions.

## Installation

```
pip install matrixkit
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "matrixkit[test]"
pytest
```

## Modules at a glance

| Module | What it offers |
| --- | --- |
| `matrixkit.funcs` | IDs (`gen_id` ULIDs, `gen_tuuid`), random strings, MD5/SHA-1 helpers, e-mail / phone / port / endpoint / IPv4 checks, `memory_runout`, `get_env` |
| `matrixkit.timeutil` | Unix timestamps in seconds, milli-, micro- and nanoseconds, quarters, `time_str_to_utc_milli`, `get_current_timezone_offset` |
| `matrixkit.fastconv` | UTF-8 string/bytes conversion and `safe_split` / `safe_split_from_bytes` |
| `matrixkit.buffers` | `get_buffer` for pooled byte buffers in size classes from 64 B to 512 KiB |
| `matrixkit.localcache` | `LocalCache`, an LRU cache with a memory budget and default or per-entry lifetimes |
| `matrixkit.aescrypt` | `encrypt` / `decrypt` with AES in CFB mode and a hashed passphrase |
| `matrixkit.jsonx` | JSON encode/decode, dotted-path lookups, `is_json`, `get_jwt_token_claims` |
| `matrixkit.response` | `JsonResponse`, the API response envelope, and constructors for it |
| `matrixkit.behavior_limiter` | `UserBehaviorLimiter` for counting failed attempts |
| `matrixkit.block_limiter` | `BlockRateLimiterMgr` (waits until allowed), `is_in_ip_whitelist` |
| `matrixkit.unblock_limiter` | `UnBlockRateLimiter` and `UnBlockRateLimiterMgr` (refuse, then cool down) |
| `matrixkit.breaker` | `CircuitBreaker`, `TwoStepCircuitBreaker`, `Settings`, `State`, `Counts` |
| `matrixkit.rotating` | `RotatingWriter`, a log file that rotates on a timer |
| `matrixkit.logx` | `Logger`, global runtime/event loggers, `LogEntry` and coloured console helpers |
| `matrixkit.mail` | `send_html_email` over SMTP |
| `matrixkit.load` | `LoadCalculator`, `SystemMetrics` and a process-wide sampler (`init`, `get_load_rate`) |
| `matrixkit.cache_keys` | Cache key builders and `DefaultCache` |

## Examples

### Caching

```python
from matrixkit.localcache import LocalCache

cache = LocalCache(max_mem=50 * 1024 * 1024, default_timeout=60)
cache.put("greeting", "hello")
cache.get("greeting")                 # "hello"; None when missing or expired
"greeting" in cache                   # True

user = cache.get_or_hook("user:42", lambda: {"id": 42})
cache.put_with_ttl("session", "data", 5)   # seconds or a timedelta
cache.put_permanent("config", {"a": 1})
cache.delete("session")
cache.flush()
```

A cached `None` counts as missing, and a hook that returns `None` caches
nothing. When the budget is full the least recently used entry is evicted.

### Limiting failed attempts

```python
from matrixkit.localcache import LocalCache
from matrixkit.behavior_limiter import UserBehaviorLimiter

limiter = UserBehaviorLimiter(LocalCache(1 << 20, 300), max_times=5)
key = "login:alice@example.com"
if limiter.can_execute(key):
    if check_login():
        limiter.exec_success(key)
    else:
        limiter.exec_failed(key)
```

The cache's default lifetime is the counting window.

### Circuit breaking

```python
from matrixkit.breaker import CircuitBreaker, OpenStateError, Settings

breaker = CircuitBreaker(Settings(name="remote", max_requests=3, timeout=5))
try:
    result = breaker.execute(call_remote_service)
except OpenStateError:
    result = None
print(breaker.state, breaker.counts)
```

`TwoStepCircuitBreaker.allow()` returns a callback to report success or
failure once the work has been done elsewhere. Both breakers raise
`OpenStateError` while open and `TooManyRequestsError` when the half-open
trial requests are used up.

### Rate limiting

```python
from matrixkit.localcache import LocalCache
from matrixkit.block_limiter import BlockRateLimiterMgr, is_in_ip_whitelist
from matrixkit.unblock_limiter import UnBlockRateLimiter, UnBlockRateLimiterMgr

limiter = UnBlockRateLimiter(window_size=1.0, max_requests=10, cooldown_time=5.0)
if not limiter.allow():
    reject_request()

mgr = UnBlockRateLimiterMgr(LocalCache(1 << 20, 600), 1.0, 10, 5.0, is_in_ip_whitelist)
mgr.update_whitelist("192.168.*.*,10.0.0.1")
mgr.allow("192.168.1.7")              # always True: whitelisted

blocking = BlockRateLimiterMgr(LocalCache(1 << 20, 600), rate=100)
blocking.take("client-1")             # sleeps if needed, returns Unix time let through
```

### Encryption

```python
from matrixkit.aescrypt import decrypt, encrypt

sealed = encrypt(b"Hello, World!", "secret", "AES-256")
assert decrypt(sealed, "secret", "AES-256") == b"Hello, World!"
```

The output is a random 16-byte IV followed by the ciphertext. An empty key
or the algorithm name `NONE` passes data through unchanged; unknown
algorithm names use AES-128.

### JSON helpers

```python
from matrixkit.jsonx import get_int64_from_json, get_jwt_token_claims, marshal_to_str

get_int64_from_json('{"code": 0, "data": {"id": 123}}', "data.id")   # 123
marshal_to_str({"a": [1, 2]})                                       # '{"a":[1,2]}'
claims = get_jwt_token_claims(token)   # payload only; the signature is not checked
```

Path lookups support nested keys, array indices, `#` for array length or
mapping over arrays, and `*` / `?` wildcards in keys.

### Response envelope

```python
from matrixkit.response import default_json_with_msg, new_json_response_from_str

resp = default_json_with_msg("OK", "done")
resp.set_list([{"id": 1}, {"id": 2}], total=2, page=1)
text = resp.to_json()
again = new_json_response_from_str(text)
```

### Logging

```python
from matrixkit import logx

logx.init_runtime_logger("log", "info", "server-1", 3600)
logx.log().info("service started", port=8080)
logx.infof("listening on %s", 8080)
```

Log records are written as JSON lines into files named
`<dir>/<type>.<YYYYmmdd_HHMMSS>.slice_log`, rotated on the given period
(at least 5 seconds). A logger at debug level also copies entries to
stderr. The console helpers (`debug`, `info`, `warn`, `error`, `fatal` and
their `f` variants) print when the runtime logger's level allows it.

### Mail

```python
from matrixkit.mail import send_html_email

send_html_email(
    "bob@example.com", "Welcome", "Service", "<p>Hello</p>",
    "noreply@example.com", "password", "smtp.qcloudmail.com:465",
)
```

Only `smtp.126…` (STARTTLS) and `smtp.qcloudmail…` (implicit TLS) hosts are
accepted, given as `host:port`, with a single recipient.

### System load

```python
from matrixkit import load

load.init(sample_size=6)      # starts a background sampler once
load.get_load_rate()          # percent; 0 before any sample
```

## What the package does not do

- It has no command-line program and runs no server; everything is a
  library called from your own code.
- `DefaultCache` only pairs a `LocalCache` with a server object you pass in;
  there is no cache that fetches entities, attributes, events or constants
  from a gateway. The `cache_keys` functions only build key strings.
- `JsonResponse` carries no built-in table of response codes or messages;
  callers supply the code and the message.