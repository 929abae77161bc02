"""Service utilities: caching, rate limiting, circuit breaking, AES, JSON, logging, mail and load sampling."""

__version__ = "0.1.0"