"""Map cache keys to backend-legal object names."""
from __future__ import annotations
import hashlib
import re

MAX_OBJECT_NAME_LENGTH = 1024
DIGEST_LENGTH = 8

_ILLEGAL = re.compile(r"[\\?#]|\s+")


def sanitize(key: str, max_length: int = MAX_OBJECT_NAME_LENGTH) -> str:
    """Return the object name used to store `key`.

    Backslash, `?`, `#` and whitespace runs become `_`. Names longer than
    `max_length` are truncated and suffixed with `_` plus the first 8 hex
    digits of the SHA-256 of the original key, keeping them distinct.
    """
    sanitized = _ILLEGAL.sub("_", key)
    if len(sanitized) > max_length:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
        base = max_length - DIGEST_LENGTH - 1
        sanitized = f"{sanitized[:base]}_{digest}"
    return sanitized
