"""Cache key naming and restore resolution."""

from .naming import MAX_OBJECT_NAME_LENGTH, sanitize
from .resolver import CACHE_KEY_METADATA, CREATED_AT_METADATA, CacheMatch, CacheResolver

__all__ = [
    "MAX_OBJECT_NAME_LENGTH",
    "sanitize",
    "CACHE_KEY_METADATA",
    "CREATED_AT_METADATA",
    "CacheMatch",
    "CacheResolver",
]
