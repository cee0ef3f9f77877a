"""Cache providers: remote blob store, fallback service and selection."""

from .fallback import FallbackCacheProvider
from .interfaces import SAVE_SKIPPED, CacheProviderProtocol, CacheServiceProtocol
from .remote import RemoteCacheProvider

__all__ = [
    "SAVE_SKIPPED",
    "CacheProviderProtocol",
    "CacheServiceProtocol",
    "FallbackCacheProvider",
    "RemoteCacheProvider",
]
