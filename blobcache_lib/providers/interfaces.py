from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

# Returned by save_cache when nothing was stored (already cached or failed)
SAVE_SKIPPED = -1


@runtime_checkable
class CacheProviderProtocol(Protocol):
    """Public surface shared by every cache provider.

    Providers never raise for cache misses or backend trouble: restore
    returns None and save returns `SAVE_SKIPPED` instead.
    """

    def is_available(self) -> bool:
        ...

    def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] = (),
        lookup_only: bool = False,
    ) -> Optional[str]:
        """Restore `paths` from the best match and return its key, or None."""
        ...

    def save_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        upload_chunk_size: Optional[int] = None,
    ) -> int:
        """Store `paths` under `primary_key`; return a positive id or `SAVE_SKIPPED`."""
        ...


@runtime_checkable
class CacheServiceProtocol(Protocol):
    """Capability offered by a fallback cache service.

    The service owns its own storage, naming and matching rules; this
    package only forwards requests to it.
    """

    def is_available(self) -> bool:
        ...

    def restore(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str],
        lookup_only: bool = False,
    ) -> Optional[str]:
        ...

    def save(
        self,
        paths: Sequence[str],
        primary_key: str,
        upload_chunk_size: Optional[int] = None,
    ) -> int:
        ...
