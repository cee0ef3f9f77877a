"""Default fallback cache service keeping archives in a local directory.

Useful on self-hosted runners with a persistent disk: the same matching
and archive rules as the remote provider, with a `FileBlobStore` as the
backend.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Sequence

from blobcache_lib.archive.codec import ArchiveCodec
from blobcache_lib.storage.file_backend import FileBlobStore
from .remote import RemoteCacheProvider

logger = logging.getLogger(__name__)


class LocalCacheService:
    def __init__(
        self,
        cache_dir: str | Path,
        codec: Optional[ArchiveCodec] = None,
        *,
        compression_method: str = "gzip",
        temp_root: Optional[str | Path] = None,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self._provider = RemoteCacheProvider(
            FileBlobStore(self.cache_dir),
            codec,
            compression_method=compression_method,
            temp_root=temp_root,
        )

    def is_available(self) -> bool:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug("Local cache directory %s unusable: %s", self.cache_dir, e)
            return False
        return True

    def restore(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str],
        lookup_only: bool = False,
    ) -> Optional[str]:
        return self._provider.restore_cache(paths, primary_key, restore_keys, lookup_only=lookup_only)

    def save(self, paths: Sequence[str], primary_key: str, upload_chunk_size: Optional[int] = None) -> int:
        return self._provider.save_cache(paths, primary_key, upload_chunk_size=upload_chunk_size)
