"""Cache provider backed by a blob store.

Composes name sanitization, the resolver, the archive codec and a
`BlobStore` into `restore_cache` and `save_cache`. This is the only place
where component errors are turned into user-facing outcomes: restore
failures become "no cache found", save failures become `SAVE_SKIPPED`,
both with a warning. Caching is an optimization and must never fail the
surrounding build.
"""
from __future__ import annotations
import logging
import os
import shutil
import tempfile
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence

from blobcache_lib.archive.codec import ArchiveCodec, get_archive_extension
from blobcache_lib.cache.naming import sanitize
from blobcache_lib.cache.resolver import (
    CACHE_KEY_METADATA,
    CREATED_AT_METADATA,
    CacheResolver,
)
from blobcache_lib.errors import ObjectExistsError
from blobcache_lib.storage.interfaces import BlobStoreProtocol
from .interfaces import SAVE_SKIPPED

logger = logging.getLogger(__name__)

TEMP_PREFIX = "blobcache"


def default_temp_root() -> Path:
    return Path(os.environ.get("RUNNER_TEMP") or tempfile.gettempdir())


class RemoteCacheProvider:
    def __init__(
        self,
        store: BlobStoreProtocol,
        codec: Optional[ArchiveCodec] = None,
        *,
        compression_method: str = "gzip",
        temp_root: Optional[str | Path] = None,
    ) -> None:
        # Fail early on an unknown method rather than at first save
        get_archive_extension(compression_method)
        self.store = store
        self.codec = codec or ArchiveCodec()
        self.compression_method = compression_method
        self.temp_root = Path(temp_root) if temp_root else default_temp_root()
        self.resolver = CacheResolver(store)

    def is_available(self) -> bool:
        return self.store is not None

    def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] = (),
        lookup_only: bool = False,
    ) -> Optional[str]:
        try:
            return self._restore(primary_key, list(restore_keys), lookup_only)
        except Exception as e:
            logger.warning("Failed to restore cache: %s", e)
            return None

    def save_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        upload_chunk_size: Optional[int] = None,
    ) -> int:
        if upload_chunk_size is not None:
            logger.debug("Ignoring upload_chunk_size=%s; chunking is configured on the blob store", upload_chunk_size)
        try:
            return self._save(list(paths), primary_key)
        except ObjectExistsError:
            logger.info("Cache was saved concurrently for key: %s, skipping save", primary_key)
            return SAVE_SKIPPED
        except Exception as e:
            logger.warning("Failed to save cache: %s", e)
            return SAVE_SKIPPED

    def _restore(self, primary_key: str, restore_keys: list[str], lookup_only: bool) -> Optional[str]:
        self._ensure_container()
        match = self.resolver.resolve(primary_key, restore_keys)
        if match is None:
            logger.info("No cache found matching the provided keys")
            return None
        logger.info("Cache found for key: %s", match.cache_key)

        if lookup_only:
            logger.info("Lookup only mode - skipping download")
            return match.cache_key

        extension = get_archive_extension(self.compression_method)
        with self._temp_directory() as tmp:
            archive_path = tmp / f"cache{extension}"
            logger.info("Downloading cache archive %s", match.object_name)
            with open(archive_path, "wb") as f:
                self.store.download(match.object_name, f)
            logger.debug("Downloaded %.2f MB", archive_path.stat().st_size / 1024 / 1024)
            self.codec.extract(archive_path, self.compression_method)
        logger.info("Cache restored from key: %s", match.cache_key)
        return match.cache_key

    def _save(self, paths: list[str], primary_key: str) -> int:
        self._ensure_container()
        object_name = sanitize(primary_key)
        if self.store.exists(object_name):
            logger.info("Cache already exists for key: %s, skipping save", primary_key)
            return SAVE_SKIPPED

        with self._temp_directory() as tmp:
            archive_path = self.codec.create(tmp, paths, self.compression_method)
            size = archive_path.stat().st_size
            logger.info("Archive created: %.2f MB", size / 1024 / 1024)
            metadata = {
                CACHE_KEY_METADATA: primary_key,
                CREATED_AT_METADATA: datetime.now(timezone.utc).isoformat(),
            }
            with open(archive_path, "rb") as f:
                self.store.upload(object_name, f, size, metadata)
        logger.info("Cache saved with key: %s", primary_key)
        return int(time.time() * 1000)

    def _ensure_container(self) -> None:
        try:
            self.store.create_container_if_absent()
        except Exception as e:
            # May lack create permission on a container that already exists
            logger.debug("Container check/create failed: %s", e)

    @contextmanager
    def _temp_directory(self) -> Iterator[Path]:
        self.temp_root.mkdir(parents=True, exist_ok=True)
        stamp = int(time.time() * 1000)
        tmp = Path(tempfile.mkdtemp(prefix=f"{TEMP_PREFIX}-{stamp}-", dir=self.temp_root))
        try:
            yield tmp
        finally:
            try:
                shutil.rmtree(tmp)
            except OSError as e:
                logger.debug("Failed to clean up temp directory %s: %s", tmp, e)
