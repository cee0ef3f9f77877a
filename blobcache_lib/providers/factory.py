"""Choose the cache provider for the current configuration.

A connection string selects the Azure-backed remote provider; without
one the fallback cache service is used. Selection is a pure function of
the configuration and happens once at startup.
"""
from __future__ import annotations
import logging
from typing import Optional

from blobcache_lib.archive.codec import ArchiveCodec
from blobcache_lib.config.config import CacheConfig
from .fallback import FallbackCacheProvider
from .interfaces import CacheProviderProtocol, CacheServiceProtocol
from .remote import RemoteCacheProvider

logger = logging.getLogger(__name__)


def is_remote_configured(config: CacheConfig) -> bool:
    return bool(config.connection_string)


def create_cache_provider(
    config: CacheConfig,
    service: Optional[CacheServiceProtocol] = None,
) -> CacheProviderProtocol:
    codec = ArchiveCodec(config.workspace_root, timeout=config.timeout)

    if is_remote_configured(config):
        logger.info("Using Azure Blob Storage cache provider (container %s)", config.container_name)
        # Lazy import: only the remote path needs the storage SDK
        from blobcache_lib.storage.azure_backend import AzureBlobStore

        store = AzureBlobStore(
            config.connection_string,
            config.container_name,
            timeout=config.timeout,
            max_block_size=config.upload_chunk_size,
        )
        return RemoteCacheProvider(
            store,
            codec,
            compression_method=config.compression_method,
            temp_root=config.temp_dir,
        )

    if service is None:
        from .local import LocalCacheService

        logger.info("Using local directory cache provider at %s", config.local_cache_dir)
        service = LocalCacheService(
            config.local_cache_dir,
            codec,
            compression_method=config.compression_method,
            temp_root=config.temp_dir,
        )
    else:
        logger.info("Using fallback cache service provider")
    return FallbackCacheProvider(service)
