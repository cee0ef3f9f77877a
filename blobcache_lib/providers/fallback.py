"""Provider that forwards to an external cache service.

Used when no remote blob store is configured. The service decides how
keys are matched and where archives live; this adapter only translates
calls and applies the same never-fail policy as the remote provider.
"""
from __future__ import annotations
import logging
from typing import Optional, Sequence

from .interfaces import SAVE_SKIPPED, CacheServiceProtocol

logger = logging.getLogger(__name__)


class FallbackCacheProvider:
    def __init__(self, service: CacheServiceProtocol):
        self.service = service

    def is_available(self) -> bool:
        try:
            return bool(self.service.is_available())
        except Exception as e:
            logger.warning("Cache service feature check failed: %s", e)
            return False

    def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] = (),
        lookup_only: bool = False,
    ) -> Optional[str]:
        try:
            return self.service.restore(list(paths), primary_key, list(restore_keys), lookup_only=lookup_only)
        except Exception as e:
            logger.warning("Failed to restore cache: %s", e)
            return None

    def save_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        upload_chunk_size: Optional[int] = None,
    ) -> int:
        try:
            return self.service.save(list(paths), primary_key, upload_chunk_size=upload_chunk_size)
        except Exception as e:
            logger.warning("Failed to save cache: %s", e)
            return SAVE_SKIPPED
