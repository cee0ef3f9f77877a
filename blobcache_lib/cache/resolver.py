"""Pick the stored object that best answers a restore request.

An exact match on the primary key always wins. Otherwise restore-key
prefixes are tried in the order given; the first prefix with any match
returns its most recently modified object (object name breaks ties).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from blobcache_lib.storage.base import BlobProperties
from blobcache_lib.storage.interfaces import BlobStoreProtocol
from .naming import sanitize

logger = logging.getLogger(__name__)

CACHE_KEY_METADATA = "cachekey"
CREATED_AT_METADATA = "createdat"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class CacheMatch:
    cache_key: str
    object_name: str


def _recency(blob: BlobProperties) -> datetime:
    ts = blob.last_modified
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def pick_most_recent(candidates: Sequence[BlobProperties]) -> Optional[BlobProperties]:
    """Return the newest candidate; equal timestamps fall back to name order."""
    if not candidates:
        return None
    by_name = sorted(candidates, key=lambda b: b.name)
    # sort is stable, so name order survives among equal timestamps
    return sorted(by_name, key=_recency, reverse=True)[0]


class CacheResolver:
    def __init__(self, store: BlobStoreProtocol):
        self.store = store

    def resolve(self, primary_key: str, restore_keys: Sequence[str] = ()) -> Optional[CacheMatch]:
        """Return the best match for the request, or None when nothing matches."""
        primary_name = sanitize(primary_key)
        if self.store.exists(primary_name):
            logger.debug("Exact match for key %s", primary_key)
            return CacheMatch(cache_key=primary_key, object_name=primary_name)

        for restore_key in restore_keys:
            prefix = sanitize(restore_key)
            matches: List[BlobProperties] = list(self.store.list_by_prefix(prefix))
            best = pick_most_recent(matches)
            if best is None:
                logger.debug("No objects under prefix %s", prefix)
                continue
            logger.debug("Prefix %s matched %d object(s); picked %s", prefix, len(matches), best.name)
            return CacheMatch(cache_key=self._original_key(best), object_name=best.name)
        return None

    def _original_key(self, blob: BlobProperties) -> str:
        metadata = blob.metadata
        if metadata is None:
            try:
                metadata = self.store.get_properties(blob.name).metadata
            except KeyError:
                metadata = None
        return (metadata or {}).get(CACHE_KEY_METADATA) or blob.name
