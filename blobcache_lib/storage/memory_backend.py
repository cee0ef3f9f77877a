"""Simple memory-backed blob store

Objects are kept in a dict `{name: (bytes, metadata, last_modified)}`. The
clock is injectable so tests can control recency ordering.
"""
from datetime import datetime, timezone
from threading import RLock
from typing import BinaryIO, Callable, Dict, Iterator, Optional, Tuple

from blobcache_lib.errors import ObjectExistsError
from .base import BlobProperties, BlobStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryBlobStore(BlobStore):
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._lock = RLock()
        self._clock = clock or _utcnow
        self._store: Dict[str, Tuple[bytes, Dict[str, str], datetime]] = {}
        self.container_created = False
        self.downloads: list[str] = []

    def create_container_if_absent(self) -> None:
        with self._lock:
            self.container_created = True

    def exists(self, name: str) -> bool:
        with self._lock:
            return name in self._store

    def _properties(self, name: str) -> BlobProperties:
        data, metadata, modified = self._store[name]
        return BlobProperties(name=name, last_modified=modified, size=len(data), metadata=dict(metadata))

    def get_properties(self, name: str) -> BlobProperties:
        with self._lock:
            return self._properties(name)

    def list_by_prefix(self, prefix: str) -> Iterator[BlobProperties]:
        with self._lock:
            names = sorted(n for n in self._store if n.startswith(prefix))
            return iter([self._properties(n) for n in names])

    def download(self, name: str, stream: BinaryIO) -> None:
        with self._lock:
            data = self._store[name][0]
            self.downloads.append(name)
        stream.write(data)

    def upload(self, name: str, stream: BinaryIO, size: int, metadata: Dict[str, str]) -> None:
        data = stream.read(size)
        with self._lock:
            if name in self._store:
                raise ObjectExistsError(name)
            self._store[name] = (data, dict(metadata), self._clock())

    def put(self, name: str, data: bytes, metadata: Optional[Dict[str, str]] = None,
            last_modified: Optional[datetime] = None) -> None:
        """Seed an object directly, bypassing create-only checks."""
        with self._lock:
            self._store[name] = (data, dict(metadata or {}), last_modified or self._clock())
