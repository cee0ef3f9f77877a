"""Blob store interface definitions.

Defines the BlobStore abstract class the cache providers use to keep
archives in some backend. Implementations translate these calls to
whatever the backend speaks (Azure Blob Storage, a local directory, a
dict in memory).
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Dict, Iterator, Optional


@dataclass
class BlobProperties:
    """What a backend knows about one stored object.

    `metadata` is None when the backend listing did not include it; callers
    can fetch it with `BlobStore.get_properties`.
    """

    name: str
    last_modified: Optional[datetime] = None
    size: int = 0
    metadata: Optional[Dict[str, str]] = None


class BlobStore(ABC):
    """Abstract blob store.

    Implementations must be safe to call from a single thread per call;
    missing objects are reported with `KeyError`.
    """

    @abstractmethod
    def create_container_if_absent(self) -> None:
        """Create the backing container (bucket, directory) if needed."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return True if an object called `name` exists."""

    @abstractmethod
    def get_properties(self, name: str) -> BlobProperties:
        """Return properties and metadata for `name`. Raise `KeyError` if missing."""

    @abstractmethod
    def list_by_prefix(self, prefix: str) -> Iterator[BlobProperties]:
        """Yield properties of every object whose name starts with `prefix`."""

    @abstractmethod
    def download(self, name: str, stream: BinaryIO) -> None:
        """Write the bytes of `name` to `stream`. Raise `KeyError` if missing."""

    @abstractmethod
    def upload(self, name: str, stream: BinaryIO, size: int, metadata: Dict[str, str]) -> None:
        """Create `name` from `size` bytes read from `stream`.

        Uploads never overwrite: if the name is taken, raise
        `ObjectExistsError`. The object must not become visible until its
        content and metadata are both in place.
        """
