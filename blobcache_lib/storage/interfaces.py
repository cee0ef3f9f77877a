from typing import Protocol, BinaryIO, Dict, Iterator, runtime_checkable

from .base import BlobProperties


@runtime_checkable
class BlobStoreProtocol(Protocol):
    """Blob store protocol mirroring `blobcache_lib.storage.BlobStore`.

    Implementations should follow the semantics documented on the abstract
    base class in `blobcache_lib.storage.base` (KeyError for missing names,
    create-only uploads, etc.).
    """

    def create_container_if_absent(self) -> None: ...

    def exists(self, name: str) -> bool: ...

    def get_properties(self, name: str) -> BlobProperties: ...

    def list_by_prefix(self, prefix: str) -> Iterator[BlobProperties]: ...

    def download(self, name: str, stream: BinaryIO) -> None: ...

    def upload(self, name: str, stream: BinaryIO, size: int, metadata: Dict[str, str]) -> None: ...
