"""Azure Blob Storage backend.

Wraps one `ContainerClient` built from a connection string. This module is
not imported by `blobcache_lib.storage`; the provider factory loads it only
when a connection string is configured.
"""
from __future__ import annotations
import logging
import math
from typing import Any, BinaryIO, Dict, Iterator, Optional

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)

from blobcache_lib.errors import BackendUnavailableError, ObjectExistsError
from .base import BlobProperties, BlobStore

logger = logging.getLogger(__name__)

BACKEND_NAME = "azure"
DEFAULT_TIMEOUT = 600
DEFAULT_CONCURRENCY = 4


def _to_properties(blob: Any) -> BlobProperties:
    metadata = getattr(blob, "metadata", None)
    return BlobProperties(
        name=blob.name,
        last_modified=getattr(blob, "last_modified", None),
        size=getattr(blob, "size", 0) or 0,
        metadata=dict(metadata) if metadata is not None else None,
    )


class AzureBlobStore(BlobStore):
    """Blob store on top of an Azure storage container.

    Parameters
    - connection_string: storage account connection string
    - container_name: container holding cache archives
    - timeout: seconds allowed for each network operation
    - max_block_size: block size for chunked uploads (SDK default when None)
    - container_client: pre-built client, used instead of the connection string
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        container_name: str = "github-actions-cache",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_block_size: Optional[int] = None,
        max_concurrency: int = DEFAULT_CONCURRENCY,
        container_client: Any = None,
    ) -> None:
        self.container_name = container_name
        self.timeout = max(1, math.ceil(timeout))
        self.max_concurrency = max_concurrency
        if container_client is not None:
            self.container = container_client
            return
        if not connection_string:
            raise ValueError("AzureBlobStore requires a connection string")
        from azure.storage.blob import ContainerClient

        options: Dict[str, Any] = {"read_timeout": self.timeout}
        if max_block_size:
            options["max_block_size"] = max_block_size
        self.container = ContainerClient.from_connection_string(
            connection_string, container_name, **options
        )
        logger.debug("Using Azure container %s", container_name)

    def _unavailable(self, action: str, name: str, err: Exception) -> BackendUnavailableError:
        return BackendUnavailableError(f"{action} '{name}' failed: {err}", backend=BACKEND_NAME)

    def create_container_if_absent(self) -> None:
        try:
            self.container.create_container(timeout=self.timeout)
            logger.info("Created container %s", self.container_name)
        except ResourceExistsError:
            logger.debug("Container %s already exists", self.container_name)
        except AzureError as e:
            raise self._unavailable("create container", self.container_name, e) from e

    def exists(self, name: str) -> bool:
        try:
            return bool(self.container.get_blob_client(name).exists(timeout=self.timeout))
        except AzureError as e:
            raise self._unavailable("exists", name, e) from e

    def get_properties(self, name: str) -> BlobProperties:
        try:
            props = self.container.get_blob_client(name).get_blob_properties(timeout=self.timeout)
        except ResourceNotFoundError:
            raise KeyError(name)
        except AzureError as e:
            raise self._unavailable("get properties", name, e) from e
        return _to_properties(props)

    def list_by_prefix(self, prefix: str) -> Iterator[BlobProperties]:
        try:
            for blob in self.container.list_blobs(
                name_starts_with=prefix, include=["metadata"], timeout=self.timeout
            ):
                yield _to_properties(blob)
        except AzureError as e:
            raise self._unavailable("list", prefix, e) from e

    def download(self, name: str, stream: BinaryIO) -> None:
        blob = self.container.get_blob_client(name)
        try:
            downloader = blob.download_blob(max_concurrency=self.max_concurrency, timeout=self.timeout)
            downloader.readinto(stream)
        except ResourceNotFoundError:
            raise KeyError(name)
        except AzureError as e:
            raise self._unavailable("download", name, e) from e

    def upload(self, name: str, stream: BinaryIO, size: int, metadata: Dict[str, str]) -> None:
        blob = self.container.get_blob_client(name)
        try:
            # Block blobs only become visible on commit, metadata included
            blob.upload_blob(
                stream,
                length=size,
                metadata={k: str(v) for k, v in metadata.items()},
                overwrite=False,
                max_concurrency=self.max_concurrency,
                timeout=self.timeout,
            )
        except ResourceExistsError as e:
            raise ObjectExistsError(name) from e
        except AzureError as e:
            raise self._unavailable("upload", name, e) from e
