"""Blob store abstraction package for the artifact cache."""

from .base import BlobProperties, BlobStore
from .file_backend import FileBlobStore
from .memory_backend import MemoryBlobStore

__all__ = ["BlobProperties", "BlobStore", "FileBlobStore", "MemoryBlobStore"]
