"""Archive packing/unpacking via an external tar."""

from .codec import (
    ArchiveCodec,
    COMPRESSION_METHODS,
    detect_compression_method,
    find_tar,
    get_archive_extension,
)

__all__ = [
    "ArchiveCodec",
    "COMPRESSION_METHODS",
    "detect_compression_method",
    "find_tar",
    "get_archive_extension",
]
