"""Exceptions raised by the cache subsystem.

Low-level components (archive codec, blob stores) raise these and let them
propagate. Only the provider boundary turns them into absent results or the
skip sentinel.
"""
from __future__ import annotations
from typing import Optional


class CacheError(Exception):
    """Base exception for cache errors."""


class ToolNotFoundError(CacheError):
    """Raised when no archiving tool can be found on the system."""

    def __init__(self, tool: str = "tar") -> None:
        self.tool = tool
        super().__init__(f"Archiving tool '{tool}' not found on PATH")


class ArchiveError(CacheError):
    """Raised when the archiving tool fails.

    `exit_code` is the tool's exit status, or None when it was stopped
    because it ran past the configured timeout.
    """

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        self.exit_code = exit_code
        super().__init__(message)


class BackendUnavailableError(CacheError):
    """Raised when a blob store cannot be reached or refuses the request."""

    def __init__(self, message: str, backend: str = "unknown") -> None:
        self.backend = backend
        super().__init__(f"[{backend}] {message}")


class ObjectExistsError(CacheError):
    """Raised by create-only uploads when the object name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Object already exists: {name}")
