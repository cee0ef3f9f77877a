"""Pack and unpack cache paths with the system `tar`.

Archived entries are stored relative to a workspace root and extracted
relative to the same root. The file list goes to tar through a manifest
file (`--files-from`) so large path sets never hit argument-length limits.
Manifest lines are always read as names, never as tar options.
"""
from __future__ import annotations
import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from blobcache_lib.errors import ArchiveError, ToolNotFoundError

logger = logging.getLogger(__name__)

COMPRESSION_METHODS = ("gzip", "zstd", "none")
ARCHIVE_BASENAME = "cache"
MANIFEST_NAME = "manifest.txt"

_EXTENSIONS = {
    "gzip": ".tar.gz",
    "zstd": ".tar.zst",
    "none": ".tar",
}

_COMPRESSION_ARGS = {
    "gzip": ["-z"],
    "zstd": ["--zstd"],
    "none": [],
}


def _check_method(method: str) -> str:
    if method not in COMPRESSION_METHODS:
        raise ValueError(f"Unknown compression method {method!r}; expected one of {COMPRESSION_METHODS}")
    return method


def get_archive_extension(method: str) -> str:
    return _EXTENSIONS[_check_method(method)]


def get_compression_args(method: str) -> List[str]:
    return list(_COMPRESSION_ARGS[_check_method(method)])


def detect_compression_method(archive_path: str | Path) -> str:
    """Guess the compression method from an archive file name.

    Only a convenience for already-named archives; creation always takes
    the method explicitly.
    """
    name = str(archive_path)
    if name.endswith(".tar.gz") or name.endswith(".tgz"):
        return "gzip"
    if name.endswith(".tar.zst"):
        return "zstd"
    return "none"


def find_tar(platform: Optional[str] = None, which: Callable[[str], Optional[str]] = shutil.which) -> str:
    """Return the path of the tar implementation to use.

    GNU tar is preferred where another implementation may shadow it
    (bsdtar on Windows and macOS). Raises `ToolNotFoundError` if none found.
    """
    platform = platform or sys.platform
    candidates: List[str] = []
    if platform == "win32":
        system_drive = os.environ.get("SystemDrive", "C:")
        git_tar = os.path.join(f"{system_drive}\\", "Program Files", "Git", "usr", "bin", "tar.exe")
        if os.path.exists(git_tar):
            return git_tar
    elif platform == "darwin":
        candidates.append("gtar")
    candidates.append("tar")
    for name in candidates:
        found = which(name)
        if found:
            return found
    raise ToolNotFoundError("tar")


def default_workspace_root() -> Path:
    return Path(os.environ.get("GITHUB_WORKSPACE") or os.getcwd()).resolve()


class ArchiveCodec:
    """Create and extract cache archives.

    Parameters
    - workspace_root: base for relative entry names (GITHUB_WORKSPACE or cwd)
    - timeout: seconds allowed for one tar run; None waits forever
    - tar_path: explicit tar binary, otherwise resolved on first use
    """

    def __init__(
        self,
        workspace_root: Optional[str | Path] = None,
        *,
        timeout: Optional[float] = None,
        tar_path: Optional[str] = None,
    ) -> None:
        self.workspace_root = Path(workspace_root).resolve() if workspace_root else default_workspace_root()
        self.timeout = timeout
        self._tar_path = tar_path

    @property
    def tar_path(self) -> str:
        if self._tar_path is None:
            self._tar_path = find_tar()
            logger.debug("Using tar at %s", self._tar_path)
        return self._tar_path

    def relative_paths(self, paths: Iterable[str | Path]) -> List[str]:
        """Express `paths` relative to the workspace root."""
        out = []
        for p in paths:
            path = Path(p)
            if not path.is_absolute():
                path = self.workspace_root / path
            out.append(os.path.relpath(os.path.normpath(path), self.workspace_root))
        return out

    def create(self, destination_dir: str | Path, paths: Iterable[str | Path], method: str) -> Path:
        """Archive `paths` into `destination_dir` and return the archive path."""
        destination_dir = Path(destination_dir)
        archive_path = destination_dir / f"{ARCHIVE_BASENAME}{get_archive_extension(method)}"
        manifest_path = destination_dir / MANIFEST_NAME

        entries = self.relative_paths(paths)
        manifest_path.write_text("\n".join(entries) + "\n", encoding="utf-8")
        try:
            args = [
                "--posix",
                "-c",
                *get_compression_args(method),
                "-f", str(archive_path),
                "-P",
                "-C", str(self.workspace_root),
                "--verbatim-files-from",
                "--files-from", str(manifest_path),
            ]
            self._run(args, "create")
        finally:
            try:
                manifest_path.unlink()
            except OSError as e:
                logger.debug("Failed to remove manifest %s: %s", manifest_path, e)
        return archive_path

    def extract(self, archive_path: str | Path, method: str) -> None:
        """Unpack `archive_path` under the workspace root."""
        self.workspace_root.mkdir(parents=True, exist_ok=True)
        args = [
            "-x",
            *get_compression_args(method),
            "-f", str(archive_path),
            "-P",
            "-C", str(self.workspace_root),
        ]
        self._run(args, "extract")

    def _run(self, args: List[str], action: str) -> None:
        cmd = [self.tar_path, *args]
        logger.debug("Running tar to %s: %s", action, " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.workspace_root),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            if not self.workspace_root.is_dir():
                raise ArchiveError(f"Workspace root {self.workspace_root} does not exist") from e
            raise ToolNotFoundError(self.tar_path) from e
        except subprocess.TimeoutExpired as e:
            raise ArchiveError(f"tar {action} timed out after {self.timeout}s") from e
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ArchiveError(
                f"tar {action} failed with exit code {result.returncode}: {stderr}",
                exit_code=result.returncode,
            )
