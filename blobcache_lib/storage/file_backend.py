"""Directory-backed blob store.

Each object lives in its own directory under `<base_dir>/objects/`, named
after the SHA-256 of the object name so arbitrary (long, slash-containing)
names map to legal paths:

- `data`            : the archive bytes
- `properties.yml`  : object name, size and user metadata

Objects are assembled under `<base_dir>/incoming/` and renamed into place,
so an object is either absent or complete. Renaming onto an existing
object directory fails, which gives create-only semantics for free.
"""
from __future__ import annotations
import hashlib
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Optional

from blobcache_lib.errors import ObjectExistsError
from .base import BlobProperties, BlobStore
from .serializer import Serializer, YAMLSerializer

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
DATA_FILE = "data"


class FileBlobStore(BlobStore):
    def __init__(self, base_dir: str | Path, serializer: Optional[Serializer] = None) -> None:
        self.base_dir = Path(base_dir)
        self.serializer = serializer or YAMLSerializer()
        self.properties_file = f"properties{self.serializer.extension}"

    @property
    def objects_dir(self) -> Path:
        return self.base_dir / "objects"

    @property
    def incoming_dir(self) -> Path:
        return self.base_dir / "incoming"

    def _dir_for(self, name: str) -> Path:
        digest = hashlib.sha256(name.encode("utf-8")).hexdigest()
        return self.objects_dir / digest

    def _read_properties(self, obj_dir: Path) -> BlobProperties:
        raw = self.serializer.load((obj_dir / self.properties_file).read_bytes()) or {}
        mtime = (obj_dir / DATA_FILE).stat().st_mtime
        return BlobProperties(
            name=raw["name"],
            last_modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
            size=int(raw.get("size", 0)),
            metadata=dict(raw.get("metadata") or {}),
        )

    def create_container_if_absent(self) -> None:
        self.objects_dir.mkdir(parents=True, exist_ok=True)
        self.incoming_dir.mkdir(parents=True, exist_ok=True)

    def exists(self, name: str) -> bool:
        return (self._dir_for(name) / DATA_FILE).exists()

    def get_properties(self, name: str) -> BlobProperties:
        obj_dir = self._dir_for(name)
        if not (obj_dir / DATA_FILE).exists():
            raise KeyError(name)
        return self._read_properties(obj_dir)

    def list_by_prefix(self, prefix: str) -> Iterator[BlobProperties]:
        if not self.objects_dir.exists():
            return
        for obj_dir in sorted(self.objects_dir.iterdir()):
            if not obj_dir.is_dir():
                continue
            try:
                props = self._read_properties(obj_dir)
            except (OSError, KeyError, ValueError):
                logger.debug("Skipping unreadable object directory %s", obj_dir)
                continue
            if props.name.startswith(prefix):
                yield props

    def download(self, name: str, stream: BinaryIO) -> None:
        path = self._dir_for(name) / DATA_FILE
        if not path.exists():
            raise KeyError(name)
        with open(path, "rb") as f:
            shutil.copyfileobj(f, stream, CHUNK_SIZE)

    def upload(self, name: str, stream: BinaryIO, size: int, metadata: Dict[str, str]) -> None:
        target = self._dir_for(name)
        if target.exists():
            raise ObjectExistsError(name)
        self.create_container_if_absent()
        staging = Path(tempfile.mkdtemp(prefix="upload-", dir=self.incoming_dir))
        try:
            written = 0
            with open(staging / DATA_FILE, "wb") as f:
                while written < size:
                    chunk = stream.read(min(CHUNK_SIZE, size - written))
                    if not chunk:
                        break
                    f.write(chunk)
                    written += len(chunk)
                f.flush()
                os.fsync(f.fileno())
            if written != size:
                raise IOError(f"Short upload for {name}: expected {size} bytes, got {written}")
            payload = {"name": name, "size": written, "metadata": dict(metadata)}
            (staging / self.properties_file).write_bytes(self.serializer.dump(payload))
            try:
                staging.rename(target)
            except OSError as e:
                if target.exists():
                    raise ObjectExistsError(name) from e
                raise
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)
