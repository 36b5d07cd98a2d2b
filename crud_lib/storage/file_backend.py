"""File-backed storage backend.

Objects are stored one per file under `<data_dir>/<collection>/`. The
filename is the URL-quoted key followed by the serializer's extension, so
any string key maps to exactly one file. Writes go to a temporary file which
is then renamed over the target, which keeps each replacement atomic.

File I/O runs synchronously inside the coroutines: a primitive never
suspends half way through a write, so cancelling the surrounding store
operation cannot leave a partial file behind.
"""
from __future__ import annotations
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote, unquote

from crud_lib.errors import BackendFailure, DuplicateKeyError
from .base import StorageBackend
from .serializer import JSONSerializer, Serializer

logger = logging.getLogger(__name__)


class FileBackend(StorageBackend[str, Any]):
    name = "file"

    def __init__(
        self,
        data_dir: str | Path = "./data",
        collection: str = "objects",
        serializer: Optional[Serializer] = None,
        issue_keys: bool = True,
    ) -> None:
        self.serializer = serializer or JSONSerializer()
        self.collection_dir = Path(data_dir) / collection
        self.collection_dir.mkdir(parents=True, exist_ok=True)
        self.can_issue_keys = issue_keys

    def _path_for(self, key: Any) -> Path:
        return self.collection_dir / f"{quote(str(key), safe='')}{self.serializer.extension}"

    def _write(self, path: Path, obj: Any) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            data = self.serializer.dump(obj)
            with open(tmp, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except Exception as e:
            tmp.unlink(missing_ok=True)
            raise BackendFailure(f"Failed to write {path}: {e}") from e

    def _exists(self, path: Path) -> bool:
        try:
            path.stat()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BackendFailure(f"Failed to check {path}: {e}") from e
        return True

    def _read(self, path: Path) -> Optional[Any]:
        try:
            with open(path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise BackendFailure(f"Failed to read {path}: {e}") from e
        try:
            return self.serializer.load(data)
        except Exception as e:
            raise BackendFailure(f"Failed to decode {path}: {e}") from e

    async def raw_create(self, key: str, obj: Any) -> None:
        path = self._path_for(key)
        if self._exists(path):
            raise DuplicateKeyError(key)
        self._write(path, obj)
        logger.debug("Stored %r at %s", key, path)

    async def raw_read(self, key: str) -> Optional[Any]:
        return self._read(self._path_for(key))

    async def raw_update(self, key: str, obj: Any) -> bool:
        path = self._path_for(key)
        if not self._exists(path):
            return False
        self._write(path, obj)
        logger.debug("Replaced %r at %s", key, path)
        return True

    async def raw_delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BackendFailure(f"Failed to delete {path}: {e}") from e
        return True

    async def raw_exists(self, key: str) -> bool:
        return self._exists(self._path_for(key))

    async def generate_key(self) -> str:
        if not self.can_issue_keys:
            return await super().generate_key()
        key = uuid.uuid4().hex
        while self._exists(self._path_for(key)):
            key = uuid.uuid4().hex
        return key

    def stored_keys(self) -> list[str]:
        """Keys currently on disk, for inspection and tests."""
        ext = self.serializer.extension
        return sorted(
            unquote(p.name[: -len(ext)])
            for p in self.collection_dir.iterdir()
            if p.is_file() and p.name.endswith(ext)
        )
