"""Storage backends wrapped by the CRUD contract layer."""
from __future__ import annotations
from pathlib import Path
from typing import Optional

from .base import StorageBackend
from .interfaces import StorageProtocol
from .memory_backend import MemoryBackend
from .file_backend import FileBackend
from .serializer import get_serializer

__all__ = [
    "StorageBackend",
    "StorageProtocol",
    "MemoryBackend",
    "FileBackend",
    "create_storage",
]


def create_storage(
    backend: str = "memory",
    serializer: str = "json",
    data_dir: str | Path = "./data",
    collection: str = "objects",
    password: Optional[str] = None,
    issue_keys: bool = True,
) -> StorageBackend:
    """Build a bundled backend by name.

    `serializer` and `password` only apply to the file backend; the
    `encrypted` serializer requires `password`.
    """
    if backend == "memory":
        return MemoryBackend(issue_keys=issue_keys)
    if backend == "file":
        options = {}
        if serializer == "encrypted":
            options["password"] = password
        return FileBackend(
            data_dir=data_dir,
            collection=collection,
            serializer=get_serializer(serializer, **options),
            issue_keys=issue_keys,
        )
    raise ValueError(f"Unknown storage backend '{backend}'")
