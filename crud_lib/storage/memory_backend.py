"""Simple memory-backed storage backend

This backend keeps objects in a plain dict keyed by the object key. Every
primitive runs entirely under one lock without awaiting, so each call is
atomic with respect to other coroutines and threads.
"""
from __future__ import annotations
import logging
import uuid
from threading import RLock
from typing import Any, Dict, Hashable, Optional

from crud_lib.errors import DuplicateKeyError
from .base import StorageBackend

logger = logging.getLogger(__name__)


class MemoryBackend(StorageBackend[Hashable, Any]):
    name = "memory"

    def __init__(self, issue_keys: bool = True) -> None:
        self._lock = RLock()
        self._store: Dict[Hashable, Any] = {}
        self.can_issue_keys = issue_keys

    async def raw_create(self, key: Hashable, obj: Any) -> None:
        with self._lock:
            # The store probes first; this catches a racing create in between.
            if key in self._store:
                raise DuplicateKeyError(key)
            self._store[key] = obj
        logger.debug("Stored %r in memory", key)

    async def raw_read(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._store.get(key)

    async def raw_update(self, key: Hashable, obj: Any) -> bool:
        with self._lock:
            if key not in self._store:
                return False
            self._store[key] = obj
            return True

    async def raw_delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    async def raw_exists(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._store

    async def generate_key(self) -> str:
        if not self.can_issue_keys:
            return await super().generate_key()
        with self._lock:
            key = uuid.uuid4().hex
            while key in self._store:
                key = uuid.uuid4().hex
            return key

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
