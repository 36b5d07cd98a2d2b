"""Contract enforcement layer.

`CrudStore` wraps any storage backend and gives every caller the same
argument validation, key handling, error translation and cancellation
behavior regardless of where the objects end up.

Each operation validates its arguments synchronously before its first
backend call, so a backend never sees malformed input. Existence checks are
delegated to the backend; the store only turns absence into
`NotFoundError` / `DuplicateKeyError`. Anything else a backend raises is
passed through untouched.

Usage:

    store = CrudStore(MemoryBackend(), key_accessor=MappingKeyAccessor('id'))
    key = await store.create({'name': 'John Doe'}, key='s-1')
    obj = await store.read(key)
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from crud_lib.cancellation import CancellationToken
from crud_lib.errors import (
    BackendFailure,
    DuplicateKeyError,
    NotFoundError,
    NullArgumentError,
    OperationCancelled,
)
from crud_lib.storage.interfaces import StorageProtocol
from .keys import KeyAccessor, KeySource, KeyStrategy

logger = logging.getLogger(__name__)

K = TypeVar("K")
T = TypeVar("T")
R = TypeVar("R")


class CrudStore(Generic[K, T]):
    """Validated create/read/update/delete over one backend collection.

    The store holds no state between calls besides its collaborators.
    """

    def __init__(
        self,
        backend: Any,
        key_strategy: Optional[KeyStrategy] = None,
        key_accessor: Optional[KeyAccessor] = None,
    ) -> None:
        if not isinstance(backend, StorageProtocol):
            raise TypeError(f"{type(backend).__name__} does not implement the storage protocol")
        if key_strategy is not None and key_accessor is not None:
            raise ValueError("Pass either key_strategy or key_accessor, not both")
        self.backend = backend
        self.key_strategy = key_strategy or KeyStrategy(key_accessor)

    async def _call(
        self,
        operation: str,
        key: Any,
        cancel: Optional[CancellationToken],
        func: Callable[..., Awaitable[R]],
        *args: Any,
        mutating: bool = False,
    ) -> R:
        """Await one backend primitive, racing it against `cancel`.

        A `mutating` primitive that finishes despite the cancellation
        request reports its result; anything else is cancelled outright.
        """
        logger.debug("%s: %s(%r)", operation, getattr(func, "__name__", func), key)
        if cancel is None:
            return await func(*args)
        cancel.raise_if_cancelled(operation, key)

        work = asyncio.ensure_future(func(*args))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # The caller's task was cancelled; take the backend call down too.
            work.cancel()
            waiter.cancel()
            raise
        if work.done():
            waiter.cancel()
            return work.result()

        work.cancel()
        try:
            result = await work
        except asyncio.CancelledError:
            raise OperationCancelled(operation, key) from None
        except Exception as e:
            raise OperationCancelled(operation, key) from e
        if not mutating:
            raise OperationCancelled(operation, key)
        logger.warning("%s of %r completed despite cancellation", operation, key)
        return result

    async def create(self, obj: T, key: Optional[K] = None, cancel: Optional[CancellationToken] = None) -> K:
        """Store `obj` under a new key and return that key.

        The key is `key` if given, else the key embedded in `obj`, else one
        issued by the backend. Raises NullArgumentError, MissingKeyError,
        KeyMismatchError or DuplicateKeyError.
        """
        if obj is None:
            raise NullArgumentError("object")
        source, resolved = self.key_strategy.plan(obj, key, bool(self.backend.can_issue_keys))

        if source is KeySource.ISSUED:
            resolved = await self._call("create", None, cancel, self.backend.generate_key)
            if resolved is None:
                raise BackendFailure(f"{type(self.backend).__name__}.generate_key returned None")

        if await self._call("create", resolved, cancel, self.backend.raw_exists, resolved):
            raise DuplicateKeyError(resolved)
        await self._call("create", resolved, cancel, self.backend.raw_create, resolved, obj, mutating=True)
        logger.info("Created %r (%s key)", resolved, source.value)
        return resolved

    async def read(self, key: K, cancel: Optional[CancellationToken] = None) -> T:
        """Return the object stored under `key` exactly as stored."""
        if key is None:
            raise NullArgumentError("key")
        obj = await self._call("read", key, cancel, self.backend.raw_read, key)
        if obj is None:
            raise NotFoundError(key)
        return obj

    async def update(self, key: K, obj: T, cancel: Optional[CancellationToken] = None) -> None:
        """Replace the object under a live `key`."""
        if key is None:
            raise NullArgumentError("key")
        if obj is None:
            raise NullArgumentError("object")
        if not await self._call("update", key, cancel, self.backend.raw_update, key, obj, mutating=True):
            raise NotFoundError(key)

    async def delete(self, key: K, cancel: Optional[CancellationToken] = None) -> None:
        """Remove a live `key`. The key may be created again afterwards."""
        if key is None:
            raise NullArgumentError("key")
        if not await self._call("delete", key, cancel, self.backend.raw_delete, key, mutating=True):
            raise NotFoundError(key)
        logger.info("Deleted %r", key)
