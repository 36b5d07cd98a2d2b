"""Storage backend interface definitions.

Defines the StorageBackend abstract class wrapped by
:class:`crud_lib.contract.store.CrudStore`. Backends are pure storage: they
never validate arguments and report absence through return values rather
than exceptions. All primitives are coroutines; each ``await`` on a backend
is a suspension point of the enclosing store operation.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

K = TypeVar("K")
T = TypeVar("T")


class StorageBackend(ABC, Generic[K, T]):
    """Abstract storage backend.

    Implementations must be safe to call from several coroutines at once.
    Subclasses that can mint keys set ``can_issue_keys`` and implement
    :meth:`generate_key`.
    """

    #: Short identifier used in logs and the health endpoint.
    name: str = "abstract"

    can_issue_keys: bool = False

    @abstractmethod
    async def raw_create(self, key: K, obj: T) -> None:
        """Store `obj` under `key`.

        The enforcement layer has already probed for an existing entry.
        Backends that can make the check atomic may raise
        ``DuplicateKeyError`` when they lose a race.
        """

    @abstractmethod
    async def raw_read(self, key: K) -> Optional[T]:
        """Return the object stored under `key`, or None when absent."""

    @abstractmethod
    async def raw_update(self, key: K, obj: T) -> bool:
        """Replace the object under `key`. Return False if `key` is absent."""

    @abstractmethod
    async def raw_delete(self, key: K) -> bool:
        """Remove `key`. Return False if it was absent."""

    async def raw_exists(self, key: K) -> bool:
        """Return True if `key` is live.

        The default reads the object; override with a cheaper probe.
        """
        return await self.raw_read(key) is not None

    async def generate_key(self) -> K:
        """Mint a fresh key that is not in use."""
        raise NotImplementedError(f"{type(self).__name__} does not issue keys")
