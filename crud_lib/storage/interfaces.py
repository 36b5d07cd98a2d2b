from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageProtocol(Protocol):
    """Structural mirror of `crud_lib.storage.StorageBackend`.

    Third-party backends do not need to inherit from the abstract class;
    anything providing these members can be wrapped by `CrudStore`.
    Semantics follow the docstrings in `crud_lib.storage.base` (None for a
    missing object, False for a missing key on update/delete).
    """

    can_issue_keys: bool

    async def raw_create(self, key: Any, obj: Any) -> None: ...

    async def raw_read(self, key: Any) -> Optional[Any]: ...

    async def raw_update(self, key: Any, obj: Any) -> bool: ...

    async def raw_delete(self, key: Any) -> bool: ...

    async def raw_exists(self, key: Any) -> bool: ...

    async def generate_key(self) -> Any: ...
