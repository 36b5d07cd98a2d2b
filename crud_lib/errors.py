"""Error taxonomy for the CRUD contract.

Every domain failure raised by :class:`crud_lib.contract.store.CrudStore`
derives from :class:`CrudError` and carries a short machine readable
``code`` which the HTTP layer reuses in its error payloads.

Cancellation is reported with :class:`OperationCancelled`, which is kept
outside the ``CrudError`` tree so that ``except CrudError`` never catches it.
"""
from __future__ import annotations
from typing import Any


class CrudError(Exception):
    """Base class for all contract violations and storage faults."""

    code = "crud_error"


class NullArgumentError(CrudError, ValueError):
    """A required argument (``object`` or ``key``) was not supplied."""

    code = "null_argument"

    def __init__(self, param_name: str) -> None:
        super().__init__(f"Argument '{param_name}' must not be None")
        self.param_name = param_name


class MissingKeyError(CrudError):
    """No key supplied, none embedded and the backend cannot issue one."""

    code = "missing_key"

    def __init__(self) -> None:
        super().__init__("No key supplied, object carries no key and the backend cannot issue keys")


class KeyMismatchError(CrudError):
    code = "key_mismatch"

    def __init__(self, supplied: Any, embedded: Any) -> None:
        super().__init__(f"Supplied key {supplied!r} does not match embedded key {embedded!r}")
        self.supplied = supplied
        self.embedded = embedded


class DuplicateKeyError(CrudError):
    code = "duplicate_key"

    def __init__(self, key: Any) -> None:
        super().__init__(f"An object with key {key!r} already exists")
        self.key = key


class NotFoundError(CrudError, KeyError):
    """Key is not in a live lifecycle state.

    Also a ``KeyError`` so code using the plain mapping convention keeps
    working.
    """

    code = "not_found"

    def __init__(self, key: Any) -> None:
        super().__init__(f"No object with key {key!r}")
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class BackendFailure(CrudError):
    """Storage fault raised by the bundled backends (I/O, decode, decrypt)."""

    code = "backend_failure"


class OperationCancelled(Exception):
    """The operation was aborted through its cancellation token."""

    def __init__(self, operation: str, key: Any = None) -> None:
        msg = f"{operation} cancelled" if key is None else f"{operation} of {key!r} cancelled"
        super().__init__(msg)
        self.operation = operation
        self.key = key
