"""Contract enforcement layer for single-object CRUD persistence."""

from .errors import (
    CrudError,
    NullArgumentError,
    MissingKeyError,
    KeyMismatchError,
    DuplicateKeyError,
    NotFoundError,
    BackendFailure,
    OperationCancelled,
)
from .cancellation import CancellationToken
from .contract import CrudStore, KeyStrategy

__all__ = [
    "CrudStore",
    "KeyStrategy",
    "CancellationToken",
    "CrudError",
    "NullArgumentError",
    "MissingKeyError",
    "KeyMismatchError",
    "DuplicateKeyError",
    "NotFoundError",
    "BackendFailure",
    "OperationCancelled",
]
