"""Key strategy and contract enforcement layer."""

from .keys import (
    KeyAccessor,
    NoKeyAccessor,
    MappingKeyAccessor,
    AttributeKeyAccessor,
    MixedKeyAccessor,
    CallableKeyAccessor,
    StrKeyAccessor,
    KeySource,
    KeyStrategy,
    key_accessor_for,
)
from .store import CrudStore

__all__ = [
    "CrudStore",
    "KeyStrategy",
    "KeySource",
    "KeyAccessor",
    "NoKeyAccessor",
    "MappingKeyAccessor",
    "AttributeKeyAccessor",
    "MixedKeyAccessor",
    "CallableKeyAccessor",
    "StrKeyAccessor",
    "key_accessor_for",
]
