"""Key resolution for create calls.

A key can come from three places: the caller, the object itself (an
embedded key, read through a *key accessor*) or the backend, which may be
able to mint fresh keys. :class:`KeyStrategy` decides which one wins and
checks that the first two agree.
"""
from __future__ import annotations
import enum
import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from crud_lib.errors import KeyMismatchError, MissingKeyError

logger = logging.getLogger(__name__)


class KeyAccessor(Protocol):
    """Extract the key embedded in an object, or None if it carries none."""

    def get_key(self, obj: Any) -> Optional[Any]: ...


class NoKeyAccessor:
    """Objects never carry their own key."""

    def get_key(self, obj: Any) -> Optional[Any]:
        return None


class MappingKeyAccessor:
    """Read the key from a mapping entry, e.g. ``obj['id']``."""

    def __init__(self, field: str) -> None:
        self.field = field

    def get_key(self, obj: Any) -> Optional[Any]:
        if not isinstance(obj, Mapping):
            return None
        return obj.get(self.field)


class AttributeKeyAccessor:
    """Read the key from an attribute, e.g. ``obj.id``."""

    def __init__(self, name: str) -> None:
        self.name = name

    def get_key(self, obj: Any) -> Optional[Any]:
        return getattr(obj, self.name, None)


class MixedKeyAccessor:
    """Dispatch to mapping or attribute access depending on the object.

    Mappings are looked up by `field`; anything else by attribute of the
    same name.
    """

    def __init__(self, field: str) -> None:
        self._mapping = MappingKeyAccessor(field)
        self._attribute = AttributeKeyAccessor(field)

    def get_key(self, obj: Any) -> Optional[Any]:
        if isinstance(obj, Mapping):
            return self._mapping.get_key(obj)
        return self._attribute.get_key(obj)


class CallableKeyAccessor:
    def __init__(self, func: Callable[[Any], Optional[Any]]) -> None:
        self._func = func

    def get_key(self, obj: Any) -> Optional[Any]:
        return self._func(obj)


class StrKeyAccessor:
    """Wrap another accessor and present embedded keys as strings.

    Used where keys travel as text, such as URL path segments.
    """

    def __init__(self, inner: KeyAccessor) -> None:
        self._inner = inner

    def get_key(self, obj: Any) -> Optional[Any]:
        key = self._inner.get_key(obj)
        return None if key is None else str(key)


def key_accessor_for(field: Optional[str]) -> KeyAccessor:
    """Accessor used by configuration: None disables embedded keys."""
    if field is None:
        return NoKeyAccessor()
    return MixedKeyAccessor(field)


class KeySource(enum.Enum):
    SUPPLIED = "supplied"
    EMBEDDED = "embedded"
    ISSUED = "issued"


class KeyStrategy:
    """Decide which key a create call stores its object under."""

    def __init__(self, accessor: Optional[KeyAccessor] = None) -> None:
        self.accessor: KeyAccessor = accessor or NoKeyAccessor()

    def embedded_key(self, obj: Any) -> Optional[Any]:
        return self.accessor.get_key(obj)

    @staticmethod
    def choose(supplied: Optional[Any], embedded: Optional[Any], can_issue: bool) -> KeySource:
        """Pick the key source, raising on missing or conflicting keys.

        The checks run in a fixed order: a missing key is reported before a
        mismatch, and a supplied key always beats an embedded one.
        """
        if supplied is None and embedded is None and not can_issue:
            raise MissingKeyError()
        if supplied is not None and embedded is not None and supplied != embedded:
            raise KeyMismatchError(supplied, embedded)
        if supplied is not None:
            return KeySource.SUPPLIED
        if embedded is not None:
            return KeySource.EMBEDDED
        return KeySource.ISSUED

    def plan(self, obj: Any, supplied: Optional[Any], can_issue: bool) -> tuple[KeySource, Optional[Any]]:
        """Resolve the key without touching the backend.

        Returns the source and, unless the backend has to issue one, the
        key itself.
        """
        embedded = self.embedded_key(obj)
        source = self.choose(supplied, embedded, can_issue)
        logger.debug("Key source for create: %s", source.value)
        if source is KeySource.SUPPLIED:
            return source, supplied
        if source is KeySource.EMBEDDED:
            return source, embedded
        return source, None

