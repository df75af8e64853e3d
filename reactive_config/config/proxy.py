"""
Change interception for store values.

ConfigProxy and ListProxy are views bound to a store and an access path.
They look their target up from the store's current value on every access, so
a view obtained before a reload keeps working afterwards. Writes mutate the
underlying value and then report the full path to the store, which patches
its text cache and persists.
"""

import json
from collections.abc import MutableMapping, MutableSequence
from typing import TYPE_CHECKING, Any, Iterator, List, Union

from ..errors import IllegalArgumentError, IndexOutOfBoundsError
from ..jsonc.editor import REMOVE
from ..jsonc.parser import AccessPath, PathSegment

if TYPE_CHECKING:
    from .store import ConfigStore


def is_proxied(value: Any) -> bool:
    """True if ``value`` is a store view rather than plain data."""
    return isinstance(value, _Proxy)


def unwrap(value: Any) -> Any:
    """Plain (deep-copied) data for a view; anything else is returned as-is."""
    if isinstance(value, _Proxy):
        return value.unwrap()
    return value


def prepare_value(value: Any) -> Any:
    """
    Turn a value into fresh, JSON-shaped data ready to be stored.

    Tuples become lists and mapping keys become strings. The result shares no
    containers with the argument.

    Raises:
        IllegalArgumentError: If the value cannot be represented as JSON
    """
    value = unwrap(value)
    try:
        return json.loads(json.dumps(value, allow_nan=False))
    except (TypeError, ValueError) as e:
        raise IllegalArgumentError(value, f"not representable as JSON ({e})") from e


class _Proxy:
    """Shared path resolution for store views."""

    _container: type = object

    def __init__(self, store: "ConfigStore", path: AccessPath = ()):
        self._store = store
        self._path = tuple(path)

    @property
    def path(self) -> AccessPath:
        return self._path

    def _target(self) -> Any:
        target = self._store._value
        try:
            for segment in self._path:
                target = target[segment]
        except (KeyError, IndexError, TypeError) as e:
            raise LookupError(f"Path {list(self._path)} no longer exists in {self._store.path}") from e
        if not isinstance(target, self._container):
            raise LookupError(
                f"Path {list(self._path)} in {self._store.path} no longer holds a {self._container.__name__}"
            )
        return target

    def _wrap(self, segment: PathSegment, value: Any) -> Any:
        if isinstance(value, dict):
            return ConfigProxy(self._store, self._path + (segment,))
        if isinstance(value, list):
            return ListProxy(self._store, self._path + (segment,))
        return value

    def unwrap(self) -> Any:
        """Deep copy of the plain data behind this view."""
        return json.loads(json.dumps(self._target()))

    def __eq__(self, other: Any) -> bool:
        return self._target() == unwrap(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._target()!r})"


class ConfigProxy(_Proxy, MutableMapping):
    """Mapping view of a JSON object inside a store."""

    _container = dict

    @staticmethod
    def _key(key: Any) -> str:
        return key if isinstance(key, str) else str(key)

    def __getitem__(self, key: Any) -> Any:
        key = self._key(key)
        return self._wrap(key, self._target()[key])

    def __setitem__(self, key: Any, value: Any) -> None:
        key = self._key(key)
        value = prepare_value(value)
        self._target()[key] = value
        self._store._record_write(self._path + (key,), value)

    def __delitem__(self, key: Any) -> None:
        key = self._key(key)
        del self._target()[key]
        self._store._record_write(self._path + (key,), REMOVE)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._target()))

    def __len__(self) -> int:
        return len(self._target())

    def __contains__(self, key: Any) -> bool:
        return self._key(key) in self._target()

    _missing = object()

    def pop(self, key: Any, default: Any = _missing) -> Any:
        """Remove ``key`` and return its plain value."""
        key = self._key(key)
        if key not in self._target():
            if default is self._missing:
                raise KeyError(key)
            return default
        value = unwrap(self[key])
        del self[key]
        return value

    def popitem(self) -> tuple:
        try:
            key = next(reversed(self._target()))
        except StopIteration:
            raise KeyError("popitem(): mapping is empty") from None
        return key, self.pop(key)


class ListProxy(_Proxy, MutableSequence):
    """Sequence view of a JSON array inside a store."""

    _container = list

    def _index(self, index: int, size: int) -> int:
        if not isinstance(index, int) or isinstance(index, bool):
            raise IllegalArgumentError(index, "array indices must be integers")
        normalized = index + size if index < 0 else index
        if not 0 <= normalized < size:
            raise IndexOutOfBoundsError(index, size)
        return normalized

    def __getitem__(self, index: Union[int, slice]) -> Any:
        target = self._target()
        if isinstance(index, slice):
            return [self._wrap(i, target[i]) for i in range(*index.indices(len(target)))]
        index = self._index(index, len(target))
        return self._wrap(index, target[index])

    def __setitem__(self, index: Union[int, slice], value: Any) -> None:
        target = self._target()
        if isinstance(index, slice):
            # Slice writes replace the whole array
            replacement = list(target)
            replacement[index] = [prepare_value(item) for item in value]
            target[:] = replacement
            self._store._record_write(self._path, prepare_value(replacement))
            return
        index = self._index(index, len(target))
        value = prepare_value(value)
        target[index] = value
        self._store._record_write(self._path + (index,), value)

    def __delitem__(self, index: Union[int, slice]) -> None:
        target = self._target()
        if isinstance(index, slice):
            del target[index]
            self._store._record_write(self._path, prepare_value(target))
            return
        index = self._index(index, len(target))
        del target[index]
        self._store._record_write(self._path + (index,), REMOVE)

    def __len__(self) -> int:
        return len(self._target())

    def insert(self, index: int, value: Any) -> None:
        """Insert before ``index``; out-of-range indices clamp like list.insert."""
        target = self._target()
        size = len(target)
        if index < 0:
            index = max(size + index, 0)
        index = min(index, size)
        value = prepare_value(value)
        target.insert(index, value)
        self._store._record_write(self._path + (index,), value, insertion=True)

    def copy(self) -> List[Any]:
        return self.unwrap()

    def pop(self, index: int = -1) -> Any:
        value = unwrap(self[index])
        del self[index]
        return value

    def reverse(self) -> None:
        self[:] = list(reversed(self.unwrap()))
