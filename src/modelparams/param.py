"""
Param: the tagged leaf that models are built from.

A Param is an immutable ordered record. Its first key holds the current
value, the remaining keys hold arbitrary metadata (bounds, units,
descriptions...). Params are never changed in place: ``with_value`` and
``with_item`` return new Params, and the traversal engine swaps whole Params
when it rebuilds an object.

Usage:
    >>> p = Param(0.5, bounds=(0.0, 1.0), units="m")
    >>> p.keys()
    ('val', 'bounds', 'units')
    >>> p.value
    0.5
    >>> p.with_value(0.8)
    Param(val=0.8, bounds=(0.0, 1.0), units='m')
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator, Tuple

from modelparams.config import get_value_key
from modelparams.errors import KeyNotFound


class _AbsentType:
    """Type of the ABSENT marker. Only one instance ever exists."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'ABSENT'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_AbsentType, ())


# Fill value for metadata a Param never defined. Distinct from None, 0 and False.
ABSENT = _AbsentType()


class Param(Mapping):
    """Immutable ordered mapping from metadata key to value.

    Construction:
        Param(1.0, units="m")          # value stored under the configured value key
        Param(units="m", val=1.0)      # the configured value key is moved first
        Param(value=1.0, units="m")    # otherwise the first keyword is the value key
        Param.from_mapping(mapping)    # first key of the mapping is the value key

    Keys are readable as attributes (``p.units``) when they are identifiers.
    Keys that share a name with a method or property (``keys``, ``values``,
    ``items``, ``get``, ``parent``, ``value``, ``value_key``) are only
    readable by subscription: ``p["parent"]``. Assigning attributes raises
    AttributeError.
    """
    __slots__ = ('_data',)

    def __init__(self, *args: Any, **metadata: Any):
        if len(args) > 1:
            raise TypeError(f"Param takes at most one positional value, got {len(args)}")
        if args:
            value_key = get_value_key()
            if value_key in metadata:
                raise TypeError(f"Param got the value twice: positionally and as '{value_key}='")
            data = {value_key: args[0]}
            data.update(metadata)
        else:
            data = dict(metadata)
            value_key = get_value_key()
            if value_key in data:
                # The configured value key always comes first
                data = {value_key: data.pop(value_key), **data}
        if not data:
            raise ValueError("Param needs at least a value")
        object.__setattr__(self, '_data', data)

    @classmethod
    def from_mapping(cls, mapping) -> 'Param':
        """Build a Param from any ordered mapping or iterable of pairs."""
        data = dict(mapping)
        if not data:
            raise ValueError("Param needs at least a value")
        param = cls.__new__(cls)
        object.__setattr__(param, '_data', data)
        return param

    # ==================== MAPPING PROTOCOL ====================

    def __getitem__(self, key: str) -> Any:
        try:
            return self._data[key]
        except KeyError:
            raise KeyNotFound(f"Param has no key {key!r}; available keys: {self.keys()}") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def keys(self) -> Tuple[str, ...]:
        """Keys in declaration order. The first key is the value key."""
        return tuple(self._data)

    # ==================== ATTRIBUTE ACCESS ====================

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, i.e. for metadata keys
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"Param has no key '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        _ = (name, value)
        raise AttributeError("Param is immutable. Use with_value() or with_item() to derive a new Param.")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("Param is immutable.")

    @property
    def parent(self) -> Mapping:
        """Read-only view of the underlying key/value data."""
        return MappingProxyType(self._data)

    @property
    def value_key(self) -> str:
        return next(iter(self._data))

    @property
    def value(self) -> Any:
        """The value stored under the first key."""
        return self._data[self.value_key]

    # ==================== DERIVATION ====================

    def with_value(self, value: Any) -> 'Param':
        """New Param with the first key's value replaced."""
        return self.with_item(self.value_key, value)

    def with_item(self, key: str, value: Any) -> 'Param':
        """New Param with ``key`` set to ``value``.

        An existing key keeps its position; a new key is appended.
        """
        data = dict(self._data)
        data[key] = value
        return Param.from_mapping(data)

    # ==================== DUNDER ====================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Param):
            return NotImplemented
        return tuple(self._data.items()) == tuple(other._data.items())

    def __hash__(self) -> int:
        return hash(tuple(self._data.items()))

    def __repr__(self) -> str:
        inner = ', '.join(f"{k}={v!r}" for k, v in self._data.items())
        return f"Param({inner})"

    def __reduce__(self):
        return (_param_from_items, (tuple(self._data.items()),))


def _param_from_items(items) -> Param:
    """Unpickling helper."""
    return Param.from_mapping(items)
