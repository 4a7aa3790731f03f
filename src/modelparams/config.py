"""
Framework configuration for modelparams.

Holds the pluggable defaults shared by the traversal engine and the model
handles. Values are module-level and changed through the setter functions,
so every caller sees the same configuration.
"""

import logging
from typing import Tuple

logger = logging.getLogger(__name__)

# Derived columns - never stored on a Param, never writable
COMPONENT = 'component'
FIELDNAME = 'fieldname'
RESERVED_KEYS: Tuple[str, str] = (COMPONENT, FIELDNAME)

_DEFAULT_VALUE_KEY = 'val'

_value_key: str = _DEFAULT_VALUE_KEY
_ignore_types: Tuple[type, ...] = ()


def set_value_key(name: str) -> None:
    """Set the key a positional Param value is stored under.

    Only affects Params created afterwards; existing Params keep their keys.
    """
    global _value_key
    if not isinstance(name, str) or not name:
        raise ValueError(f"Value key must be a non-empty string, got {name!r}")
    if name in RESERVED_KEYS:
        raise ValueError(f"'{name}' is reserved and cannot be used as the value key")
    _value_key = name


def get_value_key() -> str:
    """Get the key a positional Param value is stored under."""
    return _value_key


def set_ignore_types(types) -> None:
    """Set the types the traversal never descends into.

    Args:
        types: A type or an iterable of types
    """
    global _ignore_types
    if isinstance(types, type):
        types = (types,)
    types = tuple(types)
    for t in types:
        if not isinstance(t, type):
            raise TypeError(f"Ignore types must be types, got {t!r}")
    _ignore_types = types
    logger.debug(f"Ignore types set to {[t.__name__ for t in types]}")


def get_ignore_types() -> Tuple[type, ...]:
    """Get the types the traversal never descends into."""
    return _ignore_types


def reset_config() -> None:
    """Restore all defaults."""
    global _value_key, _ignore_types
    _value_key = _DEFAULT_VALUE_KEY
    _ignore_types = ()
