"""
Generic traversal engine: flatten selected leaves out of an arbitrary object
graph and reconstruct an object of the same shape with replacement leaves.

Both directions share one depth-first, left-to-right walk, so the n-th leaf
returned by ``flatten`` is always the n-th slot filled by ``reconstruct``.

Composite types are described by a CompositeHandler: ``children`` returns the
ordered ``(fieldname, child)`` pairs of an instance and ``rebuild`` builds a
new instance from the original plus new child values. The walker is written
once against that capability.

Built-in composites:
- tuple, named tuples and tuple subclasses
- list and list subclasses
- dict and dict subclasses (keys are the field names)
- dataclass instances (declared field order)

Anything else is opaque and copied through unchanged unless registered:

    @register_composite
    class Layer:
        def __init__(self, weight, bias):
            self.weight = weight
            self.bias = bias

Usage:
    >>> obj = {"a": Param(1), "b": (Param(2), "label")}
    >>> flatten(obj)
    (Param(val=1), Param(val=2))
    >>> reconstruct(obj, [Param(10), Param(20)])
    {'a': Param(val=10), 'b': (Param(val=20), 'label')}
"""

import copy
import logging
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Callable, Dict, Hashable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from modelparams.config import get_ignore_types
from modelparams.errors import CyclicStructureError, ShapeMismatch
from modelparams.param import Param

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositeHandler:
    """How to take a composite apart and put it back together."""
    children: Callable[[Any], List[Tuple[Hashable, Any]]]
    rebuild: Callable[[Any, List[Any]], Any]


class LeafSite(NamedTuple):
    """A selected leaf plus where it was found."""
    leaf: Any
    component: Optional[type]  # Type of the enclosing composite (None at the root)
    fieldname: Optional[Hashable]  # Field, key or index under that composite


# ==================== BUILT-IN HANDLERS ====================

def _tuple_children(obj: tuple) -> List[Tuple[Hashable, Any]]:
    names = getattr(type(obj), '_fields', None)
    if names is not None:
        return list(zip(names, obj))
    return list(enumerate(obj))


def _tuple_rebuild(obj: tuple, values: List[Any]) -> tuple:
    obj_type = type(obj)
    if obj_type is tuple:
        return tuple(values)
    if hasattr(obj_type, '_fields'):
        return obj_type(*values)
    return obj_type(values)


def _list_rebuild(obj: list, values: List[Any]) -> list:
    new_list = copy.copy(obj)
    new_list[:] = values
    return new_list


def _dict_rebuild(obj: dict, values: List[Any]) -> dict:
    new_dict = copy.copy(obj)
    for key, value in zip(obj.keys(), values):
        new_dict[key] = value
    return new_dict


def _dataclass_children(obj: Any) -> List[Tuple[Hashable, Any]]:
    # object.__getattribute__ reads the raw stored value even if the class
    # customises attribute lookup
    return [(f.name, object.__getattribute__(obj, f.name)) for f in fields(obj)]


def _dataclass_rebuild(obj: Any, values: List[Any]) -> Any:
    init_values = {}
    late_values = {}
    for f, value in zip(fields(obj), values):
        if f.init:
            init_values[f.name] = value
        else:
            late_values[f.name] = value
    result = type(obj)(**init_values)
    # init=False fields are copied through; object.__setattr__ also works on frozen dataclasses
    for name, value in late_values.items():
        object.__setattr__(result, name, value)
    return result


def _attrs_children(obj: Any) -> List[Tuple[Hashable, Any]]:
    return list(vars(obj).items())


def _attrs_rebuild(obj: Any, values: List[Any]) -> Any:
    obj_copy = copy.copy(obj)
    for name, value in zip(vars(obj), values):
        setattr(obj_copy, name, value)
    return obj_copy


_TUPLE_HANDLER = CompositeHandler(_tuple_children, _tuple_rebuild)
_DATACLASS_HANDLER = CompositeHandler(_dataclass_children, _dataclass_rebuild)

# ==================== REGISTRY ====================

_composite_registry: Dict[type, CompositeHandler] = {
    tuple: _TUPLE_HANDLER,
    list: CompositeHandler(lambda obj: list(enumerate(obj)), _list_rebuild),
    dict: CompositeHandler(lambda obj: list(obj.items()), _dict_rebuild),
}
_builtin_types = frozenset(_composite_registry)

# type -> handler (or None for opaque types), rebuilt lazily
_handler_cache: Dict[type, Optional[CompositeHandler]] = {}


def register_composite(cls: Optional[type] = None, *, children=None, rebuild=None):
    """Register a type as a composite the traversal descends into.

    Without ``children``/``rebuild`` the instance ``__dict__`` is walked in
    insertion order and rebuilt on a shallow copy with ``setattr``.

    Works as a plain call, a bare decorator, or a decorator with arguments:

        register_composite(Layer)

        @register_composite
        class Layer: ...

        @register_composite(children=layer_children, rebuild=layer_rebuild)
        class Layer: ...

    Returns:
        The registered class (or a decorator when ``cls`` is omitted)
    """
    if (children is None) != (rebuild is None):
        raise ValueError("children and rebuild must be given together")

    def decorator(target: type) -> type:
        if not isinstance(target, type):
            raise TypeError(f"register_composite() expects a class, got {target!r}")
        if target in _builtin_types:
            raise ValueError(f"Cannot re-register built-in composite {target.__name__}")
        if children is None:
            handler = CompositeHandler(_attrs_children, _attrs_rebuild)
        else:
            handler = CompositeHandler(children, rebuild)
        if target in _composite_registry:
            logger.warning(f"Overwriting composite registration for {target.__name__}")
        _composite_registry[target] = handler
        _handler_cache.clear()
        logger.debug(f"Registered composite: {target.__name__}")
        return target

    if cls is None:
        return decorator
    return decorator(cls)


def unregister_composite(cls: type) -> None:
    """Remove a registration made with register_composite."""
    if cls in _builtin_types:
        raise ValueError(f"Cannot unregister built-in composite {cls.__name__}")
    if _composite_registry.pop(cls, None) is not None:
        _handler_cache.clear()
        logger.debug(f"Unregistered composite: {cls.__name__}")


def get_composite_handler(obj_type: type) -> Optional[CompositeHandler]:
    """Resolve the handler for a type, or None if instances are opaque.

    Lookup order: explicit registration of the type itself, dataclass,
    then the nearest registered base class in MRO order.
    """
    if obj_type in _handler_cache:
        return _handler_cache[obj_type]

    handler = _composite_registry.get(obj_type)
    if handler is None and is_dataclass(obj_type):
        handler = _DATACLASS_HANDLER
    if handler is None:
        for base in obj_type.__mro__[1:]:
            if base in _composite_registry:
                handler = _composite_registry[base]
                break

    _handler_cache[obj_type] = handler
    return handler


# ==================== WALK ====================

def _as_predicate(select) -> Callable[[Any], bool]:
    if select is None:
        select = Param
    if isinstance(select, type) or isinstance(select, tuple):
        return lambda node: isinstance(node, select)
    if callable(select):
        return select
    raise TypeError(f"select must be a type, tuple of types or predicate, got {select!r}")


def _as_ignore(ignore) -> Tuple[type, ...]:
    if ignore is None:
        return get_ignore_types()
    if isinstance(ignore, type):
        return (ignore,)
    return tuple(ignore)


def _children_of(obj: Any, ignore: Tuple[type, ...]) -> Optional[List[Tuple[Hashable, Any]]]:
    """Children of a composite node, or None for opaque and ignored nodes."""
    if ignore and isinstance(obj, ignore):
        return None
    handler = get_composite_handler(type(obj))
    if handler is None:
        return None
    return handler.children(obj)


def _walk(obj: Any, is_leaf, ignore, component, fieldname, active: set) -> Iterator[LeafSite]:
    if is_leaf(obj):
        yield LeafSite(obj, component, fieldname)
        return
    children = _children_of(obj, ignore)
    if children is None:
        return
    obj_id = id(obj)
    if obj_id in active:
        raise CyclicStructureError(f"Object of type {type(obj).__name__} contains itself")
    active.add(obj_id)
    try:
        obj_type = type(obj)
        for name, child in children:
            yield from _walk(child, is_leaf, ignore, obj_type, name, active)
    finally:
        active.discard(obj_id)


def leaf_sites(obj: Any, select=None, ignore=None) -> Iterator[LeafSite]:
    """Iterate over every selected leaf with its component type and field name.

    Args:
        obj: Object to walk
        select: Leaf type, tuple of types, or predicate (default: Param)
        ignore: Types never descended into (default: configured ignore types)
    """
    return _walk(obj, _as_predicate(select), _as_ignore(ignore), None, None, set())


def flatten(obj: Any, select=None, ignore=None) -> Tuple[Any, ...]:
    """All selected leaves of ``obj`` in depth-first, left-to-right order."""
    return tuple(site.leaf for site in leaf_sites(obj, select, ignore))


def fieldname_flatten(obj: Any, select=None, ignore=None) -> Tuple[Optional[Hashable], ...]:
    """Field name each selected leaf was found under, in flatten order."""
    return tuple(site.fieldname for site in leaf_sites(obj, select, ignore))


def parent_type_flatten(obj: Any, select=None, ignore=None) -> Tuple[Optional[type], ...]:
    """Type of the composite enclosing each selected leaf, in flatten order."""
    return tuple(site.component for site in leaf_sites(obj, select, ignore))


def _rebuild(obj: Any, is_leaf, ignore, replacements: Iterator[Any], active: set) -> Any:
    if is_leaf(obj):
        return next(replacements)
    children = _children_of(obj, ignore)
    if children is None:
        return obj
    obj_id = id(obj)
    if obj_id in active:
        raise CyclicStructureError(f"Object of type {type(obj).__name__} contains itself")
    active.add(obj_id)
    try:
        new_values = [_rebuild(child, is_leaf, ignore, replacements, active) for _, child in children]
    finally:
        active.discard(obj_id)
    # Untouched subtrees are shared with the original
    if all(new is old for new, (_, old) in zip(new_values, children)):
        return obj
    return get_composite_handler(type(obj)).rebuild(obj, new_values)


def reconstruct(obj: Any, leaves: Sequence[Any], select=None, ignore=None) -> Any:
    """Rebuild ``obj`` with its selected leaves replaced positionally.

    Replacements are substituted in flatten order and may be any value, not
    only leaves of the selected type. Non-leaf values are copied through.

    Raises:
        ShapeMismatch: If the number of replacements differs from the number
            of selected leaves. Raised before anything is rebuilt.
    """
    is_leaf = _as_predicate(select)
    ignore = _as_ignore(ignore)
    leaves = list(leaves)
    expected = sum(1 for _ in _walk(obj, is_leaf, ignore, None, None, set()))
    if len(leaves) != expected:
        raise ShapeMismatch(
            f"{type(obj).__name__} has {expected} leaves but {len(leaves)} replacements were given"
        )
    return _rebuild(obj, is_leaf, ignore, iter(leaves), set())
