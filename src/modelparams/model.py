"""
Model handles: indexable, tabular views over any object containing Params.

A model wraps an arbitrary object (its *parent*) and treats every Param found
anywhere inside it as one flat, ordered list of parameters. Nothing is
cached: every read walks the current parent again, so the model can never go
stale.

Two variants share the read side:
- Model: mutable handle. Writes build a complete new parent and swap it in,
  so a failed write leaves the model untouched.
- StaticModel: immutable. No write methods; use ``with_parent`` to derive a
  new model.

Columns:
    model["val"]          values of one key across all params
    model["component"]    type of the composite each param was found in
    model["fieldname"]    field name, key or index each param was found under

Thread safety: Not thread-safe. Callers sharing a Model between threads must
serialise writes themselves.
"""

import logging
import warnings
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from modelparams import table as _table
from modelparams.config import COMPONENT, FIELDNAME, RESERVED_KEYS
from modelparams.errors import ArityMismatch, NoParametersFound, ReservedKeyError
from modelparams.traversal import fieldname_flatten, flatten, leaf_sites, parent_type_flatten, reconstruct
from modelparams.normalization import normalize
from modelparams.param import Param

logger = logging.getLogger(__name__)


# ==================== OBJECT-LEVEL HELPERS ====================

def _unwrap(obj: Any) -> Any:
    return obj.parent if isinstance(obj, AbstractModel) else obj


def params(obj: Any) -> Tuple[Param, ...]:
    """All Params in ``obj`` (or in a model's parent), in traversal order."""
    return flatten(_unwrap(obj), Param)


def has_param(obj: Any) -> bool:
    """True if ``obj`` contains at least one Param."""
    return next(leaf_sites(_unwrap(obj), Param), None) is not None


def param_fieldnames(obj: Any) -> tuple:
    """Field name each Param was found under."""
    return fieldname_flatten(_unwrap(obj), Param)


def param_parent_types(obj: Any) -> tuple:
    """Type of the composite each Param was found in."""
    return parent_type_flatten(_unwrap(obj), Param)


def strip_params(obj: Any) -> Any:
    """Copy of ``obj`` with every Param replaced by its current value."""
    obj = _unwrap(obj)
    return reconstruct(obj, [p.value for p in flatten(obj, Param)], Param)


def _check_arity(values: Sequence[Any], count: int, what: str) -> None:
    if len(values) != count:
        raise ArityMismatch(f"{what}: got {len(values)} values for {count} params")


def _with_values(obj: Any, values: Sequence[Any]) -> Any:
    """New parent with each Param's value replaced, or each Param swapped
    for the given Param when ``values`` holds only Params."""
    current = flatten(obj, Param)
    values = tuple(values)
    _check_arity(values, len(current), "update")
    n_params = sum(1 for v in values if isinstance(v, Param))
    if values and n_params == len(values):
        logger.debug(f"Replacing {n_params} params of {type(obj).__name__}")
        return normalize(reconstruct(obj, values, Param), Param)
    if n_params:
        raise TypeError(f"update got {n_params} Params among {len(values)} values; "
                        f"pass either all Params or all plain values")
    return reconstruct(obj, [p.with_value(v) for p, v in zip(current, values)], Param)


def _with_column(obj: Any, key: str, values: Sequence[Any]) -> Any:
    """New normalised parent with ``key`` set on every Param."""
    if key in RESERVED_KEYS:
        raise ReservedKeyError(f"Cannot set '{key}': it is derived from the object structure")
    current = flatten(obj, Param)
    values = tuple(values)
    _check_arity(values, len(current), f"set '{key}'")
    if current and key in current[0]:
        logger.debug(f"Replacing column '{key}' on {len(current)} params")
    else:
        logger.debug(f"Adding column '{key}' to {len(current)} params")
    newparams = [p.with_item(key, v) for p, v in zip(current, values)]
    return normalize(reconstruct(obj, newparams, Param), Param)


def update(obj: Any, values: Sequence[Any]) -> Any:
    """Replace the value of every Param positionally, keeping metadata.

    Returns a new object; ``obj`` is not modified. Given a model, returns a
    new model of the same type wrapping the updated parent. When every
    element of ``values`` is a Param, the Params are replaced whole.

    Raises:
        ArityMismatch: If ``len(values)`` differs from the number of Params
        TypeError: If ``values`` mixes Params and plain values
    """
    if isinstance(obj, AbstractModel):
        return type(obj)(_with_values(obj.parent, values), strict=obj._strict)
    return _with_values(obj, values)


def _prepare_parent(parent: Any, strict: bool, model_name: str) -> Any:
    """Normalise a parent object, reporting when it holds no Params."""
    if not has_param(parent):
        message = f"{model_name} has no Param fields (parent type: {type(parent).__name__})"
        if strict:
            raise NoParametersFound(message)
        warnings.warn(message, NoParametersFound, stacklevel=3)
        return parent
    return normalize(parent, Param)


# ==================== MODELS ====================

class AbstractModel:
    """
    Read side shared by Model and StaticModel.

    Behaves like a tuple of Params for ``len``, iteration and integer or
    slice indexing, and like a mapping of columns for string keys.
    Subclasses store the parent in ``_parent``.
    """

    def __init__(self, parent: Any, strict: bool = False):
        """
        Args:
            parent: Any object containing Params, or another model whose
                    parent is rewrapped
            strict: Raise NoParametersFound instead of warning when the
                    parent contains no Params
        """
        parent = _unwrap(parent)
        object.__setattr__(self, '_strict', strict)
        object.__setattr__(self, '_parent', _prepare_parent(parent, strict, type(self).__name__))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{type(self).__name__} wrapping {type(parent).__name__} with {len(self)} params")

    @property
    def parent(self) -> Any:
        """The wrapped object."""
        return self._parent

    def params(self) -> Tuple[Param, ...]:
        return flatten(self._parent, Param)

    # ==================== TUPLE-LIKE ====================

    def __len__(self) -> int:
        return len(self.params())

    def __iter__(self) -> Iterator[Param]:
        return iter(self.params())

    def __getitem__(self, index):
        if isinstance(index, str):
            return self.column(index)
        return self.params()[index]

    def tolist(self) -> List[Any]:
        """Current value of every Param."""
        return [p.value for p in self.params()]

    # ==================== COLUMNS ====================

    def keys(self) -> Tuple[str, ...]:
        """Column names: component, fieldname, then the Param keys."""
        return _table.model_keys(self.params())

    def has_key(self, key: str) -> bool:
        return key in self.keys()

    def column(self, key: str) -> tuple:
        """Values of one column across all Params.

        Raises:
            KeyNotFound: If the Params do not define ``key``
        """
        if key == COMPONENT:
            return param_parent_types(self._parent)
        if key == FIELDNAME:
            return param_fieldnames(self._parent)
        return tuple(p[key] for p in self.params())

    def columns(self) -> Dict[str, tuple]:
        return _table.columns(self)

    def rows(self) -> List[Dict[str, Any]]:
        """One dict per Param, keyed by column name."""
        return _table.rows(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({type(self._parent).__name__}, {len(self)} params)"


class Model(AbstractModel):
    """
    Mutable model handle.

    Every write computes a complete new parent first and replaces the stored
    parent in one assignment. A write that raises leaves the model unchanged.

    Example:
        >>> model = Model(Layer(weight=Param(0.5, bounds=(0, 1)), bias=Param(0.0)))
        >>> model["val"]
        (0.5, 0.0)
        >>> model.update([0.7, 0.1])
        >>> model["bounds"]
        ((0, 1), ABSENT)
    """

    def set_parent(self, parent: Any) -> None:
        """Replace the wrapped object. The new parent is normalised."""
        self._parent = _prepare_parent(_unwrap(parent), self._strict, type(self).__name__)

    def __setitem__(self, key: str, values: Sequence[Any]) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Model columns are set by key name, got {type(key).__name__}")
        self.set_column(key, values)

    def set_column(self, key: str, values: Sequence[Any]) -> None:
        """Set ``key`` on every Param, adding the key if it is new.

        Raises:
            ReservedKeyError: For ``component`` and ``fieldname``
            ArityMismatch: If ``len(values)`` differs from ``len(self)``
        """
        self._parent = _with_column(self._parent, key, values)

    def update(self, values: Sequence[Any]) -> None:
        """Replace the value of every Param positionally, keeping metadata.

        If every element of ``values`` is a Param, the Params are replaced
        whole and the new parent is normalised.

        Raises:
            ArityMismatch: If ``len(values)`` differs from ``len(self)``
            TypeError: If ``values`` mixes Params and plain values
        """
        self._parent = _with_values(self._parent, values)

    def update_from_table(self, table) -> 'Model':
        """Set every column of ``table`` except component and fieldname.

        ``table`` is anything ``table_columns`` accepts: a dict of columns,
        a DataFrame-like object, or a list of row dicts. All columns are
        applied before the parent is replaced.
        """
        new_parent = self._parent
        for name, values in _table.table_columns(table).items():
            if name in RESERVED_KEYS:
                continue
            new_parent = _with_column(new_parent, name, values)
        self._parent = new_parent
        return self


class StaticModel(AbstractModel):
    """
    Immutable model handle.

    Like Model but read-only: it cannot be used to add columns or update
    values. Derive a new StaticModel with ``with_parent`` or ``update()``.
    """

    def __setattr__(self, name: str, value: Any) -> None:
        _ = (name, value)
        raise AttributeError("StaticModel is immutable. Use with_parent() to derive a new model.")

    def with_parent(self, parent: Any) -> 'StaticModel':
        return type(self)(parent, strict=self._strict)
