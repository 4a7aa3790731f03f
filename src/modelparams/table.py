"""
Tabular view of a model: one row per Param, one column per key.

The view is a pure projection of the model's current parameters. Rendering
and conversion to concrete table libraries are left to the caller; a list
of row dicts or a dict of columns is accepted by most of them directly.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Sequence, Tuple

from modelparams.config import COMPONENT, FIELDNAME
from modelparams.param import ABSENT, Param


def model_keys(params: Sequence[Param]) -> Tuple[str, ...]:
    """Column names for a normalised parameter sequence.

    Returns ``()`` when there are no parameters.
    """
    if not params:
        return ()
    return (COMPONENT, FIELDNAME) + tuple(params[0].keys())


def columns(model) -> Dict[str, Tuple[Any, ...]]:
    """Column name -> tuple of values, in column order."""
    return {key: tuple(model.column(key)) for key in model.keys()}


def rows(model) -> List[Dict[str, Any]]:
    """One dict per Param, keyed by column name. Empty for an empty model."""
    cols = columns(model)
    if not cols:
        return []
    names = list(cols)
    return [dict(zip(names, values)) for values in zip(*cols.values())]


def table_columns(table) -> Dict[str, List[Any]]:
    """Read a table into column name -> list of values.

    Accepts:
    - a mapping of column name to values (dict of lists/tuples)
    - any column container with ``keys()`` and ``__getitem__`` (e.g. a DataFrame)
    - an iterable of row mappings, such as the output of ``rows()``.
      Rows missing a column contribute ABSENT for it.
    """
    if isinstance(table, Mapping) or (hasattr(table, 'keys') and hasattr(table, '__getitem__')):
        return {name: list(table[name]) for name in table.keys()}

    row_list = list(table)
    names: Dict[str, None] = {}
    for row in row_list:
        if not isinstance(row, Mapping):
            raise TypeError(f"Table rows must be mappings, got {type(row).__name__}")
        for name in row:
            names.setdefault(name, None)
    return {name: [row.get(name, ABSENT) for row in row_list] for name in names}
