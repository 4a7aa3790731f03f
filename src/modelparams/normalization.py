"""
Metadata normalisation.

Gives every Param in an object the same keys in the same order, filling keys
a Param never defined with ABSENT. Models normalise their parent on every
construction and write so columns can be read across all parameters.
"""

import logging
from typing import Any, Iterable, List, Tuple

from modelparams.errors import ValueKeyMismatch
from modelparams.traversal import flatten, reconstruct
from modelparams.param import ABSENT, Param

logger = logging.getLogger(__name__)


def param_keys_union(params: Iterable[Param]) -> Tuple[str, ...]:
    """Union of all Param keys, in first-seen order."""
    seen = {}
    for param in params:
        for key in param.keys():
            seen.setdefault(key, None)
    return tuple(seen)


def expand_keys(params: Iterable[Param]) -> List[Param]:
    """Expand all Params to the union of their keys, filling with ABSENT.

    Params that already have exactly the union keys are returned as-is.

    Raises:
        ValueKeyMismatch: If the Params do not all store their value under
                          the same first key
    """
    params = list(params)
    all_keys = param_keys_union(params)
    for param in params:
        if param.value_key != all_keys[0]:
            raise ValueKeyMismatch(
                f"Param {param!r} stores its value under '{param.value_key}', "
                f"other params use '{all_keys[0]}'")
    expanded = []
    for param in params:
        if param.keys() == all_keys:
            expanded.append(param)
        else:
            expanded.append(Param.from_mapping((key, param.get(key, ABSENT)) for key in all_keys))
    return expanded


def normalize(obj: Any, select=None, ignore=None) -> Any:
    """Rebuild ``obj`` so all its Params share one key set.

    Objects without Params are returned unchanged. Idempotent.
    """
    params = flatten(obj, select, ignore)
    if not params:
        return obj
    expanded = expand_keys(params)
    changed = sum(1 for old, new in zip(params, expanded) if old is not new)
    if changed:
        logger.debug(f"Normalized {changed}/{len(params)} params of {type(obj).__name__} "
                     f"to keys {param_keys_union(expanded)}")
    return reconstruct(obj, expanded, select, ignore)
