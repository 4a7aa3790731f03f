"""
Generic parameter introspection for arbitrary nested objects.

Mark the tunable quantities of any object with Param, wrap the object in a
Model, and read or rewrite every parameter at once as if it were a flat list
or a table, while the object itself keeps its original nested shape.

Key Features:
- Param leaves with arbitrary ordered metadata (bounds, units, ...)
- Generic flatten/reconstruct over tuples, lists, dicts, dataclasses and
  registered types
- Metadata normalisation so every parameter exposes the same columns
- Mutable (Model) and immutable (StaticModel) handles
- Row and column views for export to any table library

Quick Start:
    >>> from dataclasses import dataclass
    >>> from modelparams import Model, Param
    >>>
    >>> @dataclass
    ... class Growth:
    ...     rate: object
    ...     capacity: object
    >>>
    >>> model = Model(Growth(rate=Param(0.1, bounds=(0, 1)), capacity=Param(100, units="ind")))
    >>> model.keys()
    ('component', 'fieldname', 'val', 'bounds', 'units')
    >>> model["fieldname"]
    ('rate', 'capacity')
    >>> model.update([0.2, 150])
    >>> model.parent.rate
    Param(val=0.2, bounds=(0, 1), units=ABSENT)

Architecture:
    object -> flatten -> ordered Params -> normalize -> Model wraps object'

    Reads flatten the current parent again; writes build new Params,
    reconstruct a new parent of the same shape and swap it in.

Modules:
    - param: Param leaf and the ABSENT marker
    - traversal: traversal engine and composite registry
    - normalization: key union and ABSENT fill
    - model: Model, StaticModel and object-level helpers
    - table: row/column views
    - config: framework defaults
    - errors: exception taxonomy
"""

# Leaves
from modelparams.param import Param, ABSENT

# Traversal
from modelparams.traversal import (
    CompositeHandler,
    LeafSite,
    register_composite,
    unregister_composite,
    get_composite_handler,
    leaf_sites,
    flatten,
    reconstruct,
    fieldname_flatten,
    parent_type_flatten,
)

# Normalisation
from modelparams.normalization import normalize, expand_keys, param_keys_union

# Models
from modelparams.model import (
    AbstractModel,
    Model,
    StaticModel,
    params,
    has_param,
    param_fieldnames,
    param_parent_types,
    strip_params,
    update,
)

# Table views
from modelparams.table import rows, columns, model_keys, table_columns

# Configuration
from modelparams.config import (
    set_value_key,
    get_value_key,
    set_ignore_types,
    get_ignore_types,
    reset_config,
    RESERVED_KEYS,
)

# Errors
from modelparams.errors import (
    ModelParamsError,
    NoParametersFound,
    ShapeMismatch,
    ReservedKeyError,
    ArityMismatch,
    KeyNotFound,
    CyclicStructureError,
    ValueKeyMismatch,
)

__all__ = [
    # Leaves
    'Param',
    'ABSENT',
    # Traversal
    'CompositeHandler',
    'LeafSite',
    'register_composite',
    'unregister_composite',
    'get_composite_handler',
    'leaf_sites',
    'flatten',
    'reconstruct',
    'fieldname_flatten',
    'parent_type_flatten',
    # Normalisation
    'normalize',
    'expand_keys',
    'param_keys_union',
    # Models
    'AbstractModel',
    'Model',
    'StaticModel',
    'params',
    'has_param',
    'param_fieldnames',
    'param_parent_types',
    'strip_params',
    'update',
    # Table views
    'rows',
    'columns',
    'model_keys',
    'table_columns',
    # Configuration
    'set_value_key',
    'get_value_key',
    'set_ignore_types',
    'get_ignore_types',
    'reset_config',
    'RESERVED_KEYS',
    # Errors
    'ModelParamsError',
    'NoParametersFound',
    'ShapeMismatch',
    'ReservedKeyError',
    'ArityMismatch',
    'KeyNotFound',
    'CyclicStructureError',
    'ValueKeyMismatch',
]

__version__ = '1.0.0'
__description__ = 'Generic parameter introspection and bulk update for nested objects'
