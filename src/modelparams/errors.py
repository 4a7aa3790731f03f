"""
Exceptions raised by modelparams.

All errors are raised at the offending call and never leave a model
partially updated.
"""


class ModelParamsError(Exception):
    """Base class for all modelparams errors."""


class NoParametersFound(ModelParamsError, UserWarning):
    """The wrapped object contains no Param leaves.

    Emitted as a warning by default; raised when a model is built with
    ``strict=True``.
    """


class ShapeMismatch(ModelParamsError, ValueError):
    """Replacement count differs from the leaf count of the target object."""


class ReservedKeyError(ModelParamsError, ValueError):
    """Attempt to write a derived column such as ``component``."""


class ArityMismatch(ModelParamsError, ValueError):
    """Write values do not match the number of parameters."""


class KeyNotFound(ModelParamsError, KeyError):
    """Metadata key is not defined on a Param."""


class CyclicStructureError(ModelParamsError, ValueError):
    """The object graph refers back to one of its own containers."""


class ValueKeyMismatch(ModelParamsError, ValueError):
    """Params in one object store their value under different keys."""
