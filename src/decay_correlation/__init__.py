"""Time-decaying correlation between grouped sensor model parameters.

Sensor model parameters are partitioned into disjoint correlation groups.
Within a group the correlation coefficient decays with elapsed time along a
piecewise-linear curve; parameters in different groups are uncorrelated.
"""

from ._version import __version__
from .curves import DecayCurve, GroupParameters, validate_curve
from .errors import (
    BoundsError,
    CorrelationModelError,
    CurveNotConfiguredError,
    Failure,
    FailureKind,
    IndexOutOfRangeError,
    Outcome,
    attempt,
)
from .evaluator import evaluate_curve, evaluate_curve_many
from .interfaces import (
    CorrelationModel,
    CorrelationModelRegistryError,
    available_formats,
    create_correlation_model,
    get_correlation_model_class,
    register_correlation_model,
)
from .mapping import UNASSIGNED, GroupMapping
from .model import LINEAR_DECAY_FORMAT, LinearDecayCorrelationModel
from .configuration import ModelConfigError, build_model, load_model

__all__ = [
    "__version__",
    "BoundsError",
    "CorrelationModel",
    "CorrelationModelError",
    "CorrelationModelRegistryError",
    "CurveNotConfiguredError",
    "DecayCurve",
    "Failure",
    "FailureKind",
    "GroupMapping",
    "GroupParameters",
    "IndexOutOfRangeError",
    "LINEAR_DECAY_FORMAT",
    "LinearDecayCorrelationModel",
    "ModelConfigError",
    "Outcome",
    "UNASSIGNED",
    "attempt",
    "available_formats",
    "build_model",
    "create_correlation_model",
    "evaluate_curve",
    "evaluate_curve_many",
    "get_correlation_model_class",
    "load_model",
    "register_correlation_model",
    "validate_curve",
]
