"""Linear-decay group correlation model."""

from __future__ import annotations

import operator
from typing import Any, Sequence

import numpy as np

from decay_correlation.curves import DecayCurve, GroupParameters
from decay_correlation.errors import origin_for
from decay_correlation.evaluator import evaluate_curve, evaluate_curve_many
from decay_correlation.interfaces import CorrelationModel, correlation_model
from decay_correlation.mapping import GroupMapping

__all__ = ["LINEAR_DECAY_FORMAT", "LinearDecayCorrelationModel"]

LINEAR_DECAY_FORMAT = "linear-decay"


def _count(value: Any, *, name: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, not bool")
    try:
        count = operator.index(value)
    except TypeError as exc:
        raise TypeError(f"{name} must be an integer") from exc
    if count < 0:
        raise ValueError(f"{name} must be non-negative")
    return count


@correlation_model(format=LINEAR_DECAY_FORMAT)
class LinearDecayCorrelationModel(CorrelationModel):
    """Correlation decaying along a piecewise-linear curve per group.

    Parameters
    ----------
    num_parameters:
        Number of sensor model parameters; fixed for the model's lifetime.
    num_groups:
        Number of correlation parameter groups; fixed for the model's
        lifetime.

    Every parameter starts unassigned and every group starts without a
    curve.  Assignments and curves are then set independently through
    :meth:`set_group` and :meth:`set_curve` / :meth:`set_parameters`.
    Readers may run concurrently as long as no writer mutates the model at
    the same time.
    """

    format = LINEAR_DECAY_FORMAT

    def __init__(self, num_parameters: int, num_groups: int) -> None:
        parameters = _count(num_parameters, name="num_parameters")
        groups = _count(num_groups, name="num_groups")
        self._mapping = GroupMapping(parameters, groups)
        self._parameters = GroupParameters(groups)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(num_parameters={self.num_parameters}, "
            f"num_groups={self.num_groups})"
        )

    @property
    def num_parameters(self) -> int:
        return self._mapping.get_group_count()

    @property
    def num_groups(self) -> int:
        return self._parameters.get_group_count()

    @property
    def mapping(self) -> GroupMapping:
        return self._mapping

    # Group mapping ---------------------------------------------------------
    def get_parameter_count(self) -> int:
        return self._mapping.get_group_count()

    def get_group_count(self) -> int:
        return self._parameters.get_group_count()

    def get_group(self, sm_index: int) -> int:
        return self._mapping.get_group(sm_index)

    def set_group(self, sm_index: int, group_index: int) -> None:
        self._mapping.set_group(sm_index, group_index)

    def clear_group(self, sm_index: int) -> None:
        self._mapping.clear_group(sm_index)

    # Group parameters ------------------------------------------------------
    def get_curve(self, group_index: int) -> DecayCurve:
        return self._parameters.get_curve(group_index)

    def set_curve(
        self,
        group_index: int,
        times: Sequence[float] | np.ndarray,
        correlations: Sequence[float] | np.ndarray,
    ) -> DecayCurve:
        return self._parameters.set_curve(group_index, times, correlations)

    def set_parameters(self, group_index: int, curve: DecayCurve) -> DecayCurve:
        return self._parameters.set_parameters(group_index, curve)

    # Evaluation ------------------------------------------------------------
    def evaluate(self, group_index: int, delta_time: float) -> float:
        curve = self._curve_for("evaluate", group_index)
        return evaluate_curve(curve, delta_time, origin=origin_for("evaluate"))

    def evaluate_many(
        self, group_index: int, delta_times: Sequence[float] | np.ndarray
    ) -> np.ndarray:
        """Evaluate ``group_index`` for every entry of ``delta_times``."""

        curve = self._curve_for("evaluate_many", group_index)
        return evaluate_curve_many(
            curve, delta_times, origin=origin_for("evaluate_many")
        )

    def describe(self) -> dict[str, Any]:
        """Return a plain mapping describing the configured model."""

        curves = {}
        for group in range(self.num_groups):
            curve = self._parameters.get_curve(group)
            if curve.is_configured:
                curves[group] = curve.as_dict()
        return {
            "format": self.format,
            "parameters": self.num_parameters,
            "groups": self.num_groups,
            "assignments": [int(value) for value in self._mapping.assignments()],
            "curves": curves,
        }

    def _curve_for(self, operation: str, group_index: int) -> DecayCurve:
        return self._parameters.get_curve(group_index, operation=operation)
