"""Piecewise-linear decay curves and the per-group parameter store.

A :class:`DecayCurve` pairs elapsed-time breakpoints with the correlation
reached at each of them.  Curves are plain immutable values: validation is
applied when a curve is installed in :class:`GroupParameters`, so a rejected
curve never replaces the one already stored for a group.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import numpy as np

from decay_correlation.errors import BoundsError, check_index, origin_for

__all__ = ["DecayCurve", "GroupParameters", "validate_curve"]

logger = logging.getLogger(__name__)


def _as_breakpoint_array(values: Sequence[float] | np.ndarray, *, name: str) -> np.ndarray:
    try:
        array = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise BoundsError(
            f"{name} must be a sequence of real numbers.",
            origin="DecayCurve",
        ) from exc
    if array.ndim != 1:
        raise BoundsError(
            f"{name} must be one-dimensional.",
            origin="DecayCurve",
        )
    if array.size == 0:
        array.setflags(write=False)
        return array
    # Backed by immutable bytes so the flag cannot be switched back on.
    return np.frombuffer(array.tobytes(), dtype=np.float64)


@dataclass(frozen=True, eq=False)
class DecayCurve:
    """Breakpoints of a group's piecewise-linear correlation decay."""

    times: np.ndarray = field(default_factory=lambda: np.empty(0))
    correlations: np.ndarray = field(default_factory=lambda: np.empty(0))

    def __post_init__(self) -> None:
        object.__setattr__(self, "times", _as_breakpoint_array(self.times, name="Times"))
        object.__setattr__(
            self,
            "correlations",
            _as_breakpoint_array(self.correlations, name="Correlations"),
        )

    def __len__(self) -> int:
        return int(min(self.times.size, self.correlations.size))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecayCurve):
            return NotImplemented
        return np.array_equal(self.times, other.times) and np.array_equal(
            self.correlations, other.correlations
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_configured(self) -> bool:
        return len(self) > 0

    def breakpoints(self) -> Iterator[tuple[float, float]]:
        """Yield ``(time, correlation)`` pairs in breakpoint order."""

        for time, correlation in zip(self.times.tolist(), self.correlations.tolist()):
            yield float(time), float(correlation)

    def as_dict(self) -> dict[str, list[float]]:
        return {
            "times": [float(value) for value in self.times.tolist()],
            "correlations": [float(value) for value in self.correlations.tolist()],
        }


def validate_curve(curve: DecayCurve, *, origin: str) -> None:
    """Raise :class:`BoundsError` unless ``curve`` is a valid decay curve.

    Checks run in breakpoint order: equal lengths first, then for every
    breakpoint the ``[0, 1]`` range of its correlation followed, from the
    second breakpoint on, by the non-increasing correlation and
    non-decreasing time constraints against the previous breakpoint.
    Times may be infinite but never NaN.
    """

    size = int(curve.correlations.size)
    if size != int(curve.times.size):
        raise BoundsError(
            "Must have equal number of correlations and times.",
            origin=origin,
        )

    corrs = curve.correlations.tolist()
    times = curve.times.tolist()
    for index in range(size):
        corr = corrs[index]
        time = times[index]
        if not 0.0 <= corr <= 1.0:
            raise BoundsError("Correlation must be in range [0..1].", origin=origin)
        if math.isnan(time):
            raise BoundsError("Time must not be NaN.", origin=origin)
        if index > 0:
            if corr > corrs[index - 1]:
                raise BoundsError(
                    "Correlation must be monotonically decreasing.",
                    origin=origin,
                )
            if time < times[index - 1]:
                raise BoundsError(
                    "Time must be monotonically increasing.",
                    origin=origin,
                )


class GroupParameters:
    """Fixed-size store holding one :class:`DecayCurve` per group."""

    def __init__(self, num_groups: int) -> None:
        empty = DecayCurve()
        self._curves: list[DecayCurve] = [empty] * int(num_groups)

    def __len__(self) -> int:
        return len(self._curves)

    def get_group_count(self) -> int:
        return len(self._curves)

    def get_curve(self, group_index: int, *, operation: str = "get_curve") -> DecayCurve:
        index = self._check_group(group_index, operation)
        return self._curves[index]

    def set_curve(
        self,
        group_index: int,
        times: Sequence[float] | np.ndarray,
        correlations: Sequence[float] | np.ndarray,
    ) -> DecayCurve:
        """Validate and install the curve described by two raw sequences."""

        index = self._check_group(group_index, "set_curve")
        origin = origin_for("set_curve")
        try:
            curve = DecayCurve(times=times, correlations=correlations)
        except BoundsError as exc:
            raise BoundsError(exc.message, origin=origin) from exc
        return self._install(index, curve, origin=origin)

    def set_parameters(self, group_index: int, curve: DecayCurve) -> DecayCurve:
        """Validate and install a pre-built :class:`DecayCurve`."""

        index = self._check_group(group_index, "set_parameters")
        if not isinstance(curve, DecayCurve):
            raise TypeError("curve must be a DecayCurve instance")
        return self._install(index, curve, origin=origin_for("set_parameters"))

    def _install(self, index: int, curve: DecayCurve, *, origin: str) -> DecayCurve:
        try:
            validate_curve(curve, origin=origin)
        except BoundsError as exc:
            logger.debug(
                "Decay curve rejected.",
                extra={
                    "event": "curves.rejected",
                    "group_index": index,
                    "reason": exc.message,
                },
            )
            raise
        self._curves[index] = curve
        logger.debug(
            "Decay curve installed.",
            extra={
                "event": "curves.set",
                "group_index": index,
                "breakpoints": len(curve),
            },
        )
        return curve

    def _check_group(self, group_index: int, operation: str) -> int:
        return check_index(
            group_index,
            len(self._curves),
            label="Correlation parameter group",
            origin=origin_for(operation),
        )
