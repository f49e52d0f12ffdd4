"""Correlation coefficient evaluation over piecewise-linear decay curves."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from decay_correlation.curves import DecayCurve
from decay_correlation.errors import CurveNotConfiguredError

__all__ = ["clamp_unit", "evaluate_curve", "evaluate_curve_many"]


def clamp_unit(value: float) -> float:
    """Clamp ``value`` into ``[0, 1]``."""

    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


def _require_breakpoints(curve: DecayCurve, origin: str) -> None:
    if not curve.is_configured:
        raise CurveNotConfiguredError(
            "Correlation curve is not configured for this group.",
            origin=origin,
        )


def evaluate_curve(
    curve: DecayCurve,
    delta_time: float,
    *,
    origin: str = "evaluate_curve",
) -> float:
    """Return the correlation reached after ``|delta_time|`` has elapsed.

    Values at or before the first breakpoint take the first correlation,
    values past the last breakpoint take the last one, and anything in
    between is interpolated linearly inside the first segment whose end
    time is not exceeded.  Segments of zero or infinite width keep the
    correlation of their start point.
    """

    _require_breakpoints(curve, origin)
    adt = abs(float(delta_time))
    times = curve.times.tolist()
    corrs = curve.correlations.tolist()

    prev_time = times[0]
    prev_corr = corrs[0]
    correlation = prev_corr
    if adt <= prev_time:
        return clamp_unit(float(correlation))
    for time, corr in zip(times[1:], corrs[1:]):
        if adt <= time:
            width = time - prev_time
            if width != 0.0 and math.isfinite(width):
                correlation = prev_corr + (adt - prev_time) / width * (
                    corr - prev_corr
                )
            break
        prev_time = time
        prev_corr = corr
        correlation = prev_corr

    return clamp_unit(float(correlation))


def evaluate_curve_many(
    curve: DecayCurve,
    delta_times: Sequence[float] | np.ndarray,
    *,
    origin: str = "evaluate_curve_many",
) -> np.ndarray:
    """Vectorised :func:`evaluate_curve` preserving the input shape."""

    _require_breakpoints(curve, origin)
    adt = np.abs(np.asarray(delta_times, dtype=float))
    times = curve.times
    corrs = curve.correlations
    size = times.size

    # First breakpoint past index 0 whose time is not exceeded by ``adt``.
    segment = np.searchsorted(times[1:], adt, side="left") + 1
    beyond = segment >= size
    end = np.minimum(segment, size - 1)
    start = np.maximum(end - 1, 0)

    t0 = times[start]
    t1 = times[end]
    c0 = corrs[start]
    c1 = corrs[end]
    with np.errstate(invalid="ignore"):
        width = t1 - t0
        degenerate = (width == 0.0) | ~np.isfinite(width)
        safe_width = np.where(degenerate, 1.0, width)
        interpolated = c0 + (adt - t0) / safe_width * (c1 - c0)
    result = np.where(degenerate, c0, interpolated)
    result = np.where(beyond, corrs[-1], result)
    result = np.where(adt <= times[0], corrs[0], result)
    return np.clip(result, 0.0, 1.0)
