"""Regression tests for correlation coefficient evaluation."""

from __future__ import annotations

import numpy as np
import pytest

from decay_correlation.curves import DecayCurve
from decay_correlation.errors import CurveNotConfiguredError
from decay_correlation.evaluator import clamp_unit, evaluate_curve, evaluate_curve_many

from tests.helpers import REFERENCE_CORRELATIONS, REFERENCE_TIMES


@pytest.fixture()
def curve() -> DecayCurve:
    return DecayCurve(times=REFERENCE_TIMES, correlations=REFERENCE_CORRELATIONS)


@pytest.mark.parametrize(
    "delta_time, expected",
    [
        (0.0, 1.0),
        (5.0, 0.75),
        (10.0, 0.5),
        (15.0, 0.25),
        (20.0, 0.0),
        (25.0, 0.0),
        (-5.0, 0.75),
        (-15.0, 0.25),
    ],
)
def test_reference_curve_values(curve: DecayCurve, delta_time: float, expected: float) -> None:
    assert evaluate_curve(curve, delta_time) == pytest.approx(expected)


@pytest.mark.parametrize("delta_time", [0.0, 0.5, 3.0, 9.99, 12.5, 19.0, 40.0, 1e9])
def test_evaluation_is_symmetric_in_time(curve: DecayCurve, delta_time: float) -> None:
    assert evaluate_curve(curve, delta_time) == evaluate_curve(curve, -delta_time)


def test_flat_extrapolation_past_last_breakpoint() -> None:
    curve = DecayCurve(times=[0.0, 5.0], correlations=[0.9, 0.3])

    assert evaluate_curve(curve, 5.0) == pytest.approx(0.3)
    assert evaluate_curve(curve, 500.0) == pytest.approx(0.3)
    assert evaluate_curve(curve, float("inf")) == pytest.approx(0.3)


def test_values_before_first_breakpoint_take_first_correlation() -> None:
    curve = DecayCurve(times=[5.0, 10.0], correlations=[0.8, 0.4])

    assert evaluate_curve(curve, 0.0) == pytest.approx(0.8)
    assert evaluate_curve(curve, 5.0) == pytest.approx(0.8)
    assert evaluate_curve(curve, 7.5) == pytest.approx(0.6)


def test_degenerate_segment_does_not_divide_by_zero() -> None:
    curve = DecayCurve(times=[5.0, 5.0], correlations=[0.8, 0.8])

    assert evaluate_curve(curve, 5.0) == pytest.approx(0.8)
    assert evaluate_curve(curve, 6.0) == pytest.approx(0.8)


def test_zero_width_step_keeps_segment_start_value() -> None:
    curve = DecayCurve(times=[0.0, 5.0, 5.0, 10.0], correlations=[1.0, 0.8, 0.5, 0.2])

    assert evaluate_curve(curve, 5.0) == pytest.approx(0.8)
    assert evaluate_curve(curve, 7.5) == pytest.approx(0.35)


def test_infinite_last_breakpoint_holds_previous_correlation() -> None:
    curve = DecayCurve(times=[0.0, 10.0, float("inf")], correlations=[1.0, 0.5, 0.2])

    assert evaluate_curve(curve, 5.0) == pytest.approx(0.75)
    assert evaluate_curve(curve, 100.0) == pytest.approx(0.5)
    assert evaluate_curve(curve, float("inf")) == pytest.approx(0.5)


def test_single_breakpoint_curve_is_constant() -> None:
    curve = DecayCurve(times=[3.0], correlations=[0.6])

    assert evaluate_curve(curve, 0.0) == pytest.approx(0.6)
    assert evaluate_curve(curve, 100.0) == pytest.approx(0.6)


def test_empty_curve_raises_not_configured() -> None:
    with pytest.raises(CurveNotConfiguredError) as excinfo:
        evaluate_curve(DecayCurve(), 1.0, origin="LinearDecayCorrelationModel.evaluate")

    assert excinfo.value.origin == "LinearDecayCorrelationModel.evaluate"
    with pytest.raises(CurveNotConfiguredError):
        evaluate_curve_many(DecayCurve(), [1.0])


@pytest.mark.parametrize("value, expected", [(-0.1, 0.0), (0.0, 0.0), (0.4, 0.4), (1.0, 1.0), (1.2, 1.0)])
def test_clamp_unit(value: float, expected: float) -> None:
    assert clamp_unit(value) == expected


@pytest.mark.parametrize(
    "times, correlations",
    [
        (REFERENCE_TIMES, REFERENCE_CORRELATIONS),
        ([5.0, 5.0], [0.8, 0.8]),
        ([0.0, 5.0, 5.0, 10.0], [1.0, 0.8, 0.5, 0.2]),
        ([2.0, 4.0, 8.0, 16.0], [0.95, 0.7, 0.7, 0.05]),
        ([1.0], [0.3]),
        ([0.0, 10.0, float("inf")], [1.0, 0.5, 0.2]),
        ([float("-inf"), 0.0, 10.0], [1.0, 0.8, 0.4]),
        ([0.0, float("inf"), float("inf")], [0.9, 0.6, 0.1]),
    ],
)
def test_vectorised_evaluation_matches_scalar_scan(times, correlations) -> None:
    curve = DecayCurve(times=times, correlations=correlations)
    samples = np.concatenate([np.linspace(-25.0, 25.0, 201), [np.inf, -np.inf]])

    vectorised = evaluate_curve_many(curve, samples)
    scalar = np.array([evaluate_curve(curve, value) for value in samples])

    np.testing.assert_allclose(vectorised, scalar, rtol=0.0, atol=1e-12)
    assert vectorised.shape == samples.shape
    assert np.all((vectorised >= 0.0) & (vectorised <= 1.0))


def test_vectorised_evaluation_preserves_shape(curve: DecayCurve) -> None:
    grid = np.array([[0.0, 5.0], [15.0, 30.0]])

    result = evaluate_curve_many(curve, grid)

    np.testing.assert_allclose(result, [[1.0, 0.75], [0.25, 0.0]])
