from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from decay_correlation.model import LinearDecayCorrelationModel  # noqa: E402

from tests.helpers import REFERENCE_CORRELATIONS, REFERENCE_TIMES  # noqa: E402


@pytest.fixture()
def model() -> LinearDecayCorrelationModel:
    """Six parameters over three groups with group 0 configured."""

    instance = LinearDecayCorrelationModel(6, 3)
    instance.set_curve(0, REFERENCE_TIMES, REFERENCE_CORRELATIONS)
    return instance


@pytest.fixture()
def model_document() -> str:
    return """
    format: linear-decay
    parameters: 4
    groups: 2
    assignments:
      0: 0
      1: 0
      2: 1
    curves:
      0:
        times: [0, 10, 20]
        correlations: [1.0, 0.5, 0.0]
      1:
        times: [0, 4]
        correlations: [0.9, 0.1]
    """
