"""Shared data and helpers for the decay-correlation test-suite."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

REFERENCE_TIMES = (0.0, 10.0, 20.0)
REFERENCE_CORRELATIONS = (1.0, 0.5, 0.0)

__all__ = ["REFERENCE_CORRELATIONS", "REFERENCE_TIMES", "write_text"]


def write_text(directory: Path, name: str, contents: str) -> Path:
    """Persist dedented ``contents`` under ``directory`` and return the path."""

    target = directory / name
    target.write_text(dedent(contents).lstrip(), encoding="utf8")
    return target
