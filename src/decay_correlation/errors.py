"""Failure taxonomy shared by the correlation model components."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

__all__ = [
    "BoundsError",
    "CorrelationModelError",
    "CurveNotConfiguredError",
    "Failure",
    "FailureKind",
    "IndexOutOfRangeError",
    "Outcome",
    "attempt",
    "check_index",
    "origin_for",
]

T = TypeVar("T")

_ORIGIN_PREFIX = "LinearDecayCorrelationModel"


class FailureKind(str, Enum):
    """Categories of failure raised by the correlation model."""

    BOUNDS = "bounds"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    CURVE_NOT_CONFIGURED = "curve_not_configured"


@dataclass(frozen=True, slots=True)
class Failure:
    """Structured description of a rejected operation."""

    kind: FailureKind
    message: str
    origin: str

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "origin": self.origin,
        }


class CorrelationModelError(Exception):
    """Base class for every failure raised by the correlation model."""

    kind: FailureKind = FailureKind.BOUNDS

    def __init__(self, message: str, *, origin: str) -> None:
        super().__init__(message)
        self.failure = Failure(kind=self.kind, message=message, origin=origin)

    @property
    def message(self) -> str:
        return self.failure.message

    @property
    def origin(self) -> str:
        return self.failure.origin

    def __str__(self) -> str:
        return f"{self.failure.message} ({self.failure.origin})"


class BoundsError(CorrelationModelError, ValueError):
    """Raised when curve data violates a structural or value constraint."""

    kind = FailureKind.BOUNDS


class IndexOutOfRangeError(CorrelationModelError, IndexError):
    """Raised when a parameter or group index falls outside its range."""

    kind = FailureKind.INDEX_OUT_OF_RANGE


class CurveNotConfiguredError(CorrelationModelError, LookupError):
    """Raised when a coefficient is requested from a group without a curve."""

    kind = FailureKind.CURVE_NOT_CONFIGURED


_ERRORS_BY_KIND: Mapping[FailureKind, type[CorrelationModelError]] = {
    FailureKind.BOUNDS: BoundsError,
    FailureKind.INDEX_OUT_OF_RANGE: IndexOutOfRangeError,
    FailureKind.CURVE_NOT_CONFIGURED: CurveNotConfiguredError,
}


def origin_for(operation: str) -> str:
    """Return the origin identifier attached to failures of ``operation``."""

    return f"{_ORIGIN_PREFIX}.{operation}"


def check_index(index: Any, count: int, *, label: str, origin: str) -> int:
    """Return ``index`` as a plain ``int`` once it is known to be in range.

    ``bool`` values and non-integral numbers are rejected with
    :class:`TypeError`; negative values or values ``>= count`` raise
    :class:`IndexOutOfRangeError`.
    """

    if isinstance(index, bool):
        raise TypeError(f"{label} index must be an integer, not bool")
    try:
        resolved = operator.index(index)
    except TypeError as exc:
        raise TypeError(
            f"{label} index must be an integer, not {type(index).__name__}"
        ) from exc
    if resolved < 0 or resolved >= count:
        raise IndexOutOfRangeError(
            f"{label} index is out of range.",
            origin=origin,
        )
    return resolved


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Tagged success/failure result of a model operation."""

    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        """Return the value or raise the typed error described by ``failure``."""

        if self.failure is None:
            return self.value  # type: ignore[return-value]
        error_cls = _ERRORS_BY_KIND[self.failure.kind]
        raise error_cls(self.failure.message, origin=self.failure.origin)


def attempt(func: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """Run ``func`` and capture model failures as an :class:`Outcome`.

    Only :class:`CorrelationModelError` is captured; anything else
    propagates to the caller untouched.
    """

    try:
        value = func(*args, **kwargs)
    except CorrelationModelError as exc:
        return Outcome(failure=exc.failure)
    return Outcome(value=value)
