"""Correlation strategy contract and the registry of available strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Callable, ClassVar, Dict, Type, TypeVar

import numpy as np

from decay_correlation.mapping import UNASSIGNED

__all__ = [
    "CorrelationModel",
    "CorrelationModelRegistryError",
    "available_formats",
    "correlation_model",
    "create_correlation_model",
    "get_correlation_model_class",
    "iter_correlation_models",
    "register_correlation_model",
]

ModelT = TypeVar("ModelT", bound="type[CorrelationModel]")

_MODEL_REGISTRY: Dict[str, Type["CorrelationModel"]] = {}


class CorrelationModel(ABC):
    """Capability shared by every correlation strategy.

    Sensor model parameters are partitioned into groups.  Two parameters in
    the same group are correlated according to :meth:`evaluate`; parameters
    in different groups, or not assigned to any group, are uncorrelated.
    """

    format: ClassVar[str]
    """Textual tag identifying the strategy."""

    @abstractmethod
    def get_parameter_count(self) -> int:
        """Number of sensor model parameters covered by the model."""

    @abstractmethod
    def get_group_count(self) -> int:
        """Number of correlation parameter groups."""

    @abstractmethod
    def get_group(self, sm_index: int) -> int:
        """Group of ``sm_index`` or ``UNASSIGNED``."""

    @abstractmethod
    def set_group(self, sm_index: int, group_index: int) -> None:
        """Assign ``sm_index`` to ``group_index``."""

    @abstractmethod
    def evaluate(self, group_index: int, delta_time: float) -> float:
        """Correlation coefficient of ``group_index`` after ``delta_time``."""

    def correlation(self, sm_a: int, sm_b: int, delta_time: float) -> float:
        """Return the correlation between two sensor model parameters."""

        group_a = self.get_group(sm_a)
        group_b = self.get_group(sm_b)
        if group_a == UNASSIGNED or group_b == UNASSIGNED or group_a != group_b:
            return 0.0
        return self.evaluate(group_a, delta_time)

    def correlation_matrix(
        self,
        delta_time: float,
        indices: Sequence[int] | None = None,
    ) -> np.ndarray:
        """Return the symmetric matrix of pairwise correlations.

        ``indices`` selects and orders the parameters; by default every
        parameter is included.  Each group is evaluated once.
        """

        if indices is None:
            indices = range(self.get_parameter_count())
        groups = [self.get_group(index) for index in indices]
        size = len(groups)
        matrix = np.zeros((size, size), dtype=float)
        coefficients: dict[int, float] = {}
        for group in set(groups):
            if group != UNASSIGNED:
                coefficients[group] = self.evaluate(group, delta_time)
        for row, group in enumerate(groups):
            if group == UNASSIGNED:
                continue
            for column in range(row, size):
                if groups[column] == group:
                    matrix[row, column] = coefficients[group]
                    matrix[column, row] = coefficients[group]
        return matrix


class CorrelationModelRegistryError(ValueError):
    """Raised when a correlation strategy cannot be registered or found."""


def _normalise_format(value: str) -> str:
    if not isinstance(value, str):
        raise CorrelationModelRegistryError("format tags must be strings")
    normalised = value.strip().lower()
    if not normalised:
        raise CorrelationModelRegistryError("format tags must be non-empty strings")
    return normalised


def register_correlation_model(
    model_cls: Type[CorrelationModel], *, format: str | None = None
) -> Type[CorrelationModel]:
    """Register ``model_cls`` under its format tag and return it."""

    if not isinstance(model_cls, type) or not issubclass(model_cls, CorrelationModel):
        raise CorrelationModelRegistryError(
            "model_cls must be a subclass of CorrelationModel"
        )
    tag = _normalise_format(format if format is not None else getattr(model_cls, "format", ""))
    existing = _MODEL_REGISTRY.get(tag)
    if existing is not None and existing is not model_cls:
        raise CorrelationModelRegistryError(
            f"format '{tag}' already registered by {existing.__name__!s}"
        )
    _MODEL_REGISTRY[tag] = model_cls
    return model_cls


def correlation_model(*, format: str | None = None) -> Callable[[ModelT], ModelT]:
    """Decorator form of :func:`register_correlation_model`."""

    def decorator(model_cls: ModelT) -> ModelT:
        register_correlation_model(model_cls, format=format)
        return model_cls

    return decorator


def get_correlation_model_class(format: str) -> Type[CorrelationModel]:
    tag = _normalise_format(format)
    try:
        return _MODEL_REGISTRY[tag]
    except KeyError as exc:
        raise CorrelationModelRegistryError(
            f"unknown correlation model format '{tag}'"
        ) from exc


def create_correlation_model(
    format: str, num_parameters: int, num_groups: int
) -> CorrelationModel:
    """Instantiate the strategy registered under ``format``."""

    model_cls = get_correlation_model_class(format)
    return model_cls(num_parameters, num_groups)  # type: ignore[call-arg]


def available_formats() -> tuple[str, ...]:
    return tuple(sorted(_MODEL_REGISTRY))


def iter_correlation_models() -> Iterator[tuple[str, Type[CorrelationModel]]]:
    return iter(_MODEL_REGISTRY.items())


def _unregister(format: str) -> None:
    """Test helper removing a registration; not part of the public API."""

    _MODEL_REGISTRY.pop(_normalise_format(format), None)
