"""Failure reporting for the ``decay-correlation`` command.

Every failure the command reports becomes a :class:`CliError`.  Its
category selects the exit status, and its payload is both logged as a
``cli.error`` event and written to stdout as a JSON error document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from decay_correlation.configuration import ModelConfigError
from decay_correlation.errors import CorrelationModelError
from decay_correlation.interfaces import CorrelationModelRegistryError

__all__ = [
    "EXIT_CODES",
    "REPORTED_ERRORS",
    "CliError",
    "ErrorPayload",
    "as_cli_error",
    "log_cli_error",
]

EXIT_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What the command reports about a single failure."""

    category: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return EXIT_CODES[self.category]

    def as_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "status_code": self.status_code,
            "message": self.message,
            "context": dict(self.context),
        }


class CliError(RuntimeError):
    """Failure reported by the command with a category-specific exit status."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if category not in EXIT_CODES:
            raise ValueError(f"Unknown CLI error category: {category!r}")
        super().__init__(message)
        self.payload = ErrorPayload(
            category=category,
            message=message,
            context={str(key): _plain(value) for key, value in (context or {}).items()},
        )

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> dict[str, Any]:
        return dict(self.payload.context)

    @classmethod
    def from_model_error(
        cls, exc: CorrelationModelError, *, path: Optional[Path] = None
    ) -> "CliError":
        """Translate a correlation model failure into a usage error."""

        failure = exc.failure
        context: dict[str, Any] = {"kind": failure.kind.value, "origin": failure.origin}
        if path is not None:
            context["path"] = path
        return cls(failure.message, category="usage", context=context)


# Failures turned into an exit status instead of a traceback.
REPORTED_ERRORS = (
    CliError,
    CorrelationModelError,
    CorrelationModelRegistryError,
    ModelConfigError,
    OSError,
)


def as_cli_error(exc: BaseException, *, path: Optional[Path] = None) -> CliError:
    """Return the :class:`CliError` reported for ``exc``.

    ``path`` names the model document being processed, when known.
    """

    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, CorrelationModelError):
        return CliError.from_model_error(exc, path=path)
    context = {} if path is None else {"path": path}
    if isinstance(exc, FileNotFoundError):
        return CliError(
            f"Model document not found: {exc.filename or path or exc}",
            category="not_found",
            context=context,
        )
    if isinstance(exc, OSError):
        target = exc.filename or path
        return CliError(
            f"Cannot access {target}: {exc.strerror or exc}",
            category="io",
            context={**context, "target": target},
        )
    if isinstance(exc, (ModelConfigError, CorrelationModelRegistryError)):
        return CliError(str(exc), category="usage", context=context)
    return CliError(str(exc), context=context)


def log_cli_error(error: CliError, *, exc_info: Optional[BaseException] = None) -> None:
    """Emit ``error`` as a structured ``cli.error`` record."""

    payload = error.payload
    logger.error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )
