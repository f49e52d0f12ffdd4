"""Build correlation models from declarative documents.

Model documents are YAML files (or any equivalent mapping) with the
following layout::

    format: linear-decay
    parameters: 6
    groups: 2
    assignments:
      0: 0
      1: 0
      4: 1
    curves:
      0:
        times: [0.0, 10.0, 20.0]
        correlations: [1.0, 0.5, 0.0]

``assignments`` may also be a list holding one group (or ``null``) per
parameter.  Project level settings live under ``[tool.decay_correlation]``
in ``pyproject.toml``.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore[no-redef]

from decay_correlation.interfaces import CorrelationModel, create_correlation_model
from decay_correlation.model import LINEAR_DECAY_FORMAT

__all__ = [
    "ModelConfigError",
    "build_model",
    "load_model",
    "load_model_document",
    "load_project_config",
]

_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "decay_correlation"


class ModelConfigError(ValueError):
    """Raised when a model document is structurally invalid."""


def _deep_copy_mapping(source: Mapping[str, Any]) -> dict[str, Any]:
    copied: dict[str, Any] = {}
    for key, value in source.items():
        key_str = str(key)
        if isinstance(value, MappingABC):
            copied[key_str] = _deep_copy_mapping(value)
        elif isinstance(value, list):
            copied[key_str] = [
                _deep_copy_mapping(item) if isinstance(item, MappingABC) else item
                for item in value
            ]
        else:
            copied[key_str] = value
    return copied


def _load_document_from_text(payload: str, *, source: str) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ModelConfigError(f"Invalid YAML in model document: {source}") from exc

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise ModelConfigError(f"Model document in {source!s} must decode to a mapping")
    return MappingProxyType(_deep_copy_mapping(data))


def load_model_document(path: str | Path) -> Mapping[str, Any]:
    """Read the YAML model document stored at ``path``."""

    candidate = Path(path).expanduser()
    if not candidate.is_file():
        raise FileNotFoundError(candidate)
    with candidate.open("r", encoding="utf-8") as buffer:
        payload = buffer.read()
    return _load_document_from_text(payload, source=str(candidate))


def _coerce_count(document: Mapping[str, Any], key: str) -> int:
    if key not in document:
        raise ModelConfigError(f"Model document is missing '{key}'")
    value = document[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ModelConfigError(f"'{key}' must be an integer")
    if value < 0:
        raise ModelConfigError(f"'{key}' must be non-negative")
    return value


def _coerce_index(raw: Any, *, field_name: str) -> int:
    if isinstance(raw, bool):
        raise ModelConfigError(f"{field_name} must be an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw.strip())
    raise ModelConfigError(f"{field_name} must be an integer, got {raw!r}")


def _iter_assignments(raw: Any) -> list[tuple[int, int]]:
    if raw is None:
        return []
    if isinstance(raw, MappingABC):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = list(enumerate(raw))
    else:
        raise ModelConfigError("'assignments' must be a mapping or a list")

    resolved: list[tuple[int, int]] = []
    for raw_param, raw_group in items:
        if raw_group is None:
            continue
        param = _coerce_index(raw_param, field_name="assignment parameter index")
        group = _coerce_index(raw_group, field_name=f"group of parameter {param}")
        resolved.append((param, group))
    return resolved


def _iter_curves(raw: Any) -> list[tuple[int, Any, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, MappingABC):
        raise ModelConfigError("'curves' must be a mapping of group index to curve")

    resolved: list[tuple[int, Any, Any]] = []
    for raw_group, entry in raw.items():
        group = _coerce_index(raw_group, field_name="curve group index")
        if not isinstance(entry, MappingABC):
            raise ModelConfigError(f"curve for group {group} must be a mapping")
        missing = [key for key in ("times", "correlations") if key not in entry]
        if missing:
            raise ModelConfigError(
                f"curve for group {group} is missing {', '.join(missing)}"
            )
        resolved.append((group, entry["times"], entry["correlations"]))
    return resolved


def build_model(document: Mapping[str, Any]) -> CorrelationModel:
    """Create and configure a model from ``document``.

    Structural problems raise :class:`ModelConfigError`; invalid indices or
    curves surface as the model's own errors.
    """

    if not isinstance(document, MappingABC):
        raise ModelConfigError("model document must be a mapping")

    model_format = document.get("format", LINEAR_DECAY_FORMAT)
    num_parameters = _coerce_count(document, "parameters")
    num_groups = _coerce_count(document, "groups")
    model = create_correlation_model(str(model_format), num_parameters, num_groups)

    for param, group in _iter_assignments(document.get("assignments")):
        model.set_group(param, group)

    curves = _iter_curves(document.get("curves"))
    if curves and not hasattr(model, "set_curve"):
        raise ModelConfigError(
            f"correlation model '{model.format}' does not accept decay curves"
        )
    for group, times, correlations in curves:
        model.set_curve(group, times, correlations)  # type: ignore[attr-defined]

    return model


def load_model(path: str | Path) -> CorrelationModel:
    """Load the YAML document at ``path`` and build the described model."""

    return build_model(load_model_document(path))


def _as_dict(payload: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in payload.items():
        result[str(key)] = _as_dict(value) if isinstance(value, MappingABC) else value
    return result


def load_project_config(path: Path | None = None) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.decay_correlation]`` section from ``pyproject.toml``.

    ``path`` may point at the file itself or at the directory holding it;
    it defaults to the current working directory.
    """

    candidate = Path.cwd() if path is None else Path(path).expanduser()
    if candidate.name != _PROJECT_FILENAME:
        candidate = candidate / _PROJECT_FILENAME
    candidate = candidate.resolve(strict=False)
    if not candidate.is_file():
        return None

    with candidate.open("rb") as handle:
        try:
            data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ModelConfigError(f"Invalid TOML in project file: {candidate}") from exc

    tool_section = data.get("tool")
    if not isinstance(tool_section, MappingABC):
        return None
    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, MappingABC):
        return None
    return _as_dict(section), candidate
