"""Command line application entry point for decay-correlation."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ..configuration import load_model, load_project_config
from ..interfaces import CorrelationModel
from ..logging.config import setup_logging
from .errors import REPORTED_ERRORS, CliError, as_cli_error, log_cli_error

__all__ = ["build_parser", "main", "run_cli"]


CommandHandler = Callable[[argparse.Namespace, CorrelationModel], Mapping[str, Any]]


def _render(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def _handle_evaluate(namespace: argparse.Namespace, model: CorrelationModel) -> Mapping[str, Any]:
    coefficients = [
        {"delta_time": delta, "correlation": model.evaluate(namespace.group, delta)}
        for delta in namespace.delta_times
    ]
    return {"group": namespace.group, "coefficients": coefficients}


def _handle_correlation(
    namespace: argparse.Namespace, model: CorrelationModel
) -> Mapping[str, Any]:
    value = model.correlation(namespace.param_a, namespace.param_b, namespace.delta_time)
    return {
        "parameters": [namespace.param_a, namespace.param_b],
        "delta_time": namespace.delta_time,
        "correlation": value,
    }


def _handle_matrix(namespace: argparse.Namespace, model: CorrelationModel) -> Mapping[str, Any]:
    indices = namespace.indices or None
    matrix = model.correlation_matrix(namespace.delta_time, indices)
    return {
        "delta_time": namespace.delta_time,
        "indices": list(indices) if indices else list(range(model.get_parameter_count())),
        "matrix": matrix.tolist(),
    }


def _handle_describe(namespace: argparse.Namespace, model: CorrelationModel) -> Mapping[str, Any]:
    describe = getattr(model, "describe", None)
    if describe is None:
        return {
            "format": model.format,
            "parameters": model.get_parameter_count(),
            "groups": model.get_group_count(),
        }
    return describe()


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``decay-correlation`` command."""

    parser = argparse.ArgumentParser(
        prog="decay-correlation",
        description="Evaluate time-decaying correlation between sensor model parameters.",
    )
    parser.add_argument(
        "--model",
        dest="model_path",
        type=Path,
        default=None,
        help="YAML model document (default: 'model' from [tool.decay_correlation]).",
    )
    subparsers = parser.add_subparsers(dest="command")

    evaluate = subparsers.add_parser("evaluate", help="Coefficient of a group for elapsed times.")
    evaluate.add_argument("--group", type=int, required=True)
    evaluate.add_argument(
        "--dt",
        dest="delta_times",
        type=float,
        action="append",
        required=True,
        help="Elapsed time; repeat to evaluate several.",
    )
    evaluate.set_defaults(handler=_handle_evaluate)

    correlation = subparsers.add_parser(
        "correlation", help="Correlation between two sensor model parameters."
    )
    correlation.add_argument("--a", dest="param_a", type=int, required=True)
    correlation.add_argument("--b", dest="param_b", type=int, required=True)
    correlation.add_argument("--dt", dest="delta_time", type=float, required=True)
    correlation.set_defaults(handler=_handle_correlation)

    matrix = subparsers.add_parser("matrix", help="Pairwise correlation matrix.")
    matrix.add_argument("--dt", dest="delta_time", type=float, required=True)
    matrix.add_argument(
        "--index",
        dest="indices",
        type=int,
        action="append",
        default=[],
        help="Restrict the matrix to these parameters; repeatable.",
    )
    matrix.set_defaults(handler=_handle_matrix)

    describe = subparsers.add_parser("describe", help="Summarise the configured model.")
    describe.set_defaults(handler=_handle_describe)
    return parser


def _resolve_model_path(
    namespace: argparse.Namespace, config: Mapping[str, Any], config_path: Optional[Path]
) -> Path:
    if namespace.model_path is not None:
        return namespace.model_path
    configured = config.get("model")
    if configured is None:
        raise CliError(
            "No model document given; pass --model or set 'model' in [tool.decay_correlation].",
            category="usage",
        )
    path = Path(str(configured)).expanduser()
    if not path.is_absolute() and config_path is not None:
        path = config_path.parent / path
    return path


def _configure_logging(preliminary: argparse.Namespace, config: Mapping[str, Any]) -> None:
    table = config.get("logging", {})
    if not isinstance(table, Mapping):
        raise CliError("'logging' must be a table.", category="usage", context={"option": "logging"})
    logging_config = dict(table)
    if preliminary.log_level is not None:
        logging_config["level"] = preliminary.log_level
    if preliminary.log_output is not None:
        logging_config["output"] = preliminary.log_output
    if preliminary.log_format is not None:
        logging_config["format"] = preliminary.log_format
    logging_config.setdefault("level", "warning")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    try:
        setup_logging({"logging": logging_config})
    except ValueError as exc:
        raise CliError(str(exc), category="usage", context={"option": "logging"}) from exc


def _write(text: str) -> None:
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the decay-correlation command line interface."""

    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding [tool.decay_correlation].",
    )
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    preliminary, remaining = config_parser.parse_known_args(args)

    model_path: Optional[Path] = None
    try:
        loaded = load_project_config(preliminary.config_path)
        config, config_path = loaded if loaded is not None else ({}, None)
        _configure_logging(preliminary, config)

        namespace = build_parser().parse_args(list(remaining), namespace=preliminary)
        handler: Optional[CommandHandler] = getattr(namespace, "handler", None)
        if handler is None:
            raise CliError(
                f"Unknown command '{getattr(namespace, 'command', None)}'.",
                category="usage",
                context={"command": getattr(namespace, "command", None)},
            )
        model_path = _resolve_model_path(namespace, config, config_path)
        model = load_model(model_path)
        result = _render(handler(namespace, model))
    except REPORTED_ERRORS as exc:
        error = as_cli_error(exc, path=model_path)
        log_cli_error(error, exc_info=exc)
        _write(_render({"error": error.payload.as_dict()}))
        raise SystemExit(error.status_code) from exc

    _write(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
