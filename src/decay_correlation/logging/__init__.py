"""Logging utilities for decay-correlation."""

from decay_correlation.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
