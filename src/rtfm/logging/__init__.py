"""Structured logging primitives for rtfm."""

from .events import (
    build_run_log_path,
    key_fields,
    log_event,
    setup_logging,
)
from .formatter import StructuredTextFormatter
from .schema import EVENT_KEY_ORDER, LOG_PATH_FIELDS

__all__ = [
    "EVENT_KEY_ORDER",
    "LOG_PATH_FIELDS",
    "StructuredTextFormatter",
    "build_run_log_path",
    "key_fields",
    "log_event",
    "setup_logging",
]
