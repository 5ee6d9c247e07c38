"""Render log records as ``=== event ===`` blocks of ``key: value`` lines."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..time_utils import utc_iso
from .schema import EVENT_KEY_ORDER


def _decode(record: logging.LogRecord) -> dict[str, Any]:
    """Payload of a log_event record, or the plain message under the logger name."""
    message = record.getMessage()
    if message.startswith("{"):
        try:
            payload = json.loads(message)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            return payload
    return {"event": record.name, "message": message}


def _document_label(payload: dict[str, Any]) -> Optional[str]:
    """Collapse command/section/source fields into ``ls(1) man``."""
    if not {"command", "section", "source"} <= payload.keys():
        return None
    command = payload.pop("command")
    section = payload.pop("section")
    source = payload.pop("source")
    if source == "tldr":
        return f"{command} tldr"
    return f"{command}({section}) {source}"


def _one_line(value: Any) -> str:
    return str(value).replace("\n", "\\n")


class StructuredTextFormatter(logging.Formatter):
    """Readable structured blocks; pair with a handler terminator of a blank line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = _decode(record)
        event = str(payload.pop("event", record.name))

        fields: dict[str, Any] = {
            "ts_utc": utc_iso(record.created),
            "level": record.levelname,
            "document": _document_label(payload),
        }
        for key in EVENT_KEY_ORDER.get(event, ()):
            if key in payload:
                fields[key] = payload.pop(key)
        for key in sorted(payload):
            fields[key] = payload[key]

        lines = [f"=== {event} ==="]
        lines.extend(f"{key}: {_one_line(value)}" for key, value in fields.items() if value is not None)
        if record.exc_info:
            lines.append("traceback:")
            lines.append(self.formatException(record.exc_info))
        return "\n".join(lines)
