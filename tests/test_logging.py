"""Tests for structured logging."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from freezegun import freeze_time

from rtfm.logging import StructuredTextFormatter, build_run_log_path, log_event, setup_logging
from rtfm.models import DocumentKey, SourceKind

CREATED = datetime(2026, 3, 1, 12, 34, 56, 789000, tzinfo=timezone.utc).timestamp()


def _record(msg: str, name: str = "rtfm", level: int = logging.INFO) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.created = CREATED
    return record


class TestStructuredTextFormatter:
    """Test log block rendering."""

    def test_fetch_event_block_in_schema_order(self):
        payload = {
            "event": "fetch_complete",
            "latency_ms": 12.5,
            "command": "ls",
            "section": 1,
            "source": "man",
            "line_count": 40,
            "raw": False,
        }

        result = StructuredTextFormatter().format(_record(json.dumps(payload)))

        assert result.splitlines() == [
            "=== fetch_complete ===",
            "ts_utc: 2026-03-01T12:34:56.789000Z",
            "level: INFO",
            "document: ls(1) man",
            "line_count: 40",
            "raw: False",
            "latency_ms: 12.5",
        ]

    def test_tldr_document_has_no_section(self):
        payload = {"event": "fetch_start", "command": "tar", "section": 1, "source": "tldr"}
        result = StructuredTextFormatter().format(_record(json.dumps(payload)))
        assert "document: tar tldr" in result.splitlines()

    def test_partial_key_fields_are_kept(self):
        payload = {"event": "duplicate_entry", "command": "ls"}
        result = StructuredTextFormatter().format(_record(json.dumps(payload)))
        assert result.splitlines()[-1] == "command: ls"

    def test_unknown_fields_sorted_and_nulls_dropped(self):
        payload = {"event": "app_stop", "zeta": 1, "alpha": 2, "reason": "normal", "error": None}
        lines = StructuredTextFormatter().format(_record(json.dumps(payload))).splitlines()
        assert lines[3:] == ["reason: normal", "alpha: 2", "zeta: 1"]

    def test_plain_messages(self):
        result = StructuredTextFormatter().format(
            _record("plain text\nsecond", name="asyncio", level=logging.WARNING)
        )
        assert result.splitlines() == [
            "=== asyncio ===",
            "ts_utc: 2026-03-01T12:34:56.789000Z",
            "level: WARNING",
            "message: plain text\\nsecond",
        ]

    def test_traceback_is_appended(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record('{"event":"session_error"}', level=logging.ERROR)
            record.exc_info = sys.exc_info()
        result = StructuredTextFormatter().format(record)
        assert "traceback:" in result
        assert "RuntimeError: boom" in result


def test_log_event_serializes_domain_values(caplog):
    caplog.set_level(logging.INFO, logger="rtfm")
    key = DocumentKey("ls", 1, SourceKind.TLDR)

    log_event("fetch_start", command=key.command, source=key.source, sections=frozenset({1}))

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == {
        "event": "fetch_start",
        "command": "ls",
        "source": "tldr",
        "sections": [1],
    }


def test_log_event_resolves_path_fields(caplog):
    caplog.set_level(logging.INFO, logger="rtfm")
    log_event("app_start", log_file="~/x.log", mode="interactive")

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["log_file"] == str(Path.home().resolve() / "x.log")
    assert payload["mode"] == "interactive"


@freeze_time("2026-03-01 08:00:00")
def test_build_run_log_path_is_unique(tmp_path):
    first = build_run_log_path(str(tmp_path / "logs"))
    assert first.endswith("rtfm_2026-03-01_08-00-00.log")
    Path(first).touch()

    second = build_run_log_path(str(tmp_path / "logs"))
    assert second.endswith("rtfm_2026-03-01_08-00-00_1.log")


def test_setup_logging_writes_structured_file(tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging(str(log_file))
    try:
        log_event("session_start", command_count=3)
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logging.getLogger().handlers):
            handler.close()
            logging.getLogger().removeHandler(handler)

    assert "=== session_start ===" in text
    assert "command_count: 3" in text
    assert text.endswith("command_count: 3\n\n")


def test_setup_logging_without_file_disables_logging(caplog):
    setup_logging(None)
    log_event("session_start")
    assert caplog.records == []
