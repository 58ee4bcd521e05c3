"""Tests for the JSON log formatter (logsure_mcp/logging_config.py)."""

import json
import logging

from logsure_mcp.logging_config import JSONLogFormatter


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("logsure-mcp.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_one_json_object():
    line = JSONLogFormatter().format(make_record("Tool call started"))

    entry = json.loads(line)
    assert entry["level"] == "INFO"
    assert entry["logger"] == "logsure-mcp.test"
    assert entry["message"] == "Tool call started"
    assert "\n" not in line


def test_log_data_is_merged():
    record = make_record("Tool call completed", log_data={"tool": "get_locations", "duration_ms": 12})

    entry = json.loads(JSONLogFormatter().format(record))

    assert entry["tool"] == "get_locations"
    assert entry["duration_ms"] == 12


def test_non_json_values_are_stringified():
    import datetime

    expires = datetime.datetime(2026, 10, 18, 12, 0, tzinfo=datetime.timezone.utc)
    record = make_record("Authentication successful", log_data={"token_expires_at": expires})

    entry = json.loads(JSONLogFormatter().format(record))

    assert entry["token_expires_at"].startswith("2026-10-18")
