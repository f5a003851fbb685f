"""Tests for JSON and console log formatters."""

import json
import logging
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

from servicebase.logging.formatters import ConsoleFormatter, JSONFormatter


def _make_record(
    msg="test message",
    level=logging.INFO,
    name="test.logger",
    exc_info=None,
    **extras,
):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extras.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_formats_basic_json_with_required_fields(self):
        formatter = JSONFormatter()
        output = json.loads(formatter.format(_make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "test.logger"
        assert output["message"] == "test message"
        assert output["ts"].endswith("Z")

    def test_info_records_have_no_source_location(self):
        output = json.loads(JSONFormatter().format(_make_record()))

        assert "file" not in output

    def test_error_records_include_source_location(self):
        output = json.loads(JSONFormatter().format(_make_record(level=logging.ERROR)))

        assert output["file"] == "test.py:42"

    def test_extra_fields_become_top_level_keys(self):
        record = _make_record(request_id="abc", attempt=2, ratio=0.5)
        output = json.loads(JSONFormatter().format(record))

        assert output["request_id"] == "abc"
        assert output["attempt"] == 2
        assert output["ratio"] == 0.5

    def test_extra_fields_cannot_override_base_fields(self):
        record = _make_record(logger="spoofed")
        output = json.loads(JSONFormatter().format(record))

        assert output["logger"] == "test.logger"

    def test_none_extras_are_omitted(self):
        output = json.loads(JSONFormatter().format(_make_record(trace_id=None)))

        assert "trace_id" not in output

    def test_non_json_extras_are_serialized(self):
        record = _make_record(
            zone=ZoneInfo("UTC"),
            timeout=timedelta(seconds=10),
            amount=Decimal("1.5"),
            path=Path("/tmp/x"),
        )
        output = json.loads(JSONFormatter().format(record))

        assert output["zone"] == "UTC"
        assert output["timeout"] == 10.0
        assert output["amount"] == 1.5
        assert output["path"] == "/tmp/x"

    def test_sanitizes_sensitive_url_params(self):
        record = _make_record(url="https://api.example.com/x?token=abc&page=2")
        output = json.loads(JSONFormatter().format(record))

        assert output["url"] == "https://api.example.com/x?token=[REDACTED]&page=2"

    def test_leaves_non_url_fields_alone(self):
        record = _make_record(note="?token=abc")
        output = json.loads(JSONFormatter().format(record))

        assert output["note"] == "?token=abc"

    def test_includes_structured_exception(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            exc_info = sys.exc_info()

        record = _make_record(level=logging.ERROR, exc_info=exc_info)
        output = json.loads(JSONFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "bad value"
        assert "Traceback" in output["exception"]["stacktrace"]


class TestConsoleFormatter:

    def _formatter(self):
        formatter = ConsoleFormatter()
        formatter._use_colors = False
        return formatter

    def test_formats_level_name_and_message(self):
        output = self._formatter().format(_make_record())

        assert " - INFO - test.logger - test message" in output

    def test_appends_extras_as_key_value_tags(self):
        output = self._formatter().format(_make_record(request_id="abc"))

        assert output.endswith("test message request_id=abc")

    def test_colors_level_when_tty(self):
        formatter = ConsoleFormatter()
        formatter._use_colors = True

        output = formatter.format(_make_record(level=logging.WARNING))

        assert "\033[33mWARNING\033[0m" in output
