"""Tests for logger construction."""

import gc
import io
import json
import logging
import sys

from servicebase.logging.formatters import ConsoleFormatter, JSONFormatter
from servicebase.logging.setup import (
    DEFAULT_LOGGER_LEVEL,
    DEFAULT_LOGGER_NAME,
    get_logger,
    new_logger,
)


class TestNewLogger:

    def test_defaults(self):
        logger = new_logger()

        assert logger.name == DEFAULT_LOGGER_NAME
        assert logger.level == DEFAULT_LOGGER_LEVEL == logging.INFO
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_writes_json_lines_to_stream(self):
        stream = io.StringIO()
        logger = new_logger(stream=stream)

        logger.info("hello", extra={"request_id": "r-1"})

        record = json.loads(stream.getvalue())
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["request_id"] == "r-1"

    def test_filters_below_level(self):
        stream = io.StringIO()
        logger = new_logger(stream=stream, level=logging.WARNING)

        logger.info("dropped")
        logger.warning("kept")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "kept"

    def test_accepts_level_name(self):
        assert new_logger(level="DEBUG").level == logging.DEBUG

    def test_console_format(self):
        logger = new_logger(json_format=False)

        assert isinstance(logger.handlers[0].formatter, ConsoleFormatter)

    def test_writes_to_stdout_by_default(self, capsys):
        logger = new_logger()

        logger.info("stdout test")

        assert json.loads(capsys.readouterr().out)["message"] == "stdout test"

    def test_loggers_are_independent(self):
        first = new_logger(name="svc")
        second = new_logger(name="svc")

        assert first is not second
        assert first.handlers[0] is not second.handlers[0]
        assert logging.getLogger("svc") is not first

    def test_does_not_touch_root_logger(self):
        root_handlers = list(logging.getLogger().handlers)

        new_logger()

        assert logging.getLogger().handlers == root_handlers

    def test_windows_stdout_survives_discarded_loggers(self, monkeypatch):
        buffer = io.BytesIO()
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(buffer))

        logger = new_logger()
        logger.info("first")
        del logger
        gc.collect()

        assert not buffer.closed

        second = new_logger()
        second.info("second")

        lines = buffer.getvalue().decode("utf-8").splitlines()
        assert [json.loads(line)["message"] for line in lines] == ["first", "second"]

    def test_windows_loggers_share_one_stdout_writer(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(io.BytesIO()))

        first = new_logger()
        second = new_logger()

        assert first.handlers[0].stream is second.handlers[0].stream
        assert first.handlers[0].stream.encoding == "utf-8"


class TestGetLogger:

    def test_returns_registered_module_logger(self):
        assert get_logger("servicebase.tests") is logging.getLogger("servicebase.tests")
