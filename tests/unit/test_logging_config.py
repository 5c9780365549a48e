"""Tests for logging configuration helpers."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from httpengine.bootstrap.logging_setup import (
    ConnectionIdFilter,
    JsonFormatter,
    configure_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="httpengine.transport.worker",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="format test",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_configure_logging_stream_handler():
    adapter = configure_logging("DEBUG", "stdout")

    assert adapter.logger.name == "httpengine"
    assert adapter.logger.level == logging.DEBUG
    assert len(adapter.logger.handlers) == 1
    handler = adapter.logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, JsonFormatter)


def test_json_formatter_includes_whitelisted_extras_only():
    record = make_record(
        connection_id="abc123",
        component="transport.worker",
        event="request_complete",
        status_code=200,
        client="127.0.0.1:1",
        not_whitelisted="hidden",
    )

    data = json.loads(JsonFormatter().format(record))

    assert data["connection_id"] == "abc123"
    assert data["component"] == "transport.worker"
    assert data["event"] == "request_complete"
    assert data["status_code"] == 200
    assert data["client"] == "127.0.0.1:1"
    assert data["message"] == "format test"
    assert "not_whitelisted" not in data


def test_json_formatter_keys_are_sorted():
    output = JsonFormatter().format(make_record(event="x", client="y"))
    keys = list(json.loads(output).keys())
    assert keys == sorted(keys)


def test_configure_logging_file_destination(tmp_path: Path):
    destination = tmp_path / "logs" / "server.log"
    adapter = configure_logging("WARNING", destination.as_posix())

    assert adapter.logger.level == logging.WARNING
    handler = adapter.logger.handlers[0]
    assert handler.baseFilename == destination.as_posix()

    logging.getLogger("httpengine.server").warning("file log test")
    handler.flush()
    assert "file log test" in destination.read_text()


def test_configure_logging_text_format(tmp_path: Path):
    destination = tmp_path / "server.log"
    adapter = configure_logging("INFO", destination.as_posix(), log_format="text")

    logging.getLogger("httpengine.server").info("plain line")
    adapter.logger.handlers[0].flush()

    contents = destination.read_text()
    assert "INFO [-] httpengine.server :: plain line" in contents


def test_connection_id_filter_inserts_placeholder_when_missing():
    record = make_record()

    assert not hasattr(record, "connection_id")
    assert ConnectionIdFilter().filter(record)
    assert record.connection_id == "-"


def test_configure_logging_emits_event():
    with patch("httpengine.bootstrap.logging_setup._build_handler") as mock_build:
        mock_handler = MagicMock()
        mock_handler.level = logging.INFO
        mock_build.return_value = mock_handler

        configure_logging("INFO", "stdout")

    record = mock_handler.handle.call_args[0][0]
    assert record.msg == "Logging configured"
    assert getattr(record, "event", None) == "logging_configured"
    assert getattr(record, "log_destination", None) == "stdout"
    assert getattr(record, "log_format", None) == "json"
