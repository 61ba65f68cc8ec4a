"""Tests for structured logging setup."""

import json

import pytest
import structlog
from structlog.testing import capture_logs

from unitwork.core.logging import LogContext, bind_context, configure_logging, get_logger, unbind_context


def _last_json_line(capsys) -> dict:
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestConfigureLogging:
    def test_json_output_carries_service_and_logger(self, capsys):
        configure_logging(level="INFO", json_format=True, service="unitwork-test")
        get_logger("unitwork.orm.unit_of_work").info("commit_completed", rows_affected=3)

        record = _last_json_line(capsys)
        assert record["event"] == "commit_completed"
        assert record["rows_affected"] == 3
        assert record["level"] == "info"
        assert record["logger_name"] == "unitwork.orm.unit_of_work"
        assert record["service.name"] == "unitwork-test"
        assert "timestamp" in record

    def test_timestamp_can_be_disabled(self, capsys):
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        get_logger().info("no_time")
        assert "timestamp" not in _last_json_line(capsys)

    def test_level_filters_lower_events(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("quiet")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out


class TestLogContext:
    def test_context_is_scoped(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("ctx")

        with LogContext(unit_of_work="import-batch"):
            logger.info("inside")
            inside = _last_json_line(capsys)
        logger.info("outside")
        outside = _last_json_line(capsys)

        assert inside["unit_of_work"] == "import-batch"
        assert "unit_of_work" not in outside

    @pytest.mark.asyncio
    async def test_async_context(self):
        async with LogContext(request="r-1"):
            assert structlog.contextvars.get_contextvars()["request"] == "r-1"
        assert "request" not in structlog.contextvars.get_contextvars()

    def test_bind_and_unbind(self):
        bind_context(table="Person")
        assert structlog.contextvars.get_contextvars()["table"] == "Person"
        unbind_context("table")
        assert "table" not in structlog.contextvars.get_contextvars()


class TestGetLogger:
    def test_named_logger_before_configuration(self):
        logger = get_logger("unitwork.orm.metadata")
        with capture_logs() as logs:
            logger.info("entity_described", table="City")
        assert logs[0]["logger_name"] == "unitwork.orm.metadata"
        assert logs[0]["table"] == "City"

    def test_library_modules_import(self):
        import importlib

        for module in ("unitwork.orm.metadata", "unitwork.orm.unit_of_work", "unitwork.core.connection"):
            assert importlib.import_module(module).logger is not None
