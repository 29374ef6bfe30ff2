"""
Unit tests for logging configuration.

Tests structured JSON logging, text output, file rotation and the
stage-timing helpers.
"""

import json
import logging
import logging.handlers
import sys
from unittest.mock import MagicMock

import pytest

from suitegen.core.config import Config
from suitegen.core.logging_config import (
    ContextAdapter,
    StructuredFormatter,
    TextFormatter,
    get_logger,
    log_performance,
    setup_logging,
    timed_stage,
)


def _record(msg="Test message", level=logging.INFO, **attrs):
    record = logging.LogRecord(
        name="suitegen.test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestStructuredFormatter:
    """Test cases for StructuredFormatter."""

    def test_format_basic_log_record(self):
        formatted = StructuredFormatter("run-123").format(_record())
        log_data = json.loads(formatted)

        assert log_data["level"] == "INFO"
        assert log_data["component"] == "suitegen.test"
        assert log_data["run_id"] == "run-123"
        assert log_data["message"] == "Test message"
        assert log_data["timestamp"].endswith("Z")

    def test_format_with_metadata_and_context(self):
        record = _record(
            metadata={"selected": ["Primary"]},
            module_path="/app/Button.jsx",
            stage="bundle",
        )
        log_data = json.loads(StructuredFormatter("run-123").format(record))

        assert log_data["metadata"] == {"selected": ["Primary"]}
        assert log_data["module_path"] == "/app/Button.jsx"
        assert log_data["stage"] == "bundle"
        assert "export_name" not in log_data

    def test_format_with_exception(self):
        try:
            raise ValueError("bad export")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        log_data = json.loads(StructuredFormatter("run-123").format(record))
        assert "ValueError: bad export" in log_data["exception"]


class TestTextFormatter:
    """Test cases for TextFormatter."""

    def test_format(self):
        text = TextFormatter("abcdef123456").format(_record(metadata={"exports": 2}))

        assert "INFO" in text
        assert "Test message" in text
        assert "(run: abcdef12)" in text
        assert "exports=2" in text


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_text_logging_to_stderr(self):
        root = setup_logging(Config(log_level="DEBUG"), "run-1")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert handler.stream is sys.stderr
        assert isinstance(handler.formatter, TextFormatter)

    def test_json_logging(self):
        root = setup_logging(Config(log_format="json"), "run-1")
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_warn_level(self):
        root = setup_logging(Config(log_level="WARN"), "run-1")
        assert root.level == logging.WARNING

    def test_file_logging(self, tmp_path):
        config = Config(log_to_file=True, logs_dir=tmp_path / "logs")
        root = setup_logging(config, "run-1")

        file_handlers = [
            h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert (tmp_path / "logs" / "suitegen.log").exists()

    def test_no_file_logging_in_ci(self, tmp_path):
        config = Config(ci_mode=True, log_to_file=True, logs_dir=tmp_path / "logs")
        root = setup_logging(config, "run-1")
        assert len(root.handlers) == 1


class TestLoggerHelpers:
    """Test cases for get_logger, log_performance and timed_stage."""

    def test_get_logger_plain(self):
        assert isinstance(get_logger("suitegen.plain"), logging.Logger)

    def test_get_logger_with_context(self):
        logger = get_logger("suitegen.ctx", module_path="/app/Button.jsx")
        assert isinstance(logger, ContextAdapter)

        msg, kwargs = logger.process("hello", {"extra": {"stage": "bundle"}})
        assert kwargs["extra"] == {"stage": "bundle", "module_path": "/app/Button.jsx"}

    def test_log_performance(self):
        logger = MagicMock()
        log_performance(logger, "suite_generation", 1.234, test_cases=2)

        logger.info.assert_called_once()
        args, kwargs = logger.info.call_args
        assert "suite_generation completed in 1.23s" in args[0]
        assert kwargs["extra"]["metadata"] == {
            "operation": "suite_generation",
            "duration": 1.234,
            "test_cases": 2,
        }

    @pytest.mark.asyncio
    async def test_timed_stage(self, caplog):
        @timed_stage("bundle")
        async def build():
            return "bundled"

        with caplog.at_level(logging.DEBUG):
            assert await build() == "bundled"

        records = [r for r in caplog.records if r.getMessage() == "Stage bundle finished"]
        assert len(records) == 1
        assert records[0].metadata["stage"] == "bundle"

    @pytest.mark.asyncio
    async def test_timed_stage_logs_on_failure(self, caplog):
        @timed_stage("transform")
        async def transform():
            raise RuntimeError("boom")

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(RuntimeError):
                await transform()

        assert any(r.getMessage() == "Stage transform finished" for r in caplog.records)
