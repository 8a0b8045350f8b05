"""
Unit tests for logging utilities.

Tests verify:
- Logging setup and configuration
- Function call decorator behavior
- JSON formatting of structured fields
- Exception handling in decorated functions
"""

import json
import logging

from s3publish.utils.logging import (
    JSONFormatter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    log_function_call,
    set_correlation_id,
    setup_logging,
)


def test_setup_logging_configures_root_logger() -> None:
    """Test that setup_logging properly configures the root logger."""
    setup_logging(level="DEBUG")
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG


def test_setup_logging_json_uses_json_formatter() -> None:
    """Test that json format installs the JSON formatter."""
    setup_logging(level="INFO", log_format="json")
    root_logger = logging.getLogger()
    assert any(isinstance(h.formatter, JSONFormatter) for h in root_logger.handlers)
    setup_logging(level="INFO", log_format="text", enable_colors=False)


def test_get_logger_returns_logger_instance() -> None:
    """Test that get_logger returns a valid logger instance."""
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_module"


def test_correlation_id_roundtrip() -> None:
    """Test correlation IDs can be set and regenerated."""
    set_correlation_id("build-42")
    assert get_correlation_id() == "build-42"

    clear_correlation_id()
    generated = get_correlation_id()
    assert generated and generated != "build-42"


def test_json_formatter_includes_extra_fields(monkeypatch) -> None:
    """Test structured extra fields end up in the JSON record."""
    monkeypatch.setenv("DRONE_BUILD_NUMBER", "17")
    set_correlation_id("build-17")
    record = logging.LogRecord(
        name="s3publish.uploader.uploader",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Uploading file",
        args=(),
        exc_info=None,
    )
    record.file = "dist/app.js"
    record.target = "/bundle/dist/app.js"

    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "Uploading file"
    assert data["level"] == "INFO"
    assert data["correlation_id"] == "build-17"
    assert data["extra"] == {"file": "dist/app.js", "target": "/bundle/dist/app.js"}
    assert data["environment"]["build"] == "17"


def test_log_function_call_decorator_logs_entry_and_exit(caplog) -> None:
    """Test that log_function_call decorator logs function entry and exit."""

    @log_function_call
    def sample_function(x: int, y: int) -> int:
        """Sample function for testing decorator."""
        return x + y

    with caplog.at_level(logging.DEBUG):
        result = sample_function(2, 3)

    assert result == 5
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("ENTER sample_function(x=2, y=3)") for m in messages)
    assert any(m.startswith("EXIT sample_function -> 5") for m in messages)


def test_log_function_call_decorator_handles_exceptions(caplog) -> None:
    """Test that log_function_call decorator properly logs exceptions."""

    @log_function_call
    def failing_function() -> None:
        """Function that raises an exception."""
        raise ValueError("Test exception")

    try:
        failing_function()
        assert False, "Exception should have been raised"
    except ValueError as e:
        assert str(e) == "Test exception"

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors and errors[-1].error_type == "ValueError"
