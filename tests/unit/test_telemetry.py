"""Tests for telemetry module."""

import json
import logging

from modelfusion.telemetry import (
    JsonFormatter,
    LogContext,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    reset_log_context,
    set_log_context,
)


def _record(message: str, **fields) -> logging.LogRecord:  # type: ignore[no-untyped-def]
    record = logging.LogRecord(
        name="modelfusion.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    if fields:
        record.extra_fields = fields
    return record


class TestSensitiveDataMasker:
    """Tests for SensitiveDataMasker."""

    def test_mask_api_key(self) -> None:
        """Test masking of provider keys in text."""
        masker = SensitiveDataMasker()
        masked = masker.mask("key sk-abcdefghijklmnopqrstuvwxyz123 used")
        assert "abcdefghijklmnop" not in masked
        assert "REDACTED" in masked

    def test_mask_bearer(self) -> None:
        """Test masking of bearer tokens."""
        masked = SensitiveDataMasker().mask("Authorization: Bearer secret-token")
        assert "secret-token" not in masked

    def test_mask_dict(self) -> None:
        """Test masking of sensitive keys while keeping token counts."""
        masked = SensitiveDataMasker().mask_dict(
            {
                "api_key": "abc",
                "prompt_tokens": 12,
                "headers": {"Authorization": "Bearer x"},
                "model": "echo",
            }
        )
        assert masked["api_key"] == "***REDACTED***"
        assert masked["prompt_tokens"] == 12
        assert masked["headers"]["Authorization"] == "***REDACTED***"
        assert masked["model"] == "echo"


class TestLogContext:
    """Tests for the call-scoped log context."""

    def test_set_and_reset(self) -> None:
        """Test nesting of log contexts."""
        clear_log_context()
        token = set_log_context(LogContext(call_id="call-1", provider="test"))
        try:
            context = get_log_context()
            assert context.call_id == "call-1"
            assert context.provider == "test"
        finally:
            reset_log_context(token)
        assert get_log_context().to_dict() == {}

    def test_extra_fields(self) -> None:
        """Test that extra fields survive a round trip."""
        token = set_log_context(LogContext(run_id="run-1", extra={"tenant": "a"}))
        try:
            assert get_log_context().extra == {"tenant": "a"}
        finally:
            reset_log_context(token)


class TestFormatters:
    """Tests for JSON and text formatters."""

    def test_json_formatter(self) -> None:
        """Test JSON output with fields and context."""
        token = set_log_context(LogContext(call_id="call-7"))
        try:
            output = JsonFormatter().format(_record("POST request", url="https://api.test"))
        finally:
            reset_log_context(token)

        data = json.loads(output)
        assert data["message"] == "POST request"
        assert data["url"] == "https://api.test"
        assert data["context"] == {"call_id": "call-7"}
        assert data["level"] == "INFO"

    def test_text_formatter_masks(self) -> None:
        """Test text output masks secrets."""
        output = TextFormatter().format(_record("using sk-abcdefghijklmnopqrstuvwxyz123"))
        assert "abcdefghijklmnop" not in output
        assert "modelfusion.test" in output

    def test_text_formatter_fields(self) -> None:
        """Test text output appends fields."""
        output = TextFormatter(include_context=False).format(_record("done", status_code=200))
        assert output.endswith("| status_code=200")


class TestLogger:
    """Tests for logger creation."""

    def test_get_logger_cached(self) -> None:
        """Test that loggers are shared by name."""
        first = get_logger("modelfusion.test.cached")
        second = get_logger("modelfusion.test.cached")
        assert first.name == "modelfusion.test.cached"
        assert first._logger is second._logger

    def test_log_level_from_env(self, monkeypatch) -> None:
        """Test reading the level from the environment."""
        monkeypatch.setenv("MODELFUSION_LOG_LEVEL", "debug")
        assert LogLevel.from_env() == LogLevel.DEBUG
        monkeypatch.setenv("MODELFUSION_LOG_LEVEL", "nonsense")
        assert LogLevel.from_env() == LogLevel.INFO
        assert LogLevel.ERROR.to_logging_level() == logging.ERROR
