"""
Unit Tests for Logging Module

Tests logger configuration, request ID context, secret redaction and
logging utilities.
"""

from unittest.mock import MagicMock

import pytest
import structlog

from maple_gateway.core.config.constants import Stage
from maple_gateway.core.logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    redact_mapping,
    redact_text,
    set_request_id,
    setup_logging,
)
from maple_gateway.core.logging.logger import add_log_level_name, add_request_id, redact_secrets

API_KEY = "live_0123456789abcdef0123456789abcdef"


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        """Test that get_logger returns a logger instance."""
        logger = get_logger(__name__)
        assert logger is not None
        assert hasattr(logger, "info")

    def test_setup_logging_configures_structlog(self):
        """Test that setup_logging can run with either renderer."""
        setup_logging(log_level="DEBUG", log_format="console")
        setup_logging(log_level="INFO", log_format="json")
        assert structlog.is_configured()


@pytest.mark.unit
class TestRequestContext:
    """Test request ID context management."""

    def test_set_and_clear_request_id(self):
        """Test that set_request_id stores and clear_request_id removes the id."""
        set_request_id("abc123")
        assert get_request_id() == "abc123"

        clear_request_id()
        assert get_request_id() is None

    def test_add_request_id_processor(self):
        """Test that the processor copies the context id into the event."""
        set_request_id("req-1")
        try:
            event = add_request_id(None, "info", {"event": "x"})
        finally:
            clear_request_id()

        assert event["request_id"] == "req-1"

    def test_add_request_id_without_context(self):
        event = add_request_id(None, "info", {"event": "x"})
        assert "request_id" not in event

    def test_add_log_level_name_uppercases(self):
        assert add_log_level_name(None, "info", {"level": "warning"})["level"] == "WARNING"


@pytest.mark.unit
class TestRedaction:
    """Test credential redaction helpers and processor."""

    def test_redact_mapping_masks_sensitive_keys(self):
        """Test that key/token/secret/password/authorization fields are masked."""
        data = {
            "character_name": "Hero",
            "api_key": API_KEY,
            "x-nxopen-api-key": API_KEY,
            "Authorization": "Bearer x",
            "password": "hunter2",
            "token": "t",
        }
        redacted = redact_mapping(data)

        assert redacted["character_name"] == "Hero"
        for key in ("api_key", "x-nxopen-api-key", "Authorization", "password", "token"):
            assert redacted[key] == "[REDACTED]"
        assert data["api_key"] == API_KEY

    def test_redact_mapping_is_recursive(self):
        redacted = redact_mapping({"params": {"nested": [{"secret": "s"}]}})
        assert redacted["params"]["nested"][0]["secret"] == "[REDACTED]"

    def test_redact_mapping_handles_none(self):
        assert redact_mapping(None) == {}

    def test_redact_text_masks_api_keys(self):
        text = f"request with {API_KEY} failed"
        assert redact_text(text) == "request with [REDACTED] failed"

    def test_redact_text_leaves_plain_text(self):
        assert redact_text("character not found") == "character not found"

    def test_redact_secrets_processor(self):
        """Test that the processor masks fields and message text."""
        event = redact_secrets(
            None,
            "info",
            {
                "event": f"using {API_KEY}",
                "stage": "3.0_TRANSPORT_CALL",
                "api_key": API_KEY,
                "params": {"ocid": "abcdef0123456789", "token": "t"},
            },
        )

        assert event["event"] == "using [REDACTED]"
        assert event["stage"] == "3.0_TRANSPORT_CALL"
        assert event["api_key"] == "[REDACTED]"
        assert event["params"] == {"ocid": "abcdef0123456789", "token": "[REDACTED]"}


@pytest.mark.unit
class TestLogStage:
    """Test log_stage helper."""

    def test_log_stage_uses_stage_value(self):
        """Test that a Stage enum is logged by its value."""
        logger = MagicMock()
        log_stage(logger, Stage.ADMISSION, "Admission throttled", level="debug", pending=3)

        logger.debug.assert_called_once_with(
            "Admission throttled", stage=Stage.ADMISSION.value, pending=3
        )

    def test_log_stage_accepts_plain_string(self):
        logger = MagicMock()
        log_stage(logger, "H.1", "Health check")

        logger.info.assert_called_once_with("Health check", stage="H.1")
