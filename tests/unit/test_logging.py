"""Unit tests for structured logging."""
# ruff: noqa: ARG002  # Fixtures used for setup side effects

import logging
from unittest.mock import MagicMock, patch

import pytest
import structlog

from talentwatch.core.logging import (
    LogContext,
    add_environment_info,
    drop_color_message_key,
    get_logger,
    log_external_call,
    setup_logging,
)


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.log_level = "INFO"
    settings.ENVIRONMENT = "development"
    with patch("talentwatch.core.logging.get_settings", return_value=settings):
        yield settings


class TestProcessors:
    """Tests for custom structlog processors."""

    def test_adds_environment(self, mock_settings):
        """Test environment is added to event dict."""
        mock_settings.ENVIRONMENT = "production"

        result = add_environment_info(None, "info", {})

        assert result["environment"] == "production"

    def test_drops_color_message(self):
        result = drop_color_message_key(None, "info", {"message": "test", "color_message": "colored test"})

        assert result == {"message": "test"}


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self, mock_settings):
        setup_logging()

        assert get_logger("test") is not None
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_setup_logging_custom_level(self, mock_settings):
        """Test logging setup with custom log level."""
        setup_logging(log_level="DEBUG", json_format=True)

        assert logging.getLogger().level == logging.DEBUG


class TestLogContext:
    """Tests for LogContext context manager."""

    def test_log_context_binds_values(self, mock_settings):
        setup_logging()
        structlog.contextvars.clear_contextvars()

        with LogContext(subject_id="athlete_1", purpose="export"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx.get("subject_id") == "athlete_1"
            assert ctx.get("purpose") == "export"

        ctx = structlog.contextvars.get_contextvars()
        assert "subject_id" not in ctx
        assert "purpose" not in ctx


class TestLogExternalCall:
    """Tests for log_external_call."""

    def test_success_logs_info(self):
        logger = MagicMock()

        log_external_call(logger, "talent_registry", "/talents/sync", 12.3456, True, status_code=200)

        logger.info.assert_called_once_with(
            "external_call",
            service="talent_registry",
            operation="/talents/sync",
            duration_ms=12.35,
            success=True,
            status_code=200,
        )

    def test_failure_logs_warning(self):
        logger = MagicMock()

        log_external_call(logger, "talent_registry", "authenticate", 5.0, False, error="timeout")

        logger.warning.assert_called_once()
        logger.info.assert_not_called()
