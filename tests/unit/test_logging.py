"""Tests for the lazyhydrate.logging module."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog

from lazyhydrate.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_default_level(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LAZYHYDRATE_LOG_LEVEL", None)
            configure_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_custom_level(self) -> None:
        """Test setting custom log level."""
        configure_logging(level=logging.DEBUG)

        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_level_from_env(self) -> None:
        """Test log level from LAZYHYDRATE_LOG_LEVEL env var."""
        with patch.dict(os.environ, {"LAZYHYDRATE_LOG_LEVEL": "INFO"}):
            configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_invalid_env_level_falls_back_to_warning(self) -> None:
        with patch.dict(os.environ, {"LAZYHYDRATE_LOG_LEVEL": "LOUD"}):
            configure_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_repeated_configuration_replaces_handler(self) -> None:
        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"LAZYHYDRATE_LOG_FORMAT": "json"}):
            configure_logging(level=logging.INFO)

        get_logger("lazyhydrate.tests").info("component_activated", component_id="3")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["event"] == "component_activated"
        assert record["component_id"] == "3"
        assert record["level"] == "info"


class TestContext:
    def test_bound_context_appears_in_output(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(force_json=True, level=logging.INFO)
        bind_context(component_name="counter")
        try:
            get_logger("lazyhydrate.tests").info("module_loaded")
        finally:
            clear_context()

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["component_name"] == "counter"

    def test_clear_context(self) -> None:
        bind_context(component_id="1")
        clear_context()

        assert structlog.contextvars.get_contextvars() == {}
