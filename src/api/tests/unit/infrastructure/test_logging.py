"""Unit tests for structlog configuration."""

import pytest
import structlog

from infrastructure.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_binds_app_name(self):
        """The application name is attached to every event."""
        configure_logging("INFO", app_name="Organic Groups API")

        assert structlog.contextvars.get_contextvars() == {
            "app": "Organic Groups API"
        }

    def test_without_app_name_binds_nothing(self):
        configure_logging("DEBUG")

        assert structlog.contextvars.get_contextvars() == {}

    def test_json_output_without_tty(self, monkeypatch):
        """Without a terminal the last processor renders JSON."""
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setattr("sys.stdout.isatty", lambda: False)

        configure_logging("WARNING")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_force_color_uses_console_renderer(self, monkeypatch):
        monkeypatch.setenv("FORCE_COLOR", "1")

        configure_logging("INFO")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_unknown_level_is_rejected(self):
        with pytest.raises(KeyError):
            configure_logging("VERBOSE")
