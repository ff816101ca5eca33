"""Tests for environment-driven settings and logging setup."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Generator

import pytest
from pydantic import ValidationError

from formwire.lib.observability import JSONFormatter, setup_logging, setup_logging_from_settings
from formwire.lib.settings import FormwireSettings, get_settings


@pytest.fixture
def preserve_root_logger() -> Generator[logging.Logger, None, None]:
    """Restore root handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestFormwireSettings:
    """Tests for FormwireSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in [
            "FORMWIRE_LOG_LEVEL",
            "FORMWIRE_LOG_FORMAT",
            "FORMWIRE_LOG_FILE",
            "FORMWIRE_DISPATCH_DEPTH_WARNING",
            "FORMWIRE_LOG_VALIDATION_FAILURES",
        ]:
            monkeypatch.delenv(name, raising=False)

        settings = FormwireSettings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.log_format == "console"
        assert settings.log_file is None
        assert settings.dispatch_depth_warning == 32
        assert settings.log_validation_failures is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FORMWIRE_LOG_LEVEL", "debug")
        monkeypatch.setenv("FORMWIRE_LOG_FORMAT", "JSON")
        monkeypatch.setenv("FORMWIRE_DISPATCH_DEPTH_WARNING", "5")

        settings = FormwireSettings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"
        assert settings.dispatch_depth_warning == 5

    def test_invalid_level(self) -> None:
        with pytest.raises(ValidationError):
            FormwireSettings(log_level="LOUD", _env_file=None)

    def test_invalid_depth(self) -> None:
        with pytest.raises(ValidationError):
            FormwireSettings(dispatch_depth_warning=0, _env_file=None)

    def test_get_settings_caches_until_reload(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("FORMWIRE_DISPATCH_DEPTH_WARNING", "7")
        reloaded = get_settings(reload=True)

        assert reloaded is not first
        assert reloaded.dispatch_depth_warning == 7


class TestLogging:
    """Tests for logging helpers."""

    def test_json_formatter(self) -> None:
        record = logging.LogRecord(
            "formwire.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None
        )
        record.field_name = "username"

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "formwire.test"
        assert payload["message"] == "hello world"
        assert payload["extra"] == {"field_name": "username"}
        assert payload["timestamp"].endswith("Z")

    def test_setup_logging_writes_json_file(
        self, tmp_path: Path, preserve_root_logger: logging.Logger
    ) -> None:
        log_path = tmp_path / "formwire.log"

        setup_logging(json_format=True, log_file=str(log_path), level="DEBUG")
        logging.getLogger("formwire.test").debug("bound field")
        for handler in preserve_root_logger.handlers:
            handler.flush()

        records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
        assert any(r["message"] == "bound field" for r in records)
        assert preserve_root_logger.level == logging.DEBUG

    def test_setup_from_settings(self, preserve_root_logger: logging.Logger) -> None:
        settings = FormwireSettings(log_level="ERROR", log_format="json", _env_file=None)

        setup_logging_from_settings(settings)

        assert preserve_root_logger.level == logging.ERROR
        assert isinstance(preserve_root_logger.handlers[0].formatter, JSONFormatter)

    def test_verbose_forces_debug(self, preserve_root_logger: logging.Logger) -> None:
        setup_logging(verbose=True, level="ERROR")
        assert preserve_root_logger.level == logging.DEBUG

    def test_validation_failures_logged_when_enabled(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        from formwire.lib.adapters import ValueAdapter
        from formwire.lib.field import Field
        from formwire.lib.validators import required

        monkeypatch.setenv("FORMWIRE_LOG_VALIDATION_FAILURES", "true")

        with caplog.at_level(logging.DEBUG, logger="formwire.lib.field"):
            Field(ValueAdapter(), "", [required], name="username")

        assert "field 'username' failed validation: ['required']" in caplog.text
