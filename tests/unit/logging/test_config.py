"""Unit tests for logging configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from grace.config.models import LoggingConfig
from grace.logging import JSONFormatter, build_logging_config, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBuildLoggingConfig:
    """Tests for build_logging_config()."""

    def test_overrides_applied(self) -> None:
        base = LoggingConfig(level="info", format="text", max_bytes=1024)
        config = build_logging_config(base, level="debug", include_stderr=True)

        assert config.level == "debug"
        assert config.format == "text"
        assert config.include_stderr is True
        assert config.max_bytes == 1024

    def test_no_overrides_keeps_base(self) -> None:
        base = LoggingConfig(level="warning", format="json")
        config = build_logging_config(base)
        assert config == base

    def test_invalid_override_raises(self) -> None:
        with pytest.raises(ValueError):
            build_logging_config(LoggingConfig(), format="yaml")


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_stderr_only_by_default(self) -> None:
        configure_logging(LoggingConfig(level="debug"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_json_format(self) -> None:
        configure_logging(LoggingConfig(format="json"))
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "grace.log"
        configure_logging(LoggingConfig(file=log_file))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert log_file.parent.is_dir()

    def test_file_with_stderr(self, tmp_path: Path) -> None:
        configure_logging(
            LoggingConfig(file=tmp_path / "grace.log", include_stderr=True)
        )
        assert len(logging.getLogger().handlers) == 2

    def test_unwritable_file_falls_back_to_stderr(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")

        configure_logging(LoggingConfig(file=blocker / "grace.log"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RotatingFileHandler)
        assert "Could not open log file" in capsys.readouterr().err
