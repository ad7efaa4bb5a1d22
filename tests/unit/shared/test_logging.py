from __future__ import annotations

import logging
from dataclasses import dataclass

from healthguard.shared.logging import (
    configure_logging,
    get_logger,
    log_safely,
    update_logging_from_settings,
)


def test_configure_logging_sets_root_handlers(tmp_path) -> None:
    log_file = tmp_path / "healthguard.log"
    configure_logging(level="DEBUG", file_path=str(log_file), environment="development")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(handler, logging.FileHandler) for handler in root.handlers)

    get_logger(__name__).info("health.test.event", probe="memory")
    for handler in root.handlers:
        handler.flush()
    assert "health.test.event" in log_file.read_text()


@dataclass
class _LoggingSettings:
    level: str = "WARNING"
    file_path: str | None = None


@dataclass
class _Settings:
    logging: _LoggingSettings
    environment: str = "production"


def test_update_logging_from_settings_applies_configuration() -> None:
    update_logging_from_settings(_Settings(logging=_LoggingSettings(level="ERROR")))

    assert logging.getLogger().level == logging.ERROR


def test_update_logging_from_settings_tolerates_bad_settings() -> None:
    update_logging_from_settings(object())


def test_log_safely_swallows_sink_failures() -> None:
    class _Broken:
        def warning(self, event, **fields):
            raise RuntimeError("sink down")

    log_safely(_Broken(), "warning", "health.probe.timeout", probe="a")
    log_safely(_Broken(), "missing_level", "health.probe.timeout")
