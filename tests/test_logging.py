"""Tests for logging utilities."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from wirebox.core import ServiceContainer
from wirebox.core.config import LoggingSettings
from wirebox.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo the handlers and level installed by configure_logging."""

    root = logging.getLogger()
    package = logging.getLogger("wirebox")
    handlers = root.handlers[:]
    levels = (root.level, package.level)
    yield
    root.handlers[:] = handlers
    root.setLevel(levels[0])
    package.setLevel(levels[1])


def test_configure_logging_sets_root_level() -> None:
    """configure_logging should set the root logger level according to settings."""

    settings = LoggingSettings(level="DEBUG", structured=False)
    configure_logging(settings)
    assert logging.getLogger().level == logging.DEBUG


def test_structured_logging_config_is_accepted() -> None:
    configure_logging(LoggingSettings(level="warning", structured=True))
    assert logging.getLogger("wirebox").level == logging.WARNING


def test_container_logs_provider_and_clear_events(
    caplog: pytest.LogCaptureFixture,
) -> None:
    container = ServiceContainer()
    container.singleton("db", "handle")

    with caplog.at_level(logging.DEBUG, logger="wirebox"):
        container.get("db")
        container.clear()

    messages = [record.getMessage() for record in caplog.records]
    assert "Cached shared instance for db" in messages
    assert "Container cleared" in messages


def test_structured_logging_emits_valid_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Quotes, backslashes and newlines in a message survive as parseable JSON."""

    configure_logging(LoggingSettings(level="INFO", structured=True))
    message = 'Service "db" failed: C:\\data\nretrying'

    logging.getLogger("wirebox.test").warning(message)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == message
    assert record["level"] == "warning"
    assert record["logger"] == "wirebox.test"
    assert "timestamp" in record
