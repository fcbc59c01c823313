"""Tests for structured logging setup."""

import json
import logging

import pytest
import structlog

from selic.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    """Undo the global structlog/stdlib configuration after each test."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


def test_json_events_carry_bound_series_code(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture, restore_logging
) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    setup_logging("INFO")

    with structlog.contextvars.bound_contextvars(series_code=4390):
        get_logger("selic.data.fetcher.json_test").warning("fetch_retry", attempt=1)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "fetch_retry"
    assert event["series_code"] == 4390
    assert event["attempt"] == 1
    assert event["level"] == "warning"


def test_log_level_and_httpx_quieted(restore_logging) -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
