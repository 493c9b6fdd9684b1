"""Tests for structlog configuration helpers."""

import logging
from collections.abc import Iterator

import pytest
import structlog

from eventsync.config.logging_config import (
    add_app_context,
    clear_context,
    get_logger,
    setup_logging,
)
from eventsync.observability.tracing import CORRELATION_ID_KEY, correlation_scope


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    clear_context()
    structlog.reset_defaults()


def test_add_app_context() -> None:
    event_dict = add_app_context(None, "info", {"event": "x"})  # type: ignore[arg-type]

    assert event_dict["app"] == "event_sync"


def test_setup_json_logging_emits_app_name(caplog: pytest.LogCaptureFixture) -> None:
    setup_logging(log_level="INFO", json_logs=True)
    caplog.set_level(logging.INFO)

    get_logger("eventsync.test").info("surface_refreshed", surface="leader")

    out = "\n".join(caplog.messages)
    assert '"event": "surface_refreshed"' in out
    assert '"app": "event_sync"' in out


def test_correlation_scope_binds_and_unbinds() -> None:
    with correlation_scope("abc") as correlation_id:
        assert correlation_id == "abc"
        assert structlog.contextvars.get_contextvars()[CORRELATION_ID_KEY] == "abc"

    assert CORRELATION_ID_KEY not in structlog.contextvars.get_contextvars()
