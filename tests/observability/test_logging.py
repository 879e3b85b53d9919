"""Tests for logging setup and correlation IDs."""

import logging

import pytest

from agentrelay.observability.logging import (
    add_correlation_id,
    get_correlation_id,
    set_correlation_id,
    setup_logging,
)


class TestCorrelationId:
    def test_processor_adds_current_id(self) -> None:
        set_correlation_id("abc")
        try:
            event = add_correlation_id(logging.getLogger("test"), "info", {"event": "x"})
        finally:
            set_correlation_id(None)

        assert event == {"event": "x", "correlation_id": "abc"}
        assert get_correlation_id() is None

    def test_processor_keeps_explicit_id(self) -> None:
        set_correlation_id("abc")
        try:
            event = add_correlation_id(
                logging.getLogger("test"), "info", {"event": "x", "correlation_id": "own"}
            )
        finally:
            set_correlation_id(None)

        assert event["correlation_id"] == "own"

    def test_processor_without_id(self) -> None:
        assert add_correlation_id(logging.getLogger("test"), "info", {"event": "x"}) == {
            "event": "x"
        }


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    def test_sets_levels(self) -> None:
        setup_logging(log_level="debug")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_defaults_to_info(self) -> None:
        setup_logging(log_level="chatty", json_logs=True)

        assert logging.getLogger().level == logging.INFO
