"""Unit tests for correlation ID logging helpers."""

import logging

import pytest

from agromart.services.ui import LoggingAlerter
from agromart.utils.logging import (
    CorrelationIdFilter,
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    log_checkout_step,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


class TestCorrelationId:

    def test_set_generates_when_missing(self):
        cid = set_correlation_id()

        assert cid
        assert get_correlation_id() == cid

    def test_set_keeps_given_id(self):
        assert set_correlation_id("attempt-1") == "attempt-1"

    def test_formatter_prefixes_id(self):
        set_correlation_id("attempt-2")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

        assert StructuredFormatter("%(message)s").format(record) == "[attempt-2] hello"

    def test_filter_defaults_when_unset(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "no-correlation-id"

    def test_get_logger_adds_filter_once(self):
        logger = get_logger("agromart.test.once")
        get_logger("agromart.test.once")

        assert sum(isinstance(f, CorrelationIdFilter) for f in logger.filters) == 1


class TestLogCheckoutStep:

    def test_info_line(self, caplog):
        logger = get_logger("agromart.test.steps")

        with caplog.at_level(logging.INFO, logger="agromart.test.steps"):
            log_checkout_step(logger, "request_session", product_id="p1", amount_minor=2500)

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == (
            "Checkout step: request_session | product_id=p1 | amount_minor=2500"
        )
        assert record.step == "request_session"

    def test_error_line(self, caplog):
        logger = get_logger("agromart.test.steps")

        with caplog.at_level(logging.INFO, logger="agromart.test.steps"):
            log_checkout_step(logger, "complete", state="failed", error="ERR_CHECKOUT_002: boom")

        assert caplog.records[-1].levelno == logging.ERROR


class TestLoggingAlerter:

    def test_alert_is_logged_as_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="agromart.services.ui"):
            LoggingAlerter().alert("Payment Failed", "cancelled")

        assert caplog.records[-1].getMessage() == "Payment Failed: cancelled"
