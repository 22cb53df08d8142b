"""Unit tests for structured logging helpers."""

import logging

import pytest

from backoffice.utils.logging import (
    LOG_FORMAT,
    CorrelationIdFilter,
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_payment_operation,
    log_webhook_event,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


class TestCorrelationId:
    def test_set_and_get(self):
        assert set_correlation_id("abc-123") == "abc-123"
        assert get_correlation_id() == "abc-123"

    def test_generates_when_missing(self):
        cid = set_correlation_id()
        assert cid
        assert get_correlation_id() == cid

    def test_formatter_prefixes_correlation_id(self):
        set_correlation_id("req-42")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
        CorrelationIdFilter().filter(record)

        output = StructuredFormatter(LOG_FORMAT).format(record)
        assert output.startswith("[req-42] ")
        assert output.endswith("test: hello")

    def test_formatter_without_correlation_id(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
        assert StructuredFormatter(LOG_FORMAT).format(record).startswith("[no-correlation-id]")


class TestStructuredHelpers:
    def test_payment_operation(self, caplog):
        logger = logging.getLogger("test.payments")
        with caplog.at_level(logging.INFO, logger="test.payments"):
            log_payment_operation(
                logger, "charge", payment_intent_id="pi_1", order_id="ORD-1", amount_cents=500
            )

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == (
            "Payment operation: charge | payment_intent_id=pi_1 | order_id=ORD-1 | amount_cents=500"
        )
        assert record.order_id == "ORD-1"

    def test_payment_error_logs_at_error_level(self, caplog):
        logger = logging.getLogger("test.payments")
        with caplog.at_level(logging.INFO, logger="test.payments"):
            log_payment_operation(logger, "refund", error="declined")
        assert caplog.records[-1].levelno == logging.ERROR

    def test_webhook_event(self, caplog):
        logger = logging.getLogger("test.webhooks")
        with caplog.at_level(logging.INFO, logger="test.webhooks"):
            log_webhook_event(
                logger, "payment_intent.succeeded", "evt_1", booking_id="BK-1", result="success"
            )

        record = caplog.records[-1]
        assert "payment_intent.succeeded" in record.getMessage()
        assert record.booking_id == "BK-1"
