"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- Helper functions for payment, webhook and notification logging

Usage:
    from backoffice.utils.logging import get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Processing payment", extra={"order_id": "ORD-123"})
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def generate_correlation_id() -> str:
    """Generate a new UUID-based correlation ID."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID, or None if not set."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Correlation ID prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def configure_logging(level: str = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; existing handlers get the formatter
    instead of new handlers being stacked.

    Args:
        level: Root log level name
    """
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        handler.setFormatter(StructuredFormatter(LOG_FORMAT))
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def _log_structured(
    logger: logging.Logger, level: int, headline: str, context: dict[str, Any]
) -> None:
    """Log ``headline | key=value | ...`` and attach the context to the record.

    None values are dropped; the remaining keys keep their order.
    """
    fields = {key: value for key, value in context.items() if value is not None}
    message = " | ".join([headline, *(f"{key}={value}" for key, value in fields.items())])
    logger.log(level, message, extra=fields)


def log_payment_operation(
    logger: logging.Logger,
    operation: str,
    *,
    payment_intent_id: str | None = None,
    order_id: str | None = None,
    booking_id: str | None = None,
    amount_cents: int | None = None,
    status: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a charge, refund or status change of a payment.

    Logged at ERROR when ``error`` is given, INFO otherwise.

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "charge", "refund")
        payment_intent_id: Provider payment intent ID if available
        order_id: Order ID if the payment belongs to an order
        booking_id: Booking ID if the payment belongs to a booking
        amount_cents: Amount in minor units if relevant
        status: Payment status
        error: Error message if operation failed
        **extra: Additional context fields
    """
    context = {
        "payment_intent_id": payment_intent_id,
        "order_id": order_id,
        "booking_id": booking_id,
        "amount_cents": amount_cents,
        "status": status,
        "error": error,
        **extra,
    }
    level = logging.ERROR if error else logging.INFO
    _log_structured(logger, level, f"Payment operation: {operation}", context)


# Webhook processing result -> log level
_WEBHOOK_LEVELS = {
    "error": logging.ERROR,
    "duplicate": logging.WARNING,
    "skipped": logging.WARNING,
}


def log_webhook_event(
    logger: logging.Logger,
    event_type: str,
    event_id: str,
    *,
    order_id: str | None = None,
    booking_id: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a received or processed provider webhook event.

    Args:
        logger: Logger instance
        event_type: Stripe event type (e.g., "payment_intent.succeeded")
        event_id: Stripe event ID
        order_id: Associated order ID if available
        booking_id: Associated booking ID if available
        result: Processing result (success, duplicate, skipped, error)
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context = {
        "result": result,
        "order_id": order_id,
        "booking_id": booking_id,
        "error": error,
        **extra,
    }
    level = _WEBHOOK_LEVELS.get(result or "", logging.INFO)
    _log_structured(logger, level, f"Webhook event: {event_type} ({event_id})", context)


def log_notification(
    logger: logging.Logger,
    kind: str,
    recipient: str,
    *,
    result: str,
    message_id: str | None = None,
    error: str | None = None,
) -> None:
    """Log the outcome of a notification delivery.

    Args:
        logger: Logger instance
        kind: Notification kind (e.g., "welcome", "booking_status")
        recipient: Destination email address
        result: sent, skipped or failed
        message_id: Transport message ID when sent
        error: Error message when delivery failed
    """
    level = logging.ERROR if result == "failed" else logging.INFO
    _log_structured(
        logger,
        level,
        f"Notification {kind} to {recipient}: {result}",
        {"message_id": message_id, "error": error},
    )
