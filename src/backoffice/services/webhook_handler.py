"""Webhook handler for processing Stripe events.

Keeps the business logic for payment provider events apart from HTTP
routing so it can be tested without a request.
"""

import datetime as dt
import hashlib
import json
import logging
from typing import Any

from backoffice.models import PaymentStatus
from backoffice.utils.logging import log_webhook_event
from backoffice.utils.timestamps import to_storage

from .booking_payments import BookingPaymentService
from .dynamodb import DynamoDBService
from .order_service import OrderService

logger = logging.getLogger(__name__)

# Stripe event type -> payment status it reports
PAYMENT_INTENT_EVENTS = {
    "payment_intent.succeeded": PaymentStatus.PAID,
    "payment_intent.payment_failed": PaymentStatus.FAILED,
}


def _ack(
    event_id: str, event_type: str, result: str, message: str | None = None
) -> dict[str, Any]:
    return {
        "received": True,
        "event_id": event_id,
        "event_type": event_type,
        "processing_result": result,
        "message": message,
    }


class WebhookHandler:
    """Handler for processing Stripe webhook events.

    Processed events are recorded by ``event_id`` so a redelivered event
    is acknowledged without being applied twice.
    """

    WEBHOOK_EVENTS_TABLE = "payment-webhook-events"

    def __init__(
        self,
        db: DynamoDBService,
        orders: OrderService,
        booking_payments: BookingPaymentService,
    ) -> None:
        self.db = db
        self.orders = orders
        self.booking_payments = booking_payments

    def is_event_already_processed(self, event_id: str) -> bool:
        return self.db.get_item(self.WEBHOOK_EVENTS_TABLE, {"event_id": event_id}) is not None

    def log_event(
        self,
        event: dict[str, Any],
        processing_result: str,
        *,
        order_id: str | None = None,
        booking_id: str | None = None,
        error_message: str | None = None,
    ) -> bool:
        """Record a webhook event for idempotency and audit trail.

        Returns:
            False if another delivery of the same event was recorded first
        """
        item = {
            "event_id": event["id"],
            "event_type": event.get("type", ""),
            "processed_at": to_storage(dt.datetime.now(dt.UTC)),
            "payload_hash": hashlib.sha256(
                json.dumps(event, sort_keys=True, default=str).encode()
            ).hexdigest(),
            "processing_result": processing_result,
            "order_id": order_id,
            "booking_id": booking_id,
            "error_message": error_message,
        }
        return self.db.put_item(
            self.WEBHOOK_EVENTS_TABLE, item, condition_expression="attribute_not_exists(event_id)"
        )

    def handle(self, event: dict[str, Any]) -> dict[str, Any]:
        """Apply a verified event.

        Args:
            event: Parsed Stripe event

        Returns:
            Acknowledgement body with the processing result (success,
            duplicate, skipped or error)
        """
        event_id = event.get("id", "")
        event_type = event.get("type", "")

        if event_id and self.is_event_already_processed(event_id):
            log_webhook_event(logger, event_type, event_id, result="duplicate")
            return _ack(event_id, event_type, "duplicate", "Event already processed")

        status = PAYMENT_INTENT_EVENTS.get(event_type)
        if status is None:
            log_webhook_event(logger, event_type, event_id, result="skipped")
            return _ack(event_id, event_type, "skipped", f"Event type '{event_type}' not handled")

        intent = event.get("data", {}).get("object", {})
        metadata = intent.get("metadata") or {}
        order_id = metadata.get("order_id")
        booking_id = metadata.get("booking_id")
        payment_intent_id = intent.get("id")

        if order_id:
            applied = self.orders.record_provider_status(order_id, status, payment_intent_id)
        elif booking_id:
            applied = self.booking_payments.record_provider_status(
                booking_id, status, payment_intent_id
            )
        else:
            applied = False

        if applied:
            result, error = "success", None
        elif order_id or booking_id:
            result, error = "error", "Referenced order or booking not found"
        else:
            result, error = "skipped", "No order_id or booking_id in metadata"

        if event_id and not self.log_event(
            event, result, order_id=order_id, booking_id=booking_id, error_message=error
        ):
            result = "duplicate"

        log_webhook_event(
            logger,
            event_type,
            event_id,
            order_id=order_id,
            booking_id=booking_id,
            result=result,
            error=error,
        )
        return _ack(event_id, event_type, result, error)
