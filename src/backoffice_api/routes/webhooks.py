"""Webhook endpoint for payment provider events.

This endpoint does NOT require a bearer token: payloads are signed by
Stripe and verified with the webhook secret.
"""

from fastapi import APIRouter, Depends, Request

from backoffice.models import BackofficeError, ErrorCode, ErrorResponse
from backoffice.services.stripe_service import (
    StripeNotConfiguredError,
    StripeService,
    StripeServiceError,
)
from backoffice.services.webhook_handler import WebhookHandler
from backoffice.utils.logging import get_logger, log_webhook_event
from backoffice_api.dependencies import get_stripe_service, get_webhook_handler
from backoffice_api.models import WebhookResponse

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/webhook",
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- payment_intent.succeeded: marks the referenced order or booking payment paid
- payment_intent.payment_failed: marks it failed

Other event types are acknowledged and skipped.

**Idempotent**: a redelivered event (same id) returns 200 with 'duplicate'.
""",
    response_model=WebhookResponse,
    responses={
        400: {"description": "Invalid signature or missing header", "model": ErrorResponse},
        500: {"description": "Webhook secret not configured", "model": ErrorResponse},
    },
)
async def handle_stripe_webhook(
    request: Request,
    stripe_service: StripeService = Depends(get_stripe_service),
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookResponse:
    signature = request.headers.get("Stripe-Signature")
    if not signature:
        logger.warning("Webhook request missing Stripe-Signature header")
        raise BackofficeError(
            ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": "Missing Stripe-Signature header"},
        )

    payload = await request.body()
    try:
        event = stripe_service.verify_webhook_signature(payload, signature)
    except StripeNotConfiguredError as e:
        logger.error("Webhook received but no secret is configured: %s", e)
        raise BackofficeError(ErrorCode.WEBHOOK_NOT_CONFIGURED) from e
    except StripeServiceError as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise BackofficeError(
            ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": "Invalid webhook signature"},
        ) from e

    log_webhook_event(logger, event.get("type", ""), event.get("id", ""), result="received")
    return WebhookResponse(**handler.handle(event))
