"""Stripe payment service for payment intents, refunds and webhooks.

Provides integration with Stripe using the v8+ StripeClient pattern.
API keys come from settings, falling back to SSM Parameter Store.
"""

import json
import logging
from typing import Any

import stripe
from stripe import StripeClient

from backoffice.config import Settings

from .ssm_service import SSMService, SSMServiceError

logger = logging.getLogger(__name__)


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class StripeNotConfiguredError(StripeServiceError):
    """Raised when a required Stripe secret is unavailable."""


class StripeSignatureError(StripeServiceError):
    """Raised when a webhook signature does not verify."""


class StripeService:
    """Service for Stripe payment operations.

    Handles:
    - Payment intent creation
    - Webhook signature validation
    - Refund processing

    Usage:
        stripe_svc = StripeService(settings, SSMService())
        intent = stripe_svc.create_payment_intent(
            amount_cents=4999,
            currency="usd",
            metadata={"order_id": "ORD-1A2B3C4D5E6F"},
            idempotency_key="order_ORD-1A2B3C4D5E6F",
        )
    """

    def __init__(self, settings: Settings, ssm: SSMService | None = None) -> None:
        self._settings = settings
        self._ssm = ssm
        self._client: StripeClient | None = None
        self._webhook_secret: str | None = settings.stripe_webhook_secret

    def _parameter_path(self, name: str) -> str:
        return f"/backoffice/{self._settings.environment}/stripe/{name}"

    def _from_ssm(self, name: str) -> str:
        if self._ssm is None:
            raise StripeNotConfiguredError(f"Stripe {name} is not configured")
        try:
            return self._ssm.get_parameter(self._parameter_path(name))
        except SSMServiceError as e:
            raise StripeNotConfiguredError(f"Stripe {name} is not configured: {e}") from e

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            StripeNotConfiguredError: If the secret key cannot be found.
        """
        if self._client is None:
            secret_key = self._settings.stripe_secret_key or self._from_ssm("secret_key")
            self._client = StripeClient(secret_key)
            logger.info(
                "Stripe client initialized for environment: %s", self._settings.environment
            )
        return self._client

    def _get_webhook_secret(self) -> str:
        if self._webhook_secret is None:
            self._webhook_secret = self._from_ssm("webhook_secret")
        return self._webhook_secret

    def create_payment_intent(
        self,
        *,
        amount_cents: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
        receipt_email: str | None = None,
        description: str | None = None,
        payment_method: str | None = None,
    ) -> dict[str, Any]:
        """Create a Stripe PaymentIntent.

        When ``payment_method`` is given the intent is confirmed immediately,
        otherwise the returned client secret lets the browser confirm it.

        Args:
            amount_cents: Amount in minor currency units.
            currency: ISO currency code (lower case).
            metadata: Order or booking reference, echoed back in webhooks.
            idempotency_key: Key preventing duplicate intents on retry.
            receipt_email: Optional customer email for the Stripe receipt.
            description: Optional description shown in the dashboard.
            payment_method: Optional payment method ID to confirm with.

        Returns:
            Dict with ``payment_intent_id``, ``client_secret`` and ``status``.

        Raises:
            StripeServiceError: If the intent cannot be created.
        """
        client = self._get_client()

        params: dict[str, Any] = {
            "amount": amount_cents,
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        if description:
            params["description"] = description
        if payment_method:
            params["payment_method"] = payment_method
            params["confirm"] = True

        try:
            logger.info(
                "Creating Stripe payment intent, amount %d %s", amount_cents, currency
            )
            intent = client.payment_intents.create(
                params=params,
                options={"idempotency_key": idempotency_key},
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error(
                "Stripe payment intent creation failed: %s (code: %s)", str(e), error_code
            )
            raise StripeServiceError(
                f"Failed to create payment intent: {e}",
                stripe_error_code=error_code,
            ) from e

        logger.info("Payment intent created: %s (%s)", intent.id, intent.status)
        return {
            "payment_intent_id": intent.id,
            "client_secret": intent.client_secret,
            "status": intent.status,
        }

    def verify_webhook_signature(self, payload: bytes, signature: str) -> dict[str, Any]:
        """Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            Parsed Stripe event dictionary.

        Raises:
            StripeNotConfiguredError: If no webhook secret is available.
            StripeSignatureError: If the signature is invalid.
        """
        webhook_secret = self._get_webhook_secret()

        try:
            stripe.Webhook.construct_event(payload, signature, webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise StripeSignatureError("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", str(e))
            raise StripeSignatureError("Invalid webhook payload") from e

        # Verified, so the payload is the event JSON Stripe sent
        event: dict[str, Any] = json.loads(payload)
        logger.info("Webhook signature verified for event: %s", event.get("id"))
        return event

    def create_refund(
        self,
        *,
        payment_intent_id: str,
        amount_cents: int | None = None,
        reason: str | None = None,
    ) -> dict[str, Any]:
        """Create a refund for a payment.

        Args:
            payment_intent_id: Stripe PaymentIntent ID (pi_xxx).
            amount_cents: Refund amount in cents. If None, full refund.
            reason: Reason for refund (for records).

        Returns:
            Dict with ``refund_id``, ``amount`` and ``status``.

        Raises:
            StripeServiceError: If refund creation fails.
        """
        client = self._get_client()

        params: dict[str, Any] = {"payment_intent": payment_intent_id}
        if amount_cents is not None:
            params["amount"] = amount_cents
        if reason:
            params["metadata"] = {"reason": reason}

        try:
            logger.info(
                "Creating refund for PaymentIntent %s, amount %s cents",
                payment_intent_id,
                amount_cents or "full",
            )
            refund = client.refunds.create(params=params)
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error("Stripe refund creation failed: %s (code: %s)", str(e), error_code)
            raise StripeServiceError(
                f"Failed to create refund: {e}",
                stripe_error_code=error_code,
            ) from e

        logger.info("Refund created: %s for PaymentIntent %s", refund.id, payment_intent_id)
        return {
            "refund_id": refund.id,
            "amount": refund.amount,
            "status": refund.status,
        }
