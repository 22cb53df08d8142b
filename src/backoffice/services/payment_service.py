"""Payment service for charging orders and bookings.

Wraps the Stripe service with the back-office rules: only credit-card
payments are processed online, and provider errors become failed results
carrying a message that is safe to show to the customer.
"""

import logging

from backoffice.models import (
    BackofficeError,
    ErrorCode,
    PaymentMethod,
    PaymentResult,
    PaymentStatus,
    RefundResult,
)
from backoffice.models.errors import get_user_friendly_stripe_message
from backoffice.utils.logging import log_payment_operation

from .stripe_service import StripeNotConfiguredError, StripeService, StripeServiceError

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({PaymentMethod.CREDIT_CARD})


def is_stale_provider_status(
    current_status: PaymentStatus,
    stored_intent_id: str | None,
    event_intent_id: str | None,
) -> bool:
    """Whether a webhook status must not overwrite the stored payment.

    Refunded payments are final, and an event for an intent other than the
    stored one belongs to an earlier attempt.
    """
    if current_status == PaymentStatus.REFUNDED:
        return True
    return bool(stored_intent_id and event_intent_id and stored_intent_id != event_intent_id)


class PaymentService:
    """Service for processing payments through the payment provider."""

    def __init__(self, stripe_service: StripeService, currency: str = "usd") -> None:
        """Initialize payment service.

        Args:
            stripe_service: Provider client
            currency: Default ISO currency code
        """
        self.stripe = stripe_service
        self.currency = currency

    def charge(
        self,
        *,
        amount_cents: int,
        payment_method: PaymentMethod,
        reference: dict[str, str],
        idempotency_key: str,
        receipt_email: str | None = None,
        description: str | None = None,
        payment_method_id: str | None = None,
    ) -> PaymentResult:
        """Charge a customer.

        Args:
            amount_cents: Amount in minor units
            payment_method: Checkout payment method
            reference: Metadata identifying the order or booking
            idempotency_key: Provider idempotency key
            receipt_email: Customer email for the receipt
            description: Payment description
            payment_method_id: Optional provider payment method to confirm with

        Returns:
            PaymentResult; ``status`` is FAILED when the provider declined

        Raises:
            BackofficeError: If the method is not supported or the provider
                is not configured.
        """
        if payment_method not in SUPPORTED_METHODS:
            raise BackofficeError(
                ErrorCode.PAYMENT_METHOD_UNSUPPORTED,
                details={"payment_method": payment_method.value},
            )

        try:
            intent = self.stripe.create_payment_intent(
                amount_cents=amount_cents,
                currency=self.currency,
                metadata=reference,
                idempotency_key=idempotency_key,
                receipt_email=receipt_email,
                description=description,
                payment_method=payment_method_id,
            )
        except StripeNotConfiguredError as e:
            logger.error("Payment provider not configured: %s", e)
            raise BackofficeError(ErrorCode.STRIPE_API_ERROR) from e
        except StripeServiceError as e:
            log_payment_operation(
                logger,
                "charge",
                amount_cents=amount_cents,
                status="failed",
                error=str(e),
                **reference,
            )
            return PaymentResult(
                status=PaymentStatus.FAILED,
                error_message=get_user_friendly_stripe_message(e.stripe_error_code),
            )

        status = PaymentStatus.PAID if intent["status"] == "succeeded" else PaymentStatus.PENDING
        log_payment_operation(
            logger,
            "charge",
            payment_intent_id=intent["payment_intent_id"],
            amount_cents=amount_cents,
            status=status.value,
            **reference,
        )
        return PaymentResult(
            status=status,
            payment_intent_id=intent["payment_intent_id"],
            client_secret=intent["client_secret"],
        )

    def refund(self, payment_intent_id: str, amount_cents: int | None = None) -> RefundResult:
        """Refund a captured payment.

        Raises:
            BackofficeError: PAYMENT_FAILED when the provider rejects the refund.
        """
        try:
            refund = self.stripe.create_refund(
                payment_intent_id=payment_intent_id,
                amount_cents=amount_cents,
            )
        except StripeNotConfiguredError as e:
            raise BackofficeError(ErrorCode.STRIPE_API_ERROR) from e
        except StripeServiceError as e:
            log_payment_operation(
                logger,
                "refund",
                payment_intent_id=payment_intent_id,
                status="failed",
                error=str(e),
            )
            raise BackofficeError(
                ErrorCode.PAYMENT_FAILED,
                message=get_user_friendly_stripe_message(
                    e.stripe_error_code, "Refund could not be processed."
                ),
            ) from e

        log_payment_operation(
            logger,
            "refund",
            payment_intent_id=payment_intent_id,
            amount_cents=refund["amount"],
            status=refund["status"],
        )
        return RefundResult(**refund)
