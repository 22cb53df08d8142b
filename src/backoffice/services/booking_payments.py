"""Payments taken against bookings."""

import logging

from backoffice.models import (
    BackofficeError,
    Booking,
    BookingPayment,
    BookingPaymentCreate,
    BookingPaymentResponse,
    ErrorCode,
    PaymentStatus,
)
from backoffice.utils.ids import new_id

from .booking_service import BookingService
from .notifications import Notifier, PaymentReceiptNotification
from .payment_service import PaymentService, is_stale_provider_status

logger = logging.getLogger(__name__)


def _response(
    booking_id: str, payment: BookingPayment, client_secret: str | None = None
) -> BookingPaymentResponse:
    return BookingPaymentResponse(
        booking_id=booking_id,
        amount=payment.amount,
        currency=payment.currency,
        payment_method=payment.payment_method,
        status=payment.status,
        payment_intent_id=payment.payment_intent_id,
        client_secret=client_secret,
        processed_at=payment.processed_at,
        refunded_at=payment.refunded_at,
    )


class BookingPaymentService:
    """Create, inspect, update and refund booking payments."""

    def __init__(
        self,
        bookings: BookingService,
        payments: PaymentService,
        notifier: Notifier,
    ) -> None:
        self.bookings = bookings
        self.payments = payments
        self.notifier = notifier

    def _booking_with_payment(self, booking_id: str) -> tuple[Booking, BookingPayment]:
        booking = self.bookings.get_booking(booking_id)
        if booking.payment is None:
            raise BackofficeError(ErrorCode.PAYMENT_NOT_FOUND, details={"booking_id": booking_id})
        return booking, booking.payment

    def process_payment(self, booking_id: str, data: BookingPaymentCreate) -> BookingPaymentResponse:
        """Start a card payment for a booking.

        The payment is stored as pending (or paid when confirmed immediately)
        and the client secret is returned so the browser can finish it.

        Raises:
            BackofficeError: BOOKING_NOT_FOUND, PAYMENT_METHOD_UNSUPPORTED,
                PAYMENT_FAILED
        """
        booking = self.bookings.get_booking(booking_id)
        result = self.payments.charge(
            amount_cents=data.amount,
            payment_method=data.payment_method,
            reference={"booking_id": booking_id},
            # One key per attempt: a retry after a decline sends new parameters
            idempotency_key=f"booking_{booking_id}_{new_id('PAY')}",
            receipt_email=booking.customer.email,
            description=f"Booking #{booking_id}",
            payment_method_id=data.payment_method_id,
        )
        if result.failed:
            raise BackofficeError(
                ErrorCode.PAYMENT_FAILED,
                details={"booking_id": booking_id},
                message=result.error_message,
            )

        payment = BookingPayment(
            amount=data.amount,
            currency=self.payments.currency,
            payment_method=data.payment_method,
            payment_intent_id=result.payment_intent_id,
            status=result.status,
            processed_at=self.bookings.clock(),
        )
        updated = self.bookings.save_payment(booking_id, payment)
        self.notifier.send(PaymentReceiptNotification(updated, payment, "created"))
        return _response(updated.booking_id, payment, result.client_secret)

    def get_payment(self, booking_id: str) -> BookingPaymentResponse:
        _, payment = self._booking_with_payment(booking_id)
        return _response(booking_id, payment)

    def update_payment_status(self, booking_id: str, status: PaymentStatus) -> BookingPaymentResponse:
        """Set the payment status of a booking administratively."""
        _, current = self._booking_with_payment(booking_id)
        payment = current.model_copy(update={"status": status})
        updated = self.bookings.save_payment(booking_id, payment)
        self.notifier.send(PaymentReceiptNotification(updated, payment, "updated"))
        return _response(updated.booking_id, payment)

    def refund_payment(self, booking_id: str) -> BookingPaymentResponse:
        """Refund the full payment of a booking.

        Raises:
            BackofficeError: PAYMENT_NOT_FOUND, PAYMENT_FAILED
        """
        _, current = self._booking_with_payment(booking_id)
        if current.status == PaymentStatus.REFUNDED:
            raise BackofficeError(
                ErrorCode.PAYMENT_FAILED,
                details={"booking_id": booking_id},
                message="Payment has already been refunded",
            )
        if not current.payment_intent_id:
            raise BackofficeError(
                ErrorCode.PAYMENT_FAILED,
                details={"booking_id": booking_id},
                message="Payment has no provider reference to refund",
            )

        self.payments.refund(current.payment_intent_id)
        payment = current.model_copy(
            update={"status": PaymentStatus.REFUNDED, "refunded_at": self.bookings.clock()}
        )
        updated = self.bookings.save_payment(booking_id, payment)
        self.notifier.send(PaymentReceiptNotification(updated, payment, "refunded"))
        return _response(updated.booking_id, payment)

    def record_provider_status(
        self, booking_id: str, status: PaymentStatus, payment_intent_id: str | None
    ) -> bool:
        """Apply a payment status reported by the provider webhook.

        Events for another payment intent than the stored one, and any event
        for a refunded payment, are acknowledged but not applied.

        Returns:
            False if the booking or its payment does not exist
        """
        try:
            _, current = self._booking_with_payment(booking_id)
        except BackofficeError:
            logger.warning("Webhook referenced unknown booking payment: %s", booking_id)
            return False
        if is_stale_provider_status(current.status, current.payment_intent_id, payment_intent_id):
            logger.warning(
                "Ignoring %s for booking %s: intent %s, stored %s (%s)",
                status.value,
                booking_id,
                payment_intent_id,
                current.payment_intent_id,
                current.status.value,
            )
            return True
        update: dict[str, object] = {"status": status}
        if payment_intent_id:
            update["payment_intent_id"] = payment_intent_id
        if status == PaymentStatus.PAID:
            update["processed_at"] = self.bookings.clock()
        self.bookings.save_payment(booking_id, current.model_copy(update=update))
        return True
