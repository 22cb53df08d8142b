"""Payment request and result models shared by orders and bookings."""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import PaymentMethod, PaymentStatus


class PaymentResult(BaseModel):
    """Result of a charge attempt.

    ``client_secret`` is returned to the browser so it can complete card
    confirmation; ``error_message`` is safe to show to the customer.
    """

    status: PaymentStatus
    payment_intent_id: str | None = None
    client_secret: str | None = None
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == PaymentStatus.FAILED


class BookingPaymentCreate(BaseModel):
    """Data required to take a payment for a booking."""

    amount: int = Field(..., gt=0, description="Amount in minor units")
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    payment_method_id: str | None = Field(default=None, examples=["pm_card_visa"])


class BookingPaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class BookingPaymentResponse(BaseModel):
    """Booking payment as returned to the client."""

    booking_id: str
    amount: int
    currency: str
    payment_method: PaymentMethod
    status: PaymentStatus
    payment_intent_id: str | None = None
    client_secret: str | None = None
    processed_at: datetime | None = None
    refunded_at: datetime | None = None


class RefundResult(BaseModel):
    refund_id: str
    status: str
    amount: int
