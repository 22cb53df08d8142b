"""Booking models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from backoffice.utils.timestamps import ensure_utc

from .enums import BookingStatus, PaymentMethod, PaymentStatus


class BookingCustomer(BaseModel):
    """Contact details of the customer holding a booking."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    phone: str = Field(..., min_length=3, max_length=30, examples=["+1 555 0100"])

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]


class BookingPayment(BaseModel):
    """Payment attached to a booking.

    Amounts are stored in minor currency units (cents).
    """

    amount: int = Field(..., ge=0, description="Amount in minor units")
    currency: str = Field(default="usd")
    payment_method: PaymentMethod
    payment_intent_id: str | None = Field(default=None, examples=["pi_3ABC123DEF456"])
    status: PaymentStatus = PaymentStatus.PENDING
    processed_at: datetime | None = None
    refunded_at: datetime | None = None


class Booking(BaseModel):
    """A scheduled appointment tied to a customer email."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "booking_id": "BK-1A2B3C4D5E6F",
                    "customer": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "phone": "+1 555 0100",
                    },
                    "scheduled_at": "2030-01-01T10:00:00Z",
                    "notes": "First visit",
                    "status": "pending",
                    "payment": None,
                    "created_at": "2029-12-01T09:00:00Z",
                    "updated_at": "2029-12-01T09:00:00Z",
                }
            ]
        }
    )

    booking_id: str = Field(..., description="Unique booking ID")
    customer: BookingCustomer
    scheduled_at: datetime = Field(..., description="Scheduled date and time (UTC)")
    notes: str | None = Field(default=None, max_length=1000)
    status: BookingStatus = BookingStatus.PENDING
    payment: BookingPayment | None = None
    created_at: datetime
    updated_at: datetime


class BookingCreate(BaseModel):
    """Data required to create a booking."""

    customer: BookingCustomer
    scheduled_at: datetime = Field(..., examples=["2030-01-01T10:00:00Z"])
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("scheduled_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class BookingCustomerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=3, max_length=30)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class BookingUpdate(BaseModel):
    """Partial booking update. Only include fields that should change."""

    customer: BookingCustomerUpdate | None = None
    scheduled_at: datetime | None = None
    notes: str | None = Field(default=None, max_length=1000)
    status: BookingStatus | None = None

    @field_validator("scheduled_at")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value else value


class BookingStatusCount(BaseModel):
    status: BookingStatus
    count: int = Field(..., ge=0)


class BookingStats(BaseModel):
    """Number of bookings per status, most frequent first."""

    total: int = Field(..., ge=0)
    stats: list[BookingStatusCount]
