"""Shared API request/response models."""

from pydantic import BaseModel, Field

from backoffice.models import BookingStatus, ContactStatus


class BookingStatusUpdate(BaseModel):
    """Body of ``PATCH /bookings/{id}/status``."""

    status: BookingStatus = Field(..., examples=["confirmed"])


class ContactStatusUpdate(BaseModel):
    status: ContactStatus = Field(..., examples=["resolved"])


class HealthResponse(BaseModel):
    status: str = Field(..., examples=["healthy"])
    timestamp: str
    environment: str


class WebhookResponse(BaseModel):
    """Acknowledgement returned to the payment provider."""

    received: bool
    event_id: str | None = None
    event_type: str | None = None
    processing_result: str = Field(..., description="success, duplicate, skipped or error")
    message: str | None = None
