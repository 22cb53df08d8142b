"""API request/response models.

Domain models live in ``backoffice.models``; this package only holds
shapes specific to the HTTP layer.
"""

from .common import (
    BookingStatusUpdate,
    ContactStatusUpdate,
    HealthResponse,
    WebhookResponse,
)

__all__ = [
    "BookingStatusUpdate",
    "ContactStatusUpdate",
    "HealthResponse",
    "WebhookResponse",
]
