"""Payment endpoints for bookings.

Only card payments are processed. The client secret returned on creation
lets the browser complete any additional authentication with Stripe.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from backoffice.models import (
    BookingPaymentCreate,
    BookingPaymentResponse,
    BookingPaymentStatusUpdate,
    ErrorResponse,
)
from backoffice.services.booking_payments import BookingPaymentService
from backoffice_api.dependencies import get_booking_payment_service

router = APIRouter(tags=["payments"])

NOT_FOUND = {404: {"description": "Booking or payment not found", "model": ErrorResponse}}


@router.post(
    "/bookings/{booking_id}/payment",
    summary="Pay for a booking",
    description="""
Create a card payment for a booking.

**Notes:**
- `amount` is in minor units (cents)
- Only `credit-card` is supported
- With `payment_method_id` the payment is confirmed immediately
""",
    response_model=BookingPaymentResponse,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Unsupported method or payment failed", "model": ErrorResponse},
        **NOT_FOUND,
    },
)
async def process_payment(
    booking_id: str,
    body: BookingPaymentCreate,
    service: BookingPaymentService = Depends(get_booking_payment_service),
) -> BookingPaymentResponse:
    return service.process_payment(booking_id, body)


@router.get(
    "/bookings/{booking_id}/payment",
    summary="Get booking payment",
    response_model=BookingPaymentResponse,
    responses=NOT_FOUND,
)
async def get_payment(
    booking_id: str,
    service: BookingPaymentService = Depends(get_booking_payment_service),
) -> BookingPaymentResponse:
    return service.get_payment(booking_id)


@router.patch(
    "/bookings/{booking_id}/payment",
    summary="Update booking payment status",
    response_model=BookingPaymentResponse,
    responses=NOT_FOUND,
)
async def update_payment_status(
    booking_id: str,
    body: BookingPaymentStatusUpdate,
    service: BookingPaymentService = Depends(get_booking_payment_service),
) -> BookingPaymentResponse:
    return service.update_payment_status(booking_id, body.status)


@router.post(
    "/bookings/{booking_id}/payment/refund",
    summary="Refund booking payment",
    description="Refunds the full amount through the payment provider.",
    response_model=BookingPaymentResponse,
    responses={
        400: {"description": "Payment cannot be refunded", "model": ErrorResponse},
        **NOT_FOUND,
    },
)
async def refund_payment(
    booking_id: str,
    service: BookingPaymentService = Depends(get_booking_payment_service),
) -> BookingPaymentResponse:
    return service.refund_payment(booking_id)
