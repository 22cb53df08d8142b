"""Booking endpoints.

Provides REST endpoints for:
- Creating bookings (per-customer one hour conflict guard)
- Listing, filtering and reading bookings
- Updating details, rescheduling and changing status
- Cancelling bookings
- Booking statistics and upcoming bookings

Static paths (/stats, /upcoming, /status/{status}) are declared before
/bookings/{booking_id} so they are not captured as an ID.
"""

from fastapi import APIRouter, Depends, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from backoffice.models import (
    Booking,
    BookingCreate,
    BookingStats,
    BookingStatus,
    BookingUpdate,
    ErrorResponse,
)
from backoffice.services.booking_service import BookingService
from backoffice_api.dependencies import get_booking_service
from backoffice_api.models import BookingStatusUpdate

router = APIRouter(tags=["bookings"])

NOT_FOUND = {404: {"description": "Booking not found", "model": ErrorResponse}}


@router.post(
    "/bookings",
    summary="Create booking",
    description="""
Create a new booking.

**Notes:**
- `scheduled_at` must be in the future
- A customer (by email) cannot hold two active bookings within one hour
  of each other; the error message names the conflicting time
- Sends a confirmation email to the customer and an alert to the admin
""",
    response_model=Booking,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid data or booking conflict", "model": ErrorResponse},
    },
)
async def create_booking(
    body: BookingCreate,
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.create_booking(body)


@router.get(
    "/bookings",
    summary="List bookings",
    description="All bookings, newest first.",
    response_model=list[Booking],
)
async def list_bookings(service: BookingService = Depends(get_booking_service)) -> list[Booking]:
    return service.list_bookings()


@router.get(
    "/bookings/stats",
    summary="Booking statistics",
    description="Number of bookings per status, most common first, plus the total.",
    response_model=BookingStats,
)
async def booking_stats(service: BookingService = Depends(get_booking_service)) -> BookingStats:
    return service.booking_stats()


@router.get(
    "/bookings/upcoming",
    summary="Upcoming bookings",
    description="Active bookings scheduled in the next 7 days, soonest first.",
    response_model=list[Booking],
)
async def upcoming_bookings(
    service: BookingService = Depends(get_booking_service),
) -> list[Booking]:
    return service.upcoming_bookings()


@router.get(
    "/bookings/status/{status}",
    summary="List bookings by status",
    response_model=list[Booking],
)
async def bookings_by_status(
    status: BookingStatus,
    service: BookingService = Depends(get_booking_service),
) -> list[Booking]:
    return service.bookings_by_status(status)


@router.get(
    "/bookings/{booking_id}",
    summary="Get booking",
    response_model=Booking,
    responses=NOT_FOUND,
)
async def get_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.get_booking(booking_id)


@router.patch(
    "/bookings/{booking_id}",
    summary="Update booking",
    description="""
Update customer details, notes, schedule or status.

**Notes:**
- Rescheduling runs the conflict check, ignoring the booking itself
- Cancelled bookings only accept note changes
- A changed customer email or status sends an update email
""",
    response_model=Booking,
    responses={
        400: {"description": "Invalid change or booking conflict", "model": ErrorResponse},
        **NOT_FOUND,
    },
)
async def update_booking(
    booking_id: str,
    body: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.update_booking(booking_id, body)


@router.patch(
    "/bookings/{booking_id}/status",
    summary="Change booking status",
    description="Cancelled is terminal: a cancelled booking cannot be reopened.",
    response_model=Booking,
    responses={
        400: {"description": "Status change not allowed", "model": ErrorResponse},
        **NOT_FOUND,
    },
)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.update_status(booking_id, body.status)


@router.delete(
    "/bookings/{booking_id}",
    summary="Delete booking",
    description="Removes the booking and emails the customer a cancellation notice.",
    status_code=HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> Response:
    service.delete_booking(booking_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
