"""Booking rules: the conflict window and the status state machine.

Pure functions with no I/O, used by the booking service and tested directly.
A "slot" is the scheduled time of one active (non-cancelled) booking of a
customer, keyed by booking ID.
"""

import datetime as dt
from collections.abc import Mapping

from backoffice.models import BackofficeError, BookingStatus, ErrorCode
from backoffice.utils.timestamps import ensure_utc, format_for_humans

CONFLICT_WINDOW = dt.timedelta(minutes=60)

TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED})


def is_within_window(first: dt.datetime, second: dt.datetime) -> bool:
    """True if two times are 60 minutes or less apart."""
    return abs(ensure_utc(first) - ensure_utc(second)) <= CONFLICT_WINDOW


def find_conflicting_slot(
    scheduled_at: dt.datetime,
    slots: Mapping[str, dt.datetime],
    exclude_booking_id: str | None = None,
) -> dt.datetime | None:
    """Return the earliest slot within the window of ``scheduled_at``.

    Args:
        scheduled_at: Candidate time
        slots: Active bookings of the same customer, booking ID to time
        exclude_booking_id: Booking being rescheduled, ignored in the check

    Returns:
        Time of the conflicting booking, or None
    """
    conflicts = [
        slot
        for booking_id, slot in slots.items()
        if booking_id != exclude_booking_id and is_within_window(slot, scheduled_at)
    ]
    return min(conflicts) if conflicts else None


def conflict_error(conflicting_at: dt.datetime) -> BackofficeError:
    when = format_for_humans(conflicting_at)
    return BackofficeError(
        ErrorCode.BOOKING_CONFLICT,
        details={"conflicting_booking_at": when},
        message=(
            "You already have a booking within one hour of the requested time; "
            f"it conflicts with an existing booking at {when}"
        ),
    )


def can_transition(current: BookingStatus, new: BookingStatus) -> bool:
    """Whether a booking may move from ``current`` to ``new``.

    Cancelled is terminal; re-cancelling is allowed as a no-op. Every other
    move is an administrative decision and is allowed.
    """
    if current in TERMINAL_STATUSES:
        return new == current
    return True


def validate_status_transition(current: BookingStatus, new: BookingStatus) -> None:
    """Raise INVALID_STATUS_TRANSITION if the move is not allowed."""
    if not can_transition(current, new):
        raise BackofficeError(
            ErrorCode.INVALID_STATUS_TRANSITION,
            details={"current_status": current.value, "requested_status": new.value},
            message=f"Cannot change a {current.value} booking to {new.value}",
        )
