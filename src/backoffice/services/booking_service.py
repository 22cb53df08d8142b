"""Booking service: creation, rescheduling and status changes.

Conflict checks read the customer's guard row, which holds the times of all
their active bookings. The guard row is rewritten in the same DynamoDB
transaction as the booking, conditioned on the version that was read, so two
concurrent writers for one email cannot both pass the check.
"""

import datetime as dt
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from backoffice.models import (
    BackofficeError,
    Booking,
    BookingCreate,
    BookingCustomer,
    BookingPayment,
    BookingStats,
    BookingStatus,
    BookingStatusCount,
    BookingUpdate,
    ErrorCode,
)
from backoffice.utils.ids import new_id
from backoffice.utils.timestamps import (
    from_storage,
    optional_from_storage,
    to_storage,
    utc_now,
)

from .booking_rules import (
    CONFLICT_WINDOW,
    TERMINAL_STATUSES,
    conflict_error,
    find_conflicting_slot,
    validate_status_transition,
)
from .dynamodb import DynamoDBService, serialize_item, strip_none
from .notifications import (
    AdminAlertNotification,
    BookingConfirmationNotification,
    BookingStatusNotification,
    Notifier,
)

logger = logging.getLogger(__name__)

MAX_GUARD_ATTEMPTS = 3
UPCOMING_DAYS = 7
DEFAULT_UPDATE_MESSAGE = "Your booking details have been updated."


@dataclass
class _Guard:
    email: str
    version: int = 0
    slots: dict[str, dt.datetime] = field(default_factory=dict)


def payment_to_item(payment: BookingPayment) -> dict[str, Any]:
    return {
        "amount": payment.amount,
        "currency": payment.currency,
        "payment_method": payment.payment_method.value,
        "payment_intent_id": payment.payment_intent_id,
        "status": payment.status.value,
        "processed_at": _optional_to_storage(payment.processed_at),
        "refunded_at": _optional_to_storage(payment.refunded_at),
    }


def booking_to_item(booking: Booking) -> dict[str, Any]:
    """Convert a booking to its DynamoDB item."""
    payment = payment_to_item(booking.payment) if booking.payment else None
    return {
        "booking_id": booking.booking_id,
        "email": booking.customer.email,
        "customer": booking.customer.model_dump(),
        "scheduled_at": to_storage(booking.scheduled_at),
        "notes": booking.notes,
        "status": booking.status.value,
        "payment": payment,
        "created_at": to_storage(booking.created_at),
        "updated_at": to_storage(booking.updated_at),
    }


def item_to_booking(item: dict[str, Any]) -> Booking:
    """Convert a DynamoDB item to a Booking."""
    payment = None
    if item.get("payment"):
        data = item["payment"]
        payment = BookingPayment(
            amount=data["amount"],
            currency=data.get("currency", "usd"),
            payment_method=data["payment_method"],
            payment_intent_id=data.get("payment_intent_id"),
            status=data["status"],
            processed_at=optional_from_storage(data.get("processed_at")),
            refunded_at=optional_from_storage(data.get("refunded_at")),
        )
    return Booking(
        booking_id=item["booking_id"],
        customer=BookingCustomer(**item["customer"]),
        scheduled_at=from_storage(item["scheduled_at"]),
        notes=item.get("notes"),
        status=item["status"],
        payment=payment,
        created_at=from_storage(item["created_at"]),
        updated_at=from_storage(item["updated_at"]),
    )


def _optional_to_storage(value: dt.datetime | None) -> str | None:
    return to_storage(value) if value else None


class BookingService:
    """Service for managing bookings."""

    TABLE = "bookings"
    GUARDS_TABLE = "booking-guards"

    def __init__(
        self,
        db: DynamoDBService,
        notifier: Notifier,
        frontend_url: str = "",
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        """Initialize booking service.

        Args:
            db: DynamoDB service instance
            notifier: Delivers customer and admin emails
            frontend_url: Base URL used for links in emails
            clock: Returns the current UTC time
        """
        self.db = db
        self.notifier = notifier
        self.frontend_url = frontend_url.rstrip("/")
        self.clock = clock

    # Queries

    def get_booking(self, booking_id: str) -> Booking:
        """Get a booking by ID.

        Raises:
            BackofficeError: BOOKING_NOT_FOUND
        """
        item = self.db.get_item(self.TABLE, {"booking_id": booking_id})
        if not item:
            raise BackofficeError(
                ErrorCode.BOOKING_NOT_FOUND, details={"booking_id": booking_id}
            )
        return item_to_booking(item)

    def list_bookings(self) -> list[Booking]:
        """All bookings, newest first."""
        bookings = [item_to_booking(item) for item in self.db.scan(self.TABLE)]
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    def bookings_by_status(self, status: BookingStatus) -> list[Booking]:
        return [b for b in self.list_bookings() if b.status == status]

    def booking_stats(self) -> BookingStats:
        """Count bookings per status, most frequent first."""
        counts: dict[BookingStatus, int] = {}
        for booking in self.list_bookings():
            counts[booking.status] = counts.get(booking.status, 0) + 1
        stats = [
            BookingStatusCount(status=status, count=count)
            for status, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0].value))
        ]
        return BookingStats(total=sum(counts.values()), stats=stats)

    def upcoming_bookings(self, days: int = UPCOMING_DAYS) -> list[Booking]:
        """Non-cancelled bookings in the next ``days`` days, soonest first."""
        now = self.clock()
        until = now + dt.timedelta(days=days)
        upcoming = [
            b
            for b in self.list_bookings()
            if b.status not in TERMINAL_STATUSES and now <= b.scheduled_at <= until
        ]
        return sorted(upcoming, key=lambda b: b.scheduled_at)

    # Commands

    def create_booking(self, data: BookingCreate) -> Booking:
        """Create a booking after checking the customer's conflict window.

        Raises:
            BackofficeError: VALIDATION_FAILED for past times, BOOKING_CONFLICT
                when another active booking is within 60 minutes
        """
        self._require_future(data.scheduled_at)
        now = self.clock()
        booking = Booking(
            booking_id=new_id("BK"),
            customer=data.customer,
            scheduled_at=data.scheduled_at,
            notes=data.notes,
            status=BookingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self._write(booking, previous=None)
        logger.info("Booking created: %s for %s", booking.booking_id, booking.customer.email)

        self.notifier.send(BookingConfirmationNotification(booking, self._booking_url(booking)))
        self.notifier.alert_admin(AdminAlertNotification.new_booking(booking))
        return booking

    def update_booking(self, booking_id: str, data: BookingUpdate) -> Booking:
        """Update customer details, notes, time or status.

        A cancelled booking only accepts note changes. Rescheduling runs the
        conflict check with the booking itself excluded.

        Raises:
            BackofficeError: BOOKING_NOT_FOUND, BOOKING_NOT_MODIFIABLE,
                INVALID_STATUS_TRANSITION, VALIDATION_FAILED, BOOKING_CONFLICT
        """
        current = self.get_booking(booking_id)

        if current.status in TERMINAL_STATUSES:
            changes_other_than_notes = (
                data.customer is not None
                or data.scheduled_at is not None
                or (data.status is not None and data.status != current.status)
            )
            if changes_other_than_notes:
                raise BackofficeError(
                    ErrorCode.BOOKING_NOT_MODIFIABLE, details={"booking_id": booking_id}
                )

        if data.status is not None:
            validate_status_transition(current.status, data.status)
        if data.scheduled_at is not None and data.scheduled_at != current.scheduled_at:
            self._require_future(data.scheduled_at)

        customer = current.customer
        if data.customer is not None:
            customer = current.customer.model_copy(
                update=data.customer.model_dump(exclude_none=True)
            )

        updated = current.model_copy(
            update={
                "customer": customer,
                "scheduled_at": data.scheduled_at or current.scheduled_at,
                "notes": data.notes if data.notes is not None else current.notes,
                "status": data.status or current.status,
                "updated_at": self.clock(),
            }
        )
        self._write(updated, previous=current)
        logger.info("Booking updated: %s", booking_id)

        email_changed = updated.customer.email != current.customer.email
        status_changed = updated.status != current.status
        if email_changed or status_changed:
            self.notifier.send(
                BookingStatusNotification(
                    updated,
                    data.notes or DEFAULT_UPDATE_MESSAGE,
                    self._booking_url(updated),
                )
            )
        return updated

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        """Move a booking through the status state machine.

        Raises:
            BackofficeError: BOOKING_NOT_FOUND, INVALID_STATUS_TRANSITION
        """
        current = self.get_booking(booking_id)
        validate_status_transition(current.status, status)
        if status == current.status:
            return current

        updated = current.model_copy(update={"status": status, "updated_at": self.clock()})
        self._write(updated, previous=current)
        logger.info(
            "Booking %s status changed: %s -> %s", booking_id, current.status.value, status.value
        )

        self.notifier.send(BookingStatusNotification(updated, url=self._booking_url(updated)))
        return updated

    def delete_booking(self, booking_id: str) -> None:
        """Delete a booking and tell the customer it was cancelled.

        Raises:
            BackofficeError: BOOKING_NOT_FOUND
        """
        current = self.get_booking(booking_id)
        self._write(current, previous=current, delete=True)
        logger.info("Booking deleted: %s", booking_id)

        bookings_url = f"{self.frontend_url}/bookings" if self.frontend_url else None
        self.notifier.send(BookingStatusNotification.cancelled(current, bookings_url))

    def save_payment(self, booking_id: str, payment: BookingPayment) -> Booking:
        """Attach or replace the payment of a booking.

        Payments never move the booking in time, so the guard is not involved.
        Only the payment attribute is written; status, time and customer
        changes made concurrently are left as they are.

        Raises:
            BackofficeError: BOOKING_NOT_FOUND
        """
        attrs = self.db.update_item(
            self.TABLE,
            {"booking_id": booking_id},
            "SET #payment = :payment, updated_at = :updated_at",
            expression_attribute_values={
                ":payment": strip_none(payment_to_item(payment)),
                ":updated_at": to_storage(self.clock()),
            },
            expression_attribute_names={"#payment": "payment"},
            condition_expression="attribute_exists(booking_id)",
        )
        if attrs is None:
            raise BackofficeError(
                ErrorCode.BOOKING_NOT_FOUND, details={"booking_id": booking_id}
            )
        return item_to_booking(attrs)

    # Internals

    def _require_future(self, scheduled_at: dt.datetime) -> None:
        if scheduled_at <= self.clock():
            raise BackofficeError(
                ErrorCode.VALIDATION_FAILED,
                details={"scheduled_at": "Booking date must be in the future"},
                message="Booking date must be in the future",
            )

    def _booking_url(self, booking: Booking) -> str | None:
        if not self.frontend_url:
            return None
        return f"{self.frontend_url}/bookings/{booking.booking_id}"

    def _read_guard(self, email: str) -> _Guard:
        item = self.db.get_item(self.GUARDS_TABLE, {"email": email}, consistent_read=True)
        if not item:
            return _Guard(email=email)
        # Past slots can no longer conflict with a future booking
        horizon = self.clock() - CONFLICT_WINDOW
        slots = {
            booking_id: from_storage(value)
            for booking_id, value in item.get("slots", {}).items()
            if from_storage(value) >= horizon
        }
        return _Guard(email=email, version=int(item["version"]), slots=slots)

    def _guard_put(self, guard: _Guard) -> dict[str, Any]:
        item = serialize_item(
            {
                "email": guard.email,
                "version": guard.version + 1,
                "slots": {k: to_storage(v) for k, v in guard.slots.items()},
                "updated_at": to_storage(self.clock()),
            }
        )
        put: dict[str, Any] = {
            "TableName": self.db.table_name(self.GUARDS_TABLE),
            "Item": item,
            "ExpressionAttributeNames": {"#email": "email"},
        }
        if guard.version == 0:
            put["ConditionExpression"] = "attribute_not_exists(#email)"
        else:
            put["ConditionExpression"] = "#v = :current"
            put["ExpressionAttributeNames"] = {"#v": "version"}
            put["ExpressionAttributeValues"] = {":current": {"N": str(guard.version)}}
        return {"Put": put}

    def _booking_write(self, booking: Booking, *, is_new: bool, delete: bool) -> dict[str, Any]:
        table_name = self.db.table_name(self.TABLE)
        if delete:
            return {
                "Delete": {
                    "TableName": table_name,
                    "Key": {"booking_id": {"S": booking.booking_id}},
                    "ConditionExpression": "attribute_exists(booking_id)",
                }
            }
        condition = "attribute_not_exists(booking_id)" if is_new else "attribute_exists(booking_id)"
        return {
            "Put": {
                "TableName": table_name,
                "Item": serialize_item(booking_to_item(booking)),
                "ConditionExpression": condition,
            }
        }

    def _write(self, booking: Booking, *, previous: Booking | None, delete: bool = False) -> None:
        """Persist a booking together with the guard rows it touches.

        Raises:
            BackofficeError: BOOKING_CONFLICT if the check fails or the guard
                keeps changing underneath us
        """
        email = booking.customer.email
        emails = {email}
        if previous is not None:
            emails.add(previous.customer.email)

        for attempt in range(1, MAX_GUARD_ATTEMPTS + 1):
            guards = {address: self._read_guard(address) for address in emails}
            if previous is not None:
                guards[previous.customer.email].slots.pop(booking.booking_id, None)

            if not delete and booking.status not in TERMINAL_STATUSES:
                target = guards[email]
                conflicting_at = find_conflicting_slot(
                    booking.scheduled_at, target.slots, exclude_booking_id=booking.booking_id
                )
                if conflicting_at is not None:
                    logger.info(
                        "Booking conflict for %s at %s", email, booking.scheduled_at.isoformat()
                    )
                    raise conflict_error(conflicting_at)
                target.slots[booking.booking_id] = booking.scheduled_at

            items = [self._guard_put(guard) for guard in guards.values()]
            items.append(self._booking_write(booking, is_new=previous is None, delete=delete))
            if self.db.transact_write(items):
                return
            logger.warning(
                "Booking write for %s cancelled by a concurrent change (attempt %d/%d)",
                email,
                attempt,
                MAX_GUARD_ATTEMPTS,
            )

        raise BackofficeError(
            ErrorCode.BOOKING_CONFLICT,
            details={"email": email},
            message="Bookings for this customer changed while saving; please try again",
        )
