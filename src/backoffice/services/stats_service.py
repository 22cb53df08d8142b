"""Admin statistics across orders, bookings, users and subscriptions."""

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass

from backoffice.models import (
    BackofficeError,
    ErrorCode,
    MonthlyStats,
    MonthlyUserStats,
    PaymentStatus,
    PeriodStats,
    YearlyStats,
)
from backoffice.utils.timestamps import month_bounds, year_bounds

from .booking_service import BookingService
from .order_service import OrderService
from .subscription_service import SubscriptionService
from .user_service import UserService

MIN_YEAR = 2000
MAX_YEAR = 2100


def _count_between(values: Iterable[dt.datetime], start: dt.datetime, end: dt.datetime) -> int:
    return sum(1 for value in values if start <= value < end)


@dataclass
class _Snapshot:
    """Timestamps (and order amounts) loaded once per request."""

    orders: list[tuple[dt.datetime, int, PaymentStatus]]
    bookings: list[dt.datetime]
    users: list[dt.datetime]
    subscriptions: list[dt.datetime]

    def period(self, start: dt.datetime, end: dt.datetime) -> PeriodStats:
        orders = [(total, status) for created, total, status in self.orders if start <= created < end]
        return PeriodStats(
            orders=len(orders),
            revenue=sum(total for total, status in orders if status == PaymentStatus.PAID),
            bookings=_count_between(self.bookings, start, end),
            new_users=_count_between(self.users, start, end),
            new_subscriptions=_count_between(self.subscriptions, start, end),
        )


def _check_period(year: int, month: int | None = None) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise BackofficeError(
            ErrorCode.VALIDATION_FAILED,
            details={"year": f"Year must be between {MIN_YEAR} and {MAX_YEAR}"},
        )
    if month is not None and not 1 <= month <= 12:
        raise BackofficeError(
            ErrorCode.VALIDATION_FAILED, details={"month": "Month must be between 1 and 12"}
        )


class StatsService:
    """Read-only aggregations for the admin dashboard.

    Orders, users and subscriptions are counted by creation time; bookings
    by their scheduled time. Revenue only includes paid orders.
    """

    def __init__(
        self,
        orders: OrderService,
        bookings: BookingService,
        users: UserService,
        subscriptions: SubscriptionService,
    ) -> None:
        self.orders = orders
        self.bookings = bookings
        self.users = users
        self.subscriptions = subscriptions

    def _snapshot(self) -> "_Snapshot":
        return _Snapshot(
            orders=[(o.created_at, o.total_price, o.payment.status) for o in self.orders.list_orders()],
            bookings=[b.scheduled_at for b in self.bookings.list_bookings()],
            users=[u.created_at for u in self.users.list_users()],
            subscriptions=[s.created_at for s in self.subscriptions.list_subscriptions()],
        )

    def monthly(self, year: int, month: int) -> MonthlyStats:
        _check_period(year, month)
        start, end = month_bounds(year, month)
        return MonthlyStats(
            year=year, month=month, **self._snapshot().period(start, end).model_dump()
        )

    def yearly(self, year: int) -> YearlyStats:
        """Totals for a year plus a breakdown for each of its months."""
        _check_period(year)
        snapshot = self._snapshot()
        months = [
            MonthlyStats(
                year=year, month=month, **snapshot.period(*month_bounds(year, month)).model_dump()
            )
            for month in range(1, 13)
        ]
        return YearlyStats(
            year=year, months=months, **snapshot.period(*year_bounds(year)).model_dump()
        )

    def user_stats(self) -> list[MonthlyUserStats]:
        """Per registration month: number of users and their average login count."""
        groups: dict[int, list[int]] = {}
        for user in self.users.list_users():
            groups.setdefault(user.created_at.month, []).append(user.login_count)
        return [
            MonthlyUserStats(
                month=month,
                num_users=len(logins),
                avg_login_count=round(sum(logins) / len(logins), 2),
            )
            for month, logins in sorted(groups.items())
        ]
