"""Timestamp helpers.

DynamoDB stores datetimes as strings. Every datetime is written in one
fixed-width UTC format so that string order equals chronological order,
which the booking window queries rely on.
"""

import datetime as dt

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def ensure_utc(value: dt.datetime) -> dt.datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value.astimezone(dt.UTC)


def to_storage(value: dt.datetime) -> str:
    """Format a datetime for storage, e.g. ``2030-01-01T10:00:00.000000Z``."""
    return ensure_utc(value).strftime(STORAGE_FORMAT)


def from_storage(value: str) -> dt.datetime:
    """Parse a stored timestamp back into an aware UTC datetime.

    Accepts the storage format and plain ISO-8601 strings.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(dt.datetime.fromisoformat(value))


def optional_from_storage(value: str | None) -> dt.datetime | None:
    return from_storage(value) if value else None


def format_for_humans(value: dt.datetime) -> str:
    """Short readable form used in messages, e.g. ``2030-01-01 10:00 UTC``."""
    return ensure_utc(value).strftime("%Y-%m-%d %H:%M UTC")


def format_long(value: dt.datetime) -> str:
    """Long readable form used in emails, e.g. ``Tuesday, January 01, 2030 at 10:00 UTC``."""
    return ensure_utc(value).strftime("%A, %B %d, %Y at %H:%M UTC")


def month_bounds(year: int, month: int) -> tuple[dt.datetime, dt.datetime]:
    """Return the [start, end) UTC bounds of a calendar month."""
    start = dt.datetime(year, month, 1, tzinfo=dt.UTC)
    if month == 12:
        end = dt.datetime(year + 1, 1, 1, tzinfo=dt.UTC)
    else:
        end = dt.datetime(year, month + 1, 1, tzinfo=dt.UTC)
    return start, end


def year_bounds(year: int) -> tuple[dt.datetime, dt.datetime]:
    """Return the [start, end) UTC bounds of a calendar year."""
    return dt.datetime(year, 1, 1, tzinfo=dt.UTC), dt.datetime(year + 1, 1, 1, tzinfo=dt.UTC)


def one_year_before(value: dt.datetime) -> dt.datetime:
    """Same moment one year earlier; Feb 29 maps to Feb 28."""
    try:
        return value.replace(year=value.year - 1)
    except ValueError:
        return value.replace(year=value.year - 1, day=28)
