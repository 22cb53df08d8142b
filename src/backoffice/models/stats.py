"""Admin statistics models."""

from pydantic import BaseModel, Field


class PeriodStats(BaseModel):
    """Activity totals for a calendar period. Revenue is in minor units."""

    orders: int = 0
    revenue: int = 0
    bookings: int = 0
    new_users: int = 0
    new_subscriptions: int = 0


class MonthlyStats(PeriodStats):
    year: int
    month: int = Field(..., ge=1, le=12)


class YearlyStats(PeriodStats):
    year: int
    months: list[MonthlyStats] = Field(default_factory=list)
