"""Admin statistics endpoints."""

from fastapi import APIRouter, Depends

from backoffice.models import ErrorResponse, MonthlyStats, MonthlyUserStats, YearlyStats
from backoffice.services.stats_service import StatsService
from backoffice_api.dependencies import get_stats_service
from backoffice_api.security import require_admin

router = APIRouter(
    prefix="/stats",
    tags=["stats"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Bearer token required", "model": ErrorResponse},
        403: {"description": "Admin role required", "model": ErrorResponse},
    },
)


@router.get(
    "/monthly/{year}/{month}",
    summary="Monthly statistics",
    description="Orders, paid revenue, bookings, new users and new subscriptions for one month.",
    response_model=MonthlyStats,
)
async def monthly_stats(
    year: int,
    month: int,
    service: StatsService = Depends(get_stats_service),
) -> MonthlyStats:
    return service.monthly(year, month)


@router.get(
    "/yearly/{year}",
    summary="Yearly statistics",
    description="Totals for the year plus a breakdown for each month.",
    response_model=YearlyStats,
)
async def yearly_stats(year: int, service: StatsService = Depends(get_stats_service)) -> YearlyStats:
    return service.yearly(year)


@router.get(
    "/user-stats",
    summary="User registration statistics",
    description="Users registered per month and their average login count.",
    response_model=list[MonthlyUserStats],
)
async def user_stats(
    service: StatsService = Depends(get_stats_service),
) -> list[MonthlyUserStats]:
    return service.user_stats()
