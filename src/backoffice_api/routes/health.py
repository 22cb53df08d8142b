"""Health check endpoint."""

import datetime as dt

from fastapi import APIRouter, Depends

from backoffice.config import Settings
from backoffice_api.dependencies import get_settings
from backoffice_api.models import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check",
    response_model=HealthResponse,
)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=dt.datetime.now(dt.UTC).isoformat(),
        environment=settings.environment,
    )
