"""Newsletter subscription endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from backoffice.models import (
    ErrorResponse,
    MonthlySubscriptionStats,
    Subscription,
    SubscriptionCreate,
    SubscriptionUpdate,
)
from backoffice.services.subscription_service import SubscriptionService
from backoffice_api.dependencies import get_subscription_service

router = APIRouter(tags=["subscriptions"])

NOT_FOUND = {404: {"description": "Subscription not found", "model": ErrorResponse}}


@router.post(
    "/subscriptions",
    summary="Subscribe",
    description="Creates an unverified subscription and emails a verification link "
    "pointing back at this API.",
    response_model=Subscription,
    status_code=HTTP_201_CREATED,
    responses={400: {"description": "Email already subscribed", "model": ErrorResponse}},
)
async def subscribe(
    request: Request,
    body: SubscriptionCreate,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Subscription:
    return service.subscribe(body, verify_url_base=str(request.base_url))


@router.get(
    "/subscriptions/verify/{token}",
    summary="Verify subscription",
    response_model=Subscription,
    responses={400: {"description": "Unknown or used token", "model": ErrorResponse}},
)
async def verify_subscription(
    token: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Subscription:
    return service.verify(token)


@router.get(
    "/subscriptions/stats/monthly",
    summary="Monthly subscription statistics",
    description="Subscriptions created in the last 12 months, total and verified per month.",
    response_model=list[MonthlySubscriptionStats],
)
async def monthly_stats(
    service: SubscriptionService = Depends(get_subscription_service),
) -> list[MonthlySubscriptionStats]:
    return service.monthly_stats()


@router.get("/subscriptions", summary="List subscriptions", response_model=list[Subscription])
async def list_subscriptions(
    service: SubscriptionService = Depends(get_subscription_service),
) -> list[Subscription]:
    return service.list_subscriptions()


@router.get(
    "/subscriptions/{subscription_id}",
    summary="Get subscription",
    response_model=Subscription,
    responses=NOT_FOUND,
)
async def get_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Subscription:
    return service.get_subscription(subscription_id)


@router.patch(
    "/subscriptions/{subscription_id}",
    summary="Update subscription",
    response_model=Subscription,
    responses={400: {"description": "Email already subscribed", "model": ErrorResponse}, **NOT_FOUND},
)
async def update_subscription(
    subscription_id: str,
    body: SubscriptionUpdate,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Subscription:
    return service.update_subscription(subscription_id, body)


@router.delete(
    "/subscriptions/{subscription_id}",
    summary="Delete subscription",
    status_code=HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Response:
    service.delete_subscription(subscription_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
