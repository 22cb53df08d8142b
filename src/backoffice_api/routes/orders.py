"""Order endpoints.

Provides REST endpoints for:
- Placing orders (total check, stock check, card payment)
- Listing and reading orders
- Updating order and payment status
- Order statistics
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from backoffice.models import ErrorResponse, Order, OrderCreate, OrderStatistics, OrderUpdate
from backoffice.services.order_service import OrderService
from backoffice_api.dependencies import get_order_service

router = APIRouter(tags=["orders"])

NOT_FOUND = {404: {"description": "Order not found", "model": ErrorResponse}}


@router.post(
    "/orders",
    summary="Place order",
    description="""
Place an order and charge it.

**Notes:**
- `total_price` must equal the sum of `price * quantity` over the items
- Every product must exist and have enough stock
- Only `credit-card` is processed; a failed payment stores nothing
- Stock is decremented and sales counts incremented on success
""",
    response_model=Order,
    status_code=HTTP_201_CREATED,
    responses={
        400: {
            "description": "Total mismatch, unavailable product or payment failure",
            "model": ErrorResponse,
        },
    },
)
async def create_order(
    body: OrderCreate,
    service: OrderService = Depends(get_order_service),
) -> Order:
    return service.create_order(body)


@router.get(
    "/orders/statistics",
    summary="Order statistics",
    description="Total orders, revenue from paid orders and average order value.",
    response_model=OrderStatistics,
)
async def order_statistics(service: OrderService = Depends(get_order_service)) -> OrderStatistics:
    return service.order_statistics()


@router.get("/orders", summary="List orders", response_model=list[Order])
async def list_orders(service: OrderService = Depends(get_order_service)) -> list[Order]:
    return service.list_orders()


@router.get(
    "/orders/{order_id}",
    summary="Get order",
    response_model=Order,
    responses=NOT_FOUND,
)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)) -> Order:
    return service.get_order(order_id)


@router.patch(
    "/orders/{order_id}",
    summary="Update order",
    description="Change fulfilment and/or payment status. The admin is alerted when "
    "an order becomes paid.",
    response_model=Order,
    responses=NOT_FOUND,
)
async def update_order(
    order_id: str,
    body: OrderUpdate,
    service: OrderService = Depends(get_order_service),
) -> Order:
    return service.update_order(order_id, body)
