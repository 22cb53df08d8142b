"""Order service: checkout, listing, statistics and status updates."""

import logging
from typing import Any

from backoffice.models import (
    BackofficeError,
    ErrorCode,
    Order,
    OrderCreate,
    OrderPayment,
    OrderStatistics,
    OrderUpdate,
    PaymentStatus,
)
from backoffice.utils.ids import new_id
from backoffice.utils.timestamps import from_storage, optional_from_storage, to_storage, utc_now

from .dynamodb import DynamoDBService
from .notifications import AdminAlertNotification, Notifier, OrderConfirmationNotification
from .payment_service import PaymentService, is_stale_provider_status
from .product_service import ProductService

logger = logging.getLogger(__name__)


def order_to_item(order: Order) -> dict[str, Any]:
    item = order.model_dump(mode="json")
    item["created_at"] = to_storage(order.created_at)
    item["updated_at"] = to_storage(order.updated_at)
    item["payment"]["paid_at"] = to_storage(order.payment.paid_at) if order.payment.paid_at else None
    # The client secret is handed to the browser once and never stored
    item["payment"].pop("client_secret", None)
    return item


def item_to_order(item: dict[str, Any]) -> Order:
    data = dict(item)
    data["created_at"] = from_storage(item["created_at"])
    data["updated_at"] = from_storage(item["updated_at"])
    payment = dict(item.get("payment", {}))
    payment["paid_at"] = optional_from_storage(payment.get("paid_at"))
    data["payment"] = payment
    return Order.model_validate(data)


class OrderService:
    """Service for placing and managing orders."""

    TABLE = "orders"

    def __init__(
        self,
        db: DynamoDBService,
        products: ProductService,
        payments: PaymentService,
        notifier: Notifier,
    ) -> None:
        self.db = db
        self.products = products
        self.payments = payments
        self.notifier = notifier

    def create_order(self, data: OrderCreate) -> Order:
        """Validate, charge and store an order.

        Nothing is stored when validation or payment fails.

        Raises:
            BackofficeError: ORDER_TOTAL_MISMATCH, PRODUCT_UNAVAILABLE,
                PAYMENT_METHOD_UNSUPPORTED, PAYMENT_FAILED
        """
        expected = data.items_total()
        if data.total_price != expected:
            raise BackofficeError(
                ErrorCode.ORDER_TOTAL_MISMATCH,
                details={"total_price": str(data.total_price), "expected": str(expected)},
            )

        self.products.check_availability(data.items)

        order_id = new_id("ORD")
        result = self.payments.charge(
            amount_cents=data.total_price,
            payment_method=data.payment_method,
            reference={"order_id": order_id},
            idempotency_key=f"order_{order_id}",
            receipt_email=data.customer.email,
            description=f"Order {order_id}",
            payment_method_id=data.payment_method_id,
        )
        if result.failed:
            raise BackofficeError(
                ErrorCode.PAYMENT_FAILED,
                details={"order_id": order_id},
                message=result.error_message,
            )

        now = utc_now()
        order = Order(
            order_id=order_id,
            customer=data.customer,
            payment_method=data.payment_method,
            items=data.items,
            total_price=data.total_price,
            commodity_price=data.commodity_price,
            currency=self.payments.currency,
            payment=OrderPayment(
                status=result.status,
                payment_intent_id=result.payment_intent_id,
                client_secret=result.client_secret,
                paid_at=now if result.status == PaymentStatus.PAID else None,
            ),
            created_at=now,
            updated_at=now,
        )
        self.db.put_item(
            self.TABLE,
            order_to_item(order),
            condition_expression="attribute_not_exists(order_id)",
        )
        logger.info("Order created: %s total=%d", order_id, order.total_price)

        if not self.products.reserve_stock(order.items):
            # The charge already went through, so the order stands
            logger.error("Stock could not be reserved for order %s", order_id)

        self.notifier.send(OrderConfirmationNotification(order))
        self.notifier.alert_admin(AdminAlertNotification.new_order(order))
        return order

    def list_orders(self) -> list[Order]:
        """All orders, newest first."""
        orders = [item_to_order(item) for item in self.db.scan(self.TABLE)]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def get_order(self, order_id: str) -> Order:
        item = self.db.get_item(self.TABLE, {"order_id": order_id})
        if not item:
            raise BackofficeError(ErrorCode.ORDER_NOT_FOUND, details={"order_id": order_id})
        return item_to_order(item)

    def order_statistics(self) -> OrderStatistics:
        """Total orders, revenue over paid orders and average order value.

        The average divides paid revenue by the count of all orders.
        """
        orders = self.list_orders()
        revenue = sum(o.total_price for o in orders if o.payment.status == PaymentStatus.PAID)
        average = revenue / len(orders) if orders else 0.0
        return OrderStatistics(
            total_orders=len(orders),
            total_revenue=revenue,
            avg_order_value=round(average, 2),
        )

    def update_order(self, order_id: str, data: OrderUpdate) -> Order:
        """Update fulfilment and/or payment status.

        The admin is alerted when the payment status moves into ``paid``.
        """
        current = self.get_order(order_id)
        payment = current.payment
        if data.payment_status is not None:
            payment = payment.model_copy(update={"status": data.payment_status})
            if data.payment_status == PaymentStatus.PAID and payment.paid_at is None:
                payment = payment.model_copy(update={"paid_at": utc_now()})

        updated = current.model_copy(
            update={
                "order_status": data.order_status or current.order_status,
                "payment": payment,
                "updated_at": utc_now(),
            }
        )
        saved = self.db.put_item(
            self.TABLE,
            order_to_item(updated),
            condition_expression="attribute_exists(order_id)",
        )
        if not saved:
            raise BackofficeError(ErrorCode.ORDER_NOT_FOUND, details={"order_id": order_id})

        became_paid = (
            current.payment.status != PaymentStatus.PAID
            and updated.payment.status == PaymentStatus.PAID
        )
        if became_paid:
            self.notifier.alert_admin(AdminAlertNotification.order_paid(updated))
        return updated

    def record_provider_status(
        self, order_id: str, status: PaymentStatus, payment_intent_id: str | None
    ) -> bool:
        """Apply a payment status reported by the provider webhook.

        Events for another payment intent than the order's, and any event for
        a refunded order, are acknowledged but not applied.

        Returns:
            False if the order does not exist
        """
        try:
            current = self.get_order(order_id)
        except BackofficeError:
            logger.warning("Webhook referenced unknown order: %s", order_id)
            return False
        stored_intent_id = current.payment.payment_intent_id
        if is_stale_provider_status(current.payment.status, stored_intent_id, payment_intent_id):
            logger.warning(
                "Ignoring %s for order %s: intent %s, stored %s (%s)",
                status.value,
                order_id,
                payment_intent_id,
                stored_intent_id,
                current.payment.status.value,
            )
            return True
        self.update_order(order_id, OrderUpdate(payment_status=status))
        return True
