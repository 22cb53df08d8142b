"""Unit tests for OrderService: checkout, statistics and status updates."""

import pytest

from backoffice.models import (
    BackofficeError,
    ErrorCode,
    OrderCreate,
    OrderStatus,
    OrderUpdate,
    PaymentStatus,
    ProductCreate,
)
from backoffice.services.order_service import OrderService
from backoffice.services.product_service import ProductService
from backoffice.services.stripe_service import StripeServiceError
from tests.conftest import ADMIN_EMAIL


@pytest.fixture
def product_service(dynamodb) -> ProductService:
    return ProductService(dynamodb)


@pytest.fixture
def order_service(dynamodb, product_service, payment_service, notifier) -> OrderService:
    return OrderService(dynamodb, product_service, payment_service, notifier)


@pytest.fixture
def shirt(product_service, product_data):
    return product_service.create_product(ProductCreate(**product_data))


def order_request(product, quantity: int = 2, total: int | None = None, **overrides) -> OrderCreate:
    data = {
        "customer": {
            "name": "Jane Doe",
            "email": "Jane@Example.com",
            "address": "1 Beach Road",
        },
        "payment_method": "credit-card",
        "items": [
            {
                "product_id": product.product_id,
                "name": product.name,
                "price": product.price,
                "size": "M",
                "quantity": quantity,
            }
        ],
        "total_price": product.price * quantity if total is None else total,
    }
    data.update(overrides)
    return OrderCreate(**data)


class TestCreateOrder:
    def test_successful_checkout(
        self, order_service, product_service, shirt, mock_stripe_service, transport
    ):
        order = order_service.create_order(order_request(shirt))

        assert order.order_id.startswith("ORD-")
        assert order.total_price == 9998
        assert order.customer.email == "jane@example.com"
        assert order.payment.status == PaymentStatus.PAID
        assert order.payment.client_secret == "pi_test_123_secret_abc"
        assert order.payment.paid_at is not None
        assert order.order_status == OrderStatus.PROCESSING

        kwargs = mock_stripe_service.create_payment_intent.call_args.kwargs
        assert kwargs["amount_cents"] == 9998
        assert kwargs["idempotency_key"] == f"order_{order.order_id}"
        assert kwargs["metadata"] == {"order_id": order.order_id}

        stock = product_service.get_product(shirt.product_id)
        assert stock.stock == 8
        assert stock.sales_count == 2

        subjects = {m["to"]: m["subject"] for m in transport.sent}
        assert subjects["jane@example.com"] == f"Order Confirmation - {order.order_id}"
        assert subjects[ADMIN_EMAIL] == f"New Order - {order.order_id}"

    def test_client_secret_is_not_stored(self, order_service, shirt, dynamodb):
        order = order_service.create_order(order_request(shirt))

        stored = dynamodb.get_item("orders", {"order_id": order.order_id})
        assert "client_secret" not in stored["payment"]
        assert order_service.get_order(order.order_id).payment.client_secret is None

    def test_total_mismatch(self, order_service, shirt, mock_stripe_service):
        with pytest.raises(BackofficeError) as exc_info:
            order_service.create_order(order_request(shirt, total=100))

        assert exc_info.value.code == ErrorCode.ORDER_TOTAL_MISMATCH
        assert exc_info.value.details == {"total_price": "100", "expected": "9998"}
        mock_stripe_service.create_payment_intent.assert_not_called()

    def test_insufficient_stock(self, order_service, shirt, mock_stripe_service):
        with pytest.raises(BackofficeError) as exc_info:
            order_service.create_order(order_request(shirt, quantity=11))

        assert exc_info.value.code == ErrorCode.PRODUCT_UNAVAILABLE
        mock_stripe_service.create_payment_intent.assert_not_called()

    def test_payment_failure_stores_nothing(
        self, order_service, product_service, shirt, mock_stripe_service, transport
    ):
        mock_stripe_service.create_payment_intent.side_effect = StripeServiceError(
            "declined", stripe_error_code="card_declined"
        )
        with pytest.raises(BackofficeError) as exc_info:
            order_service.create_order(order_request(shirt))

        assert exc_info.value.code == ErrorCode.PAYMENT_FAILED
        assert order_service.list_orders() == []
        assert product_service.get_product(shirt.product_id).stock == 10
        assert transport.sent == []

    def test_unsupported_payment_method(self, order_service, shirt):
        with pytest.raises(BackofficeError) as exc_info:
            order_service.create_order(order_request(shirt, payment_method="paypal"))
        assert exc_info.value.code == ErrorCode.PAYMENT_METHOD_UNSUPPORTED
        assert order_service.list_orders() == []

    def test_pending_payment_has_no_paid_at(self, order_service, shirt, mock_stripe_service):
        mock_stripe_service.create_payment_intent.return_value = {
            "payment_intent_id": "pi_pending",
            "client_secret": "secret",
            "status": "requires_payment_method",
        }
        order = order_service.create_order(order_request(shirt))
        assert order.payment.status == PaymentStatus.PENDING
        assert order.payment.paid_at is None


class TestOrderQueries:
    def test_get_unknown(self, order_service):
        with pytest.raises(BackofficeError) as exc_info:
            order_service.get_order("ORD-MISSING")
        assert exc_info.value.code == ErrorCode.ORDER_NOT_FOUND

    def test_statistics_count_paid_revenue_only(self, order_service, shirt, mock_stripe_service):
        order_service.create_order(order_request(shirt, quantity=1))
        order_service.create_order(order_request(shirt, quantity=2))
        mock_stripe_service.create_payment_intent.return_value = {
            "payment_intent_id": "pi_pending",
            "client_secret": "secret",
            "status": "processing",
        }
        order_service.create_order(order_request(shirt, quantity=1))

        stats = order_service.order_statistics()
        assert stats.total_orders == 3
        assert stats.total_revenue == 3 * 4999
        assert stats.avg_order_value == round(3 * 4999 / 3, 2)

    def test_statistics_empty(self, order_service):
        stats = order_service.order_statistics()
        assert stats.total_orders == 0
        assert stats.avg_order_value == 0


class TestUpdateOrder:
    def test_fulfilment_status(self, order_service, shirt):
        order = order_service.create_order(order_request(shirt))
        updated = order_service.update_order(
            order.order_id, OrderUpdate(order_status=OrderStatus.SHIPPED)
        )
        assert updated.order_status == OrderStatus.SHIPPED
        assert order_service.get_order(order.order_id).order_status == OrderStatus.SHIPPED

    def test_admin_alerted_when_payment_becomes_paid(
        self, order_service, shirt, mock_stripe_service, transport
    ):
        mock_stripe_service.create_payment_intent.return_value = {
            "payment_intent_id": "pi_pending",
            "client_secret": "secret",
            "status": "processing",
        }
        order = order_service.create_order(order_request(shirt))
        transport.sent.clear()

        updated = order_service.update_order(
            order.order_id, OrderUpdate(payment_status=PaymentStatus.PAID)
        )
        assert updated.payment.paid_at is not None
        assert [(m["to"], m["subject"]) for m in transport.sent] == [
            (ADMIN_EMAIL, f"Order Paid - {order.order_id}")
        ]

        transport.sent.clear()
        order_service.update_order(order.order_id, OrderUpdate(payment_status=PaymentStatus.PAID))
        assert transport.sent == []

    def test_update_unknown(self, order_service):
        with pytest.raises(BackofficeError) as exc_info:
            order_service.update_order("ORD-MISSING", OrderUpdate(order_status=OrderStatus.SHIPPED))
        assert exc_info.value.code == ErrorCode.ORDER_NOT_FOUND

    def test_record_provider_status(self, order_service, shirt):
        order = order_service.create_order(order_request(shirt))
        assert order_service.record_provider_status(
            order.order_id, PaymentStatus.FAILED, "pi_test_123"
        )
        assert order_service.get_order(order.order_id).payment.status == PaymentStatus.FAILED
        assert not order_service.record_provider_status("ORD-MISSING", PaymentStatus.PAID, None)

    def test_provider_status_for_other_intent_is_ignored(self, order_service, shirt):
        order = order_service.create_order(order_request(shirt))

        assert order_service.record_provider_status(
            order.order_id, PaymentStatus.FAILED, "pi_OTHER_old"
        )
        payment = order_service.get_order(order.order_id).payment
        assert payment.status == PaymentStatus.PAID
        assert payment.payment_intent_id == "pi_test_123"

    def test_refunded_order_stays_refunded(self, order_service, shirt):
        order = order_service.create_order(order_request(shirt))
        order_service.update_order(order.order_id, OrderUpdate(payment_status=PaymentStatus.REFUNDED))

        order_service.record_provider_status(order.order_id, PaymentStatus.PAID, "pi_test_123")

        assert order_service.get_order(order.order_id).payment.status == PaymentStatus.REFUNDED
