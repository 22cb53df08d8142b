"""Tests for the product and order routes."""

from typing import Any

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def product(client: TestClient, admin_headers, product_data) -> dict[str, Any]:
    response = client.post("/api/products", json=product_data, headers=admin_headers)
    assert response.status_code == 201, response.text
    body: dict[str, Any] = response.json()
    return body


def order_body(product: dict[str, Any], quantity: int = 2, **overrides: Any) -> dict[str, Any]:
    body = {
        "customer": {"name": "Jane Doe", "email": "jane@example.com", "address": "1 Main St"},
        "payment_method": "credit-card",
        "items": [
            {
                "product_id": product["product_id"],
                "name": product["name"],
                "price": product["price"],
                "quantity": quantity,
            }
        ],
        "total_price": product["price"] * quantity,
        "payment_method_id": "pm_card_visa",
    }
    body.update(overrides)
    return body


class TestProductAccess:
    def test_create_requires_token(self, client, product_data):
        response = client.post("/api/products", json=product_data)

        assert response.status_code == 401
        assert response.json()["error_code"] == "ERR_AUTH_001"

    def test_create_requires_admin(self, client, product_data, user_headers):
        response = client.post("/api/products", json=product_data, headers=user_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "ERR_AUTH_004"

    def test_garbage_token(self, client, product_data):
        response = client.post(
            "/api/products", json=product_data, headers={"Authorization": "Bearer nonsense"}
        )
        assert response.status_code == 401

    def test_reads_are_public(self, client, product):
        assert client.get("/api/products").status_code == 200
        assert client.get(f"/api/products/{product['product_id']}").status_code == 200


class TestProducts:
    def test_create(self, product):
        assert product["product_id"].startswith("PRD-")
        assert product["sales_count"] == 0

    def test_discount_above_price_rejected(self, client, admin_headers, product_data):
        product_data["discount_price"] = product_data["price"] + 1
        response = client.post("/api/products", json=product_data, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_001"

    def test_filters(self, client, product):
        assert len(client.get("/api/products", params={"category": "clothing"}).json()) == 1
        assert client.get("/api/products", params={"category": "books"}).json() == []
        assert len(client.get("/api/products", params={"featured": "true"}).json()) == 1

    def test_update(self, client, admin_headers, product):
        response = client.put(
            f"/api/products/{product['product_id']}",
            json={"stock": 3},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["stock"] == 3
        assert response.json()["name"] == product["name"]

    def test_delete(self, client, admin_headers, product):
        path = f"/api/products/{product['product_id']}"
        assert client.delete(path, headers=admin_headers).status_code == 204
        assert client.get(path).json()["error_code"] == "ERR_404_PRODUCT"

    def test_stats(self, client, product):
        body = client.get("/api/products/stats").json()

        assert body["total_products"] == 1
        assert body["featured"] == 1
        assert body["categories"][0]["category"] == "clothing"


class TestOrders:
    def test_checkout(self, client, product, sent_emails):
        response = client.post("/api/orders", json=order_body(product))

        assert response.status_code == 201
        order = response.json()
        assert order["order_id"].startswith("ORD-")
        assert order["payment"]["status"] == "paid"
        assert order["payment"]["client_secret"] == "pi_test_123_secret_abc"
        assert order["order_status"] == "processing"

        stored = client.get(f"/api/orders/{order['order_id']}").json()
        assert stored["payment"]["client_secret"] is None

        stocked = client.get(f"/api/products/{product['product_id']}").json()
        assert stocked["stock"] == product["stock"] - 2
        assert stocked["sales_count"] == 2
        assert "admin@example.com" in {email["to"] for email in sent_emails}

    def test_total_mismatch(self, client, product):
        response = client.post("/api/orders", json=order_body(product, total_price=100))

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "ERR_005"
        assert body["details"]["total_price"] == "100"

    def test_not_enough_stock(self, client, product):
        quantity = product["stock"] + 1
        response = client.post("/api/orders", json=order_body(product, quantity=quantity))

        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_006"

    def test_unsupported_method(self, client, product):
        response = client.post(
            "/api/orders", json=order_body(product, payment_method="bank-transfer")
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_007"
        assert client.get("/api/orders").json() == []

    def test_empty_items_rejected(self, client, product):
        response = client.post("/api/orders", json=order_body(product, items=[]))
        assert response.status_code == 400
        assert "items" in response.json()["details"]

    def test_read_and_update(self, client, product):
        order = client.post("/api/orders", json=order_body(product)).json()
        path = f"/api/orders/{order['order_id']}"

        assert client.get(path).json()["order_id"] == order["order_id"]
        response = client.patch(path, json={"order_status": "shipped"})

        assert response.status_code == 200
        assert response.json()["order_status"] == "shipped"

    def test_unknown_order(self, client):
        response = client.get("/api/orders/ORD-000000000000")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ERR_404_ORDER"

    def test_statistics(self, client, product):
        client.post("/api/orders", json=order_body(product, quantity=1))
        client.post("/api/orders", json=order_body(product, quantity=3))

        body = client.get("/api/orders/statistics").json()

        assert body["total_orders"] == 2
        assert body["total_revenue"] == product["price"] * 4
        assert body["avg_order_value"] == product["price"] * 2
