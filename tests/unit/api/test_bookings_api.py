"""Tests for the booking and booking payment routes."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient


def booking_body(scheduled_at: str, email: str = "jane@example.com") -> dict[str, Any]:
    return {
        "customer": {"name": "Jane Doe", "email": email, "phone": "+1 555 0100"},
        "scheduled_at": scheduled_at,
        "notes": "First visit",
    }


@pytest.fixture
def booking(client: TestClient) -> dict[str, Any]:
    response = client.post("/api/bookings", json=booking_body("2099-06-01T10:00:00Z"))
    assert response.status_code == 201, response.text
    body: dict[str, Any] = response.json()
    return body


class TestCreateBooking:
    def test_created_pending(self, booking, sent_emails):
        assert booking["booking_id"].startswith("BK-")
        assert booking["status"] == "pending"
        assert booking["customer"]["email"] == "jane@example.com"
        assert {email["to"] for email in sent_emails} == {"jane@example.com", "admin@example.com"}

    def test_conflict_within_an_hour(self, client, booking):
        response = client.post("/api/bookings", json=booking_body("2099-06-01T10:30:00Z"))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "ERR_002"
        assert "10:00 UTC" in body["message"]
        assert "conflicting_booking_at" in body["details"]

    def test_conflict_ignores_email_case(self, client, booking):
        response = client.post(
            "/api/bookings", json=booking_body("2099-06-01T10:45:00Z", email="JANE@example.com")
        )
        assert response.status_code == 400

    def test_slot_outside_window_is_accepted(self, client, booking):
        response = client.post("/api/bookings", json=booking_body("2099-06-01T12:00:00Z"))
        assert response.status_code == 201

    def test_other_customer_same_time(self, client, booking):
        response = client.post(
            "/api/bookings", json=booking_body("2099-06-01T10:00:00Z", email="sam@example.com")
        )
        assert response.status_code == 201

    def test_past_time_rejected(self, client):
        response = client.post("/api/bookings", json=booking_body("2001-01-01T10:00:00Z"))

        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_001"

    def test_invalid_email_reports_field(self, client):
        body = booking_body("2099-06-01T10:00:00Z", email="not-an-email")
        response = client.post("/api/bookings", json=body)

        assert response.status_code == 400
        assert "customer.email" in response.json()["details"]


class TestReadBookings:
    def test_get_by_id(self, client, booking):
        response = client.get(f"/api/bookings/{booking['booking_id']}")
        assert response.status_code == 200
        assert response.json()["booking_id"] == booking["booking_id"]

    def test_unknown_booking(self, client):
        response = client.get("/api/bookings/BK-000000000000")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ERR_404_BOOKING"

    def test_list(self, client, booking):
        response = client.get("/api/bookings")
        assert [b["booking_id"] for b in response.json()] == [booking["booking_id"]]

    def test_stats_is_not_a_booking_id(self, client, booking):
        response = client.get("/api/bookings/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert {"status": "pending", "count": 1} in body["stats"]

    def test_upcoming(self, client, booking):
        soon = (datetime.now(UTC) + timedelta(days=2)).replace(microsecond=0)
        created = client.post(
            "/api/bookings", json=booking_body(soon.isoformat(), email="sam@example.com")
        ).json()

        response = client.get("/api/bookings/upcoming")

        assert response.status_code == 200
        assert [b["booking_id"] for b in response.json()] == [created["booking_id"]]

    def test_by_status(self, client, booking):
        assert len(client.get("/api/bookings/status/pending").json()) == 1
        assert client.get("/api/bookings/status/confirmed").json() == []

    def test_by_unknown_status(self, client):
        assert client.get("/api/bookings/status/archived").status_code == 400


class TestChangeBooking:
    def test_reschedule_near_own_slot(self, client, booking):
        response = client.patch(
            f"/api/bookings/{booking['booking_id']}",
            json={"scheduled_at": "2099-06-01T10:30:00Z"},
        )

        assert response.status_code == 200
        assert response.json()["scheduled_at"].startswith("2099-06-01T10:30:00")

    def test_confirm(self, client, booking, sent_emails):
        response = client.patch(
            f"/api/bookings/{booking['booking_id']}/status", json={"status": "confirmed"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert sent_emails[-1]["subject"] == "Booking Updated"
        assert "Your booking has been confirmed!" in sent_emails[-1]["text"]

    def test_cancelled_cannot_reopen(self, client, booking):
        path = f"/api/bookings/{booking['booking_id']}/status"
        client.patch(path, json={"status": "cancelled"})

        response = client.patch(path, json={"status": "pending"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_003"

    def test_cancel_frees_the_slot(self, client, booking):
        client.patch(
            f"/api/bookings/{booking['booking_id']}/status", json={"status": "cancelled"}
        )
        response = client.post("/api/bookings", json=booking_body("2099-06-01T10:15:00Z"))
        assert response.status_code == 201

    def test_delete(self, client, booking):
        response = client.delete(f"/api/bookings/{booking['booking_id']}")

        assert response.status_code == 204
        assert client.get(f"/api/bookings/{booking['booking_id']}").status_code == 404
        assert client.post(
            "/api/bookings", json=booking_body("2099-06-01T10:00:00Z")
        ).status_code == 201


class TestBookingPayment:
    def test_pay_and_read(self, client, booking, stripe_client):
        path = f"/api/bookings/{booking['booking_id']}/payment"
        response = client.post(path, json={"amount": 5000, "payment_method_id": "pm_card_visa"})

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "paid"
        assert body["payment_intent_id"] == "pi_test_123"
        assert body["amount"] == 5000

        params = stripe_client.payment_intents.create.call_args.kwargs["params"]
        assert params["metadata"] == {"booking_id": booking["booking_id"]}
        assert params["confirm"] is True

        stored = client.get(path).json()
        assert stored["status"] == "paid"
        assert stored["client_secret"] is None

    def test_no_payment_yet(self, client, booking):
        response = client.get(f"/api/bookings/{booking['booking_id']}/payment")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ERR_404_PAYMENT"

    def test_unsupported_method(self, client, booking):
        response = client.post(
            f"/api/bookings/{booking['booking_id']}/payment",
            json={"amount": 5000, "payment_method": "paypal"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_007"

    def test_refund(self, client, booking, stripe_client):
        path = f"/api/bookings/{booking['booking_id']}/payment"
        client.post(path, json={"amount": 5000})

        response = client.post(f"{path}/refund")

        assert response.status_code == 200
        assert response.json()["status"] == "refunded"
        assert response.json()["refunded_at"]
        stripe_client.refunds.create.assert_called_once()

    def test_manual_status_update(self, client, booking):
        path = f"/api/bookings/{booking['booking_id']}/payment"
        client.post(path, json={"amount": 5000})

        response = client.patch(path, json={"status": "failed"})

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
