"""Tests for the contact, subscription and statistics routes."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

CONTACT = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "subject": "Opening hours",
    "message": "Are you open on Sundays?",
}


@pytest.fixture
def subscription(client: TestClient) -> dict[str, Any]:
    response = client.post(
        "/api/subscriptions", json={"name": "Jane Doe", "email": "jane@example.com"}
    )
    assert response.status_code == 201, response.text
    body: dict[str, Any] = response.json()
    return body


class TestContacts:
    def test_submit_records_client(self, client, sent_emails):
        response = client.post(
            "/api/contacts",
            json=CONTACT,
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest"},
        )

        assert response.status_code == 201
        contact = response.json()
        assert contact["status"] == "pending"
        assert contact["ip_address"] == "203.0.113.7"
        assert contact["user_agent"] == "pytest"
        assert [email["to"] for email in sent_emails] == ["admin@example.com", "jane@example.com"]

    def test_list_requires_admin(self, client, user_headers):
        assert client.get("/api/contacts").status_code == 401
        assert client.get("/api/contacts", headers=user_headers).status_code == 403

    def test_resolve(self, client, admin_headers):
        contact = client.post("/api/contacts", json=CONTACT).json()

        response = client.patch(
            f"/api/contacts/{contact['contact_id']}",
            json={"status": "resolved"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["responded_at"]
        listed = client.get("/api/contacts", headers=admin_headers).json()
        assert listed[0]["status"] == "resolved"

    def test_stats_are_public(self, client):
        client.post("/api/contacts", json=CONTACT)

        body = client.get("/api/contacts/stats").json()

        assert body["total"] == 1
        assert {"status": "pending", "count": 1} in body["stats"]


class TestSubscriptions:
    def test_verification_link_round_trip(self, client, subscription, sent_emails):
        assert subscription["is_verified"] is False
        link = next(
            line.split(": ", 1)[1]
            for line in sent_emails[-1]["text"].splitlines()
            if "/api/subscriptions/verify/" in line
        )
        assert link.startswith("http://testserver/api/subscriptions/verify/")

        response = client.get(link.removeprefix("http://testserver"))

        assert response.status_code == 200
        assert response.json()["is_verified"] is True

    def test_unknown_token(self, client):
        response = client.get("/api/subscriptions/verify/" + "0" * 64)

        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_009"

    def test_duplicate_email(self, client, subscription):
        response = client.post(
            "/api/subscriptions", json={"name": "Again", "email": "jane@example.com"}
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_004"

    def test_crud(self, client, subscription):
        path = f"/api/subscriptions/{subscription['subscription_id']}"

        assert client.get(path).json()["email"] == "jane@example.com"
        assert client.patch(path, json={"name": "Jane D."}).json()["name"] == "Jane D."
        assert len(client.get("/api/subscriptions").json()) == 1
        assert client.delete(path).status_code == 204
        assert client.get(path).json()["error_code"] == "ERR_404_SUBSCRIPTION"

    def test_monthly_stats(self, client, subscription):
        response = client.get("/api/subscriptions/stats/monthly")

        assert response.status_code == 200
        (row,) = response.json()
        assert row["total_subscriptions"] == 1
        assert row["verified_subscriptions"] == 0


class TestStats:
    def test_requires_admin(self, client, user_headers):
        assert client.get("/api/stats/yearly/2030").status_code == 401
        response = client.get("/api/stats/yearly/2030", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["error_code"] == "ERR_AUTH_004"

    def test_monthly(self, client, admin_headers):
        response = client.get("/api/stats/monthly/2030/3", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "orders": 0,
            "revenue": 0,
            "bookings": 0,
            "new_users": 0,
            "new_subscriptions": 0,
            "year": 2030,
            "month": 3,
        }

    def test_invalid_month(self, client, admin_headers):
        response = client.get("/api/stats/monthly/2030/13", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_001"

    def test_yearly_has_twelve_months(self, client, admin_headers):
        body = client.get("/api/stats/yearly/2030", headers=admin_headers).json()
        assert [m["month"] for m in body["months"]] == list(range(1, 13))

    def test_user_stats_counts_registrations(self, client, admin_headers):
        body = client.get("/api/stats/user-stats", headers=admin_headers).json()
        assert sum(row["num_users"] for row in body) == 1
