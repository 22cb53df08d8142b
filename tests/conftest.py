"""Pytest configuration and fixtures for the back-office tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto, tables created from the real definitions
- An in-memory email transport and notifier
- A controllable clock for booking rules
- Sample request data
- A FastAPI test client with registered user and admin tokens
"""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock, patch

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before any app import reads them
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-backoffice")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("EMAIL_TRANSPORT", "log")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_abc123xyz")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret123")

if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from backoffice.models import BookingCreate, BookingCustomer  # noqa: E402
from backoffice.services.booking_service import BookingService  # noqa: E402
from backoffice.services.dynamodb import DynamoDBService  # noqa: E402
from backoffice.services.email_transport import RecordingEmailTransport  # noqa: E402
from backoffice.services.notifications import Notifier  # noqa: E402
from backoffice.services.payment_service import PaymentService  # noqa: E402
from backoffice.services.tables import prefixed_definitions  # noqa: E402
from backoffice_api.dependencies import (  # noqa: E402
    get_email_transport,
    get_user_service,
    reset_services,
)
from backoffice_api.main import create_app  # noqa: E402

TABLE_PREFIX = os.environ["DYNAMODB_TABLE_PREFIX"]
REGION = os.environ["AWS_DEFAULT_REGION"]
ADMIN_EMAIL = "admin@example.com"

# Fixed "now" for booking tests; bookings are scheduled later the same day
NOW = datetime(2030, 1, 1, 8, 0, tzinfo=UTC)


def at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    """A UTC time on January ``day`` 2030."""
    return datetime(2030, 1, day, hour, minute, tzinfo=UTC)


def booking_request(
    scheduled_at: datetime,
    email: str = "jane@example.com",
    name: str = "Jane Doe",
    notes: str | None = None,
) -> BookingCreate:
    return BookingCreate(
        customer=BookingCustomer(name=name, email=email, phone="+1 555 0100"),
        scheduled_at=scheduled_at,
        notes=notes,
    )


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# === AWS Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = REGION


@pytest.fixture
def mocked_aws(aws_credentials: None) -> Generator[None, None, None]:
    """Mock AWS and create every table with the configured prefix."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name=REGION)
        for definition in prefixed_definitions(TABLE_PREFIX):
            client.create_table(**definition)
        yield


@pytest.fixture
def dynamodb(mocked_aws: None) -> DynamoDBService:
    return DynamoDBService(table_prefix=TABLE_PREFIX, region_name=REGION)


# === Service Fixtures ===


@pytest.fixture
def transport() -> RecordingEmailTransport:
    return RecordingEmailTransport()


@pytest.fixture
def notifier(transport: RecordingEmailTransport) -> Notifier:
    return Notifier(transport, admin_email=ADMIN_EMAIL)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def booking_service(
    dynamodb: DynamoDBService, notifier: Notifier, clock: FixedClock
) -> BookingService:
    return BookingService(
        dynamodb, notifier, frontend_url="https://shop.example.com", clock=clock
    )


@pytest.fixture
def mock_stripe_service() -> MagicMock:
    """Stripe service whose payment intents succeed immediately."""
    stripe_service = MagicMock()
    stripe_service.create_payment_intent.return_value = {
        "payment_intent_id": "pi_test_123",
        "client_secret": "pi_test_123_secret_abc",
        "status": "succeeded",
    }
    stripe_service.create_refund.return_value = {
        "refund_id": "re_test_123",
        "amount": 5000,
        "status": "succeeded",
    }
    return stripe_service


@pytest.fixture
def payment_service(mock_stripe_service: MagicMock) -> PaymentService:
    return PaymentService(mock_stripe_service, currency="usd")


# === Sample Data ===


@pytest.fixture
def product_data() -> dict[str, Any]:
    return {
        "name": "Linen Shirt",
        "description": "Breathable summer shirt",
        "price": 4999,
        "discount_price": 3999,
        "category": "clothing",
        "stock": 10,
        "sizes": ["S", "M", "L"],
        "colors": ["white", "blue"],
        "featured": True,
    }


# === API Fixtures ===


@pytest.fixture
def stripe_client() -> Generator[MagicMock, None, None]:
    """Mock StripeClient whose payment intents succeed immediately."""
    with patch("backoffice.services.stripe_service.StripeClient") as mock_client_class:
        client = MagicMock()
        client.payment_intents.create.return_value = MagicMock(
            id="pi_test_123", client_secret="pi_test_123_secret_abc", status="succeeded"
        )
        client.refunds.create.return_value = MagicMock(
            id="re_test_123", amount=5000, status="succeeded"
        )
        mock_client_class.return_value = client
        yield client


@pytest.fixture
def client(mocked_aws: None, stripe_client: MagicMock) -> Generator[TestClient, None, None]:
    """Test client for a fresh app wired to moto and the mocked Stripe client."""
    reset_services()
    yield TestClient(create_app(), raise_server_exceptions=False)
    reset_services()


@pytest.fixture
def sent_emails(client: TestClient) -> list[dict[str, str]]:
    """Messages captured by the app's recording email transport."""
    return get_email_transport().sent  # type: ignore[attr-defined]


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., dict[str, Any]]:
    def register(email: str = "user@example.com", password: str = "s3cret-pass") -> dict[str, Any]:
        response = client.post(
            "/api/auth/register",
            json={
                "name": "Test User",
                "email": email,
                "password": password,
                "confirm_password": password,
            },
        )
        assert response.status_code == 201, response.text
        body: dict[str, Any] = response.json()
        return body

    return register


@pytest.fixture
def user_headers(register_user: Callable[..., dict[str, Any]]) -> dict[str, str]:
    return {"Authorization": f"Bearer {register_user()['token']}"}


@pytest.fixture
def admin_headers(
    client: TestClient, register_user: Callable[..., dict[str, Any]]
) -> dict[str, str]:
    """Register a user, promote them to admin and log in again."""
    auth = register_user("admin-user@example.com")
    get_user_service().make_admin(auth["user"]["user_id"])
    response = client.post(
        "/api/auth/login",
        json={"email": "admin-user@example.com", "password": "s3cret-pass"},
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}
