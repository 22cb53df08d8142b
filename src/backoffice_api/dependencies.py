"""FastAPI dependency injection providers for shared services.

Settings are read once and every service is built lazily and cached with
``@lru_cache`` so each process shares one instance.

Usage in routes:
    from backoffice_api.dependencies import get_booking_service

    @router.get("/bookings")
    async def list_bookings(
        service: BookingService = Depends(get_booking_service),
    ):
        ...

Service Dependency Graph:
    Settings
        ├── DynamoDBService
        │       ├── BookingService ── BookingPaymentService
        │       ├── ProductService ── OrderService
        │       ├── ContactService, SubscriptionService, UserService
        │       └── WebhookHandler
        ├── StripeService ── PaymentService
        └── EmailTransport ── Notifier

Testing:
    Use reset_services() to clear cached instances between tests.
"""

import datetime as dt
import logging
from functools import lru_cache

from backoffice.config import Settings
from backoffice.services.booking_payments import BookingPaymentService
from backoffice.services.booking_service import BookingService
from backoffice.services.contact_service import ContactService
from backoffice.services.dynamodb import DynamoDBService
from backoffice.services.email_transport import (
    EmailTransport,
    RecordingEmailTransport,
    SesEmailTransport,
)
from backoffice.services.notifications import Notifier
from backoffice.services.order_service import OrderService
from backoffice.services.payment_service import PaymentService
from backoffice.services.product_service import ProductService
from backoffice.services.ssm_service import SSMService
from backoffice.services.stats_service import StatsService
from backoffice.services.stripe_service import StripeService
from backoffice.services.subscription_service import SubscriptionService
from backoffice.services.user_service import UserService
from backoffice.services.webhook_handler import WebhookHandler

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_dynamodb_service() -> DynamoDBService:
    settings = get_settings()
    return DynamoDBService(
        table_prefix=settings.dynamodb_table_prefix, region_name=settings.aws_region
    )


@lru_cache
def get_ssm_service() -> SSMService:
    return SSMService(region_name=get_settings().aws_region)


@lru_cache
def get_stripe_service() -> StripeService:
    return StripeService(get_settings(), ssm=get_ssm_service())


@lru_cache
def get_payment_service() -> PaymentService:
    return PaymentService(get_stripe_service(), currency=get_settings().currency)


@lru_cache
def get_email_transport() -> EmailTransport:
    """Get the configured email transport.

    ``EMAIL_TRANSPORT=log`` (or a missing sender address) keeps messages
    in memory and logs them instead of calling SES.
    """
    settings = get_settings()
    if settings.email_transport == "log" or not settings.email_from:
        logger.info("Email delivery disabled; messages are only logged")
        return RecordingEmailTransport()
    return SesEmailTransport(settings.email_from, region_name=settings.aws_region)


@lru_cache
def get_notifier() -> Notifier:
    settings = get_settings()
    return Notifier(
        get_email_transport(),
        admin_email=settings.admin_email,
        enabled=settings.notifications_enabled,
    )


@lru_cache
def get_booking_service() -> BookingService:
    return BookingService(
        db=get_dynamodb_service(),
        notifier=get_notifier(),
        frontend_url=get_settings().frontend_url,
    )


@lru_cache
def get_booking_payment_service() -> BookingPaymentService:
    return BookingPaymentService(
        bookings=get_booking_service(),
        payments=get_payment_service(),
        notifier=get_notifier(),
    )


@lru_cache
def get_product_service() -> ProductService:
    return ProductService(db=get_dynamodb_service())


@lru_cache
def get_order_service() -> OrderService:
    return OrderService(
        db=get_dynamodb_service(),
        products=get_product_service(),
        payments=get_payment_service(),
        notifier=get_notifier(),
    )


@lru_cache
def get_contact_service() -> ContactService:
    return ContactService(db=get_dynamodb_service(), notifier=get_notifier())


@lru_cache
def get_subscription_service() -> SubscriptionService:
    return SubscriptionService(db=get_dynamodb_service(), notifier=get_notifier())


@lru_cache
def get_user_service() -> UserService:
    settings = get_settings()
    return UserService(
        db=get_dynamodb_service(),
        notifier=get_notifier(),
        signing_secret=settings.signing_secret,
        token_lifetime=dt.timedelta(minutes=settings.jwt_expires_minutes),
    )


@lru_cache
def get_stats_service() -> StatsService:
    return StatsService(
        orders=get_order_service(),
        bookings=get_booking_service(),
        users=get_user_service(),
        subscriptions=get_subscription_service(),
    )


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    return WebhookHandler(
        db=get_dynamodb_service(),
        orders=get_order_service(),
        booking_payments=get_booking_payment_service(),
    )


_PROVIDERS = (
    get_settings,
    get_dynamodb_service,
    get_ssm_service,
    get_stripe_service,
    get_payment_service,
    get_email_transport,
    get_notifier,
    get_booking_service,
    get_booking_payment_service,
    get_product_service,
    get_order_service,
    get_contact_service,
    get_subscription_service,
    get_user_service,
    get_stats_service,
    get_webhook_handler,
)


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests, e.g.
    after changing environment variables.
    """
    for provider in _PROVIDERS:
        provider.cache_clear()
