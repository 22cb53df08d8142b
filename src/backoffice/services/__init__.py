"""Backend services for the back-office API."""

from .booking_payments import BookingPaymentService
from .booking_service import BookingService
from .contact_service import ContactService
from .dynamodb import DynamoDBService
from .email_transport import EmailTransport, RecordingEmailTransport, SesEmailTransport
from .notifications import Notifier
from .order_service import OrderService
from .payment_service import PaymentService
from .product_service import ProductService
from .ssm_service import SSMService, SSMServiceError
from .stats_service import StatsService
from .stripe_service import StripeService, StripeServiceError
from .subscription_service import SubscriptionService
from .user_service import UserService
from .webhook_handler import WebhookHandler

__all__ = [
    "DynamoDBService",
    "BookingService",
    "BookingPaymentService",
    "ContactService",
    "OrderService",
    "PaymentService",
    "ProductService",
    "StatsService",
    "SubscriptionService",
    "UserService",
    "WebhookHandler",
    "EmailTransport",
    "RecordingEmailTransport",
    "SesEmailTransport",
    "Notifier",
    "SSMService",
    "SSMServiceError",
    "StripeService",
    "StripeServiceError",
]
