"""Pydantic models for back-office data entities."""

from .booking import (
    Booking,
    BookingCreate,
    BookingCustomer,
    BookingCustomerUpdate,
    BookingPayment,
    BookingStats,
    BookingStatusCount,
    BookingUpdate,
)
from .contact import Contact, ContactCreate, ContactStats, ContactStatusCount
from .enums import (
    BookingStatus,
    ContactStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductCategory,
    ProductSize,
    UserRole,
)
from .errors import BackofficeError, ErrorCode, ErrorResponse
from .order import (
    Order,
    OrderCreate,
    OrderCustomer,
    OrderItem,
    OrderPayment,
    OrderStatistics,
    OrderUpdate,
)
from .payment import (
    BookingPaymentCreate,
    BookingPaymentResponse,
    BookingPaymentStatusUpdate,
    PaymentResult,
    RefundResult,
)
from .product import (
    CategoryStats,
    Product,
    ProductCreate,
    ProductStats,
    ProductUpdate,
)
from .stats import MonthlyStats, PeriodStats, YearlyStats
from .subscription import (
    MonthlySubscriptionStats,
    Subscription,
    SubscriptionCreate,
    SubscriptionUpdate,
)
from .user import (
    AuthToken,
    LoginRequest,
    MonthlyUserStats,
    ProfileUpdate,
    RegisterRequest,
    RoleCount,
    User,
    UserRecord,
    UserUpdate,
)

__all__ = [
    # Bookings
    "Booking",
    "BookingCreate",
    "BookingCustomer",
    "BookingCustomerUpdate",
    "BookingPayment",
    "BookingStats",
    "BookingStatusCount",
    "BookingUpdate",
    # Contacts
    "Contact",
    "ContactCreate",
    "ContactStats",
    "ContactStatusCount",
    # Enums
    "BookingStatus",
    "ContactStatus",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "ProductCategory",
    "ProductSize",
    "UserRole",
    # Errors
    "BackofficeError",
    "ErrorCode",
    "ErrorResponse",
    # Orders
    "Order",
    "OrderCreate",
    "OrderCustomer",
    "OrderItem",
    "OrderPayment",
    "OrderStatistics",
    "OrderUpdate",
    # Payments
    "BookingPaymentCreate",
    "BookingPaymentResponse",
    "BookingPaymentStatusUpdate",
    "PaymentResult",
    "RefundResult",
    # Products
    "CategoryStats",
    "Product",
    "ProductCreate",
    "ProductStats",
    "ProductUpdate",
    # Stats
    "MonthlyStats",
    "PeriodStats",
    "YearlyStats",
    # Subscriptions
    "MonthlySubscriptionStats",
    "Subscription",
    "SubscriptionCreate",
    "SubscriptionUpdate",
    # Users
    "AuthToken",
    "LoginRequest",
    "MonthlyUserStats",
    "ProfileUpdate",
    "RegisterRequest",
    "RoleCount",
    "User",
    "UserRecord",
    "UserUpdate",
]
