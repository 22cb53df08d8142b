"""Enumeration types for back-office data models."""

from enum import Enum


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Status of a payment attached to an order or booking."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""

    CREDIT_CARD = "credit-card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank-transfer"


class OrderStatus(str, Enum):
    """Fulfilment status of an order."""

    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ProductCategory(str, Enum):
    CLOTHING = "clothing"
    ELECTRONICS = "electronics"
    HOME = "home"
    BEAUTY = "beauty"
    SPORTS = "sports"
    BOOKS = "books"
    OTHER = "other"


class ProductSize(str, Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"


class ContactStatus(str, Enum):
    """Handling status of a contact form submission."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    SPAM = "spam"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
