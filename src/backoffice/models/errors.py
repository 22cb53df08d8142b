"""Standard error codes for the back-office API.

All services raise ``BackofficeError`` with one of these codes. The API
layer maps each code to an HTTP status and renders an ``ErrorResponse``.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Request and business-rule errors (ERR_001-ERR_010)
    VALIDATION_FAILED = "ERR_001"
    BOOKING_CONFLICT = "ERR_002"
    INVALID_STATUS_TRANSITION = "ERR_003"
    DUPLICATE_EMAIL = "ERR_004"
    ORDER_TOTAL_MISMATCH = "ERR_005"
    PRODUCT_UNAVAILABLE = "ERR_006"
    PAYMENT_METHOD_UNSUPPORTED = "ERR_007"
    PAYMENT_FAILED = "ERR_008"
    INVALID_VERIFICATION_TOKEN = "ERR_009"
    BOOKING_NOT_MODIFIABLE = "ERR_010"

    # Not found errors (ERR_404_*)
    BOOKING_NOT_FOUND = "ERR_404_BOOKING"
    ORDER_NOT_FOUND = "ERR_404_ORDER"
    PRODUCT_NOT_FOUND = "ERR_404_PRODUCT"
    CONTACT_NOT_FOUND = "ERR_404_CONTACT"
    SUBSCRIPTION_NOT_FOUND = "ERR_404_SUBSCRIPTION"
    USER_NOT_FOUND = "ERR_404_USER"
    PAYMENT_NOT_FOUND = "ERR_404_PAYMENT"

    # Authentication error codes (ERR_AUTH_001-ERR_AUTH_004)
    AUTH_REQUIRED = "ERR_AUTH_001"
    INVALID_CREDENTIALS = "ERR_AUTH_002"
    PASSWORDS_DO_NOT_MATCH = "ERR_AUTH_003"
    FORBIDDEN = "ERR_AUTH_004"

    # Stripe/Payment provider error codes (ERR_STRIPE_001-ERR_STRIPE_003)
    INVALID_WEBHOOK_SIGNATURE = "ERR_STRIPE_001"
    STRIPE_API_ERROR = "ERR_STRIPE_002"
    WEBHOOK_NOT_CONFIGURED = "ERR_STRIPE_003"

    INTERNAL = "ERR_INTERNAL"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "Request validation failed",
    ErrorCode.BOOKING_CONFLICT: "You already have a booking within one hour of the requested time",
    ErrorCode.INVALID_STATUS_TRANSITION: "This status change is not allowed",
    ErrorCode.DUPLICATE_EMAIL: "This email is already registered",
    ErrorCode.ORDER_TOTAL_MISMATCH: "Order total does not match the sum of its items",
    ErrorCode.PRODUCT_UNAVAILABLE: "One or more products are unavailable",
    ErrorCode.PAYMENT_METHOD_UNSUPPORTED: "Payment method not supported",
    ErrorCode.PAYMENT_FAILED: "Payment processing failed",
    ErrorCode.INVALID_VERIFICATION_TOKEN: "Invalid verification token",
    ErrorCode.BOOKING_NOT_MODIFIABLE: "Cancelled bookings can only have their notes changed",
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found",
    ErrorCode.ORDER_NOT_FOUND: "Order not found",
    ErrorCode.PRODUCT_NOT_FOUND: "Product not found",
    ErrorCode.CONTACT_NOT_FOUND: "No contact found with that ID",
    ErrorCode.SUBSCRIPTION_NOT_FOUND: "No subscription found with that ID",
    ErrorCode.USER_NOT_FOUND: "No user found with that ID",
    ErrorCode.PAYMENT_NOT_FOUND: "Payment not found",
    ErrorCode.AUTH_REQUIRED: "You are not logged in! Please log in to get access.",
    ErrorCode.INVALID_CREDENTIALS: "Incorrect email or password",
    ErrorCode.PASSWORDS_DO_NOT_MATCH: "Passwords do not match",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.STRIPE_API_ERROR: "Payment provider error occurred",
    ErrorCode.WEBHOOK_NOT_CONFIGURED: "Webhook secret not configured",
    ErrorCode.INTERNAL: "An unexpected error occurred",
}


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint.

    Attributes:
        success: Always False for errors
        error_code: Standard error code (e.g., ERR_002)
        message: Human-readable error message
        details: Optional additional context about the error
    """

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    details: Optional[dict[str, str]] = None


class BackofficeError(Exception):
    """Exception raised by back-office operations.

    ``message`` overrides the default text for the code when a more
    specific explanation is available (e.g. the conflicting booking time).
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
        message: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error_code=self.code, message=self.message, details=self.details)


# Stripe error code to user-friendly message mapping
STRIPE_ERROR_MESSAGES: dict[str, str] = {
    # Card errors - user can fix
    "card_declined": "Your card was declined. Please try a different card.",
    "expired_card": "Your card has expired. Please use a different card.",
    "insufficient_funds": "Your card has insufficient funds. Please try a different card.",
    "incorrect_cvc": "The security code (CVC) is incorrect. Please check and try again.",
    "incorrect_number": "The card number is incorrect. Please check and try again.",
    "invalid_number": "The card number is invalid. Please check and try again.",
    # Processing errors - may be transient
    "processing_error": "A processing error occurred. Please try again.",
    "rate_limit": "Too many requests. Please wait a moment and try again.",
    "generic_decline": "Your card was declined. Please try a different card.",
}


def get_user_friendly_stripe_message(
    stripe_error_code: Optional[str],
    default_message: str = "Payment could not be processed. Please try again.",
) -> str:
    """Get a user-friendly message for a Stripe error code.

    Args:
        stripe_error_code: The Stripe error code (e.g., 'card_declined').
        default_message: Message to use if error code is unknown.

    Returns:
        User-friendly error message.
    """
    if stripe_error_code and stripe_error_code in STRIPE_ERROR_MESSAGES:
        return STRIPE_ERROR_MESSAGES[stripe_error_code]
    return default_message


def validation_details(error: Any) -> dict[str, str]:
    """Flatten pydantic validation errors into ``{field: message}``.

    Args:
        error: Anything exposing pydantic-style ``errors()``.

    Returns:
        Mapping of dotted field location to the first message for it.
    """
    details: dict[str, str] = {}
    for err in error.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        details.setdefault(field, err.get("msg", "Invalid value"))
    return details
