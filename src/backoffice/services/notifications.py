"""Email notifications.

Every message kind is a ``Notification`` subclass that knows its recipient,
subject and body paragraphs. The base class renders the HTML and plain-text
bodies; the ``Notifier`` hands the result to an email transport.

Usage:
    notifier = Notifier(transport, admin_email="admin@example.com")
    notifier.send(WelcomeNotification(user.name, user.email))
    notifier.alert_admin(AdminAlertNotification.new_order(order))
"""

import html
import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from backoffice.models import Booking, BookingPayment, Contact, Order
from backoffice.utils.logging import log_notification
from backoffice.utils.timestamps import format_long

from .email_transport import EmailTransport

logger = logging.getLogger(__name__)

TONE_COLORS = {
    "success": "#4CAF50",
    "error": "#F44336",
    "info": "#2196F3",
    "warning": "#FF9800",
}

BOOKING_STATUS_MESSAGES = {
    "confirmed": "Your booking has been confirmed!",
    "cancelled": "Your booking has been cancelled.",
    "completed": "Your booking has been marked as completed.",
}
DEFAULT_STATUS_MESSAGE = "Your booking status has been updated."


def format_money(amount: int, currency: str) -> str:
    """Format minor units for display, e.g. ``49.99 USD``."""
    return f"{amount / 100:.2f} {currency.upper()}"


def _first_name(name: str) -> str:
    return name.split(" ")[0] if name else ""


class Notification(ABC):
    """Base class for an outgoing email."""

    kind: ClassVar[str] = "generic"
    tone: ClassVar[str] = "info"

    def __init__(self, recipient_name: str, recipient_email: str, url: str | None = None):
        self.recipient_name = recipient_name
        self.recipient_email = recipient_email
        self.url = url

    @property
    @abstractmethod
    def subject(self) -> str: ...

    @abstractmethod
    def paragraphs(self) -> list[str]:
        """Body paragraphs as plain text."""

    def action(self) -> tuple[str, str] | None:
        """Optional ``(label, url)`` call to action."""
        return None

    def greeting(self) -> str:
        first = _first_name(self.recipient_name)
        return f"Hi {first}," if first else "Hi,"

    def render_text(self) -> str:
        lines = [self.subject, "", self.greeting(), ""]
        for paragraph in self.paragraphs():
            lines.extend([paragraph, ""])
        action = self.action()
        if action:
            label, url = action
            lines.extend([f"{label}: {url}", ""])
        return "\n".join(lines).rstrip() + "\n"

    def render_html(self) -> str:
        color = TONE_COLORS.get(self.tone, TONE_COLORS["info"])
        body = "".join(f"<p>{html.escape(p)}</p>" for p in self.paragraphs())
        action_html = ""
        action = self.action()
        if action:
            label, url = action
            action_html = (
                f'<a href="{html.escape(url, quote=True)}" style="display: inline-block; '
                f"padding: 10px 20px; margin-top: 10px; background-color: {color}; "
                f'color: white; text-decoration: none; border-radius: 4px;">'
                f"{html.escape(label)}</a>"
            )
        return (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 20px auto;">'
            f'<div style="padding: 15px; border-radius: 6px; background-color: {color}; '
            f'color: white; font-weight: bold;">{html.escape(self.subject)}</div>'
            f'<div style="padding: 0 15px 15px; color: #333;">'
            f"<p>{html.escape(self.greeting())}</p>{body}{action_html}</div>"
            "</div>"
        )


class WelcomeNotification(Notification):
    kind = "welcome"
    tone = "success"

    @property
    def subject(self) -> str:
        return "Welcome to our platform!"

    def paragraphs(self) -> list[str]:
        return ["Thank you for registering with us. We're excited to have you on board!"]


class BookingConfirmationNotification(Notification):
    kind = "booking_confirmation"
    tone = "success"

    def __init__(self, booking: Booking, url: str | None = None):
        super().__init__(booking.customer.name, booking.customer.email, url)
        self.booking = booking

    @property
    def subject(self) -> str:
        return "Booking Confirmation"

    def paragraphs(self) -> list[str]:
        paragraphs = [
            f"Your booking on {format_long(self.booking.scheduled_at)} has been received.",
            f"Status: {self.booking.status.value}",
        ]
        if self.booking.notes:
            paragraphs.append(f"Notes: {self.booking.notes}")
        return paragraphs

    def action(self) -> tuple[str, str] | None:
        return ("View Booking Details", self.url) if self.url else None


class BookingStatusNotification(Notification):
    """Booking update or cancellation sent to the customer."""

    kind = "booking_status"

    def __init__(
        self,
        booking: Booking,
        message: str | None = None,
        url: str | None = None,
        subject: str = "Booking Updated",
    ):
        super().__init__(booking.customer.name, booking.customer.email, url)
        self.booking = booking
        self.message = message or BOOKING_STATUS_MESSAGES.get(
            booking.status.value, DEFAULT_STATUS_MESSAGE
        )
        self._subject = subject

    @classmethod
    def cancelled(cls, booking: Booking, url: str | None = None) -> "BookingStatusNotification":
        message = f"Your booking for {format_long(booking.scheduled_at)} has been cancelled."
        return cls(booking, message, url, subject="Booking Cancelled")

    @property
    def tone(self) -> str:  # type: ignore[override]
        return "error" if self._subject == "Booking Cancelled" else "info"

    @property
    def subject(self) -> str:
        return self._subject

    def paragraphs(self) -> list[str]:
        return [
            self.message,
            f"Status: {self.booking.status.value}",
            f"Scheduled date: {format_long(self.booking.scheduled_at)}",
        ]

    def action(self) -> tuple[str, str] | None:
        return ("View Changes", self.url) if self.url else None


class OrderConfirmationNotification(Notification):
    kind = "order_confirmation"
    tone = "success"

    def __init__(self, order: Order):
        super().__init__(order.customer.name, order.customer.email)
        self.order = order

    @property
    def subject(self) -> str:
        return f"Order Confirmation - {self.order.order_id}"

    def paragraphs(self) -> list[str]:
        currency = self.order.currency
        lines = [f"Thank you for your order! Your order number is {self.order.order_id}."]
        for item in self.order.items:
            size = f" ({item.size.value})" if item.size else ""
            lines.append(
                f"{item.quantity} x {item.name}{size}: {format_money(item.line_total, currency)}"
            )
        lines.append(f"Total: {format_money(self.order.total_price, currency)}")
        lines.append(f"Shipping to: {self.order.customer.address}")
        return lines


class SubscriptionConfirmationNotification(Notification):
    kind = "subscription_confirmation"
    tone = "success"

    @property
    def subject(self) -> str:
        return "Please confirm your subscription"

    def paragraphs(self) -> list[str]:
        return [
            "Thank you for subscribing to our newsletter! Please confirm your email "
            "address to start receiving updates."
        ]

    def action(self) -> tuple[str, str] | None:
        return ("Confirm Subscription", self.url) if self.url else None


class ContactConfirmationNotification(Notification):
    kind = "contact_confirmation"

    @property
    def subject(self) -> str:
        return "We Received Your Message"

    def paragraphs(self) -> list[str]:
        return [
            "Thank you for contacting us. We've received your message and will get "
            "back to you soon."
        ]


class PaymentReceiptNotification(Notification):
    """Payment created, updated or refunded for a booking."""

    kind = "payment_receipt"
    tone = "success"

    EVENT_SUBJECTS: ClassVar[dict[str, str]] = {
        "created": "Payment Received",
        "updated": "Payment Updated",
        "refunded": "Payment Refunded",
    }

    def __init__(self, booking: Booking, payment: BookingPayment, event: str):
        super().__init__(booking.customer.name, booking.customer.email)
        self.booking = booking
        self.payment = payment
        self.event = event

    @property
    def subject(self) -> str:
        return self.EVENT_SUBJECTS.get(self.event, "Payment Update")

    def paragraphs(self) -> list[str]:
        return [
            f"Booking: {self.booking.booking_id} on {format_long(self.booking.scheduled_at)}",
            f"Amount: {format_money(self.payment.amount, self.payment.currency)}",
            f"Payment status: {self.payment.status.value}",
        ]


class AdminAlertNotification(Notification):
    """Internal alert sent to the configured admin address."""

    kind = "admin_alert"
    tone = "warning"

    def __init__(self, subject: str, lines: list[str]):
        super().__init__("Admin", "")
        self._subject = subject
        self.lines = lines

    @property
    def subject(self) -> str:
        return self._subject

    def paragraphs(self) -> list[str]:
        return self.lines

    @classmethod
    def new_booking(cls, booking: Booking) -> "AdminAlertNotification":
        return cls(
            f"New Booking - {format_long(booking.scheduled_at)}",
            [
                f"Booking ID: {booking.booking_id}",
                f"Customer: {booking.customer.name} <{booking.customer.email}>",
                f"Phone: {booking.customer.phone}",
                f"Notes: {booking.notes or '-'}",
            ],
        )

    @classmethod
    def new_order(cls, order: Order) -> "AdminAlertNotification":
        return cls(
            f"New Order - {order.order_id}",
            [
                f"Customer: {order.customer.name} <{order.customer.email}>",
                f"Items: {sum(item.quantity for item in order.items)}",
                f"Total: {format_money(order.total_price, order.currency)}",
                f"Payment status: {order.payment.status.value}",
            ],
        )

    @classmethod
    def order_paid(cls, order: Order) -> "AdminAlertNotification":
        return cls(
            f"Order Paid - {order.order_id}",
            [
                f"Customer: {order.customer.name} <{order.customer.email}>",
                f"Total: {format_money(order.total_price, order.currency)}",
            ],
        )

    @classmethod
    def new_contact(cls, contact: Contact) -> "AdminAlertNotification":
        return cls(
            f"New Contact Form Submission: {contact.subject}",
            [
                f"From: {contact.name} <{contact.email}>",
                f"Message: {contact.message}",
            ],
        )


class Notifier:
    """Delivers notifications; delivery failures are logged, never raised."""

    def __init__(
        self,
        transport: EmailTransport,
        *,
        admin_email: str | None = None,
        enabled: bool = True,
    ) -> None:
        self.transport = transport
        self.admin_email = admin_email
        self.enabled = enabled

    def send(self, notification: Notification, to: str | None = None) -> bool:
        """Render and deliver a notification.

        Args:
            notification: Message to send
            to: Override recipient address

        Returns:
            True if the transport accepted the message
        """
        recipient = to or notification.recipient_email
        if not self.enabled or not recipient:
            log_notification(logger, notification.kind, recipient or "-", result="skipped")
            return False

        try:
            message_id = self.transport.send(
                recipient,
                notification.subject,
                notification.render_html(),
                notification.render_text(),
            )
        except Exception as e:  # noqa: BLE001 - email must never fail the request
            log_notification(
                logger, notification.kind, recipient, result="failed", error=str(e)
            )
            return False

        log_notification(
            logger, notification.kind, recipient, result="sent", message_id=message_id
        )
        return True

    def alert_admin(self, notification: AdminAlertNotification) -> bool:
        return self.send(notification, to=self.admin_email)
