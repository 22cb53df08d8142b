"""Unit tests for notification rendering, the Notifier and email transports."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from backoffice.models import Booking, BookingCustomer, BookingStatus
from backoffice.services.email_transport import RecordingEmailTransport, SesEmailTransport
from backoffice.services.notifications import (
    AdminAlertNotification,
    BookingConfirmationNotification,
    BookingStatusNotification,
    Notification,
    Notifier,
    WelcomeNotification,
    format_money,
)


@pytest.fixture
def booking() -> Booking:
    created = datetime(2029, 12, 1, 9, 0, tzinfo=UTC)
    return Booking(
        booking_id="BK-1A2B3C4D5E6F",
        customer=BookingCustomer(name="Jane Doe", email="jane@example.com", phone="+1 555 0100"),
        scheduled_at=datetime(2030, 1, 1, 10, 0, tzinfo=UTC),
        notes="Window seat <please>",
        status=BookingStatus.PENDING,
        created_at=created,
        updated_at=created,
    )


class TestRendering:
    def test_booking_confirmation(self, booking):
        notification = BookingConfirmationNotification(
            booking, "https://shop.example.com/bookings/BK-1A2B3C4D5E6F"
        )
        text = notification.render_text()

        assert notification.subject == "Booking Confirmation"
        assert text.startswith("Booking Confirmation\n\nHi Jane,")
        assert "Tuesday, January 01, 2030 at 10:00 UTC" in text
        assert "View Booking Details: https://shop.example.com/bookings/BK-1A2B3C4D5E6F" in text

    def test_html_escapes_user_content(self, booking):
        html = BookingConfirmationNotification(booking).render_html()
        assert "Window seat &lt;please&gt;" in html
        assert "<please>" not in html

    def test_status_messages(self, booking):
        confirmed = booking.model_copy(update={"status": BookingStatus.CONFIRMED})
        assert "Your booking has been confirmed!" in (
            BookingStatusNotification(confirmed).render_text()
        )
        cancelled = BookingStatusNotification.cancelled(booking)
        assert cancelled.subject == "Booking Cancelled"
        assert cancelled.tone == "error"

    def test_admin_alert_subject(self, booking):
        alert = AdminAlertNotification.new_booking(booking)
        assert alert.subject == "New Booking - Tuesday, January 01, 2030 at 10:00 UTC"
        assert "Booking ID: BK-1A2B3C4D5E6F" in alert.render_text()

    @pytest.mark.parametrize(
        "amount,currency,expected",
        [(4999, "usd", "49.99 USD"), (5, "eur", "0.05 EUR"), (0, "usd", "0.00 USD")],
    )
    def test_format_money(self, amount, currency, expected):
        assert format_money(amount, currency) == expected

    def test_subclass_without_body_cannot_be_built(self):
        class Untitled(Notification):
            @property
            def subject(self) -> str:
                return "Untitled"

        with pytest.raises(TypeError, match="paragraphs"):
            Untitled("Jane Doe", "jane@example.com")


class TestNotifier:
    def test_sends_to_recipient(self):
        transport = RecordingEmailTransport()
        assert Notifier(transport).send(WelcomeNotification("Jane Doe", "jane@example.com"))
        assert transport.sent[0]["to"] == "jane@example.com"
        assert transport.sent[0]["subject"] == "Welcome to our platform!"

    def test_disabled_notifier_skips(self):
        transport = RecordingEmailTransport()
        notifier = Notifier(transport, enabled=False)
        assert not notifier.send(WelcomeNotification("Jane", "jane@example.com"))
        assert transport.sent == []

    def test_admin_alert_without_admin_email_is_skipped(self, booking):
        transport = RecordingEmailTransport()
        assert not Notifier(transport).alert_admin(AdminAlertNotification.new_booking(booking))
        assert transport.sent == []

    def test_transport_failure_is_swallowed(self):
        transport = MagicMock()
        transport.send.side_effect = RuntimeError("SES throttled")
        assert not Notifier(transport).send(WelcomeNotification("Jane", "jane@example.com"))


class TestSesEmailTransport:
    def test_sends_through_ses(self, aws_credentials):
        with mock_aws():
            ses = boto3.client("ses", region_name="eu-west-1")
            ses.verify_email_identity(EmailAddress="no-reply@example.com")
            transport = SesEmailTransport("no-reply@example.com", region_name="eu-west-1")

            message_id = transport.send("jane@example.com", "Hello", "<p>Hi</p>", "Hi")

            assert message_id
            quota = ses.get_send_quota()
            assert quota["SentLast24Hours"] == 1

    def test_unverified_sender_raises(self, aws_credentials):
        with mock_aws():
            transport = SesEmailTransport("unverified@example.com", region_name="eu-west-1")
            with pytest.raises(ClientError, match="not verified"):
                transport.send("jane@example.com", "Hello", "<p>Hi</p>", "Hi")
