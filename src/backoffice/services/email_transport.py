"""Email transports.

A transport delivers one already-rendered message. Notifications never talk
to a mail provider directly.
"""

import logging
from typing import Protocol

import boto3

logger = logging.getLogger(__name__)


class EmailTransport(Protocol):
    """Anything that can deliver a rendered email."""

    def send(self, to: str, subject: str, html: str, text: str) -> str | None:
        """Deliver a message and return the provider message ID if known."""
        ...


class SesEmailTransport:
    """Email transport backed by Amazon SES."""

    def __init__(self, sender: str, region_name: str | None = None) -> None:
        """Initialize the SES client.

        Args:
            sender: From address, e.g. ``Bookings <no-reply@example.com>``
            region_name: SES region. Defaults to the boto3 resolution chain.
        """
        self.sender = sender
        self._client = boto3.client("ses", region_name=region_name)

    def send(self, to: str, subject: str, html: str, text: str) -> str | None:
        response = self._client.send_email(
            Source=self.sender,
            Destination={"ToAddresses": [to]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {
                    "Text": {"Data": text, "Charset": "UTF-8"},
                    "Html": {"Data": html, "Charset": "UTF-8"},
                },
            },
        )
        message_id: str | None = response.get("MessageId")
        return message_id


class RecordingEmailTransport:
    """Transport that keeps messages in memory instead of sending them.

    Used for local development when no mail provider is configured.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    def send(self, to: str, subject: str, html: str, text: str) -> str | None:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        logger.info("Recorded email to %s: %s", to, subject)
        return None
