"""Contact form submissions."""

import datetime as dt
import logging
from typing import Any

from backoffice.models import (
    BackofficeError,
    Contact,
    ContactCreate,
    ContactStats,
    ContactStatus,
    ContactStatusCount,
    ErrorCode,
)
from backoffice.utils.ids import new_id
from backoffice.utils.timestamps import from_storage, optional_from_storage, to_storage, utc_now

from .dynamodb import DynamoDBService
from .notifications import AdminAlertNotification, ContactConfirmationNotification, Notifier

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


def _to_item(contact: Contact) -> dict[str, Any]:
    item = contact.model_dump(mode="json")
    item["created_at"] = to_storage(contact.created_at)
    item["updated_at"] = to_storage(contact.updated_at)
    item["responded_at"] = to_storage(contact.responded_at) if contact.responded_at else None
    return item


def _from_item(item: dict[str, Any]) -> Contact:
    data = dict(item)
    data["created_at"] = from_storage(item["created_at"])
    data["updated_at"] = from_storage(item["updated_at"])
    data["responded_at"] = optional_from_storage(item.get("responded_at"))
    return Contact.model_validate(data)


class ContactService:
    """Service for contact form submissions."""

    TABLE = "contacts"

    def __init__(self, db: DynamoDBService, notifier: Notifier) -> None:
        self.db = db
        self.notifier = notifier

    def submit(
        self,
        data: ContactCreate,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Contact:
        """Store a submission, alert the admin and confirm to the sender."""
        now = utc_now()
        contact = Contact(
            contact_id=new_id("CON"),
            name=data.name,
            email=data.email,
            subject=data.subject,
            message=data.message,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            updated_at=now,
        )
        self.db.put_item(self.TABLE, _to_item(contact))
        logger.info("Contact submission stored: %s from %s", contact.contact_id, contact.email)

        self.notifier.alert_admin(AdminAlertNotification.new_contact(contact))
        self.notifier.send(ContactConfirmationNotification(contact.name, contact.email))
        return contact

    def list_contacts(self) -> list[Contact]:
        contacts = [_from_item(item) for item in self.db.scan(self.TABLE)]
        return sorted(contacts, key=lambda c: c.created_at, reverse=True)

    def get_contact(self, contact_id: str) -> Contact:
        item = self.db.get_item(self.TABLE, {"contact_id": contact_id})
        if not item:
            raise BackofficeError(ErrorCode.CONTACT_NOT_FOUND, details={"contact_id": contact_id})
        return _from_item(item)

    def update_status(self, contact_id: str, status: ContactStatus) -> Contact:
        """Change the handling status; resolving records the response time."""
        current = self.get_contact(contact_id)
        now = utc_now()
        update: dict[str, Any] = {"status": status, "updated_at": now}
        if status == ContactStatus.RESOLVED:
            update["responded_at"] = now
        updated = current.model_copy(update=update)
        if not self.db.put_item(
            self.TABLE,
            _to_item(updated),
            condition_expression="attribute_exists(contact_id)",
        ):
            raise BackofficeError(ErrorCode.CONTACT_NOT_FOUND, details={"contact_id": contact_id})
        return updated

    def contact_stats(self) -> ContactStats:
        """Totals per status and the number received in the last 7 days."""
        contacts = self.list_contacts()
        counts: dict[ContactStatus, int] = {}
        for contact in contacts:
            counts[contact.status] = counts.get(contact.status, 0) + 1
        since = utc_now() - dt.timedelta(days=RECENT_DAYS)
        return ContactStats(
            total=len(contacts),
            stats=[
                ContactStatusCount(status=status, count=count)
                for status, count in sorted(counts.items(), key=lambda kv: -kv[1])
            ],
            last_7_days=sum(1 for c in contacts if c.created_at >= since),
        )
