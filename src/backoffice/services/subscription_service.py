"""Newsletter subscriptions with email verification."""

import datetime as dt
import logging
import secrets
from typing import Any

from backoffice.models import (
    BackofficeError,
    ErrorCode,
    MonthlySubscriptionStats,
    Subscription,
    SubscriptionCreate,
    SubscriptionUpdate,
)
from backoffice.utils.ids import new_id
from backoffice.utils.timestamps import from_storage, one_year_before, to_storage, utc_now

from .dynamodb import DynamoDBService
from .notifications import Notifier, SubscriptionConfirmationNotification
from .tables import EMAIL_INDEX, VERIFICATION_TOKEN_INDEX

logger = logging.getLogger(__name__)

ALREADY_SUBSCRIBED = "This email is already subscribed"


def generate_verification_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(32)


def _from_item(item: dict[str, Any]) -> Subscription:
    return Subscription(
        subscription_id=item["subscription_id"],
        name=item["name"],
        email=item["email"],
        is_verified=item.get("is_verified", False),
        created_at=from_storage(item["created_at"]),
        updated_at=from_storage(item["updated_at"]),
    )


class SubscriptionService:
    """Service for newsletter subscriptions."""

    TABLE = "subscriptions"

    def __init__(self, db: DynamoDBService, notifier: Notifier) -> None:
        self.db = db
        self.notifier = notifier

    def _find_by_email(self, email: str) -> dict[str, Any] | None:
        results = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=EMAIL_INDEX,
            partition_key_name="email",
            partition_key_value=email,
        )
        return results[0] if results else None

    def subscribe(self, data: SubscriptionCreate, verify_url_base: str) -> Subscription:
        """Create an unverified subscription and email the verification link.

        Args:
            data: Subscriber name and email
            verify_url_base: Base URL the verification path is appended to

        Raises:
            BackofficeError: DUPLICATE_EMAIL
        """
        if self._find_by_email(data.email):
            raise BackofficeError(
                ErrorCode.DUPLICATE_EMAIL, details={"email": data.email}, message=ALREADY_SUBSCRIBED
            )

        now = utc_now()
        token = generate_verification_token()
        subscription = Subscription(
            subscription_id=new_id("SUB"),
            name=data.name,
            email=data.email,
            is_verified=False,
            created_at=now,
            updated_at=now,
        )
        item = {
            **subscription.model_dump(mode="json"),
            "verification_token": token,
            "created_at": to_storage(now),
            "updated_at": to_storage(now),
        }
        self.db.put_item(
            self.TABLE, item, condition_expression="attribute_not_exists(subscription_id)"
        )
        logger.info("Subscription created: %s", subscription.subscription_id)

        verify_url = f"{verify_url_base.rstrip('/')}/api/subscriptions/verify/{token}"
        self.notifier.send(
            SubscriptionConfirmationNotification(subscription.name, subscription.email, verify_url)
        )
        return subscription

    def verify(self, token: str) -> Subscription:
        """Mark the subscription holding ``token`` as verified.

        The token is single use.

        Raises:
            BackofficeError: INVALID_VERIFICATION_TOKEN
        """
        results = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=VERIFICATION_TOKEN_INDEX,
            partition_key_name="verification_token",
            partition_key_value=token,
        )
        if not results:
            raise BackofficeError(ErrorCode.INVALID_VERIFICATION_TOKEN)

        subscription_id = results[0]["subscription_id"]
        attrs = self.db.update_item(
            self.TABLE,
            key={"subscription_id": subscription_id},
            update_expression="SET is_verified = :true, updated_at = :now REMOVE verification_token",
            condition_expression="verification_token = :token",
            expression_attribute_values={
                ":true": True,
                ":now": to_storage(utc_now()),
                ":token": token,
            },
        )
        if attrs is None:
            raise BackofficeError(ErrorCode.INVALID_VERIFICATION_TOKEN)
        logger.info("Subscription verified: %s", subscription_id)
        return _from_item(attrs)

    def list_subscriptions(self) -> list[Subscription]:
        subscriptions = [_from_item(item) for item in self.db.scan(self.TABLE)]
        return sorted(subscriptions, key=lambda s: s.created_at, reverse=True)

    def get_subscription(self, subscription_id: str) -> Subscription:
        item = self.db.get_item(self.TABLE, {"subscription_id": subscription_id})
        if not item:
            raise BackofficeError(
                ErrorCode.SUBSCRIPTION_NOT_FOUND, details={"subscription_id": subscription_id}
            )
        return _from_item(item)

    def update_subscription(self, subscription_id: str, data: SubscriptionUpdate) -> Subscription:
        """Update name, email or verification flag.

        Raises:
            BackofficeError: SUBSCRIPTION_NOT_FOUND, DUPLICATE_EMAIL
        """
        current = self.get_subscription(subscription_id)
        changes = data.model_dump(exclude_none=True)
        if "email" in changes and changes["email"] != current.email:
            if self._find_by_email(changes["email"]):
                raise BackofficeError(
                    ErrorCode.DUPLICATE_EMAIL,
                    details={"email": changes["email"]},
                    message=ALREADY_SUBSCRIBED,
                )
        if not changes:
            return current

        changes["updated_at"] = to_storage(utc_now())
        names = {f"#{key}": key for key in changes}
        values = {f":{key}": value for key, value in changes.items()}
        attrs = self.db.update_item(
            self.TABLE,
            key={"subscription_id": subscription_id},
            update_expression="SET " + ", ".join(f"#{key} = :{key}" for key in changes),
            expression_attribute_names=names,
            expression_attribute_values=values,
            condition_expression="attribute_exists(subscription_id)",
        )
        if attrs is None:
            raise BackofficeError(
                ErrorCode.SUBSCRIPTION_NOT_FOUND, details={"subscription_id": subscription_id}
            )
        return _from_item(attrs)

    def delete_subscription(self, subscription_id: str) -> None:
        if self.db.delete_item(self.TABLE, {"subscription_id": subscription_id}) is None:
            raise BackofficeError(
                ErrorCode.SUBSCRIPTION_NOT_FOUND, details={"subscription_id": subscription_id}
            )

    def monthly_stats(self, now: dt.datetime | None = None) -> list[MonthlySubscriptionStats]:
        """Subscriptions created in the last 12 months, grouped by calendar month.

        Returns:
            One entry per month that has subscriptions, ordered by month number
        """
        now = now or utc_now()
        since = one_year_before(now)
        totals: dict[int, list[int]] = {}
        for subscription in self.list_subscriptions():
            if subscription.created_at < since:
                continue
            counts = totals.setdefault(subscription.created_at.month, [0, 0])
            counts[0] += 1
            if subscription.is_verified:
                counts[1] += 1
        return [
            MonthlySubscriptionStats(
                month=month, total_subscriptions=total, verified_subscriptions=verified
            )
            for month, (total, verified) in sorted(totals.items())
        ]
