"""User accounts, authentication and admin user management."""

import datetime as dt
import logging
from typing import Any

from backoffice.models import (
    AuthToken,
    BackofficeError,
    ErrorCode,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    RoleCount,
    User,
    UserRecord,
    UserRole,
    UserUpdate,
)
from backoffice.utils.ids import new_id
from backoffice.utils.passwords import hash_password, verify_password
from backoffice.utils.timestamps import from_storage, optional_from_storage, to_storage, utc_now
from backoffice.utils.tokens import InvalidTokenError, create_access_token, decode_access_token

from .dynamodb import DynamoDBService
from .notifications import Notifier, WelcomeNotification
from .tables import EMAIL_INDEX

logger = logging.getLogger(__name__)


def _to_item(user: UserRecord) -> dict[str, Any]:
    item = user.model_dump(mode="json")
    item["created_at"] = to_storage(user.created_at)
    item["updated_at"] = to_storage(user.updated_at)
    item["last_login"] = to_storage(user.last_login) if user.last_login else None
    return item


def _from_item(item: dict[str, Any]) -> UserRecord:
    data = dict(item)
    data["created_at"] = from_storage(item["created_at"])
    data["updated_at"] = from_storage(item["updated_at"])
    data["last_login"] = optional_from_storage(item.get("last_login"))
    return UserRecord.model_validate(data)


class UserService:
    """Service for registration, login and user administration."""

    TABLE = "users"

    def __init__(
        self,
        db: DynamoDBService,
        notifier: Notifier,
        signing_secret: str,
        token_lifetime: dt.timedelta = dt.timedelta(days=1),
    ) -> None:
        """Initialize user service.

        Args:
            db: DynamoDB service instance
            notifier: Sends the welcome email
            signing_secret: Secret used to sign access tokens
            token_lifetime: How long issued tokens stay valid
        """
        self.db = db
        self.notifier = notifier
        self.signing_secret = signing_secret
        self.token_lifetime = token_lifetime

    # Authentication

    def register(self, data: RegisterRequest) -> AuthToken:
        """Create an account and sign the user in.

        Raises:
            BackofficeError: PASSWORDS_DO_NOT_MATCH, DUPLICATE_EMAIL
        """
        if data.password != data.confirm_password:
            raise BackofficeError(ErrorCode.PASSWORDS_DO_NOT_MATCH)
        self._ensure_email_free(data.email)

        now = utc_now()
        record = UserRecord(
            user_id=new_id("USR"),
            name=data.name,
            email=data.email,
            role=UserRole.USER,
            password_hash=hash_password(data.password),
            created_at=now,
            updated_at=now,
        )
        self.db.put_item(
            self.TABLE, _to_item(record), condition_expression="attribute_not_exists(user_id)"
        )
        logger.info("User registered: %s", record.user_id)

        self.notifier.send(WelcomeNotification(record.name, record.email))
        return self._issue_token(record.public())

    def login(self, data: LoginRequest) -> AuthToken:
        """Check credentials and issue a token.

        Raises:
            BackofficeError: INVALID_CREDENTIALS for unknown email, wrong
                password or a deactivated account
        """
        item = self._find_by_email(data.email)
        record = _from_item(item) if item else None
        if record is None or not verify_password(data.password, record.password_hash):
            raise BackofficeError(ErrorCode.INVALID_CREDENTIALS)
        if not record.active:
            raise BackofficeError(ErrorCode.INVALID_CREDENTIALS)

        now = utc_now()
        attrs = self.db.update_item(
            self.TABLE,
            key={"user_id": record.user_id},
            update_expression=(
                "SET login_count = if_not_exists(login_count, :zero) + :one, "
                "last_login = :now, updated_at = :now"
            ),
            expression_attribute_values={":zero": 0, ":one": 1, ":now": to_storage(now)},
            condition_expression="attribute_exists(user_id)",
        )
        if attrs is None:
            raise BackofficeError(ErrorCode.INVALID_CREDENTIALS)
        logger.info("User logged in: %s", record.user_id)
        return self._issue_token(_from_item(attrs).public())

    def authenticate_token(self, token: str) -> User:
        """Resolve a bearer token to an active user.

        Raises:
            BackofficeError: AUTH_REQUIRED if the token is invalid or the
                user no longer exists or is inactive
        """
        try:
            claims = decode_access_token(token, self.signing_secret)
        except InvalidTokenError as e:
            logger.info("Rejected access token: %s", e)
            raise BackofficeError(ErrorCode.AUTH_REQUIRED) from e

        item = self.db.get_item(self.TABLE, {"user_id": claims["sub"]})
        if not item:
            raise BackofficeError(ErrorCode.AUTH_REQUIRED)
        user = _from_item(item).public()
        if not user.active:
            raise BackofficeError(ErrorCode.AUTH_REQUIRED)
        return user

    # Self-service

    def update_profile(self, user_id: str, data: ProfileUpdate) -> User:
        return self._apply_update(user_id, data.model_dump(exclude_none=True))

    def deactivate(self, user_id: str) -> None:
        """Soft-delete the caller's own account."""
        self._apply_update(user_id, {"active": False})
        logger.info("User deactivated: %s", user_id)

    # Administration

    def list_users(self) -> list[User]:
        users = [_from_item(item).public() for item in self.db.scan(self.TABLE)]
        return sorted(users, key=lambda u: u.created_at, reverse=True)

    def get_user(self, user_id: str) -> User:
        return self._get_record(user_id).public()

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        changes = data.model_dump(exclude_none=True)
        if "role" in changes:
            changes["role"] = changes["role"].value
        return self._apply_update(user_id, changes)

    def make_admin(self, user_id: str) -> User:
        return self._apply_update(user_id, {"role": UserRole.ADMIN.value})

    def delete_user(self, user_id: str) -> None:
        if self.db.delete_item(self.TABLE, {"user_id": user_id}) is None:
            raise BackofficeError(ErrorCode.USER_NOT_FOUND, details={"user_id": user_id})
        logger.info("User deleted: %s", user_id)

    def role_stats(self) -> list[RoleCount]:
        """Number of users per role, most common first."""
        counts: dict[UserRole, int] = {}
        for user in self.list_users():
            counts[user.role] = counts.get(user.role, 0) + 1
        return [
            RoleCount(role=role, count=count)
            for role, count in sorted(counts.items(), key=lambda kv: -kv[1])
        ]

    # Internals

    def _find_by_email(self, email: str) -> dict[str, Any] | None:
        results = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=EMAIL_INDEX,
            partition_key_name="email",
            partition_key_value=email.lower(),
        )
        return results[0] if results else None

    def _ensure_email_free(self, email: str, user_id: str | None = None) -> None:
        existing = self._find_by_email(email)
        if existing and existing["user_id"] != user_id:
            raise BackofficeError(ErrorCode.DUPLICATE_EMAIL, details={"email": email})

    def _get_record(self, user_id: str) -> UserRecord:
        item = self.db.get_item(self.TABLE, {"user_id": user_id})
        if not item:
            raise BackofficeError(ErrorCode.USER_NOT_FOUND, details={"user_id": user_id})
        return _from_item(item)

    def _apply_update(self, user_id: str, changes: dict[str, Any]) -> User:
        if "email" in changes:
            self._ensure_email_free(changes["email"], user_id)
        if not changes:
            return self.get_user(user_id)

        changes = {**changes, "updated_at": to_storage(utc_now())}
        attrs = self.db.update_item(
            self.TABLE,
            key={"user_id": user_id},
            update_expression="SET " + ", ".join(f"#{key} = :{key}" for key in changes),
            expression_attribute_names={f"#{key}": key for key in changes},
            expression_attribute_values={f":{key}": value for key, value in changes.items()},
            condition_expression="attribute_exists(user_id)",
        )
        if attrs is None:
            raise BackofficeError(ErrorCode.USER_NOT_FOUND, details={"user_id": user_id})
        return _from_item(attrs).public()

    def _issue_token(self, user: User) -> AuthToken:
        token, expires_at = create_access_token(
            user.user_id,
            self.signing_secret,
            self.token_lifetime,
            role=user.role.value,
        )
        return AuthToken(token=token, expires_at=expires_at, user=user)
