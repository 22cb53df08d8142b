"""User account models."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from .enums import UserRole


class _EmailNormalizer(BaseModel):
    @field_validator("email", check_fields=False)
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class RegisterRequest(_EmailNormalizer):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(_EmailNormalizer):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdate(_EmailNormalizer):
    """Fields a user may change on their own account."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None


class UserUpdate(ProfileUpdate):
    """Fields an administrator may change."""

    role: UserRole | None = None
    active: bool | None = None


class User(BaseModel):
    """Public view of a user account (no password hash)."""

    user_id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
    active: bool = True
    login_count: int = 0
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserRecord(User):
    """Stored user including the password hash. Never returned by the API."""

    password_hash: str

    def public(self) -> User:
        return User.model_validate(self.model_dump(exclude={"password_hash"}))


class AuthToken(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: User


class RoleCount(BaseModel):
    role: UserRole
    count: int


class MonthlyUserStats(BaseModel):
    month: int = Field(..., ge=1, le=12)
    num_users: int
    avg_login_count: float
