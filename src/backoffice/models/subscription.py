"""Newsletter subscription models."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class SubscriptionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class SubscriptionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    is_verified: bool | None = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class Subscription(BaseModel):
    """A newsletter subscription.

    The verification token is never exposed through this model.
    """

    subscription_id: str
    name: str
    email: str
    is_verified: bool = False
    created_at: datetime
    updated_at: datetime


class MonthlySubscriptionStats(BaseModel):
    month: int = Field(..., ge=1, le=12)
    total_subscriptions: int
    verified_subscriptions: int
