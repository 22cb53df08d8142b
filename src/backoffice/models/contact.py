"""Contact form models."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from .enums import ContactStatus


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator("name", "subject", "message")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class Contact(BaseModel):
    contact_id: str
    name: str
    email: str
    subject: str
    message: str
    status: ContactStatus = ContactStatus.PENDING
    ip_address: str | None = None
    user_agent: str | None = None
    responded_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ContactStatusCount(BaseModel):
    status: ContactStatus
    count: int


class ContactStats(BaseModel):
    total: int
    stats: list[ContactStatusCount]
    last_7_days: int
