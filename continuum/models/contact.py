"""Contact form schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, Field, field_validator

from continuum.models.common import ApiModel, utcnow


class ContactFormType(StrEnum):
    GENERAL = "general"
    CONSULTATION = "consultation"
    INVESTMENT = "investment"
    MEDIA = "media"
    CAREERS = "careers"


class ContactStatus(StrEnum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class PreferredContactMethod(StrEnum):
    EMAIL = "email"
    PHONE = "phone"


class ContactFormSubmission(ApiModel):
    id: str
    name: str
    email: EmailStr
    phone: str | None = None
    subject: str
    message: str
    type: ContactFormType = ContactFormType.GENERAL
    preferred_contact: PreferredContactMethod = PreferredContactMethod.EMAIL
    status: ContactStatus = ContactStatus.NEW
    submitted_at: datetime = Field(default_factory=utcnow)
    read_at: datetime | None = None
    replied_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class ContactRequest(ApiModel):
    """Public contact form body."""

    name: str
    email: EmailStr
    subject: str
    message: str
    phone: str | None = None
    type: ContactFormType = ContactFormType.GENERAL
    preferred_contact: PreferredContactMethod = PreferredContactMethod.EMAIL

    @field_validator("name")
    @classmethod
    def name_length(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value.strip()

    @field_validator("subject")
    @classmethod
    def subject_length(cls, value: str) -> str:
        if len(value.strip()) < 3:
            raise ValueError("Subject must be at least 3 characters")
        return value.strip()

    @field_validator("message")
    @classmethod
    def message_length(cls, value: str) -> str:
        if len(value.strip()) < 10:
            raise ValueError("Message must be at least 10 characters")
        return value


class ContactStatusUpdate(ApiModel):
    status: ContactStatus


class ContactReply(ApiModel):
    message: str

    @field_validator("message")
    @classmethod
    def message_length(cls, value: str) -> str:
        if len(value.strip()) < 10:
            raise ValueError("Reply must be at least 10 characters")
        return value
