"""Email template, notification settings and bulk send schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, Field

from continuum.models.common import ApiModel, utcnow


class RecipientFilter(StrEnum):
    ALL_CLIENTS = "all-clients"
    CLIENTS_WITH_PETS = "clients-with-pets"
    CLIENTS_WITH_APPOINTMENTS = "clients-with-appointments"
    CUSTOM_LIST = "custom-list"


class EmailTemplate(ApiModel):
    id: str
    name: str
    subject: str
    body: str
    variables: list[str] = Field(default_factory=list)
    is_system: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class EmailTemplateCreate(ApiModel):
    name: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class EmailTemplateUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    subject: str | None = Field(default=None, min_length=1)
    body: str | None = Field(default=None, min_length=1)


class TemplateTestRequest(ApiModel):
    to: EmailStr
    variables: dict[str, str] = Field(default_factory=dict)


class NotificationSettings(ApiModel):
    send_appointment_confirmation: bool = True
    send_reminders: bool = True
    send_welcome_email: bool = True
    send_monthly_newsletter: bool = False
    reply_to_email: str = ""
    email_footer: str = ""


class BulkEmailRequest(ApiModel):
    recipient_filter: RecipientFilter
    date_range_start: str | None = None
    date_range_end: str | None = None
    custom_emails: list[EmailStr] = Field(default_factory=list)
    template_id: str | None = None
    subject: str = Field(..., min_length=3)
    body: str = Field(..., min_length=10)
    reply_to: EmailStr | None = None


class EmailRecipient(ApiModel):
    email: str
    name: str
    client_id: str | None = None


class RecipientResult(ApiModel):
    email: str
    success: bool
    error: str | None = None


class BulkEmailResult(ApiModel):
    total: int
    sent: int
    failed: int
    results: list[RecipientResult]
