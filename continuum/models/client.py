"""Client account schemas."""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from continuum.models.common import ApiModel, utcnow


class Address(ApiModel):
    """Postal address of a client."""

    street: str | None = None
    city: str | None = None
    postcode: str | None = None
    country: str | None = None


class Client(ApiModel):
    """Stored client account (password hash is kept under its own key)."""

    id: str
    email: EmailStr
    first_name: str
    last_name: str
    phone: str | None = None
    address: Address | None = None
    notes: str | None = None
    email_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ClientRegistration(ApiModel):
    """Self-service portal registration."""

    email: EmailStr
    password: str
    first_name: str
    last_name: str
    phone: str

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value

    @field_validator("first_name")
    @classmethod
    def first_name_length(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("First name must be at least 2 characters")
        return value.strip()

    @field_validator("last_name")
    @classmethod
    def last_name_length(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("Last name must be at least 2 characters")
        return value.strip()

    @field_validator("phone")
    @classmethod
    def phone_length(cls, value: str) -> str:
        if len(value) < 10:
            raise ValueError("Phone must be at least 10 digits")
        return value


class ClientCreate(ApiModel):
    """Admin-created client account."""

    email: EmailStr
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: str | None = None
    address: Address | None = None
    notes: str | None = None
    password: str | None = Field(default=None, min_length=6)


class ClientUpdate(ApiModel):
    """Partial profile update; admins may also set notes."""

    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    address: Address | None = None
    notes: str | None = None
