"""Appointment schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, Field, field_validator

from continuum.models.common import ApiModel, utcnow
from continuum.models.pet import PetSpecies


class AppointmentType(StrEnum):
    INITIAL_CONSULTATION = "initial-consultation"
    FOLLOW_UP = "follow-up"
    DIAGNOSTIC = "diagnostic"
    TREATMENT = "treatment"
    EMERGENCY = "emergency"


class BookingType(StrEnum):
    """Appointment types offered on the public booking form."""

    INITIAL = "initial"
    FOLLOWUP = "followup"
    DIAGNOSTIC = "diagnostic"
    TREATMENT = "treatment"
    EMERGENCY = "emergency"


BOOKING_TYPE_MAP: dict[BookingType, AppointmentType] = {
    BookingType.INITIAL: AppointmentType.INITIAL_CONSULTATION,
    BookingType.FOLLOWUP: AppointmentType.FOLLOW_UP,
    BookingType.DIAGNOSTIC: AppointmentType.DIAGNOSTIC,
    BookingType.TREATMENT: AppointmentType.TREATMENT,
    BookingType.EMERGENCY: AppointmentType.EMERGENCY,
}


class AppointmentStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(ApiModel):
    """An appointment; references one client and one pet when known."""

    id: str
    client_id: str | None = None
    pet_id: str | None = None
    client_name: str
    client_email: EmailStr
    client_phone: str | None = None
    pet_name: str
    pet_species: PetSpecies | None = None
    type: AppointmentType
    date: str
    time: str | None = None
    duration: int | None = None
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str | None = None
    internal_notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class BookingRequest(ApiModel):
    """Public consultation booking form."""

    owner_name: str
    email: EmailStr
    phone: str
    pet_name: str
    pet_species: PetSpecies
    appointment_type: BookingType
    preferred_date: str
    message: str | None = None

    @field_validator("owner_name")
    @classmethod
    def owner_name_length(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value.strip()

    @field_validator("phone")
    @classmethod
    def phone_length(cls, value: str) -> str:
        if len(value) < 10:
            raise ValueError("Phone must be at least 10 digits")
        return value

    @field_validator("pet_name")
    @classmethod
    def pet_name_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Pet name is required")
        return value.strip()

    @field_validator("preferred_date")
    @classmethod
    def preferred_date_is_date(cls, value: str) -> str:
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError("Preferred date must be a valid date") from e
        return value


class AppointmentCreate(ApiModel):
    """Admin-created appointment."""

    client_id: str | None = None
    pet_id: str | None = None
    client_name: str = Field(..., min_length=1)
    client_email: EmailStr
    client_phone: str | None = None
    pet_name: str = Field(..., min_length=1)
    type: AppointmentType
    date: str
    time: str | None = None
    duration: int | None = Field(default=None, gt=0)
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    notes: str | None = None


class AppointmentUpdate(ApiModel):
    date: str | None = None
    time: str | None = None
    status: AppointmentStatus | None = None
    internal_notes: str | None = None
