"""Pet profile schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from continuum.models.common import ApiModel, utcnow


class PetSpecies(StrEnum):
    DOG = "dog"
    CAT = "cat"
    OTHER = "other"


class PetSex(StrEnum):
    MALE = "male"
    FEMALE = "female"
    NEUTERED = "neutered"
    SPAYED = "spayed"


class InsuranceDetails(ApiModel):
    provider: str | None = None
    policy_number: str | None = None
    expiry_date: str | None = None


class Pet(ApiModel):
    """A pet; belongs to exactly one client."""

    id: str
    client_id: str
    name: str
    species: PetSpecies
    breed: str
    date_of_birth: str
    weight: float
    sex: PetSex
    microchip_id: str | None = None
    insurance_details: InsuranceDetails | None = None
    photo_url: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PetCreate(ApiModel):
    name: str = Field(..., min_length=1)
    species: PetSpecies
    breed: str = Field(..., min_length=1)
    date_of_birth: str
    weight: float = Field(..., gt=0)
    sex: PetSex
    microchip_id: str | None = None
    insurance_details: InsuranceDetails | None = None
    notes: str | None = None


class PetUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    breed: str | None = None
    weight: float | None = Field(default=None, gt=0)
    microchip_id: str | None = None
    insurance_details: InsuranceDetails | None = None
    photo_url: str | None = None
    notes: str | None = None
