"""Clinical health record schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from continuum.models.common import ApiModel, utcnow


class HealthRecordType(StrEnum):
    CHECKUP = "checkup"
    DIAGNOSTIC = "diagnostic"
    TREATMENT = "treatment"
    MEDICATION = "medication"
    VACCINATION = "vaccination"
    LAB_RESULT = "lab-result"


class ReferenceRange(ApiModel):
    min: float
    max: float


class PrescribedMedication(ApiModel):
    name: str
    dosage: str
    frequency: str
    start_date: str
    end_date: str | None = None
    prescribed_by: str
    purpose: str
    notes: str | None = None
    active: bool = True


class LabResult(ApiModel):
    test_name: str
    value: float | str
    unit: str
    reference_range: ReferenceRange | None = None
    abnormal: bool | None = None


class Biomarker(ApiModel):
    type: str
    value: float
    unit: str
    date: str
    reference_range: ReferenceRange | None = None
    notes: str | None = None


class Attachment(ApiModel):
    name: str
    url: str
    type: str


class HealthRecordCreate(ApiModel):
    pet_id: str = Field(..., min_length=1)
    type: HealthRecordType
    date: str
    veterinarian: str = Field(..., min_length=1)
    diagnosis: str | None = None
    notes: str = ""
    medications: list[PrescribedMedication] = Field(default_factory=list)
    lab_results: list[LabResult] = Field(default_factory=list)
    biomarkers: list[Biomarker] = Field(default_factory=list)
    follow_up_date: str | None = None


class HealthRecord(HealthRecordCreate):
    id: str
    attachments: list[Attachment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str
