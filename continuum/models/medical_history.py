"""Medical history intake and onboarding progress schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, Field

from continuum.models.common import ApiModel, utcnow

TOTAL_ONBOARDING_STEPS = 8


class AllergySeverity(StrEnum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    LIFE_THREATENING = "life-threatening"


class WaterIntake(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class ExerciseIntensity(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class Medication(ApiModel):
    name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    start_date: str
    end_date: str | None = None
    prescribed_by: str | None = None
    reason: str = Field(..., min_length=1)


class ChronicCondition(ApiModel):
    condition: str = Field(..., min_length=1)
    diagnosed_date: str
    diagnosed_by: str | None = None
    currently_managed: bool
    treatment: str | None = None


class Allergy(ApiModel):
    allergen: str = Field(..., min_length=1)
    reaction: str = Field(..., min_length=1)
    severity: AllergySeverity
    diagnosed_date: str | None = None


class Surgery(ApiModel):
    procedure: str = Field(..., min_length=1)
    date: str
    veterinarian: str | None = None
    clinic: str | None = None
    complications: str | None = None
    notes: str | None = None


class Vaccination(ApiModel):
    vaccine: str = Field(..., min_length=1)
    date: str
    next_due: str | None = None
    administered_by: str | None = None
    batch_number: str | None = None


class Illness(ApiModel):
    illness: str = Field(..., min_length=1)
    diagnosed_date: str
    resolved_date: str | None = None
    treatment: str | None = None
    notes: str | None = None


class DietInformation(ApiModel):
    current_food: str = Field(..., min_length=1)
    feeding_schedule: str = Field(..., min_length=1)
    treats: str | None = None
    supplements: str | None = None
    dietary_restrictions: str | None = None
    water_intake: WaterIntake


class ExerciseInformation(ApiModel):
    frequency: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)
    intensity: ExerciseIntensity
    activity_types: list[str] = Field(default_factory=list)


class VeterinarianInfo(ApiModel):
    name: str = Field(..., min_length=1)
    clinic_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr | None = None
    address: str | None = None
    years_with_vet: float | None = None
    reason_for_change: str | None = None


class InsuranceInfo(ApiModel):
    provider: str = Field(..., min_length=1)
    policy_number: str = Field(..., min_length=1)
    coverage_type: str = Field(..., min_length=1)
    expiry_date: str | None = None
    annual_limit: float | None = None
    deductible: float | None = None


class EmergencyContact(ApiModel):
    name: str = Field(..., min_length=1)
    relationship: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    alternate_phone: str | None = None
    email: EmailStr | None = None
    can_authorize: bool


class MedicalHistoryBase(ApiModel):
    current_medications: list[Medication] = Field(default_factory=list)
    chronic_conditions: list[ChronicCondition] = Field(default_factory=list)
    allergies: list[Allergy] = Field(default_factory=list)
    previous_surgeries: list[Surgery] = Field(default_factory=list)
    vaccination_history: list[Vaccination] = Field(default_factory=list)
    previous_illnesses: list[Illness] = Field(default_factory=list)
    diet: DietInformation
    exercise: ExerciseInformation
    previous_veterinarian: VeterinarianInfo | None = None
    insurance: InsuranceInfo | None = None
    emergency_contact: EmergencyContact
    behavioral_issues: str | None = None
    additional_notes: str | None = None


class MedicalHistoryCreate(MedicalHistoryBase):
    """Intake submission body."""

    pet_id: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)


class MedicalHistory(MedicalHistoryCreate):
    """Stored intake, one per pet."""

    completed_at: datetime | None = None


class MedicalHistoryUpdate(ApiModel):
    current_medications: list[Medication] | None = None
    chronic_conditions: list[ChronicCondition] | None = None
    allergies: list[Allergy] | None = None
    previous_surgeries: list[Surgery] | None = None
    vaccination_history: list[Vaccination] | None = None
    previous_illnesses: list[Illness] | None = None
    diet: DietInformation | None = None
    exercise: ExerciseInformation | None = None
    previous_veterinarian: VeterinarianInfo | None = None
    insurance: InsuranceInfo | None = None
    emergency_contact: EmergencyContact | None = None
    behavioral_issues: str | None = None
    additional_notes: str | None = None


# Wizard form state. Every field has a blank default so a half-filled
# draft always loads; the strict models above validate on submit.


class DietForm(ApiModel):
    current_food: str = ""
    feeding_schedule: str = ""
    treats: str = ""
    supplements: str = ""
    dietary_restrictions: str = ""
    water_intake: WaterIntake = WaterIntake.NORMAL


class ExerciseForm(ApiModel):
    frequency: str = ""
    duration: str = ""
    intensity: ExerciseIntensity = ExerciseIntensity.MODERATE
    activity_types: list[str] = Field(default_factory=list)


class VeterinarianForm(ApiModel):
    name: str = ""
    clinic_name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    years_with_vet: float | None = None
    reason_for_change: str = ""


class InsuranceForm(ApiModel):
    provider: str = ""
    policy_number: str = ""
    coverage_type: str = ""
    expiry_date: str = ""
    annual_limit: float | None = None
    deductible: float | None = None


class EmergencyContactForm(ApiModel):
    name: str = ""
    relationship: str = ""
    phone: str = ""
    alternate_phone: str = ""
    email: str = ""
    can_authorize: bool = False


class MedicalHistoryForm(ApiModel):
    current_medications: list[Medication] = Field(default_factory=list)
    chronic_conditions: list[ChronicCondition] = Field(default_factory=list)
    allergies: list[Allergy] = Field(default_factory=list)
    previous_surgeries: list[Surgery] = Field(default_factory=list)
    vaccination_history: list[Vaccination] = Field(default_factory=list)
    previous_illnesses: list[Illness] = Field(default_factory=list)
    diet: DietForm = Field(default_factory=DietForm)
    exercise: ExerciseForm = Field(default_factory=ExerciseForm)
    previous_veterinarian: VeterinarianForm = Field(default_factory=VeterinarianForm)
    insurance: InsuranceForm = Field(default_factory=InsuranceForm)
    emergency_contact: EmergencyContactForm = Field(default_factory=EmergencyContactForm)
    behavioral_issues: str = ""
    additional_notes: str = ""


class StepsCompleted(ApiModel):
    basic_info: bool = False
    current_health: bool = False
    medical_history: bool = False
    lifestyle: bool = False
    previous_care: bool = False
    insurance: bool = False
    emergency: bool = False
    additional: bool = False

    @classmethod
    def all_done(cls) -> "StepsCompleted":
        return cls(**{name: True for name in cls.model_fields})


class OnboardingStatus(ApiModel):
    client_id: str
    pet_id: str
    current_step: int = 0
    total_steps: int = TOTAL_ONBOARDING_STEPS
    completed: bool = False
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
    steps_completed: StepsCompleted = Field(default_factory=StepsCompleted)


class OnboardingStatusCreate(ApiModel):
    client_id: str = Field(..., min_length=1)
    pet_id: str = Field(..., min_length=1)


class OnboardingStatusUpdate(ApiModel):
    client_id: str = Field(..., min_length=1)
    pet_id: str = Field(..., min_length=1)
    current_step: int | None = Field(default=None, ge=0, le=TOTAL_ONBOARDING_STEPS)
    completed: bool | None = None
    steps_completed: dict[str, bool] | None = None
