"""Multi-step medical history intake wizard.

The wizard is a small state machine over a draft form: steps 1..7 and a
final ``success`` state. It performs no I/O of its own; persisting drafts
and submitting the finished history are left to the caller.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from continuum.core.exceptions import first_error_message
from continuum.models.common import ApiModel
from continuum.models.medical_history import (
    DietInformation,
    EmergencyContact,
    ExerciseInformation,
    InsuranceInfo,
    MedicalHistoryCreate,
    MedicalHistoryForm,
    VeterinarianInfo,
)

logger = logging.getLogger(__name__)

TOTAL_STEPS = 7

STEP_TITLES: dict[int, str] = {
    1: "Current medications",
    2: "Conditions and allergies",
    3: "Medical history",
    4: "Lifestyle and diet",
    5: "Previous veterinary care",
    6: "Insurance",
    7: "Emergency contact and notes",
}

# Onboarding status sections ticked off when a wizard step is passed
STEP_SECTIONS: dict[int, list[str]] = {
    1: ["basic_info", "current_health"],
    2: ["current_health"],
    3: ["medical_history"],
    4: ["lifestyle"],
    5: ["previous_care"],
    6: ["insurance"],
    7: ["emergency", "additional"],
}

STEP_INCOMPLETE = "Please complete all required fields before continuing"
SUBMIT_INCOMPLETE = "Please complete all required fields"
SUBMIT_FAILED = "Failed to save medical history. Please try again."

_PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_phone(phone: str) -> bool:
    """Digits, spaces, dashes and parentheses with an optional leading ``+``; at least 10 digits."""
    if not _PHONE_RE.match(phone):
        return False
    return sum(ch.isdigit() for ch in phone) >= 10


def validate_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def _filled(value: str) -> bool:
    return bool(value and value.strip())


def validate_step(step: int, form: MedicalHistoryForm) -> bool:
    """Check that ``form`` has what ``step`` requires.

    Step 4 needs the diet and exercise basics; step 7 needs a complete
    emergency contact with a valid phone. Other steps always pass.

    Args:
        step: Wizard step, 1-based
        form: Current draft

    Returns:
        True if the step may be left
    """
    if step == 4:
        return all(
            (
                _filled(form.diet.current_food),
                _filled(form.diet.feeding_schedule),
                _filled(form.exercise.frequency),
                _filled(form.exercise.duration),
            )
        )
    if step == 7:
        contact = form.emergency_contact
        return (
            _filled(contact.name)
            and _filled(contact.relationship)
            and _filled(contact.phone)
            and validate_phone(contact.phone)
        )
    return True


def _deep_merge(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _blank_to_none(value: str) -> str | None:
    return value if _filled(value) else None


class WizardState(ApiModel):
    """Serializable wizard state, stored as the onboarding draft."""

    client_id: str
    pet_id: str
    step: int = 1
    success: bool = False
    error: str | None = None
    retryable: bool = False
    form: MedicalHistoryForm = Field(default_factory=MedicalHistoryForm)


Submitter = Callable[[MedicalHistoryCreate], Awaitable[Any]]


class OnboardingWizard:
    """Drives one pet's intake form through its steps."""

    def __init__(self, state: WizardState) -> None:
        self.state = state

    @classmethod
    def start(cls, client_id: str, pet_id: str) -> "OnboardingWizard":
        return cls(WizardState(client_id=client_id, pet_id=pet_id))

    @classmethod
    def from_json(cls, raw: str) -> "OnboardingWizard":
        return cls(WizardState.model_validate_json(raw))

    def to_json(self) -> str:
        return self.state.model_dump_json(by_alias=True)

    @property
    def step(self) -> int:
        return self.state.step

    @property
    def is_success(self) -> bool:
        return self.state.success

    @property
    def error(self) -> str | None:
        return self.state.error

    def update(self, data: dict[str, Any]) -> None:
        """Merge partial form data (camelCase or snake_case keys) into the draft.

        Raises:
            pydantic.ValidationError: If the merged form is malformed
        """
        if not data:
            return
        current = self.state.form.model_dump(by_alias=True)
        incoming = MedicalHistoryForm.model_validate(
            _deep_merge(current, self._camel_keys(data))
        )
        self.state.form = incoming

    @staticmethod
    def _camel_keys(data: dict[str, Any]) -> dict[str, Any]:
        # snake_case input must land on the camelCase keys of the dump it merges into
        out: dict[str, Any] = {}
        for key, value in data.items():
            camel = re.sub(r"_([a-z])", lambda m: m.group(1).upper(), key)
            out[camel] = OnboardingWizard._camel_keys(value) if isinstance(value, dict) else value
        return out

    def next(self) -> bool:
        """Advance one step if the current step validates.

        Returns:
            True if the wizard moved forward
        """
        if self.state.success:
            return False
        if not validate_step(self.state.step, self.state.form):
            self.state.error = STEP_INCOMPLETE
            self.state.retryable = False
            return False
        self.state.error = None
        self.state.retryable = False
        self.state.step = min(self.state.step + 1, TOTAL_STEPS)
        return True

    def previous(self) -> None:
        """Go back one step; the form is left untouched."""
        if self.state.success:
            return
        self.state.error = None
        self.state.retryable = False
        self.state.step = max(self.state.step - 1, 1)

    def build_history(self) -> MedicalHistoryCreate:
        """Assemble the strict history payload from the draft.

        Raises:
            pydantic.ValidationError: If the draft does not satisfy the schema
        """
        form = self.state.form
        contact = form.emergency_contact

        previous_vet = None
        if _filled(form.previous_veterinarian.name):
            vet = form.previous_veterinarian
            previous_vet = VeterinarianInfo(
                name=vet.name,
                clinic_name=vet.clinic_name,
                phone=vet.phone,
                email=_blank_to_none(vet.email),
                address=_blank_to_none(vet.address),
                years_with_vet=vet.years_with_vet,
                reason_for_change=_blank_to_none(vet.reason_for_change),
            )

        insurance = None
        if _filled(form.insurance.provider):
            ins = form.insurance
            insurance = InsuranceInfo(
                provider=ins.provider,
                policy_number=ins.policy_number,
                coverage_type=ins.coverage_type,
                expiry_date=_blank_to_none(ins.expiry_date),
                annual_limit=ins.annual_limit,
                deductible=ins.deductible,
            )

        return MedicalHistoryCreate(
            pet_id=self.state.pet_id,
            client_id=self.state.client_id,
            current_medications=form.current_medications,
            chronic_conditions=form.chronic_conditions,
            allergies=form.allergies,
            previous_surgeries=form.previous_surgeries,
            vaccination_history=form.vaccination_history,
            previous_illnesses=form.previous_illnesses,
            diet=DietInformation(
                current_food=form.diet.current_food,
                feeding_schedule=form.diet.feeding_schedule,
                treats=_blank_to_none(form.diet.treats),
                supplements=_blank_to_none(form.diet.supplements),
                dietary_restrictions=_blank_to_none(form.diet.dietary_restrictions),
                water_intake=form.diet.water_intake,
            ),
            exercise=ExerciseInformation(
                frequency=form.exercise.frequency,
                duration=form.exercise.duration,
                intensity=form.exercise.intensity,
                activity_types=form.exercise.activity_types,
            ),
            previous_veterinarian=previous_vet,
            insurance=insurance,
            emergency_contact=EmergencyContact(
                name=contact.name,
                relationship=contact.relationship,
                phone=contact.phone,
                alternate_phone=_blank_to_none(contact.alternate_phone),
                email=_blank_to_none(contact.email),
                can_authorize=contact.can_authorize,
            ),
            behavioral_issues=_blank_to_none(form.behavioral_issues),
            additional_notes=_blank_to_none(form.additional_notes),
        )

    async def submit(self, submitter: Submitter) -> bool:
        """Validate the final step and hand the history to ``submitter``.

        On success the wizard enters the ``success`` state. If the submitter
        raises, the error is kept as retryable and the step and form stay as
        they were.

        Args:
            submitter: Coroutine function that stores the history

        Returns:
            True once the history is stored
        """
        if self.state.success:
            return True
        if not validate_step(TOTAL_STEPS, self.state.form):
            self.state.error = SUBMIT_INCOMPLETE
            self.state.retryable = False
            return False

        try:
            history = self.build_history()
        except PydanticValidationError as e:
            self.state.error = first_error_message(e.errors())
            self.state.retryable = False
            return False

        try:
            await submitter(history)
        except Exception:
            logger.warning(
                "Medical history submission failed",
                extra={"client_id": self.state.client_id, "pet_id": self.state.pet_id},
                exc_info=True,
            )
            self.state.error = SUBMIT_FAILED
            self.state.retryable = True
            return False

        self.state.error = None
        self.state.retryable = False
        self.state.success = True
        return True

    def view(self) -> dict[str, Any]:
        """Wire representation for the wizard endpoints."""
        return {
            "step": "success" if self.state.success else self.state.step,
            "totalSteps": TOTAL_STEPS,
            "title": None if self.state.success else STEP_TITLES[self.state.step],
            "error": self.state.error,
            "retryable": self.state.retryable,
            "form": self.state.form.model_dump(by_alias=True, mode="json"),
        }
