"""Onboarding progress, intake wizard and medical history endpoints."""

from enum import StrEnum
from typing import Annotated, Any

from fastapi import APIRouter, Query
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from continuum.api.dependencies import ClientAuth, ClientSvc, OnboardingSvc, ensure_own_client
from continuum.core.exceptions import NotFoundError, ValidationError, first_error_message
from continuum.models.common import ApiModel
from continuum.models.medical_history import (
    MedicalHistory,
    MedicalHistoryCreate,
    MedicalHistoryUpdate,
    OnboardingStatus,
    OnboardingStatusCreate,
    OnboardingStatusUpdate,
)
from continuum.services.onboarding_wizard import STEP_SECTIONS, OnboardingWizard

router = APIRouter()
history_router = APIRouter()


class WizardAction(StrEnum):
    NEXT = "next"
    PREVIOUS = "previous"
    SUBMIT = "submit"
    SAVE = "save"


class WizardCommand(ApiModel):
    action: WizardAction
    data: dict[str, Any] = Field(default_factory=dict)


# Status


@router.post("/status", response_model=OnboardingStatus, status_code=201)
async def create_status(
    body: OnboardingStatusCreate,
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
) -> OnboardingStatus:
    """Start onboarding for one of the client's pets."""
    ensure_own_client(session, body.client_id)
    await clients.get_owned_pet(session.client_id, body.pet_id)
    return await service.create_status(body.client_id, body.pet_id)


@router.get("/status")
async def get_status(
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
    client_id: Annotated[str, Query(alias="clientId")],
    pet_id: Annotated[str | None, Query(alias="petId")] = None,
) -> Any:
    """One pet's status, or every indexed pet's when ``petId`` is omitted."""
    ensure_own_client(session, client_id)
    if pet_id:
        await clients.get_owned_pet(session.client_id, pet_id)
        status = await service.get_status(client_id, pet_id)
        if status is None:
            raise NotFoundError(resource="Onboarding status", detail="Onboarding status not found")
        return status.model_dump(by_alias=True, mode="json", exclude_none=True)

    statuses = await service.get_client_statuses(client_id)
    return {
        "statuses": [s.model_dump(by_alias=True, mode="json", exclude_none=True) for s in statuses],
        "allCompleted": await service.has_completed_onboarding(client_id),
    }


@router.put("/status", response_model=OnboardingStatus)
async def update_status(
    body: OnboardingStatusUpdate,
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
) -> OnboardingStatus:
    ensure_own_client(session, body.client_id)
    await clients.get_owned_pet(session.client_id, body.pet_id)
    updates = body.model_dump(exclude_unset=True, exclude={"client_id", "pet_id"})
    return await service.update_status(body.client_id, body.pet_id, updates)


# Wizard


async def _load_wizard(service: OnboardingSvc, client_id: str, pet_id: str) -> OnboardingWizard:
    raw = await service.repo.get_draft(client_id, pet_id)
    if raw:
        try:
            return OnboardingWizard.from_json(raw)
        except PydanticValidationError:
            # Drafts written by an older form shape are discarded
            await service.repo.delete_draft(client_id, pet_id)
    return OnboardingWizard.start(client_id, pet_id)


@router.get("/wizard/{pet_id}")
async def get_wizard(
    pet_id: str,
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
) -> dict[str, Any]:
    """Current wizard state for a pet, resuming a saved draft if there is one."""
    await clients.get_owned_pet(session.client_id, pet_id)
    wizard = await _load_wizard(service, session.client_id, pet_id)
    return wizard.view()


@router.post("/wizard/{pet_id}")
async def drive_wizard(
    pet_id: str,
    command: WizardCommand,
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
) -> dict[str, Any]:
    """Apply form data and one wizard action; the draft is kept between requests."""
    client_id = session.client_id
    await clients.get_owned_pet(client_id, pet_id)
    wizard = await _load_wizard(service, client_id, pet_id)

    try:
        wizard.update(command.data)
    except PydanticValidationError as e:
        raise ValidationError(first_error_message(e.errors())) from e

    if command.action == WizardAction.NEXT:
        step = wizard.step
        if wizard.next():
            await service.complete_step(client_id, pet_id, STEP_SECTIONS[step], step)
    elif command.action == WizardAction.PREVIOUS:
        wizard.previous()
    elif command.action == WizardAction.SUBMIT:
        await wizard.submit(service.save_medical_history)

    if wizard.is_success:
        await service.repo.delete_draft(client_id, pet_id)
    else:
        await service.repo.save_draft(client_id, pet_id, wizard.to_json())
    return wizard.view()


# Medical history


@history_router.post("", response_model=MedicalHistory, status_code=201)
async def save_medical_history(
    body: MedicalHistoryCreate,
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
) -> MedicalHistory:
    """Store a completed intake and mark the pet's onboarding complete."""
    ensure_own_client(session, body.client_id)
    await clients.get_owned_pet(session.client_id, body.pet_id)
    return await service.save_medical_history(body)


@history_router.get("", response_model=MedicalHistory)
async def get_medical_history(
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
    pet_id: Annotated[str, Query(alias="petId")],
) -> MedicalHistory:
    await clients.get_owned_pet(session.client_id, pet_id)
    history = await service.get_medical_history(pet_id)
    if history is None:
        raise NotFoundError(resource="Medical history", detail="Medical history not found")
    return history


@history_router.put("", response_model=MedicalHistory)
async def update_medical_history(
    body: MedicalHistoryUpdate,
    session: ClientAuth,
    clients: ClientSvc,
    service: OnboardingSvc,
    pet_id: Annotated[str, Query(alias="petId")],
) -> MedicalHistory:
    await clients.get_owned_pet(session.client_id, pet_id)
    return await service.update_medical_history(pet_id, body)
