"""Service for onboarding progress and pet medical histories."""

import logging
from typing import Any

from redis import Redis

from continuum.core.exceptions import NotFoundError
from continuum.models.common import utcnow
from continuum.models.medical_history import (
    TOTAL_ONBOARDING_STEPS,
    MedicalHistory,
    MedicalHistoryCreate,
    MedicalHistoryUpdate,
    OnboardingStatus,
    StepsCompleted,
)
from continuum.repositories.onboarding_repo import OnboardingRepository

logger = logging.getLogger(__name__)


def _step_fields(steps: dict[str, bool]) -> dict[str, bool]:
    """Normalize ``basicInfo``/``basic_info`` keys to field names, dropping unknown ones."""
    names: dict[str, str] = {}
    for name, info in StepsCompleted.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return {names[key]: bool(value) for key, value in steps.items() if key in names}


class OnboardingService:
    """Tracks each pet's intake progress and stores the completed history."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.repo = OnboardingRepository(redis)

    async def create_status(self, client_id: str, pet_id: str) -> OnboardingStatus:
        """Start (or restart) onboarding for a pet and index it under the client.

        Args:
            client_id: Client ID
            pet_id: Pet ID

        Returns:
            The fresh status at step 1
        """
        status = OnboardingStatus(client_id=client_id, pet_id=pet_id)
        return await self.repo.save_status(status)

    async def get_status(self, client_id: str, pet_id: str) -> OnboardingStatus | None:
        return await self.repo.get_status(client_id, pet_id)

    async def update_status(
        self,
        client_id: str,
        pet_id: str,
        updates: dict[str, Any],
    ) -> OnboardingStatus:
        """Merge a partial update into an existing status.

        ``stepsCompleted`` is merged key by key rather than replaced.

        Args:
            client_id: Client ID
            pet_id: Pet ID
            updates: Snake-case fields to change

        Returns:
            The merged status

        Raises:
            NotFoundError: If onboarding was never started for the pet
        """
        existing = await self.repo.get_status(client_id, pet_id)
        if existing is None:
            raise NotFoundError(resource="Onboarding status", detail="Onboarding status not found")

        data = existing.model_dump()
        steps = updates.pop("steps_completed", None)
        data.update({k: v for k, v in updates.items() if v is not None})
        if steps:
            data["steps_completed"] = {**data["steps_completed"], **_step_fields(steps)}
        if data.get("completed") and data.get("completed_at") is None:
            data["completed_at"] = utcnow()

        status = OnboardingStatus.model_validate(data)
        return await self.repo.save_status(status)

    async def get_client_statuses(self, client_id: str) -> list[OnboardingStatus]:
        return await self.repo.list_statuses(client_id)

    async def has_completed_onboarding(self, client_id: str) -> bool:
        """Check whether every indexed pet has finished onboarding.

        Args:
            client_id: Client ID

        Returns:
            True when all pets are complete; False when there are none
        """
        pet_ids = await self.repo.indexed_pet_ids(client_id)
        if not pet_ids:
            return False
        for pet_id in pet_ids:
            status = await self.repo.get_status(client_id, pet_id)
            if status is None or not status.completed:
                return False
        return True

    async def complete_step(
        self,
        client_id: str,
        pet_id: str,
        sections: list[str],
        current_step: int,
    ) -> OnboardingStatus:
        """Record wizard progress, creating the status when missing.

        ``currentStep`` never moves backwards.

        Args:
            client_id: Client ID
            pet_id: Pet ID
            sections: Section flags to set, e.g. ``["basic_info"]``
            current_step: Step the wizard has reached

        Returns:
            The updated status
        """
        status = await self.repo.get_status(client_id, pet_id)
        if status is None:
            status = OnboardingStatus(client_id=client_id, pet_id=pet_id)

        steps = status.steps_completed.model_copy(update={name: True for name in sections})
        status = status.model_copy(
            update={
                "steps_completed": steps,
                "current_step": max(status.current_step, min(current_step, TOTAL_ONBOARDING_STEPS)),
            }
        )
        return await self.repo.save_status(status)

    async def save_medical_history(self, payload: MedicalHistoryCreate) -> MedicalHistory:
        """Store a completed intake and mark onboarding complete for the pet.

        Args:
            payload: Full medical history

        Returns:
            The stored history with ``completedAt`` set
        """
        now = utcnow()
        history = MedicalHistory(**payload.model_dump(), completed_at=now)
        await self.repo.save_history(history)

        status = await self.repo.get_status(payload.client_id, payload.pet_id)
        if status is None:
            status = OnboardingStatus(client_id=payload.client_id, pet_id=payload.pet_id)
        status = status.model_copy(
            update={
                "completed": True,
                "completed_at": now,
                "current_step": TOTAL_ONBOARDING_STEPS,
                "steps_completed": StepsCompleted.all_done(),
            }
        )
        await self.repo.save_status(status)
        logger.info(
            "Medical history saved",
            extra={"client_id": payload.client_id, "pet_id": payload.pet_id},
        )
        return history

    async def get_medical_history(self, pet_id: str) -> MedicalHistory | None:
        return await self.repo.get_history(pet_id)

    async def update_medical_history(
        self,
        pet_id: str,
        updates: MedicalHistoryUpdate,
    ) -> MedicalHistory:
        """Replace the given top-level sections of a stored history.

        Args:
            pet_id: Pet ID
            updates: Sections to replace

        Returns:
            The updated history

        Raises:
            NotFoundError: If the pet has no medical history
        """
        existing = await self.repo.get_history(pet_id)
        if existing is None:
            raise NotFoundError(resource="Medical history", detail="Medical history not found")

        changes = {
            name: getattr(updates, name)
            for name in updates.model_fields_set
            if getattr(updates, name) is not None
        }
        history = existing.model_copy(update=changes)
        return await self.repo.save_history(history)
