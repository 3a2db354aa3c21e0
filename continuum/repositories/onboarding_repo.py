"""Repository for onboarding progress, medical histories and wizard drafts."""

from continuum.models.medical_history import MedicalHistory, OnboardingStatus
from continuum.repositories.base import DocumentRepository


class OnboardingRepository(DocumentRepository):
    """Per-pet onboarding status, indexed per client, plus histories and drafts."""

    DRAFT_TTL_SECONDS = 7 * 24 * 60 * 60

    @staticmethod
    def status_key(client_id: str, pet_id: str) -> str:
        return f"onboarding-status:{client_id}:{pet_id}"

    @staticmethod
    def index_key(client_id: str) -> str:
        return f"onboarding-index:{client_id}"

    @staticmethod
    def history_key(pet_id: str) -> str:
        return f"medical-history:{pet_id}"

    @staticmethod
    def draft_key(client_id: str, pet_id: str) -> str:
        return f"onboarding-draft:{client_id}:{pet_id}"

    # Status

    async def get_status(self, client_id: str, pet_id: str) -> OnboardingStatus | None:
        return self._load(self.status_key(client_id, pet_id), OnboardingStatus)

    async def save_status(self, status: OnboardingStatus) -> OnboardingStatus:
        """Store a status and index its pet under the client.

        Args:
            status: The onboarding status

        Returns:
            The stored status
        """
        self._store(self.status_key(status.client_id, status.pet_id), status)
        self.redis.sadd(self.index_key(status.client_id), status.pet_id)
        return status

    async def indexed_pet_ids(self, client_id: str) -> list[str]:
        return sorted(self.redis.smembers(self.index_key(client_id)))

    async def list_statuses(self, client_id: str) -> list[OnboardingStatus]:
        """List the statuses of every pet indexed under a client.

        Args:
            client_id: The client ID

        Returns:
            Statuses ordered by pet ID
        """
        pet_ids = await self.indexed_pet_ids(client_id)
        return self._load_many(
            (self.status_key(client_id, pet_id) for pet_id in pet_ids),
            OnboardingStatus,
        )

    async def delete_status(self, client_id: str, pet_id: str) -> None:
        self.redis.delete(self.status_key(client_id, pet_id))
        self.redis.srem(self.index_key(client_id), pet_id)

    async def drop_index(self, client_id: str) -> None:
        self.redis.delete(self.index_key(client_id))

    # Medical history

    async def get_history(self, pet_id: str) -> MedicalHistory | None:
        return self._load(self.history_key(pet_id), MedicalHistory)

    async def save_history(self, history: MedicalHistory) -> MedicalHistory:
        self._store(self.history_key(history.pet_id), history)
        return history

    async def delete_history(self, pet_id: str) -> None:
        self.redis.delete(self.history_key(pet_id))

    # Wizard drafts (raw JSON, the wizard owns the shape)

    async def get_draft(self, client_id: str, pet_id: str) -> str | None:
        return self.redis.get(self.draft_key(client_id, pet_id))

    async def save_draft(self, client_id: str, pet_id: str, payload: str) -> None:
        """Store a wizard draft for a week.

        Args:
            client_id: The client ID
            pet_id: The pet ID
            payload: Serialized wizard state
        """
        self.redis.setex(self.draft_key(client_id, pet_id), self.DRAFT_TTL_SECONDS, payload)

    async def delete_draft(self, client_id: str, pet_id: str) -> None:
        self.redis.delete(self.draft_key(client_id, pet_id))
