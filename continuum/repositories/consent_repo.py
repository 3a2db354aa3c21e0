"""Repository for consent acceptance records."""

from continuum.models.common import ensure_aware
from continuum.models.consent import ConsentAcceptance
from continuum.repositories.base import DocumentRepository


class ConsentRepository(DocumentRepository):
    """Append-only acceptance records indexed per client and per pet.

    Records are never updated or deleted; a revocation is a new record.
    """

    @staticmethod
    def acceptance_key(acceptance_id: str) -> str:
        return f"consent-acceptance:{acceptance_id}"

    @staticmethod
    def client_index_key(client_id: str) -> str:
        return f"client-consents:{client_id}"

    @staticmethod
    def pet_index_key(client_id: str, pet_id: str) -> str:
        return f"pet-consents:{client_id}:{pet_id}"

    async def create(self, acceptance: ConsentAcceptance) -> ConsentAcceptance:
        """Save an acceptance record.

        Args:
            acceptance: The record to store

        Returns:
            The stored record
        """
        self._store(self.acceptance_key(acceptance.id), acceptance)
        self.redis.sadd(self.client_index_key(acceptance.client_id), acceptance.id)
        if acceptance.pet_id:
            self.redis.sadd(
                self.pet_index_key(acceptance.client_id, acceptance.pet_id),
                acceptance.id,
            )
        return acceptance

    async def get(self, acceptance_id: str) -> ConsentAcceptance | None:
        return self._load(self.acceptance_key(acceptance_id), ConsentAcceptance)

    async def list_for_client(self, client_id: str) -> list[ConsentAcceptance]:
        """All records for a client, most recent first."""
        return self._sorted(self.redis.smembers(self.client_index_key(client_id)))

    async def list_for_pet(self, client_id: str, pet_id: str) -> list[ConsentAcceptance]:
        """All records for one pet of a client, most recent first."""
        return self._sorted(self.redis.smembers(self.pet_index_key(client_id, pet_id)))

    def _sorted(self, ids: set[str]) -> list[ConsentAcceptance]:
        records = self._load_many(
            (self.acceptance_key(i) for i in sorted(ids)), ConsentAcceptance
        )
        return sorted(records, key=lambda r: ensure_aware(r.accepted_at), reverse=True)
