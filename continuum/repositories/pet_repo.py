"""Repository for pet profiles."""

from continuum.models.pet import Pet
from continuum.repositories.base import DocumentRepository


class PetRepository(DocumentRepository):
    INDEX_KEY = "pets:index"

    @staticmethod
    def pet_key(pet_id: str) -> str:
        return f"pet:{pet_id}"

    @staticmethod
    def client_index_key(client_id: str) -> str:
        return f"pets:client:{client_id}"

    async def get(self, pet_id: str) -> Pet | None:
        return self._load(self.pet_key(pet_id), Pet)

    async def save(self, pet: Pet) -> Pet:
        self._store(self.pet_key(pet.id), pet)
        self.redis.sadd(self.INDEX_KEY, pet.id)
        self.redis.sadd(self.client_index_key(pet.client_id), pet.id)
        return pet

    async def list_all(self) -> list[Pet]:
        ids = sorted(self.redis.smembers(self.INDEX_KEY))
        pets = self._load_many((self.pet_key(i) for i in ids), Pet)
        return sorted(pets, key=lambda p: p.created_at, reverse=True)

    async def list_for_client(self, client_id: str) -> list[Pet]:
        ids = sorted(self.redis.smembers(self.client_index_key(client_id)))
        pets = self._load_many((self.pet_key(i) for i in ids), Pet)
        return sorted(pets, key=lambda p: p.created_at)

    async def client_pet_ids(self, client_id: str) -> set[str]:
        return set(self.redis.smembers(self.client_index_key(client_id)))

    async def delete(self, pet_id: str, client_id: str) -> None:
        self.redis.delete(self.pet_key(pet_id))
        self.redis.srem(self.INDEX_KEY, pet_id)
        self.redis.srem(self.client_index_key(client_id), pet_id)

    async def drop_client_index(self, client_id: str) -> None:
        self.redis.delete(self.client_index_key(client_id))
