"""Repository for clinical health records."""

from continuum.models.health_record import HealthRecord
from continuum.repositories.appointment_repo import date_score
from continuum.repositories.base import DocumentRepository


class HealthRecordRepository(DocumentRepository):
    INDEX_KEY = "health-records:index"

    @staticmethod
    def record_key(record_id: str) -> str:
        return f"health-record:{record_id}"

    @staticmethod
    def pet_index_key(pet_id: str) -> str:
        return f"health-records:pet:{pet_id}"

    async def get(self, record_id: str) -> HealthRecord | None:
        return self._load(self.record_key(record_id), HealthRecord)

    async def save(self, record: HealthRecord) -> HealthRecord:
        self._store(self.record_key(record.id), record)
        self.redis.sadd(self.INDEX_KEY, record.id)
        self.redis.zadd(self.pet_index_key(record.pet_id), {record.id: date_score(record.date)})
        return record

    async def list_for_pet(self, pet_id: str, limit: int = 50) -> list[HealthRecord]:
        """Newest first."""
        ids = self.redis.zrevrange(self.pet_index_key(pet_id), 0, limit - 1)
        return self._load_many((self.record_key(i) for i in ids), HealthRecord)

    async def list_all(self) -> list[HealthRecord]:
        ids = sorted(self.redis.smembers(self.INDEX_KEY))
        records = self._load_many((self.record_key(i) for i in ids), HealthRecord)
        return sorted(records, key=lambda r: date_score(r.date), reverse=True)

    async def delete(self, record: HealthRecord) -> None:
        self.redis.delete(self.record_key(record.id))
        self.redis.srem(self.INDEX_KEY, record.id)
        self.redis.zrem(self.pet_index_key(record.pet_id), record.id)

    async def drop_pet_index(self, pet_id: str) -> None:
        """Forget a deleted pet's record index; the records stay in the global index."""
        self.redis.delete(self.pet_index_key(pet_id))
