"""Repository for appointments."""

from datetime import datetime

from continuum.models.appointment import Appointment
from continuum.models.common import ensure_aware
from continuum.repositories.base import DocumentRepository


def date_score(value: str) -> float:
    """Sort score (epoch milliseconds) for an appointment date string."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    return ensure_aware(parsed).timestamp() * 1000


class AppointmentRepository(DocumentRepository):
    """Appointments ordered by date in ``appointments:list``."""

    LIST_KEY = "appointments:list"

    @staticmethod
    def appointment_key(appointment_id: str) -> str:
        return f"appointment:{appointment_id}"

    @staticmethod
    def client_index_key(client_id: str) -> str:
        return f"appointments:client:{client_id}"

    async def get(self, appointment_id: str) -> Appointment | None:
        return self._load(self.appointment_key(appointment_id), Appointment)

    async def save(self, appointment: Appointment) -> Appointment:
        self._store(self.appointment_key(appointment.id), appointment)
        self.redis.zadd(self.LIST_KEY, {appointment.id: date_score(appointment.date)})
        if appointment.client_id:
            self.redis.sadd(self.client_index_key(appointment.client_id), appointment.id)
        return appointment

    async def get_recent(self, limit: int = 20) -> list[Appointment]:
        ids = self.redis.zrevrange(self.LIST_KEY, 0, limit - 1)
        return self._load_many((self.appointment_key(i) for i in ids), Appointment)

    async def list_for_client(self, client_id: str) -> list[Appointment]:
        ids = sorted(self.redis.smembers(self.client_index_key(client_id)))
        appointments = self._load_many(
            (self.appointment_key(i) for i in ids), Appointment
        )
        return sorted(appointments, key=lambda a: date_score(a.date), reverse=True)

    async def list_all(self) -> list[Appointment]:
        ids = self.redis.zrevrange(self.LIST_KEY, 0, -1)
        return self._load_many((self.appointment_key(i) for i in ids), Appointment)

    async def delete(self, appointment: Appointment) -> None:
        self.redis.delete(self.appointment_key(appointment.id))
        self.redis.zrem(self.LIST_KEY, appointment.id)
        if appointment.client_id:
            self.redis.srem(self.client_index_key(appointment.client_id), appointment.id)

    async def unindex_client(self, client_id: str) -> None:
        """Drop a client's appointment index.

        The appointment documents stay in ``appointments:list`` so the
        clinic's history remains visible to admins.

        Args:
            client_id: Client ID
        """
        self.redis.delete(self.client_index_key(client_id))
