"""Clinical health records written by clinic staff."""

import logging

from redis import Redis

from continuum.core.exceptions import NotFoundError
from continuum.models.common import new_id
from continuum.models.health_record import HealthRecord, HealthRecordCreate
from continuum.repositories.client_repo import ClientRepository
from continuum.repositories.health_record_repo import HealthRecordRepository
from continuum.repositories.pet_repo import PetRepository
from continuum.services.email_client import EmailError
from continuum.services.email_service import EmailService

logger = logging.getLogger(__name__)


class HealthRecordService:
    """Service for clinic-authored pet health records."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.records = HealthRecordRepository(redis)
        self.pets = PetRepository(redis)
        self.clients = ClientRepository(redis)

    async def create_record(
        self,
        data: HealthRecordCreate,
        created_by: str,
        email_service: EmailService | None = None,
    ) -> HealthRecord:
        """Store a record for an existing pet and tell the owner (best-effort).

        Args:
            data: Record details
            created_by: Admin user ID
            email_service: Sends the owner notification

        Returns:
            The stored record

        Raises:
            NotFoundError: If the pet does not exist
        """
        pet = await self.pets.get(data.pet_id)
        if pet is None:
            raise NotFoundError(resource="Pet", resource_id=data.pet_id)

        record = HealthRecord(id=new_id("record"), created_by=created_by, **data.model_dump())
        await self.records.save(record)
        logger.info("Health record created", extra={"record_id": record.id, "pet_id": pet.id})

        client = await self.clients.get(pet.client_id)
        if email_service is not None and client is not None:
            try:
                await email_service.send_health_record_notification(
                    client_name=client.full_name,
                    client_email=client.email,
                    pet_name=pet.name,
                    record_type=record.type.value,
                    date=record.date,
                    summary=record.diagnosis or record.notes,
                )
            except EmailError:
                logger.warning(
                    "Health record notification failed",
                    extra={"record_id": record.id},
                    exc_info=True,
                )
        return record

    async def get_record(self, record_id: str) -> HealthRecord:
        """Get a record by ID.

        Args:
            record_id: Health record ID

        Returns:
            The record

        Raises:
            NotFoundError: If the record does not exist
        """
        record = await self.records.get(record_id)
        if record is None:
            raise NotFoundError(resource="Health record", resource_id=record_id)
        return record

    async def list_for_pet(self, pet_id: str, limit: int = 50) -> list[HealthRecord]:
        """List a pet's records.

        Args:
            pet_id: Pet ID
            limit: Maximum number of records

        Returns:
            Records, most recent first
        """
        return await self.records.list_for_pet(pet_id, limit)

    async def list_all(self) -> list[HealthRecord]:
        return await self.records.list_all()

    async def delete_record(self, record_id: str) -> None:
        record = await self.get_record(record_id)
        await self.records.delete(record)
