"""Tests for clinical health records."""

from unittest.mock import MagicMock

import fakeredis
import pytest

from continuum.core.exceptions import NotFoundError
from continuum.models.client import ClientCreate
from continuum.models.health_record import HealthRecordCreate
from continuum.models.pet import PetCreate
from continuum.services.client_service import ClientService
from continuum.services.email_client import EmailError
from continuum.services.health_record_service import HealthRecordService


@pytest.fixture
def service(redis_client: fakeredis.FakeRedis) -> HealthRecordService:
    return HealthRecordService(redis_client)


@pytest.fixture
async def pet_id(redis_client: fakeredis.FakeRedis) -> str:
    clients = ClientService(redis_client)
    client = await clients.create_client(
        ClientCreate(email="jane.owner@example.com", first_name="Jane", last_name="Owner")
    )
    pet = await clients.create_pet(
        client.id,
        PetCreate(
            name="Biscuit",
            species="dog",
            breed="Beagle",
            date_of_birth="2016-04-01",
            weight=11.5,
            sex="neutered",
        ),
    )
    return pet.id


def _record(pet_id: str, day: str = "2025-06-01", **kwargs: object) -> HealthRecordCreate:
    return HealthRecordCreate(
        pet_id=pet_id, type="checkup", date=day, veterinarian="Dr Vet", **kwargs
    )


class TestHealthRecordService:
    async def test_create_notifies_owner(
        self, service: HealthRecordService, pet_id: str, mock_email_service: MagicMock
    ) -> None:
        record = await service.create_record(
            _record(pet_id, diagnosis="Healthy"), created_by="admin-1", email_service=mock_email_service
        )

        assert record.created_by == "admin-1"
        kwargs = mock_email_service.send_health_record_notification.await_args.kwargs
        assert kwargs["client_email"] == "jane.owner@example.com"
        assert kwargs["pet_name"] == "Biscuit"
        assert kwargs["summary"] == "Healthy"

    async def test_notification_failure_is_logged(
        self, service: HealthRecordService, pet_id: str, mock_email_service: MagicMock
    ) -> None:
        mock_email_service.send_health_record_notification.side_effect = EmailError("down")

        record = await service.create_record(
            _record(pet_id), created_by="admin-1", email_service=mock_email_service
        )

        assert (await service.get_record(record.id)).id == record.id

    async def test_unknown_pet(self, service: HealthRecordService) -> None:
        with pytest.raises(NotFoundError):
            await service.create_record(_record("pet-missing"), created_by="admin-1")

    async def test_list_for_pet_newest_first(
        self, service: HealthRecordService, pet_id: str
    ) -> None:
        for day in ("2025-01-01", "2025-03-01", "2025-02-01"):
            await service.create_record(_record(pet_id, day), created_by="admin-1")

        records = await service.list_for_pet(pet_id, limit=2)

        assert [r.date for r in records] == ["2025-03-01", "2025-02-01"]
        assert len(await service.list_all()) == 3

    async def test_delete(self, service: HealthRecordService, pet_id: str) -> None:
        record = await service.create_record(_record(pet_id), created_by="admin-1")

        await service.delete_record(record.id)

        assert await service.list_for_pet(pet_id) == []
        with pytest.raises(NotFoundError):
            await service.get_record(record.id)
