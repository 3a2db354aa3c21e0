"""Tests for email templates and bulk recipient selection."""

from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest

from continuum.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from continuum.models.appointment import AppointmentCreate
from continuum.models.client import ClientCreate
from continuum.models.communications import (
    BulkEmailRequest,
    BulkEmailResult,
    EmailTemplateCreate,
    EmailTemplateUpdate,
    NotificationSettings,
    RecipientFilter,
)
from continuum.models.pet import PetCreate
from continuum.services.appointment_service import AppointmentService
from continuum.services.client_service import ClientService
from continuum.services.template_service import SYSTEM_TEMPLATES, TemplateService


@pytest.fixture
def service(redis_client: fakeredis.FakeRedis) -> TemplateService:
    return TemplateService(redis_client)


def _bulk(recipient_filter: RecipientFilter, **kwargs: object) -> BulkEmailRequest:
    return BulkEmailRequest(
        recipient_filter=recipient_filter,
        subject="Clinic news",
        body="<p>Dear {{clientName}}, news from {{clinicName}}</p>",
        **kwargs,
    )


class TestTemplates:
    async def test_create_extracts_variables(self, service: TemplateService) -> None:
        template = await service.create_template(
            EmailTemplateCreate(name="Recall", subject="{{petName}} is due", body="Dear {{clientName}}")
        )

        assert template.variables == ["petName", "clientName"]
        assert template.is_system is False

    async def test_update_refreshes_variables(self, service: TemplateService) -> None:
        template = await service.create_template(
            EmailTemplateCreate(name="Recall", subject="Due", body="Dear {{clientName}}")
        )

        updated = await service.update_template(template.id, EmailTemplateUpdate(body="Hi {{date}}"))

        assert updated.variables == ["date"]
        assert updated.name == "Recall"

    async def test_get_missing(self, service: TemplateService) -> None:
        with pytest.raises(NotFoundError):
            await service.get_template("template-missing")

    async def test_seed_is_idempotent(self, service: TemplateService) -> None:
        created = await service.seed_system_templates()

        assert created == [t[0] for t in SYSTEM_TEMPLATES]
        assert await service.seed_system_templates() == []
        assert len(await service.list_templates()) == len(SYSTEM_TEMPLATES)

    async def test_system_templates_protected(self, service: TemplateService) -> None:
        await service.seed_system_templates()

        with pytest.raises(ForbiddenError):
            await service.delete_template("newsletter")

    async def test_delete_custom(self, service: TemplateService) -> None:
        template = await service.create_template(
            EmailTemplateCreate(name="Tmp", subject="S", body="B")
        )

        await service.delete_template(template.id)

        assert await service.list_templates() == []

    async def test_send_test_fills_clinic_defaults(self, service: TemplateService) -> None:
        await service.seed_system_templates()
        email = AsyncMock()
        email.send_email.return_value = "msg-1"

        message_id = await service.send_test(
            "welcome-email", "vet@example.com", {"clientName": "Jane"}, email
        )

        assert message_id == "msg-1"
        kwargs = email.send_email.call_args.kwargs
        assert kwargs["subject"] == "[TEST] Welcome to Continuum Clinic"
        assert "Dear Jane" in kwargs["body"]


class TestNotificationSettings:
    async def test_defaults_then_save(self, service: TemplateService) -> None:
        assert (await service.get_settings()) == NotificationSettings()

        await service.save_settings(NotificationSettings(send_reminders=False))

        assert (await service.get_settings()).send_reminders is False


class TestRecipients:
    @pytest.fixture
    async def people(self, redis_client: fakeredis.FakeRedis) -> dict[str, str]:
        clients = ClientService(redis_client)
        with_pet = await clients.create_client(
            ClientCreate(email="pet@example.com", first_name="Pat", last_name="Pet")
        )
        await clients.create_pet(
            with_pet.id,
            PetCreate(
                name="Rex",
                species="dog",
                breed="Boxer",
                date_of_birth="2015-01-01",
                weight=30,
                sex="male",
            ),
        )
        with_appt = await clients.create_client(
            ClientCreate(email="appt@example.com", first_name="Ada", last_name="Appt")
        )
        await AppointmentService(redis_client).create(
            AppointmentCreate(
                client_id=with_appt.id,
                client_name="Ada Appt",
                client_email="appt@example.com",
                pet_name="Tom",
                type="diagnostic",
                date="2025-06-15T10:00:00",
            )
        )
        return {"pet": with_pet.id, "appt": with_appt.id}

    async def test_all_clients(self, service: TemplateService, people: dict[str, str]) -> None:
        recipients = await service.resolve_recipients(_bulk(RecipientFilter.ALL_CLIENTS))

        assert {r.email for r in recipients} == {"pet@example.com", "appt@example.com"}

    async def test_clients_with_pets(self, service: TemplateService, people: dict[str, str]) -> None:
        recipients = await service.resolve_recipients(_bulk(RecipientFilter.CLIENTS_WITH_PETS))

        assert [r.client_id for r in recipients] == [people["pet"]]

    async def test_appointments_in_range_include_end_day(
        self, service: TemplateService, people: dict[str, str]
    ) -> None:
        inside = _bulk(
            RecipientFilter.CLIENTS_WITH_APPOINTMENTS,
            date_range_start="2025-06-01",
            date_range_end="2025-06-15",
        )
        outside = _bulk(
            RecipientFilter.CLIENTS_WITH_APPOINTMENTS,
            date_range_start="2025-07-01",
        )

        assert [r.client_id for r in await service.resolve_recipients(inside)] == [people["appt"]]
        assert await service.resolve_recipients(outside) == []

    async def test_custom_list_deduplicated(self, service: TemplateService) -> None:
        request = _bulk(
            RecipientFilter.CUSTOM_LIST,
            custom_emails=["a@example.com", "A@example.com", "b@example.com"],
        )

        recipients = await service.resolve_recipients(request)

        assert [r.email for r in recipients] == ["a@example.com", "b@example.com"]
        assert recipients[0].name == "Recipient 1"

    async def test_send_bulk(self, service: TemplateService, people: dict[str, str]) -> None:
        email = AsyncMock()
        email.send_bulk_email.return_value = BulkEmailResult(total=2, sent=2, failed=0, results=[])

        result = await service.send_bulk(_bulk(RecipientFilter.ALL_CLIENTS), email)

        assert result.sent == 2
        recipients, subject, body = email.send_bulk_email.call_args.args
        assert len(recipients) == 2
        assert "Continuum Clinic" in body
        assert "{{clientName}}" in body

    async def test_send_bulk_without_recipients(self, service: TemplateService) -> None:
        with pytest.raises(ValidationError):
            await service.send_bulk(_bulk(RecipientFilter.ALL_CLIENTS), MagicMock())
