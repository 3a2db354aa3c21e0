"""Tests for the admin inbox, templates, bulk email and notification settings."""

from unittest.mock import MagicMock

import fakeredis
import pytest
from fastapi import status
from httpx import AsyncClient

from continuum.models.communications import BulkEmailResult, RecipientResult
from continuum.models.contact import ContactRequest
from continuum.services.contact_service import ContactService
from continuum.services.email_client import EmailError
from continuum.services.template_service import TemplateService


@pytest.fixture
async def submission(redis_client: fakeredis.FakeRedis):  # type: ignore[no-untyped-def]
    return await ContactService(redis_client).submit(
        ContactRequest(
            name="Sam Visitor",
            email="sam@example.com",
            subject="Opening hours",
            message="When are you open on Saturdays?",
        )
    )


class TestContactInbox:
    """Reading and answering contact form submissions."""

    async def test_list_and_open(
        self, client: AsyncClient, admin_headers: dict[str, str], submission
    ) -> None:  # type: ignore[no-untyped-def]
        listed = await client.get("/api/admin/contact", headers=admin_headers)
        opened = await client.get(f"/api/admin/contact/{submission.id}", headers=admin_headers)

        assert [s["id"] for s in listed.json()] == [submission.id]
        assert listed.json()[0]["status"] == "new"
        assert opened.json()["status"] == "read"

    async def test_filter_by_status(
        self, client: AsyncClient, admin_headers: dict[str, str], submission
    ) -> None:  # type: ignore[no-untyped-def]
        await client.put(
            f"/api/admin/contact/{submission.id}",
            json={"status": "archived"},
            headers=admin_headers,
        )

        new = await client.get("/api/admin/contact", params={"status": "new"}, headers=admin_headers)
        archived = await client.get(
            "/api/admin/contact", params={"status": "archived"}, headers=admin_headers
        )

        assert new.json() == []
        assert [s["id"] for s in archived.json()] == [submission.id]

    async def test_reply(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        mock_email_service: MagicMock,
        submission,  # type: ignore[no-untyped-def]
    ) -> None:
        response = await client.post(
            f"/api/admin/contact/{submission.id}/reply",
            json={"message": "We open from 9 until 1."},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "replied"
        mock_email_service.send_contact_reply.assert_awaited_once()

    async def test_reply_email_failure(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        mock_email_service: MagicMock,
        submission,  # type: ignore[no-untyped-def]
    ) -> None:
        mock_email_service.send_contact_reply.side_effect = EmailError("provider down")

        response = await client.post(
            f"/api/admin/contact/{submission.id}/reply",
            json={"message": "We open from 9 until 1."},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json() == {"error": "Failed to send reply"}

    async def test_reply_too_short(
        self, client: AsyncClient, admin_headers: dict[str, str], submission
    ) -> None:  # type: ignore[no-untyped-def]
        response = await client.post(
            f"/api/admin/contact/{submission.id}/reply",
            json={"message": "ok"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_delete(
        self, client: AsyncClient, admin_headers: dict[str, str], submission
    ) -> None:  # type: ignore[no-untyped-def]
        deleted = await client.delete(f"/api/admin/contact/{submission.id}", headers=admin_headers)
        missing = await client.get(f"/api/admin/contact/{submission.id}", headers=admin_headers)

        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert missing.status_code == status.HTTP_404_NOT_FOUND


class TestTemplates:
    """Email template management."""

    async def test_create_and_list(self, client: AsyncClient, admin_headers: dict[str, str]) -> None:
        created = await client.post(
            "/api/admin/templates",
            json={
                "name": "Spring check",
                "subject": "Time for {{petName}}'s check",
                "body": "<p>Hi {{clientName}}</p>",
            },
            headers=admin_headers,
        )

        assert created.status_code == status.HTTP_201_CREATED
        assert sorted(created.json()["variables"]) == ["clientName", "petName"]
        listed = await client.get("/api/admin/templates", headers=admin_headers)
        assert [t["id"] for t in listed.json()] == [created.json()["id"]]

    async def test_system_template_cannot_be_deleted(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        redis_client: fakeredis.FakeRedis,
    ) -> None:
        await TemplateService(redis_client).seed_system_templates()

        response = await client.delete("/api/admin/templates/welcome-email", headers=admin_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_send_test(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        mock_email_service: MagicMock,
        redis_client: fakeredis.FakeRedis,
    ) -> None:
        await TemplateService(redis_client).seed_system_templates()

        response = await client.post(
            "/api/admin/templates/welcome-email/test",
            json={"to": "vet@example.com", "variables": {"clientName": "Jane"}},
            headers=admin_headers,
        )

        assert response.json() == {"success": True, "messageId": "msg-test"}
        kwargs = mock_email_service.send_email.await_args.kwargs
        assert kwargs["subject"].startswith("[TEST] ")

    async def test_send_test_failure(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        mock_email_service: MagicMock,
        redis_client: fakeredis.FakeRedis,
    ) -> None:
        await TemplateService(redis_client).seed_system_templates()
        mock_email_service.send_email.side_effect = EmailError("provider down")

        response = await client.post(
            "/api/admin/templates/welcome-email/test",
            json={"to": "vet@example.com"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    async def test_missing_template(self, client: AsyncClient, admin_headers: dict[str, str]) -> None:
        response = await client.get("/api/admin/templates/nope", headers=admin_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestBulkAndSettings:
    """Bulk sends and notification settings."""

    async def test_bulk_to_custom_list(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        mock_email_service: MagicMock,
    ) -> None:
        mock_email_service.send_bulk_email.return_value = BulkEmailResult(
            total=2,
            sent=2,
            failed=0,
            results=[
                RecipientResult(email="a@example.com", success=True),
                RecipientResult(email="b@example.com", success=True),
            ],
        )

        response = await client.post(
            "/api/admin/communications/send",
            json={
                "recipientFilter": "custom-list",
                "customEmails": ["a@example.com", "b@example.com", "a@example.com"],
                "subject": "Clinic news",
                "body": "<p>Our new hours start next week.</p>",
            },
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["sent"] == 2
        recipients = mock_email_service.send_bulk_email.await_args.args[0]
        assert [r.email for r in recipients] == ["a@example.com", "b@example.com"]

    async def test_bulk_without_recipients(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/admin/communications/send",
            json={
                "recipientFilter": "all-clients",
                "subject": "Clinic news",
                "body": "<p>Our new hours start next week.</p>",
            },
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "No recipients found"}

    async def test_settings_round_trip(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        defaults = await client.get("/api/admin/communications/settings", headers=admin_headers)
        assert defaults.json()["sendMonthlyNewsletter"] is False

        saved = await client.put(
            "/api/admin/communications/settings",
            json={**defaults.json(), "sendMonthlyNewsletter": True, "replyToEmail": "hi@example.com"},
            headers=admin_headers,
        )
        again = await client.get("/api/admin/communications/settings", headers=admin_headers)

        assert saved.json()["sendMonthlyNewsletter"] is True
        assert again.json()["replyToEmail"] == "hi@example.com"
