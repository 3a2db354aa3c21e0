"""Tests for consent service."""

from datetime import UTC, datetime

import fakeredis
import pytest

from continuum.core.exceptions import NotFoundError, ValidationError
from continuum.models.consent import (
    REVOKED_SIGNATURE,
    ConsentAcceptanceRequest,
    Signature,
    SignatureMethod,
)
from continuum.services.consent_documents import (
    get_all_consents,
    get_consent_document,
    get_required_consents,
)
from continuum.services.consent_service import ConsentService

CLIENT_ID = "client-1"
PET_ID = "pet-1"


@pytest.fixture
def service(redis_client: fakeredis.FakeRedis) -> ConsentService:
    return ConsentService(redis_client)


def _accept(document_id: str, pet_id: str | None = None, **kwargs: object) -> ConsentAcceptanceRequest:
    return ConsentAcceptanceRequest(
        client_id=CLIENT_ID,
        pet_id=pet_id,
        document_id=document_id,
        signature=Signature(method=SignatureMethod.TYPED_NAME, value="Jane Owner"),
        **kwargs,
    )


class TestConsentDocuments:
    def test_catalogue(self) -> None:
        required = get_required_consents()

        assert len(get_all_consents()) == 8
        assert [d.id for d in required] == [
            "informed-consent-v1.0",
            "liability-waiver-v1.0",
            "data-privacy-gdpr-v1.0",
            "treatment-authorization-v1.0",
            "financial-responsibility-v1.0",
        ]
        assert get_consent_document("nope") is None


class TestRecordAcceptance:
    async def test_fills_server_side_fields(self, service: ConsentService) -> None:
        record = await service.record_acceptance(
            _accept("informed-consent-v1.0"), ip_address="10.0.0.1", user_agent="pytest"
        )

        assert record.id.startswith("consent-")
        assert record.document_version == "1.0"
        assert record.ip_address == "10.0.0.1"
        assert record.user_agent == "pytest"
        assert record.accepted_at is not None

    async def test_unknown_document(self, service: ConsentService) -> None:
        with pytest.raises(ValidationError):
            await service.record_acceptance(_accept("made-up-v9"))

    async def test_reserved_signature_value(self, service: ConsentService) -> None:
        request = ConsentAcceptanceRequest(
            client_id=CLIENT_ID,
            document_id="informed-consent-v1.0",
            signature=Signature(method=SignatureMethod.CHECKBOX, value=REVOKED_SIGNATURE),
        )
        with pytest.raises(ValidationError):
            await service.record_acceptance(request)

    async def test_repeated_acceptances_are_kept(self, service: ConsentService) -> None:
        await service.record_acceptance(_accept("informed-consent-v1.0"))
        await service.record_acceptance(_accept("informed-consent-v1.0"))

        assert len(await service.get_client_consents(CLIENT_ID)) == 2


class TestConsentStatus:
    async def test_pending_is_required_minus_accepted(self, service: ConsentService) -> None:
        required = [d.id for d in get_required_consents()]
        for document_id in required[:3]:
            await service.record_acceptance(_accept(document_id))
        # optional documents do not affect the pending set
        await service.record_acceptance(_accept("telemedicine-consent-v1.0"))

        status = await service.get_consent_status(CLIENT_ID)

        assert {d.id for d in status.pending_consents} == set(required[3:])
        assert status.all_required_accepted is False

    async def test_all_required_accepted(self, service: ConsentService) -> None:
        for document in get_required_consents():
            await service.record_acceptance(_accept(document.id))

        status = await service.get_consent_status(CLIENT_ID)

        assert status.pending_consents == []
        assert status.all_required_accepted is True
        assert await service.has_accepted_required_consents(CLIENT_ID) is True

    async def test_pet_scope_is_separate(self, service: ConsentService) -> None:
        await service.record_acceptance(_accept("informed-consent-v1.0", pet_id=PET_ID))

        assert await service.has_accepted_consent(CLIENT_ID, "informed-consent-v1.0", PET_ID)
        pet_status = await service.get_consent_status(CLIENT_ID, PET_ID)
        assert "informed-consent-v1.0" not in {d.id for d in pet_status.pending_consents}
        # a pet-scoped record says nothing about the client-level scope
        assert await service.has_accepted_consent(CLIENT_ID, "informed-consent-v1.0") is False
        client_status = await service.get_consent_status(CLIENT_ID)
        assert "informed-consent-v1.0" in {d.id for d in client_status.pending_consents}

    async def test_pet_revocation_keeps_client_acceptance(self, service: ConsentService) -> None:
        """Revoking for a pet leaves the client-level acceptance in force."""
        await service.record_acceptance(
            _accept("informed-consent-v1.0", accepted_at=datetime(2025, 1, 1, tzinfo=UTC))
        )
        await service.record_acceptance(
            _accept(
                "informed-consent-v1.0",
                pet_id=PET_ID,
                accepted_at=datetime(2025, 2, 1, tzinfo=UTC),
            )
        )

        await service.revoke_consent(CLIENT_ID, "informed-consent-v1.0", pet_id=PET_ID)

        assert await service.has_accepted_consent(CLIENT_ID, "informed-consent-v1.0") is True
        latest = await service.get_latest_acceptance(CLIENT_ID, "informed-consent-v1.0")
        assert latest is not None
        assert latest.pet_id is None
        assert not latest.is_revocation
        effective = await service.get_effective_acceptances(CLIENT_ID)
        assert [r.document_id for r in effective] == ["informed-consent-v1.0"]
        assert await service.has_accepted_consent(CLIENT_ID, "informed-consent-v1.0", PET_ID) is False

    async def test_client_revoke_ignores_pet_records(self, service: ConsentService) -> None:
        await service.record_acceptance(_accept("liability-waiver-v1.0", pet_id=PET_ID))

        with pytest.raises(NotFoundError):
            await service.revoke_consent(CLIENT_ID, "liability-waiver-v1.0")
        assert await service.has_accepted_consent(CLIENT_ID, "liability-waiver-v1.0", PET_ID) is True


class TestRevocation:
    async def test_latest_record_wins(self, service: ConsentService) -> None:
        await service.record_acceptance(
            _accept("liability-waiver-v1.0", accepted_at=datetime(2025, 3, 1, tzinfo=UTC))
        )

        revocation = await service.revoke_consent(CLIENT_ID, "liability-waiver-v1.0")

        assert revocation.is_revocation
        assert await service.has_accepted_consent(CLIENT_ID, "liability-waiver-v1.0") is False
        # the original acceptance is still stored
        history = await service.get_client_consents(CLIENT_ID)
        assert len(history) == 2
        assert sum(1 for r in history if not r.is_revocation) == 1

    async def test_revoked_document_becomes_pending(self, service: ConsentService) -> None:
        for document in get_required_consents():
            await service.record_acceptance(_accept(document.id))
        await service.revoke_consent(CLIENT_ID, "data-privacy-gdpr-v1.0")

        status = await service.get_consent_status(CLIENT_ID)

        assert [d.id for d in status.pending_consents] == ["data-privacy-gdpr-v1.0"]

    async def test_revocation_after_future_dated_acceptance(self, service: ConsentService) -> None:
        """A revocation always sorts after the acceptance it revokes."""
        await service.record_acceptance(
            _accept("informed-consent-v1.0", accepted_at=datetime(2099, 1, 1, tzinfo=UTC))
        )
        await service.revoke_consent(CLIENT_ID, "informed-consent-v1.0")

        assert await service.has_accepted_consent(CLIENT_ID, "informed-consent-v1.0") is False

    async def test_reaccept_after_revocation(self, service: ConsentService) -> None:
        await service.record_acceptance(
            _accept("informed-consent-v1.0", accepted_at=datetime(2025, 1, 1, tzinfo=UTC))
        )
        await service.revoke_consent(CLIENT_ID, "informed-consent-v1.0")
        await service.record_acceptance(_accept("informed-consent-v1.0"))

        assert await service.has_accepted_consent(CLIENT_ID, "informed-consent-v1.0") is True

    async def test_revoke_without_acceptance(self, service: ConsentService) -> None:
        with pytest.raises(NotFoundError):
            await service.revoke_consent(CLIENT_ID, "informed-consent-v1.0")

    async def test_revoke_twice(self, service: ConsentService) -> None:
        await service.record_acceptance(
            _accept("informed-consent-v1.0", accepted_at=datetime(2025, 1, 1, tzinfo=UTC))
        )
        await service.revoke_consent(CLIENT_ID, "informed-consent-v1.0")

        with pytest.raises(NotFoundError):
            await service.revoke_consent(CLIENT_ID, "informed-consent-v1.0")
