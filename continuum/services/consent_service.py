"""Service for consent management."""

import logging
from datetime import timedelta

from redis import Redis

from continuum.core.exceptions import NotFoundError, ValidationError
from continuum.models.common import ensure_aware, new_id, utcnow
from continuum.models.consent import (
    REVOKED_SIGNATURE,
    ConsentAcceptance,
    ConsentAcceptanceRequest,
    ConsentStatus,
    Signature,
    SignatureMethod,
)
from continuum.repositories.consent_repo import ConsentRepository
from continuum.services.consent_documents import get_consent_document, get_required_consents

logger = logging.getLogger(__name__)


def is_revocation(record: ConsentAcceptance) -> bool:
    """A revocation is an ordinary record whose signature value is ``REVOKED``."""
    return record.is_revocation


class ConsentService:
    """Service for client consent to the clinic's documents.

    Acceptance records are append-only. For any (client, pet, document) the
    record with the latest ``acceptedAt`` decides the state, so every
    "has accepted" question goes through :meth:`get_latest_acceptance`.
    """

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.repo = ConsentRepository(redis)

    async def record_acceptance(
        self,
        request: ConsentAcceptanceRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ConsentAcceptance:
        """Build and store an acceptance record from a portal submission.

        Missing id, timestamp, document type and version are filled in; the
        request's IP and user agent are used when the body omits them.

        Raises:
            ValidationError: For an unknown document or a reserved signature value
        """
        document = get_consent_document(request.document_id)
        if document is None:
            raise ValidationError(f"Unknown consent document '{request.document_id}'")
        if request.signature and request.signature.value == REVOKED_SIGNATURE:
            raise ValidationError("Signature value is reserved")

        now = utcnow()
        record = ConsentAcceptance(
            id=request.id or new_id("consent"),
            client_id=request.client_id,
            pet_id=request.pet_id,
            document_id=document.id,
            document_type=request.document_type or document.type,
            document_version=request.document_version or document.version,
            accepted_at=request.accepted_at or now,
            ip_address=request.ip_address or ip_address,
            user_agent=request.user_agent or user_agent,
            signature=request.signature,
        )
        return await self.save_acceptance(record)

    async def save_acceptance(self, record: ConsentAcceptance) -> ConsentAcceptance:
        """Append a record. Repeated acceptances are kept as history.

        Args:
            record: Acceptance or revocation record

        Returns:
            The stored record
        """
        saved = await self.repo.create(record)
        logger.info(
            "Consent recorded",
            extra={
                "client_id": record.client_id,
                "pet_id": record.pet_id,
                "document_id": record.document_id,
                "revocation": record.is_revocation,
            },
        )
        return saved

    async def get_client_consents(self, client_id: str) -> list[ConsentAcceptance]:
        """Get every record a client has made, pet-scoped ones included.

        Args:
            client_id: Client ID

        Returns:
            Records, most recent first
        """
        return await self.repo.list_for_client(client_id)

    async def get_pet_consents(self, client_id: str, pet_id: str) -> list[ConsentAcceptance]:
        """Get the records scoped to one of a client's pets.

        Args:
            client_id: Client ID
            pet_id: Pet ID

        Returns:
            Records, most recent first
        """
        return await self.repo.list_for_pet(client_id, pet_id)

    async def _records(self, client_id: str, pet_id: str | None) -> list[ConsentAcceptance]:
        if pet_id:
            return await self.get_pet_consents(client_id, pet_id)
        # The client index also holds pet-scoped records
        records = await self.get_client_consents(client_id)
        return [record for record in records if record.pet_id is None]

    async def get_latest_acceptance(
        self,
        client_id: str,
        document_id: str,
        pet_id: str | None = None,
    ) -> ConsentAcceptance | None:
        """Get the most recent record (acceptance or revocation) for a document.

        Args:
            client_id: Client ID
            document_id: Consent document ID
            pet_id: Pet ID, or None for the client-level scope

        Returns:
            The latest record in that exact scope, or None
        """
        for record in await self._records(client_id, pet_id):
            if record.document_id == document_id:
                return record
        return None

    async def has_accepted_consent(
        self,
        client_id: str,
        document_id: str,
        pet_id: str | None = None,
    ) -> bool:
        latest = await self.get_latest_acceptance(client_id, document_id, pet_id)
        return latest is not None and not latest.is_revocation

    async def get_effective_acceptances(
        self,
        client_id: str,
        pet_id: str | None = None,
    ) -> list[ConsentAcceptance]:
        """Get the latest record per document, dropping documents whose latest is a revocation.

        Args:
            client_id: Client ID
            pet_id: Pet ID, or None for the client-level scope

        Returns:
            Currently effective acceptances
        """
        latest: dict[str, ConsentAcceptance] = {}
        for record in await self._records(client_id, pet_id):
            latest.setdefault(record.document_id, record)
        return [r for r in latest.values() if not r.is_revocation]

    async def get_consent_status(
        self,
        client_id: str,
        pet_id: str | None = None,
    ) -> ConsentStatus:
        """Compare the required documents with the ones currently accepted.

        Args:
            client_id: Client ID
            pet_id: Pet ID, or None for the client-level scope

        Returns:
            Consent status with the pending documents
        """
        required = get_required_consents()
        accepted = await self.get_effective_acceptances(client_id, pet_id)
        accepted_ids = {record.document_id for record in accepted}
        pending = [document for document in required if document.id not in accepted_ids]
        return ConsentStatus(
            client_id=client_id,
            pet_id=pet_id,
            required_consents=required,
            accepted_consents=accepted,
            pending_consents=pending,
            all_required_accepted=not pending,
            last_updated=utcnow(),
        )

    async def has_accepted_required_consents(
        self,
        client_id: str,
        pet_id: str | None = None,
    ) -> bool:
        status = await self.get_consent_status(client_id, pet_id)
        return status.all_required_accepted

    async def revoke_consent(
        self,
        client_id: str,
        document_id: str,
        pet_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ConsentAcceptance:
        """Withdraw a consent by appending a revocation record.

        Args:
            client_id: Client ID
            document_id: Consent document ID
            pet_id: Pet ID, or None for the client-level scope
            ip_address: Requesting IP, stored on the record
            user_agent: Requesting user agent, stored on the record

        Returns:
            The revocation record

        Raises:
            NotFoundError: If the document is not currently accepted
        """
        latest = await self.get_latest_acceptance(client_id, document_id, pet_id)
        if latest is None or latest.is_revocation:
            raise NotFoundError(
                resource="Consent",
                detail="No consent acceptance found to revoke",
            )

        # Must be strictly newer than the record it revokes
        now = max(utcnow(), ensure_aware(latest.accepted_at) + timedelta(microseconds=1))
        revocation = ConsentAcceptance(
            id=new_id("consent"),
            client_id=client_id,
            pet_id=pet_id,
            document_id=latest.document_id,
            document_type=latest.document_type,
            document_version=latest.document_version,
            accepted_at=now,
            ip_address=ip_address,
            user_agent=user_agent,
            signature=Signature(
                method=SignatureMethod.CHECKBOX,
                value=REVOKED_SIGNATURE,
                timestamp=now,
            ),
        )
        return await self.save_acceptance(revocation)
