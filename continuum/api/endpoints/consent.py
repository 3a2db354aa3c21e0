"""Consent API endpoints."""

from enum import StrEnum
from typing import Annotated, Any

from fastapi import APIRouter, Query, Request

from continuum.api.dependencies import ClientAuth, ConsentSvc, ensure_own_client, get_client_info
from continuum.core.exceptions import NotFoundError, ValidationError
from continuum.models.consent import (
    ConsentAcceptance,
    ConsentAcceptanceRequest,
    ConsentDocument,
)
from continuum.services.consent_documents import get_all_consents, get_consent_document

router = APIRouter()


class ConsentAction(StrEnum):
    STATUS = "status"
    HISTORY = "history"
    CHECK = "check"


@router.post("", status_code=201)
async def record_consent(
    body: ConsentAcceptanceRequest,
    request: Request,
    session: ClientAuth,
    service: ConsentSvc,
) -> dict[str, Any]:
    """Record an acceptance for the session's client.

    A new record is appended on every call; earlier acceptances stay as history.
    """
    ensure_own_client(session, body.client_id)
    ip_address, user_agent = get_client_info(request)
    record = await service.record_acceptance(body, ip_address, user_agent)
    all_accepted = await service.has_accepted_required_consents(body.client_id, body.pet_id)
    return {
        "success": True,
        "acceptance": record.model_dump(by_alias=True, mode="json", exclude_none=True),
        "allRequiredAccepted": all_accepted,
    }


@router.get("")
async def get_consent(
    session: ClientAuth,
    service: ConsentSvc,
    client_id: Annotated[str, Query(alias="clientId")],
    pet_id: Annotated[str | None, Query(alias="petId")] = None,
    action: ConsentAction = ConsentAction.STATUS,
    document_id: Annotated[str | None, Query(alias="documentId")] = None,
) -> Any:
    """Consent status, full history or a single-document check."""
    ensure_own_client(session, client_id)

    if action == ConsentAction.HISTORY:
        records = (
            await service.get_pet_consents(client_id, pet_id)
            if pet_id
            else await service.get_client_consents(client_id)
        )
        return [r.model_dump(by_alias=True, mode="json", exclude_none=True) for r in records]

    if action == ConsentAction.CHECK:
        if not document_id:
            raise ValidationError("documentId is required")
        latest = await service.get_latest_acceptance(client_id, document_id, pet_id)
        return {
            "documentId": document_id,
            "hasAccepted": latest is not None and not latest.is_revocation,
            "acceptedAt": latest.accepted_at.isoformat() if latest else None,
        }

    status = await service.get_consent_status(client_id, pet_id)
    return status.model_dump(by_alias=True, mode="json", exclude_none=True)


@router.delete("", response_model=ConsentAcceptance, response_model_exclude_none=True)
async def revoke_consent(
    request: Request,
    session: ClientAuth,
    service: ConsentSvc,
    client_id: Annotated[str, Query(alias="clientId")],
    document_id: Annotated[str, Query(alias="documentId")],
    pet_id: Annotated[str | None, Query(alias="petId")] = None,
) -> ConsentAcceptance:
    """Withdraw a consent; 404 when it is not currently accepted."""
    ensure_own_client(session, client_id)
    ip_address, user_agent = get_client_info(request)
    return await service.revoke_consent(client_id, document_id, pet_id, ip_address, user_agent)


@router.get("/documents", response_model=list[ConsentDocument])
async def list_documents(
    required: Annotated[bool | None, Query()] = None,
) -> list[ConsentDocument]:
    documents = get_all_consents()
    if required is not None:
        documents = [d for d in documents if d.required == required]
    return documents


@router.get("/documents/{document_id}", response_model=ConsentDocument)
async def get_document(document_id: str) -> ConsentDocument:
    document = get_consent_document(document_id)
    if document is None:
        raise NotFoundError(resource="Consent document", detail="Consent document not found")
    return document
