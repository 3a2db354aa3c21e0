"""Consent document and acceptance schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from continuum.models.common import ApiModel, utcnow

REVOKED_SIGNATURE = "REVOKED"


class ConsentType(StrEnum):
    INFORMED_CONSENT = "informed-consent"
    LIABILITY_WAIVER = "liability-waiver"
    DATA_PRIVACY = "data-privacy"
    TREATMENT_AUTHORIZATION = "treatment-authorization"
    EXPERIMENTAL_TREATMENT = "experimental-treatment"
    TELEMEDICINE = "telemedicine"
    FINANCIAL_RESPONSIBILITY = "financial-responsibility"
    TERMS_OF_SERVICE = "terms-of-service"


class ConsentCategory(StrEnum):
    LEGAL = "legal"
    MEDICAL = "medical"
    DATA = "data"
    FINANCIAL = "financial"


class SignatureMethod(StrEnum):
    CHECKBOX = "checkbox"
    TYPED_NAME = "typed-name"
    DIGITAL_SIGNATURE = "digital-signature"


class ConsentDocument(ApiModel):
    """A versioned legal text. Static; never written at runtime."""

    model_config = {"frozen": True}

    id: str
    type: ConsentType
    version: str
    title: str
    content: str
    effective_date: str
    required: bool
    category: ConsentCategory


class Signature(ApiModel):
    method: SignatureMethod
    value: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=utcnow)


class ConsentAcceptance(ApiModel):
    """Append-only acceptance (or revocation) record."""

    id: str
    client_id: str
    pet_id: str | None = None
    document_id: str
    document_type: ConsentType
    document_version: str
    accepted_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    signature: Signature | None = None

    @property
    def is_revocation(self) -> bool:
        return self.signature is not None and self.signature.value == REVOKED_SIGNATURE


class ConsentAcceptanceRequest(ApiModel):
    """Body of POST /api/consent; server fills id, timestamps and version when absent."""

    id: str | None = None
    client_id: str = Field(..., min_length=1)
    pet_id: str | None = None
    document_id: str = Field(..., min_length=1)
    document_type: ConsentType | None = None
    document_version: str | None = None
    accepted_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    signature: Signature | None = None


class ConsentStatus(ApiModel):
    client_id: str
    pet_id: str | None = None
    required_consents: list[ConsentDocument]
    accepted_consents: list[ConsentAcceptance]
    pending_consents: list[ConsentDocument]
    all_required_accepted: bool
    last_updated: datetime
