"""The clinic's consent documents.

Documents are versioned and immutable: a wording change ships as a new
document id (``...-v1.1``) so earlier acceptances keep pointing at the text
the client actually saw.
"""

from continuum.models.consent import ConsentCategory, ConsentDocument, ConsentType

EFFECTIVE_DATE = "2025-01-01"

CONSENT_DOCUMENTS: tuple[ConsentDocument, ...] = (
    ConsentDocument(
        id="informed-consent-v1.0",
        type=ConsentType.INFORMED_CONSENT,
        version="1.0",
        title="Informed Consent for Veterinary Longevity Treatment",
        effective_date=EFFECTIVE_DATE,
        required=True,
        category=ConsentCategory.MEDICAL,
        content=(
            "## Nature of care\n\n"
            "Continuum Clinic provides preventive and longevity-focused veterinary medicine, "
            "including diagnostics, biomarker monitoring, nutritional protocols and, where "
            "appropriate, advanced therapeutics.\n\n"
            "## Risks and alternatives\n\n"
            "Every intervention carries risk. Your veterinarian will explain the expected "
            "benefits, known risks and available alternatives, including no treatment, before "
            "any procedure.\n\n"
            "## Your rights\n\n"
            "You may ask questions at any time and may withdraw consent for future treatment "
            "by notifying the clinic in writing."
        ),
    ),
    ConsentDocument(
        id="liability-waiver-v1.0",
        type=ConsentType.LIABILITY_WAIVER,
        version="1.0",
        title="Liability Waiver and Release",
        effective_date=EFFECTIVE_DATE,
        required=True,
        category=ConsentCategory.LEGAL,
        content=(
            "## Acknowledgement\n\n"
            "Outcomes of longevity medicine cannot be guaranteed. Individual animals respond "
            "differently to diagnostics and treatment.\n\n"
            "## Release\n\n"
            "Except in cases of negligence, you release the clinic and its staff from claims "
            "arising from complications that were disclosed to you in advance."
        ),
    ),
    ConsentDocument(
        id="data-privacy-gdpr-v1.0",
        type=ConsentType.DATA_PRIVACY,
        version="1.0",
        title="Data Privacy and GDPR Consent",
        effective_date=EFFECTIVE_DATE,
        required=True,
        category=ConsentCategory.DATA,
        content=(
            "## Data we hold\n\n"
            "Contact details, your pets' medical histories, health records and the consent "
            "records you sign.\n\n"
            "## How we use it\n\n"
            "To deliver and coordinate care, to contact you about appointments and, in "
            "anonymised form only, to improve our protocols.\n\n"
            "## Your rights under UK GDPR\n\n"
            "You may request access to, correction of, or erasure of your data, and may "
            "withdraw this consent at any time from the client portal."
        ),
    ),
    ConsentDocument(
        id="treatment-authorization-v1.0",
        type=ConsentType.TREATMENT_AUTHORIZATION,
        version="1.0",
        title="Treatment Authorization",
        effective_date=EFFECTIVE_DATE,
        required=True,
        category=ConsentCategory.MEDICAL,
        content=(
            "## Authorization\n\n"
            "You authorize the clinic's veterinarians to examine your pet and perform the "
            "diagnostics and treatments agreed in your care plan.\n\n"
            "## Emergencies\n\n"
            "If you cannot be reached in an emergency, the clinic may provide life-saving "
            "care, contacting your nominated emergency contact where possible."
        ),
    ),
    ConsentDocument(
        id="financial-responsibility-v1.0",
        type=ConsentType.FINANCIAL_RESPONSIBILITY,
        version="1.0",
        title="Financial Responsibility Agreement",
        effective_date=EFFECTIVE_DATE,
        required=True,
        category=ConsentCategory.FINANCIAL,
        content=(
            "## Fees\n\n"
            "You are responsible for all fees for services provided to your pet. Estimates "
            "are given before planned procedures.\n\n"
            "## Insurance\n\n"
            "Where you hold pet insurance the clinic will help with claims, but payment "
            "remains due whether or not the insurer pays."
        ),
    ),
    ConsentDocument(
        id="experimental-treatment-v1.0",
        type=ConsentType.EXPERIMENTAL_TREATMENT,
        version="1.0",
        title="Consent for Novel and Experimental Therapies",
        effective_date=EFFECTIVE_DATE,
        required=False,
        category=ConsentCategory.MEDICAL,
        content=(
            "Some therapies offered by the clinic are novel and supported by limited "
            "evidence. They are only used after a separate discussion and with this "
            "additional consent."
        ),
    ),
    ConsentDocument(
        id="telemedicine-consent-v1.0",
        type=ConsentType.TELEMEDICINE,
        version="1.0",
        title="Telemedicine Consent",
        effective_date=EFFECTIVE_DATE,
        required=False,
        category=ConsentCategory.MEDICAL,
        content=(
            "Remote consultations cannot replace a physical examination. The veterinarian "
            "may ask you to bring your pet to the clinic before giving advice."
        ),
    ),
    ConsentDocument(
        id="terms-of-service-v1.0",
        type=ConsentType.TERMS_OF_SERVICE,
        version="1.0",
        title="Terms of Service",
        effective_date=EFFECTIVE_DATE,
        required=False,
        category=ConsentCategory.LEGAL,
        content="Use of the client portal is subject to the clinic's published terms of service.",
    ),
)

_BY_ID = {document.id: document for document in CONSENT_DOCUMENTS}


def get_all_consents() -> list[ConsentDocument]:
    return list(CONSENT_DOCUMENTS)


def get_required_consents() -> list[ConsentDocument]:
    return [document for document in CONSENT_DOCUMENTS if document.required]


def get_consent_document(document_id: str) -> ConsentDocument | None:
    return _BY_ID.get(document_id)


def get_consents_by_type(consent_type: ConsentType | str) -> list[ConsentDocument]:
    return [d for d in CONSENT_DOCUMENTS if d.type == consent_type]


def get_consents_by_category(category: ConsentCategory | str) -> list[ConsentDocument]:
    return [d for d in CONSENT_DOCUMENTS if d.category == category]
