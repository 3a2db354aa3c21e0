"""Admin inbox, email templates, bulk sends and notification settings."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response

from continuum.api.dependencies import ContactSvc, EmailSvc, TemplateSvc, get_admin_session
from continuum.core.exceptions import ServiceUnavailableError
from continuum.models.communications import (
    BulkEmailRequest,
    BulkEmailResult,
    EmailTemplate,
    EmailTemplateCreate,
    EmailTemplateUpdate,
    NotificationSettings,
    TemplateTestRequest,
)
from continuum.models.contact import (
    ContactFormSubmission,
    ContactReply,
    ContactStatus,
    ContactStatusUpdate,
)
from continuum.services.email_client import EmailError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_admin_session)])


# Contact inbox


@router.get("/contact", response_model=list[ContactFormSubmission], response_model_exclude_none=True)
async def list_contacts(
    service: ContactSvc,
    status: Annotated[ContactStatus | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[ContactFormSubmission]:
    """List contact submissions, newest first, optionally filtered by status."""
    return await service.list_submissions(status=status, limit=limit)


@router.get(
    "/contact/{contact_id}",
    response_model=ContactFormSubmission,
    response_model_exclude_none=True,
)
async def get_contact(contact_id: str, service: ContactSvc) -> ContactFormSubmission:
    """Opening a new submission marks it read."""
    return await service.get(contact_id, mark_read=True)


@router.put(
    "/contact/{contact_id}",
    response_model=ContactFormSubmission,
    response_model_exclude_none=True,
)
async def update_contact_status(
    contact_id: str,
    body: ContactStatusUpdate,
    service: ContactSvc,
) -> ContactFormSubmission:
    """Set a submission's status, stamping read and reply times."""
    return await service.update_status(contact_id, body.status)


@router.post(
    "/contact/{contact_id}/reply",
    response_model=ContactFormSubmission,
    response_model_exclude_none=True,
)
async def reply_to_contact(
    contact_id: str,
    body: ContactReply,
    service: ContactSvc,
    email: EmailSvc,
) -> ContactFormSubmission:
    """Email a reply to the submitter and mark the submission replied.

    Returns 503 if the email provider rejects the message.
    """
    try:
        return await service.reply(contact_id, body.message, email_service=email)
    except EmailError as e:
        logger.error("Contact reply failed", extra={"contact_id": contact_id, "error": str(e)})
        raise ServiceUnavailableError("Failed to send reply") from e


@router.delete("/contact/{contact_id}", status_code=204)
async def delete_contact(contact_id: str, service: ContactSvc) -> Response:
    await service.delete(contact_id)
    return Response(status_code=204)


# Templates


@router.get("/templates", response_model=list[EmailTemplate])
async def list_templates(service: TemplateSvc) -> list[EmailTemplate]:
    return await service.list_templates()


@router.post("/templates", response_model=EmailTemplate, status_code=201)
async def create_template(body: EmailTemplateCreate, service: TemplateSvc) -> EmailTemplate:
    """Create a custom email template; its placeholders are listed from the subject and body."""
    return await service.create_template(body)


@router.get("/templates/{template_id}", response_model=EmailTemplate)
async def get_template(template_id: str, service: TemplateSvc) -> EmailTemplate:
    return await service.get_template(template_id)


@router.put("/templates/{template_id}", response_model=EmailTemplate)
async def update_template(
    template_id: str,
    body: EmailTemplateUpdate,
    service: TemplateSvc,
) -> EmailTemplate:
    return await service.update_template(template_id, body)


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(template_id: str, service: TemplateSvc) -> Response:
    await service.delete_template(template_id)
    return Response(status_code=204)


@router.post("/templates/{template_id}/test")
async def send_test_email(
    template_id: str,
    body: TemplateTestRequest,
    service: TemplateSvc,
    email: EmailSvc,
) -> dict[str, Any]:
    """Render a template with clinic defaults plus the given variables and send it to one address."""
    try:
        message_id = await service.send_test(template_id, body.to, body.variables, email)
    except EmailError as e:
        logger.error("Test email failed", extra={"template_id": template_id, "error": str(e)})
        raise ServiceUnavailableError("Failed to send test email") from e
    return {"success": True, "messageId": message_id}


# Bulk sends and settings


@router.post("/communications/send", response_model=BulkEmailResult)
async def send_bulk(body: BulkEmailRequest, service: TemplateSvc, email: EmailSvc) -> BulkEmailResult:
    """Send one message to every recipient the filter selects."""
    return await service.send_bulk(body, email)


@router.get("/communications/settings", response_model=NotificationSettings)
async def get_notification_settings(service: TemplateSvc) -> NotificationSettings:
    return await service.get_settings()


@router.put("/communications/settings", response_model=NotificationSettings)
async def save_notification_settings(
    body: NotificationSettings,
    service: TemplateSvc,
) -> NotificationSettings:
    """Replace the clinic's notification settings."""
    return await service.save_settings(body)
