"""Admin email templates, notification settings and bulk sends."""

import logging

from redis import Redis

from continuum.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from continuum.core.site import CLINIC_ADDRESS, CLINIC_EMAIL, CLINIC_NAME, CLINIC_PHONE
from continuum.models.common import new_id, utcnow
from continuum.models.communications import (
    BulkEmailRequest,
    BulkEmailResult,
    EmailRecipient,
    EmailTemplate,
    EmailTemplateCreate,
    EmailTemplateUpdate,
    NotificationSettings,
    RecipientFilter,
)
from continuum.repositories.appointment_repo import AppointmentRepository, date_score
from continuum.repositories.client_repo import ClientRepository
from continuum.repositories.pet_repo import PetRepository
from continuum.repositories.template_repo import TemplateRepository
from continuum.services.email_client import extract_variables, replace_variables
from continuum.services.email_service import EmailService

logger = logging.getLogger(__name__)

CLINIC_VARIABLES = {
    "clinicName": CLINIC_NAME,
    "clinicAddress": CLINIC_ADDRESS,
    "clinicEmail": CLINIC_EMAIL,
    "clinicPhone": CLINIC_PHONE,
}

_FOOTER = """
<hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;" />
<p style="color: #666; font-size: 12px;">
  {{clinicName}}<br />{{clinicAddress}}<br />{{clinicEmail}} | {{clinicPhone}}
</p>"""

# (id, name, subject, body) seeded by ``continuum init-templates``
SYSTEM_TEMPLATES: tuple[tuple[str, str, str, str], ...] = (
    (
        "appointment-confirmation",
        "Appointment Confirmation",
        "Appointment Confirmed - {{date}} at {{time}}",
        "<h2>Appointment Confirmed</h2>\n<p>Dear {{clientName}},</p>\n"
        "<p>Your appointment has been confirmed for {{petName}}.</p>\n"
        "<p><strong>Date:</strong> {{date}}<br /><strong>Time:</strong> {{time}}<br />"
        "<strong>Type:</strong> {{appointmentType}}</p>\n"
        "<p>If you need to reschedule, please contact us at least 24 hours in advance.</p>"
        + _FOOTER,
    ),
    (
        "appointment-reminder",
        "Appointment Reminder (24h)",
        "Reminder: Appointment Tomorrow for {{petName}}",
        "<h2>Appointment Reminder</h2>\n<p>Dear {{clientName}},</p>\n"
        "<p>This is a friendly reminder that {{petName}} has an appointment tomorrow.</p>\n"
        "<p><strong>Date:</strong> {{date}}<br /><strong>Time:</strong> {{time}}<br />"
        "<strong>Type:</strong> {{appointmentType}}</p>\n"
        "<p><strong>Please arrive 10 minutes early</strong> to complete any paperwork.</p>"
        + _FOOTER,
    ),
    (
        "welcome-email",
        "Welcome Email (New Client)",
        "Welcome to {{clinicName}}",
        "<h2>Welcome to Continuum Clinic</h2>\n<p>Dear {{clientName}},</p>\n"
        "<p>We're delighted to have you and {{petName}} join our family.</p>\n"
        "<p>In your portal you can view health records, book appointments and "
        "follow treatments.</p>" + _FOOTER,
    ),
    (
        "follow-up-request",
        "Follow-up Request",
        "Follow-up for {{petName}}",
        "<h2>Follow-up Appointment Recommended</h2>\n<p>Dear {{clientName}},</p>\n"
        "<p>We hope {{petName}} is doing well following the recent visit.</p>\n"
        "<p>We recommend scheduling a follow-up within the next 2-4 weeks.</p>" + _FOOTER,
    ),
    (
        "newsletter",
        "Monthly Newsletter Template",
        "Continuum Clinic Newsletter - {{date}}",
        "<h2>Monthly Newsletter</h2>\n<p>Dear {{clientName}},</p>\n<p>{{content}}</p>" + _FOOTER,
    ),
)


class TemplateService:
    """Service for email templates, notification settings and bulk sends."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.templates = TemplateRepository(redis)
        self.clients = ClientRepository(redis)
        self.pets = PetRepository(redis)
        self.appointments = AppointmentRepository(redis)

    async def list_templates(self) -> list[EmailTemplate]:
        return await self.templates.list_all()

    async def get_template(self, template_id: str) -> EmailTemplate:
        """Get a template by ID.

        Args:
            template_id: Template ID

        Returns:
            The template

        Raises:
            NotFoundError: If the template does not exist
        """
        template = await self.templates.get(template_id)
        if template is None:
            raise NotFoundError(resource="Template", detail="Template not found")
        return template

    async def create_template(self, data: EmailTemplateCreate) -> EmailTemplate:
        """Create a custom template, listing its ``{{variables}}``.

        Args:
            data: Name, subject and body

        Returns:
            The created template
        """
        template = EmailTemplate(
            id=new_id("template"),
            name=data.name,
            subject=data.subject,
            body=data.body,
            variables=extract_variables(data.subject + data.body),
        )
        await self.templates.save(template)
        logger.info("Email template created", extra={"template_id": template.id})
        return template

    async def update_template(self, template_id: str, updates: EmailTemplateUpdate) -> EmailTemplate:
        """Apply a partial update and recompute the variable list.

        Args:
            template_id: Template ID
            updates: Fields to change

        Returns:
            The updated template

        Raises:
            NotFoundError: If the template does not exist
        """
        template = await self.get_template(template_id)
        template = template.model_copy(
            update={**updates.model_dump(exclude_unset=True), "updated_at": utcnow()}
        )
        template.variables = extract_variables(template.subject + template.body)
        return await self.templates.save(template)

    async def delete_template(self, template_id: str) -> None:
        """Delete a custom template.

        Args:
            template_id: Template ID

        Raises:
            NotFoundError: If the template does not exist
            ForbiddenError: For system templates
        """
        template = await self.get_template(template_id)
        if template.is_system:
            raise ForbiddenError("System templates cannot be deleted")
        await self.templates.delete(template_id)

    async def seed_system_templates(self) -> list[str]:
        """Write any missing system template.

        Returns:
            IDs of the templates created
        """
        created: list[str] = []
        for template_id, name, subject, body in SYSTEM_TEMPLATES:
            if await self.templates.get(template_id) is not None:
                continue
            await self.templates.save(
                EmailTemplate(
                    id=template_id,
                    name=name,
                    subject=subject,
                    body=body,
                    variables=extract_variables(subject + body),
                    is_system=True,
                )
            )
            created.append(template_id)
        return created

    async def send_test(
        self,
        template_id: str,
        to: str,
        variables: dict[str, str],
        email_service: EmailService,
    ) -> str | None:
        """Render a template with clinic defaults plus ``variables`` and send it.

        Args:
            template_id: Template ID
            to: Recipient address
            variables: Values for the template placeholders
            email_service: Sends the rendered email

        Returns:
            Provider message ID, if any

        Raises:
            NotFoundError: If the template does not exist
            EmailError: If the provider rejects the send
        """
        template = await self.get_template(template_id)
        data = {**CLINIC_VARIABLES, **variables}
        return await email_service.send_email(
            to=to,
            subject=f"[TEST] {replace_variables(template.subject, data)}",
            body=replace_variables(template.body, data),
        )

    # Notification settings

    async def get_settings(self) -> NotificationSettings:
        return await self.templates.get_settings()

    async def save_settings(self, settings: NotificationSettings) -> NotificationSettings:
        return await self.templates.save_settings(settings)

    # Bulk sends

    async def resolve_recipients(self, request: BulkEmailRequest) -> list[EmailRecipient]:
        """Expand the request's recipient filter into addresses, deduplicated by email.

        Args:
            request: Bulk send request with its filter

        Returns:
            Recipients in filter order
        """
        if request.recipient_filter == RecipientFilter.CUSTOM_LIST:
            recipients = [
                EmailRecipient(email=email, name=f"Recipient {index}")
                for index, email in enumerate(request.custom_emails, start=1)
            ]
        else:
            clients = await self.clients.list_all()
            if request.recipient_filter == RecipientFilter.CLIENTS_WITH_PETS:
                clients = [c for c in clients if await self.pets.client_pet_ids(c.id)]
            elif request.recipient_filter == RecipientFilter.CLIENTS_WITH_APPOINTMENTS:
                with_appointments = await self._clients_with_appointments(
                    request.date_range_start, request.date_range_end
                )
                clients = [c for c in clients if c.id in with_appointments]
            recipients = [
                EmailRecipient(email=c.email, name=c.full_name, client_id=c.id) for c in clients
            ]

        seen: set[str] = set()
        unique = []
        for recipient in recipients:
            if recipient.email.lower() not in seen:
                seen.add(recipient.email.lower())
                unique.append(recipient)
        return unique

    async def _clients_with_appointments(self, start: str | None, end: str | None) -> set[str]:
        low = date_score(start) if start else float("-inf")
        high = date_score(end) if end else float("inf")
        if end and len(end) == 10:
            # a bare end date includes the whole day
            high = date_score(f"{end}T23:59:59.999")
        return {
            a.client_id
            for a in await self.appointments.list_all()
            if a.client_id and low <= date_score(a.date) <= high
        }

    async def send_bulk(
        self,
        request: BulkEmailRequest,
        email_service: EmailService,
    ) -> BulkEmailResult:
        """Send a subject and body, or a stored template, to every recipient.

        ``{{clientName}}`` is filled per recipient; clinic details are filled once.

        Args:
            request: Bulk send request
            email_service: Sends the emails

        Returns:
            Counts of sent and failed messages

        Raises:
            ValidationError: If the filter matches nobody
            NotFoundError: If the template does not exist
        """
        recipients = await self.resolve_recipients(request)
        if not recipients:
            raise ValidationError("No recipients found")

        subject, body = request.subject, request.body
        if request.template_id:
            template = await self.get_template(request.template_id)
            subject, body = template.subject, template.body

        subject = replace_variables(subject, CLINIC_VARIABLES)
        body = replace_variables(body, CLINIC_VARIABLES)
        result = await email_service.send_bulk_email(
            recipients, subject, body, reply_to=request.reply_to
        )
        logger.info(
            "Bulk email sent",
            extra={"total": result.total, "sent": result.sent, "failed": result.failed},
        )
        return result
