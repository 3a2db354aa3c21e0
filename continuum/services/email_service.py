"""Built-in transactional emails and bulk sending."""

import html
import logging
from datetime import datetime
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from continuum.core.config import Settings, get_settings
from continuum.core.site import CLINIC_ADDRESS, CLINIC_EMAIL, CLINIC_NAME, CLINIC_PHONE
from continuum.models.appointment import BookingRequest
from continuum.models.communications import (
    BulkEmailResult,
    EmailRecipient,
    NotificationSettings,
    RecipientResult,
)
from continuum.models.contact import ContactFormSubmission
from continuum.services.email_client import EmailError, ResendClient, replace_variables

logger = logging.getLogger(__name__)


def format_preferred_date(value: str) -> str:
    """``2025-03-14`` -> ``Friday, 14 March 2025``; unparseable values pass through."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed:%A}, {parsed.day} {parsed:%B %Y}"


class EmailService:
    """Renders the clinic's built-in emails and hands them to Resend.

    Bodies are Jinja2 templates with autoescaping on, so values typed by
    visitors never reach the HTML unescaped.
    """

    def __init__(
        self,
        client: ResendClient,
        settings: Settings | None = None,
        notification_settings: NotificationSettings | None = None,
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.notifications = notification_settings or NotificationSettings()
        self._env = Environment(
            loader=PackageLoader("continuum", "web/templates/email"),
            autoescape=select_autoescape(default=True),
        )

    def render(self, template_name: str, **context: Any) -> str:
        """Render an email template with the clinic details in context.

        Args:
            template_name: File under ``web/templates/email``
            **context: Template variables

        Returns:
            Rendered HTML
        """
        template = self._env.get_template(template_name)
        return template.render(
            clinic_name=CLINIC_NAME,
            clinic_address=CLINIC_ADDRESS,
            clinic_email=CLINIC_EMAIL,
            clinic_phone=CLINIC_PHONE,
            footer=self.notifications.email_footer,
            **context,
        )

    @property
    def reply_to(self) -> str | None:
        return self.notifications.reply_to_email or None

    async def send_email(
        self,
        to: str | list[str],
        subject: str,
        body: str,
        reply_to: str | None = None,
    ) -> str | None:
        """Send an already rendered HTML body.

        Args:
            to: Recipient address or addresses
            subject: Subject line
            body: HTML body
            reply_to: Reply-to address, defaulting to the notification settings

        Returns:
            Provider message ID, if any

        Raises:
            EmailError: If Resend rejects the message
        """
        return await self.client.send(
            to=to,
            subject=subject,
            html=body,
            reply_to=reply_to or self.reply_to,
        )

    async def send_contact_notification(self, submission: ContactFormSubmission) -> None:
        """Forward a contact form submission to the clinic inbox.

        Args:
            submission: The stored submission

        Raises:
            EmailError: If the send fails
        """
        body = self.render(
            "contact_notification.html",
            name=submission.name,
            email=submission.email,
            phone=submission.phone,
            type=submission.type.value,
            subject=submission.subject,
            message=submission.message,
        )
        await self.client.send(
            to=self.settings.email_to,
            subject=f"Contact Form: {submission.subject}",
            html=body,
            reply_to=submission.email,
        )

    def _booking_context(self, booking: BookingRequest) -> dict[str, Any]:
        return {
            "owner_name": booking.owner_name,
            "email": booking.email,
            "phone": booking.phone,
            "pet_name": booking.pet_name,
            "pet_species": booking.pet_species.value,
            "appointment_type": booking.appointment_type.value,
            "preferred_date": format_preferred_date(booking.preferred_date),
            "message": booking.message,
        }

    async def send_appointment_notification(self, booking: BookingRequest) -> None:
        """Tell the clinic about a new booking request."""
        await self.client.send(
            to=self.settings.email_to,
            subject=f"New Consultation Request: {booking.pet_name} ({booking.pet_species.value})",
            html=self.render("appointment_notification.html", **self._booking_context(booking)),
            reply_to=booking.email,
        )

    async def send_appointment_confirmation(self, booking: BookingRequest) -> bool:
        """Confirm receipt of a booking request to the owner.

        Args:
            booking: The booking request

        Returns:
            False when confirmations are disabled in the notification settings

        Raises:
            EmailError: If the send fails
        """
        if not self.notifications.send_appointment_confirmation:
            return False
        await self.client.send(
            to=booking.email,
            subject=f"Consultation Request Received - {CLINIC_NAME}",
            html=self.render("appointment_confirmation.html", **self._booking_context(booking)),
            reply_to=self.reply_to,
        )
        return True

    async def send_welcome(self, client_name: str, client_email: str) -> bool:
        """Welcome a newly verified portal client.

        Args:
            client_name: Client full name
            client_email: Client email

        Returns:
            False when welcome emails are disabled in the notification settings
        """
        if not self.notifications.send_welcome_email:
            return False
        await self.client.send(
            to=client_email,
            subject=f"Welcome to {CLINIC_NAME} Portal",
            html=self.render("welcome.html", client_name=client_name),
            reply_to=self.reply_to,
        )
        return True

    def verification_url(self, token: str, locale: str) -> str:
        return f"{self.settings.site_url.rstrip('/')}/{locale}/verify-email?token={token}"

    async def send_verification(
        self,
        client_name: str,
        client_email: str,
        token: str,
        locale: str = "en",
    ) -> None:
        """Send the email verification link.

        Args:
            client_name: Client full name
            client_email: Address to verify
            token: Verification token
            locale: Locale of the landing page
        """
        await self.client.send(
            to=client_email,
            subject=f"Verify your email - {CLINIC_NAME}",
            html=self.render(
                "verification.html",
                client_name=client_name,
                verify_url=self.verification_url(token, locale),
            ),
        )

    async def send_contact_reply(
        self,
        to: str,
        to_name: str,
        subject: str,
        message: str,
    ) -> None:
        await self.client.send(
            to=to,
            subject=f"Re: {subject}",
            html=self.render("contact_reply.html", to_name=to_name, message=message),
            reply_to=self.reply_to,
        )

    async def send_health_record_notification(
        self,
        client_name: str,
        client_email: str,
        pet_name: str,
        record_type: str,
        date: str,
        summary: str,
    ) -> None:
        await self.client.send(
            to=client_email,
            subject=f"New Health Record for {pet_name}",
            html=self.render(
                "health_record.html",
                client_name=client_name,
                pet_name=pet_name,
                record_type=record_type,
                date=date,
                summary=summary,
            ),
            reply_to=self.reply_to,
        )

    async def send_bulk_email(
        self,
        recipients: list[EmailRecipient],
        subject: str,
        body: str,
        reply_to: str | None = None,
    ) -> BulkEmailResult:
        """Send a personalised copy to every recipient.

        ``{{clientName}}`` is replaced per recipient. A failed recipient is
        recorded and the batch continues.

        Args:
            recipients: Deduplicated recipients
            subject: Subject line
            body: HTML body
            reply_to: Reply-to address

        Returns:
            Per-recipient results with totals
        """
        results: list[RecipientResult] = []
        for recipient in recipients:
            personalised = replace_variables(body, {"clientName": html.escape(recipient.name)})
            try:
                await self.send_email(
                    to=recipient.email,
                    subject=replace_variables(subject, {"clientName": recipient.name}),
                    body=personalised,
                    reply_to=reply_to,
                )
            except EmailError as e:
                logger.warning(
                    "Bulk email failed for recipient",
                    extra={"recipient": recipient.email, "status_code": e.status_code},
                )
                results.append(RecipientResult(email=recipient.email, success=False, error=str(e)))
                continue
            results.append(RecipientResult(email=recipient.email, success=True))

        sent = sum(1 for r in results if r.success)
        return BulkEmailResult(
            total=len(results),
            sent=sent,
            failed=len(results) - sent,
            results=results,
        )
