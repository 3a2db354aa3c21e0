"""Contact form intake and the admin inbox."""

import logging

from redis import Redis, RedisError

from continuum.core.exceptions import NotFoundError
from continuum.models.analytics import ConversionKind
from continuum.models.common import new_id
from continuum.models.contact import ContactFormSubmission, ContactRequest, ContactStatus
from continuum.repositories.contact_repo import ContactRepository
from continuum.services.analytics_service import AnalyticsService
from continuum.services.email_client import EmailError
from continuum.services.email_service import EmailService

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.repo = ContactRepository(redis)

    async def submit(
        self,
        request: ContactRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
        email_service: EmailService | None = None,
        analytics: AnalyticsService | None = None,
    ) -> ContactFormSubmission:
        """Store a contact form submission as ``new``.

        Counting the conversion and notifying the clinic are best-effort.

        Args:
            request: Validated contact form
            ip_address: Sender's IP address
            user_agent: Sender's user agent
            email_service: Sends the clinic notification
            analytics: Records the contact conversion

        Returns:
            The stored submission
        """
        submission = ContactFormSubmission(
            id=new_id("contact"),
            **request.model_dump(),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await self.repo.save(submission)
        logger.info("Contact form submitted", extra={"contact_id": submission.id})

        if analytics is not None:
            try:
                await analytics.track_conversion(ConversionKind.CONTACT)
            except RedisError:
                logger.warning("Contact conversion not tracked", exc_info=True)

        if email_service is not None:
            try:
                await email_service.send_contact_notification(submission)
            except EmailError:
                logger.exception(
                    "Contact notification failed", extra={"contact_id": submission.id}
                )
        return submission

    async def list_submissions(
        self,
        status: ContactStatus | None = None,
        limit: int = 100,
    ) -> list[ContactFormSubmission]:
        return await self.repo.list_recent(limit, status)

    async def get(self, contact_id: str, mark_read: bool = False) -> ContactFormSubmission:
        """Get a submission, optionally moving it from ``new`` to ``read``.

        Args:
            contact_id: Submission ID
            mark_read: Mark a new submission as read

        Returns:
            The submission

        Raises:
            NotFoundError: If the submission does not exist
        """
        submission = await self.repo.get(contact_id)
        if submission is None:
            raise NotFoundError(resource="Contact submission", resource_id=contact_id)
        if mark_read and submission.status == ContactStatus.NEW:
            submission = await self.repo.update_status(contact_id, ContactStatus.READ) or submission
        return submission

    async def update_status(self, contact_id: str, status: ContactStatus) -> ContactFormSubmission:
        submission = await self.repo.update_status(contact_id, status)
        if submission is None:
            raise NotFoundError(resource="Contact submission", resource_id=contact_id)
        return submission

    async def reply(
        self,
        contact_id: str,
        message: str,
        email_service: EmailService,
    ) -> ContactFormSubmission:
        """Email a reply to the sender and mark the submission replied.

        Args:
            contact_id: Submission ID
            message: Reply body
            email_service: Sends the reply

        Returns:
            The submission with status ``replied``

        Raises:
            NotFoundError: If the submission does not exist
            EmailError: If the reply could not be sent
        """
        submission = await self.get(contact_id)
        await email_service.send_contact_reply(
            to=submission.email,
            to_name=submission.name,
            subject=submission.subject,
            message=message,
        )
        return await self.update_status(contact_id, ContactStatus.REPLIED)

    async def delete(self, contact_id: str) -> None:
        await self.get(contact_id)
        await self.repo.delete(contact_id)
