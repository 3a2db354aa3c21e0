"""Repository for contact form submissions."""

from continuum.models.common import utcnow
from continuum.models.contact import ContactFormSubmission, ContactStatus
from continuum.repositories.base import DocumentRepository


class ContactRepository(DocumentRepository):
    """Submissions ordered by submission time in ``contacts:list``."""

    LIST_KEY = "contacts:list"

    @staticmethod
    def contact_key(contact_id: str) -> str:
        return f"contact:{contact_id}"

    async def get(self, contact_id: str) -> ContactFormSubmission | None:
        return self._load(self.contact_key(contact_id), ContactFormSubmission)

    async def save(self, submission: ContactFormSubmission) -> ContactFormSubmission:
        """Store a submission and index it by submission time.

        Args:
            submission: The submission to store

        Returns:
            The stored submission
        """
        self._store(self.contact_key(submission.id), submission)
        self.redis.zadd(
            self.LIST_KEY, {submission.id: submission.submitted_at.timestamp() * 1000}
        )
        return submission

    async def list_recent(
        self,
        limit: int = 100,
        status: ContactStatus | None = None,
    ) -> list[ContactFormSubmission]:
        """List submissions, newest first.

        Args:
            limit: Maximum number of submissions read
            status: Only submissions with this status

        Returns:
            Matching submissions
        """
        ids = self.redis.zrevrange(self.LIST_KEY, 0, limit - 1)
        submissions = self._load_many(
            (self.contact_key(i) for i in ids), ContactFormSubmission
        )
        if status is not None:
            submissions = [s for s in submissions if s.status == status]
        return submissions

    async def update_status(
        self, contact_id: str, status: ContactStatus
    ) -> ContactFormSubmission | None:
        """Update a submission's status, stamping the read and reply times.

        Args:
            contact_id: The submission ID
            status: New status

        Returns:
            The updated submission, or None if not found
        """
        submission = await self.get(contact_id)
        if submission is None:
            return None
        submission.status = status
        if status == ContactStatus.READ and submission.read_at is None:
            submission.read_at = utcnow()
        if status == ContactStatus.REPLIED:
            submission.replied_at = utcnow()
        self._store(self.contact_key(contact_id), submission)
        return submission

    async def delete(self, contact_id: str) -> None:
        self.redis.delete(self.contact_key(contact_id))
        self.redis.zrem(self.LIST_KEY, contact_id)
