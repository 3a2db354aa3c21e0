"""Consultation bookings and admin appointment management."""

import logging

from redis import Redis, RedisError

from continuum.core.exceptions import NotFoundError
from continuum.models.analytics import ConversionKind
from continuum.models.appointment import (
    BOOKING_TYPE_MAP,
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    BookingRequest,
)
from continuum.models.common import new_id, utcnow
from continuum.repositories.appointment_repo import AppointmentRepository
from continuum.repositories.client_repo import ClientRepository
from continuum.services.analytics_service import AnalyticsService
from continuum.services.email_client import EmailError
from continuum.services.email_service import EmailService

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service for booking requests and the admin appointment book."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.repo = AppointmentRepository(redis)
        self.clients = ClientRepository(redis)

    async def book(
        self,
        booking: BookingRequest,
        email_service: EmailService | None = None,
        analytics: AnalyticsService | None = None,
    ) -> Appointment:
        """Persist a public booking request as a pending appointment.

        The booking is linked to an existing client with the same email.
        Conversion tracking and both emails are best-effort.

        Args:
            booking: Validated booking form
            email_service: Sends the clinic notice and the owner confirmation
            analytics: Records the appointment conversion

        Returns:
            The stored appointment
        """
        client = await self.clients.get_by_email(booking.email)
        appointment = Appointment(
            id=new_id("appt"),
            client_id=client.id if client else None,
            client_name=booking.owner_name,
            client_email=booking.email,
            client_phone=booking.phone,
            pet_name=booking.pet_name,
            pet_species=booking.pet_species,
            type=BOOKING_TYPE_MAP[booking.appointment_type],
            date=booking.preferred_date,
            status=AppointmentStatus.PENDING,
            notes=booking.message,
        )
        await self.repo.save(appointment)
        logger.info("Appointment requested", extra={"appointment_id": appointment.id})

        if analytics is not None:
            try:
                await analytics.track_conversion(ConversionKind.APPOINTMENT)
            except RedisError:
                logger.warning("Appointment conversion not tracked", exc_info=True)

        if email_service is not None:
            try:
                await email_service.send_appointment_notification(booking)
                await email_service.send_appointment_confirmation(booking)
            except EmailError:
                logger.exception(
                    "Appointment emails failed",
                    extra={"appointment_id": appointment.id},
                )
        return appointment

    async def list_recent(self, limit: int = 20) -> list[Appointment]:
        return await self.repo.get_recent(limit)

    async def list_for_client(self, client_id: str) -> list[Appointment]:
        return await self.repo.list_for_client(client_id)

    async def get(self, appointment_id: str) -> Appointment:
        """Get an appointment by ID.

        Args:
            appointment_id: Appointment ID

        Returns:
            The appointment

        Raises:
            NotFoundError: If the appointment does not exist
        """
        appointment = await self.repo.get(appointment_id)
        if appointment is None:
            raise NotFoundError(resource="Appointment", resource_id=appointment_id)
        return appointment

    async def create(self, data: AppointmentCreate) -> Appointment:
        appointment = Appointment(id=new_id("appt"), **data.model_dump())
        return await self.repo.save(appointment)

    async def update(self, appointment_id: str, updates: AppointmentUpdate) -> Appointment:
        """Apply a partial update, typically a status change.

        Args:
            appointment_id: Appointment ID
            updates: Fields to change

        Returns:
            The updated appointment

        Raises:
            NotFoundError: If the appointment does not exist
        """
        appointment = await self.get(appointment_id)
        appointment = appointment.model_copy(
            update={**updates.model_dump(exclude_unset=True), "updated_at": utcnow()}
        )
        return await self.repo.save(appointment)

    async def delete(self, appointment_id: str) -> None:
        appointment = await self.get(appointment_id)
        await self.repo.delete(appointment)
