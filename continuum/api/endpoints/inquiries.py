"""Public booking and contact forms."""

from typing import Any

from fastapi import APIRouter, Request

from continuum.api.dependencies import (
    AnalyticsSvc,
    AppointmentSvc,
    ContactSvc,
    EmailSvc,
    Limiter,
    enforce_rate_limit,
    get_client_info,
)
from continuum.models.appointment import BookingRequest
from continuum.models.contact import ContactRequest

appointments_router = APIRouter()
contact_router = APIRouter()


@appointments_router.post("")
async def request_appointment(
    booking: BookingRequest,
    request: Request,
    service: AppointmentSvc,
    email: EmailSvc,
    analytics: AnalyticsSvc,
    limiter: Limiter,
) -> dict[str, Any]:
    """Store a consultation request as ``pending``; emails are best-effort."""
    await enforce_rate_limit(limiter, "appointment", request)
    appointment = await service.book(booking, email_service=email, analytics=analytics)
    return {
        "success": True,
        "id": appointment.id,
        "message": "Consultation request received. We will contact you shortly.",
    }


@contact_router.post("")
async def submit_contact(
    body: ContactRequest,
    request: Request,
    service: ContactSvc,
    email: EmailSvc,
    analytics: AnalyticsSvc,
    limiter: Limiter,
) -> dict[str, Any]:
    await enforce_rate_limit(limiter, "contact", request)
    ip_address, user_agent = get_client_info(request)
    submission = await service.submit(
        body,
        ip_address=ip_address,
        user_agent=user_agent,
        email_service=email,
        analytics=analytics,
    )
    return {"success": True, "id": submission.id, "message": "Message sent successfully"}
