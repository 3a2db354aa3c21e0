"""FastAPI dependencies shared by the API routers."""

from functools import lru_cache
from typing import Annotated

from fastapi import Cookie, Depends, Request, Response

from continuum.core.config import Settings, get_settings
from continuum.core.exceptions import ForbiddenError, RateLimitError, UnauthorizedError
from continuum.core.redis import RedisClient
from continuum.models.auth import AdminSession, ClientSession
from continuum.repositories.template_repo import TemplateRepository
from continuum.services.analytics_service import AnalyticsService
from continuum.services.appointment_service import AppointmentService
from continuum.services.auth_service import AuthService
from continuum.services.client_service import ClientService
from continuum.services.consent_service import ConsentService
from continuum.services.contact_service import ContactService
from continuum.services.content_service import ContentService
from continuum.services.email_client import ResendClient
from continuum.services.email_service import EmailService
from continuum.services.health_record_service import HealthRecordService
from continuum.services.onboarding_service import OnboardingService
from continuum.services.rate_limiter import EndpointRateLimiter, RateLimiter, RateLimitExceeded
from continuum.services.template_service import TemplateService

ADMIN_COOKIE = "admin-token"
CLIENT_COOKIE = "client-token"

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_client_info(request: Request) -> tuple[str | None, str | None]:
    """Extract IP address and user agent from request."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address: str | None = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    return ip_address, user_agent


# Services


@lru_cache
def get_resend_client() -> ResendClient:
    """Shared Resend client (one connection pool per process)."""
    return ResendClient(get_settings())


async def get_email_service(redis: RedisClient, settings: SettingsDep) -> EmailService:
    """Email service configured with the stored notification settings."""
    notifications = await TemplateRepository(redis).get_settings()
    return EmailService(get_resend_client(), settings, notifications)


EmailSvc = Annotated[EmailService, Depends(get_email_service)]


def get_auth_service(redis: RedisClient, settings: SettingsDep, email: EmailSvc) -> AuthService:
    return AuthService(redis, settings, email)


def get_analytics_service(redis: RedisClient, settings: SettingsDep) -> AnalyticsService:
    return AnalyticsService(redis, settings)


def get_consent_service(redis: RedisClient) -> ConsentService:
    return ConsentService(redis)


def get_onboarding_service(redis: RedisClient) -> OnboardingService:
    return OnboardingService(redis)


def get_client_service(redis: RedisClient) -> ClientService:
    return ClientService(redis)


def get_content_service(redis: RedisClient) -> ContentService:
    return ContentService(redis)


def get_appointment_service(redis: RedisClient) -> AppointmentService:
    return AppointmentService(redis)


def get_contact_service(redis: RedisClient) -> ContactService:
    return ContactService(redis)


def get_template_service(redis: RedisClient) -> TemplateService:
    return TemplateService(redis)


def get_health_record_service(redis: RedisClient) -> HealthRecordService:
    return HealthRecordService(redis)


def get_rate_limiter(redis: RedisClient, settings: SettingsDep) -> EndpointRateLimiter:
    return EndpointRateLimiter(RateLimiter(redis), settings)


AuthSvc = Annotated[AuthService, Depends(get_auth_service)]
AnalyticsSvc = Annotated[AnalyticsService, Depends(get_analytics_service)]
ConsentSvc = Annotated[ConsentService, Depends(get_consent_service)]
OnboardingSvc = Annotated[OnboardingService, Depends(get_onboarding_service)]
ClientSvc = Annotated[ClientService, Depends(get_client_service)]
ContentSvc = Annotated[ContentService, Depends(get_content_service)]
AppointmentSvc = Annotated[AppointmentService, Depends(get_appointment_service)]
ContactSvc = Annotated[ContactService, Depends(get_contact_service)]
TemplateSvc = Annotated[TemplateService, Depends(get_template_service)]
HealthRecordSvc = Annotated[HealthRecordService, Depends(get_health_record_service)]
Limiter = Annotated[EndpointRateLimiter, Depends(get_rate_limiter)]


async def enforce_rate_limit(limiter: EndpointRateLimiter, limit_type: str, request: Request) -> None:
    """Consume one request for the caller's IP.

    Raises:
        RateLimitError: If the window's budget is used up
    """
    ip_address, _ = get_client_info(request)
    try:
        await limiter.consume(limit_type, ip_address or "unknown")
    except RateLimitExceeded as e:
        raise RateLimitError(retry_after=e.reset_time) from e


# Sessions


async def get_admin_session(
    auth: AuthSvc,
    admin_token: Annotated[str | None, Cookie(alias=ADMIN_COOKIE)] = None,
) -> AdminSession:
    """Validate the admin cookie against its server-side session.

    Raises:
        UnauthorizedError: If the cookie is missing, invalid or revoked
    """
    session = await auth.get_admin_session(admin_token)
    if session is None:
        raise UnauthorizedError()
    return session


async def get_client_session(
    auth: AuthSvc,
    client_token: Annotated[str | None, Cookie(alias=CLIENT_COOKIE)] = None,
) -> ClientSession:
    """Validate the client cookie against its server-side session.

    Raises:
        UnauthorizedError: If the cookie is missing, invalid or revoked
    """
    session = await auth.get_client_session(client_token)
    if session is None:
        raise UnauthorizedError()
    return session


# Type aliases for dependency injection
AdminAuth = Annotated[AdminSession, Depends(get_admin_session)]
ClientAuth = Annotated[ClientSession, Depends(get_client_session)]


def ensure_own_client(session: ClientSession, client_id: str) -> None:
    """Raises:
        ForbiddenError: If ``client_id`` is not the session's client
    """
    if session.client_id != client_id:
        raise ForbiddenError()


def set_session_cookie(
    response: Response,
    name: str,
    token: str,
    max_age: int,
    settings: Settings,
) -> None:
    response.set_cookie(
        name,
        token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        path="/",
    )


def clear_session_cookie(response: Response, name: str, settings: Settings) -> None:
    response.delete_cookie(
        name,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        path="/",
    )
