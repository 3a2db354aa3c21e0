"""Admin and client login, logout, registration and email verification."""

from typing import Annotated, Any

from fastapi import APIRouter, Cookie, Query, Request, Response

from continuum.api.dependencies import (
    ADMIN_COOKIE,
    CLIENT_COOKIE,
    AdminAuth,
    AuthSvc,
    ClientAuth,
    ClientSvc,
    Limiter,
    SettingsDep,
    clear_session_cookie,
    enforce_rate_limit,
    set_session_cookie,
)
from continuum.core.i18n import DEFAULT_LOCALE, is_supported
from continuum.models.auth import LoginRequest, ResendVerificationRequest, VerifyEmailRequest
from continuum.models.client import ClientRegistration
from continuum.models.common import SuccessResponse

router = APIRouter()


def _locale(value: str | None) -> str:
    return value if value and is_supported(value) else DEFAULT_LOCALE


@router.post("/admin/login")
async def admin_login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth: AuthSvc,
    limiter: Limiter,
    settings: SettingsDep,
) -> dict[str, Any]:
    """Open an admin session and set the ``admin-token`` cookie."""
    await enforce_rate_limit(limiter, "login", request)
    result = await auth.login_admin(body.email, body.password)
    set_session_cookie(response, ADMIN_COOKIE, result.token, result.max_age, settings)
    return {"success": True, "user": {"id": result.session.user_id, "email": body.email}}


@router.post("/admin/logout", response_model=SuccessResponse)
async def admin_logout(
    response: Response,
    auth: AuthSvc,
    settings: SettingsDep,
    admin_token: Annotated[str | None, Cookie(alias=ADMIN_COOKIE)] = None,
) -> SuccessResponse:
    """End the admin session and clear its cookie."""
    await auth.logout_admin(admin_token)
    clear_session_cookie(response, ADMIN_COOKIE, settings)
    return SuccessResponse()


@router.get("/admin/session")
async def admin_session(session: AdminAuth) -> dict[str, Any]:
    return {"authenticated": True, "user": session.model_dump(by_alias=True, mode="json")}


@router.post("/client/register", response_model=SuccessResponse, status_code=201)
async def client_register(
    body: ClientRegistration,
    auth: AuthSvc,
    locale: Annotated[str | None, Query()] = None,
) -> SuccessResponse:
    """Create a portal account; the verification email is best-effort."""
    await auth.register_client(body, _locale(locale))
    return SuccessResponse(
        message="Registration successful. Please check your email to verify your account.",
    )


@router.post("/client/login")
async def client_login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth: AuthSvc,
    limiter: Limiter,
    settings: SettingsDep,
) -> dict[str, Any]:
    """Open a client session and set the ``client-token`` cookie."""
    await enforce_rate_limit(limiter, "login", request)
    result = await auth.login_client(body.email, body.password)
    set_session_cookie(response, CLIENT_COOKIE, result.token, result.max_age, settings)
    client = result.client
    return {
        "success": True,
        "user": {
            "id": client.id,
            "email": client.email,
            "firstName": client.first_name,
            "lastName": client.last_name,
        }
        if client
        else None,
    }


@router.post("/client/logout", response_model=SuccessResponse)
async def client_logout(
    response: Response,
    auth: AuthSvc,
    settings: SettingsDep,
    client_token: Annotated[str | None, Cookie(alias=CLIENT_COOKIE)] = None,
) -> SuccessResponse:
    """End the portal session and clear its cookie."""
    await auth.logout_client(client_token)
    clear_session_cookie(response, CLIENT_COOKIE, settings)
    return SuccessResponse()


@router.get("/client/session")
async def client_session(session: ClientAuth, clients: ClientSvc) -> dict[str, Any]:
    client = await clients.get_client(session.client_id)
    return {
        "authenticated": True,
        "user": {
            "id": client.id,
            "email": client.email,
            "firstName": client.first_name,
            "lastName": client.last_name,
            "emailVerified": client.email_verified,
        },
    }


@router.post("/verify-email", response_model=SuccessResponse)
async def verify_email(body: VerifyEmailRequest, auth: AuthSvc) -> SuccessResponse:
    """Confirm a client's email address from the link sent at registration."""
    await auth.verify_email(body.token)
    return SuccessResponse(message="Email verified successfully")


@router.post("/client/resend-verification", response_model=SuccessResponse)
async def resend_verification(
    body: ResendVerificationRequest,
    request: Request,
    auth: AuthSvc,
    clients: ClientSvc,
    limiter: Limiter,
    locale: Annotated[str | None, Query()] = None,
) -> SuccessResponse:
    """Send a fresh verification link. The answer does not reveal whether the email exists."""
    await enforce_rate_limit(limiter, "login", request)
    client = await clients.clients.get_by_email(body.email)
    if client is not None and not client.email_verified:
        await auth.resend_verification(client.id, _locale(locale))
    return SuccessResponse(message="If the account exists, a verification email has been sent")
