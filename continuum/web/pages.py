"""Server-rendered, locale-prefixed pages."""

import logging
from functools import partial
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Cookie, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from continuum.api.dependencies import (
    ADMIN_COOKIE,
    CLIENT_COOKIE,
    AnalyticsSvc,
    AuthSvc,
    ClientSvc,
    ConsentSvc,
    ContentSvc,
    SettingsDep,
)
from continuum.core.exceptions import NotFoundError, ValidationError
from continuum.core.i18n import LOCALES, is_supported, negotiate_locale, text_direction, translate
from continuum.core.site import CLINIC_DESCRIPTION, CLINIC_EMAIL, CLINIC_NAME, CLINIC_PHONE

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.globals.update(
    clinic_name=CLINIC_NAME,
    clinic_description=CLINIC_DESCRIPTION,
    clinic_email=CLINIC_EMAIL,
    clinic_phone=CLINIC_PHONE,
    locales=LOCALES,
)

AdminToken = Annotated[str | None, Cookie(alias=ADMIN_COOKIE)]
ClientToken = Annotated[str | None, Cookie(alias=CLIENT_COOKIE)]


async def _render(
    request: Request,
    name: str,
    locale: str,
    content: ContentSvc | None = None,
    status_code: int = 200,
    **context: Any,
) -> HTMLResponse:
    """Render ``name`` with the locale helpers and any stored SEO override."""
    seo = None
    if content is not None:
        rest = request.url.path[len(locale) + 1:] or "/"
        seo = await content.get_seo_for_path(locale, rest)
    return templates.TemplateResponse(
        request,
        name,
        {
            "locale": locale,
            "dir": text_direction(locale),
            "t": partial(translate, locale),
            "seo": seo,
            **context,
        },
        status_code=status_code,
    )


def _not_found(request: Request, locale: str | None = None) -> HTMLResponse:
    locale = locale if locale and is_supported(locale) else "en"
    return templates.TemplateResponse(
        request,
        "404.html",
        {"locale": locale, "dir": text_direction(locale), "t": partial(translate, locale), "seo": None},
        status_code=404,
    )


@router.get("/")
async def root(request: Request, settings: SettingsDep) -> RedirectResponse:
    """Send the bare root to the visitor's preferred locale."""
    locale = negotiate_locale(request.headers.get("accept-language"), settings.default_locale)
    return RedirectResponse(f"/{locale}/", status_code=307)


@router.get("/{locale}")
@router.get("/{locale}/")
async def home(request: Request, locale: str, content: ContentSvc) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    posts = await content.list_published(locale, limit=3)
    return await _render(request, "home.html", locale, content, posts=posts)


@router.get("/{locale}/blog")
async def blog_index(
    request: Request,
    locale: str,
    content: ContentSvc,
    tag: str | None = None,
    category: str | None = None,
) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    posts = await content.list_published(locale, tag=tag, category=category)
    taxonomy = await content.get_taxonomy(locale)
    return await _render(
        request,
        "blog_list.html",
        locale,
        content,
        posts=posts,
        tags=taxonomy["tags"],
        categories=taxonomy["categories"],
        active_tag=tag,
        active_category=category,
    )


@router.get("/{locale}/blog/{slug}")
async def blog_post(request: Request, locale: str, slug: str, content: ContentSvc) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    try:
        post = await content.get_published(locale, slug)
    except NotFoundError:
        return _not_found(request, locale)
    await content.record_view(post.id)
    return await _render(request, "blog_post.html", locale, content, post=post)


@router.get("/{locale}/contact")
async def contact(request: Request, locale: str, content: ContentSvc) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    return await _render(request, "contact.html", locale, content)


@router.get("/{locale}/portal")
async def portal(
    request: Request,
    locale: str,
    auth: AuthSvc,
    clients: ClientSvc,
    client_token: ClientToken = None,
) -> Response:
    """Login form, or the client's dashboard when a session is present."""
    if not is_supported(locale):
        return _not_found(request)
    session = await auth.get_client_session(client_token)
    client = pets = None
    if session is not None:
        client = await clients.get_client(session.client_id)
        pets = await clients.get_client_pets(session.client_id)
    return await _render(request, "portal.html", locale, client=client, pets=pets)


@router.get("/{locale}/portal/consent")
async def portal_consent(
    request: Request,
    locale: str,
    auth: AuthSvc,
    consent: ConsentSvc,
    client_token: ClientToken = None,
) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    session = await auth.get_client_session(client_token)
    if session is None:
        return RedirectResponse(f"/{locale}/portal", status_code=303)
    status = await consent.get_consent_status(session.client_id)
    return await _render(request, "consent.html", locale, status=status)


@router.get("/{locale}/admin")
async def admin(
    request: Request,
    locale: str,
    auth: AuthSvc,
    admin_token: AdminToken = None,
) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    session = await auth.get_admin_session(admin_token)
    return await _render(request, "admin.html", locale, admin=session)


@router.get("/{locale}/admin/analytics")
async def admin_analytics(
    request: Request,
    locale: str,
    auth: AuthSvc,
    analytics: AnalyticsSvc,
    admin_token: AdminToken = None,
    days: int | None = None,
) -> Response:
    if not is_supported(locale):
        return _not_found(request)
    session = await auth.get_admin_session(admin_token)
    if session is None:
        return RedirectResponse(f"/{locale}/admin", status_code=303)
    if days is not None:
        days = max(1, min(days, 365))
    summary = await analytics.get_summary(days)
    return await _render(request, "analytics.html", locale, summary=summary)


@router.get("/{locale}/verify-email")
async def verify_email(
    request: Request,
    locale: str,
    auth: AuthSvc,
    token: str | None = None,
) -> Response:
    """Landing page of the link in the verification email."""
    if not is_supported(locale):
        return _not_found(request)
    verified = False
    if token:
        try:
            await auth.verify_email(token)
            verified = True
        except ValidationError:
            logger.info("Verification link rejected")
    return await _render(request, "verify_email.html", locale, verified=verified)
