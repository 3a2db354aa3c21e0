"""Public blog endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query

from continuum.api.dependencies import ContentSvc
from continuum.core.exceptions import ValidationError
from continuum.core.i18n import DEFAULT_LOCALE, is_supported
from continuum.models.content import Post

router = APIRouter()

Locale = Annotated[str, Query()]


def _check_locale(locale: str) -> str:
    if not is_supported(locale):
        raise ValidationError(f"Unsupported locale '{locale}'")
    return locale


@router.get("", response_model=list[Post], response_model_exclude_none=True)
async def list_posts(
    service: ContentSvc,
    locale: Locale = DEFAULT_LOCALE,
    tag: Annotated[str | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
) -> list[Post]:
    """Published posts for a locale, newest first."""
    return await service.list_published(_check_locale(locale), tag=tag, category=category)


@router.get("/tags")
async def list_tags(service: ContentSvc, locale: Locale = DEFAULT_LOCALE) -> list[str]:
    taxonomy = await service.get_taxonomy(_check_locale(locale))
    return taxonomy["tags"]


@router.get("/categories")
async def list_categories(service: ContentSvc, locale: Locale = DEFAULT_LOCALE) -> list[str]:
    taxonomy = await service.get_taxonomy(_check_locale(locale))
    return taxonomy["categories"]


@router.get("/{slug}", response_model=Post, response_model_exclude_none=True)
async def get_post(
    slug: str,
    service: ContentSvc,
    background: BackgroundTasks,
    locale: Locale = DEFAULT_LOCALE,
) -> Post:
    """A published post; its view counter is bumped after the response."""
    post = await service.get_published(_check_locale(locale), slug)
    background.add_task(service.record_view, post.id)
    return post
