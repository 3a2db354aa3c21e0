"""Admin management of blog posts, SEO page overrides and redirects."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from continuum.api.dependencies import ContentSvc, get_admin_session
from continuum.models.content import (
    Post,
    PostCreate,
    PostUpdate,
    Redirect,
    RedirectCreate,
    SeoPage,
    SeoPageCreate,
)

router = APIRouter(dependencies=[Depends(get_admin_session)])


# Posts


@router.get("/posts", response_model=list[Post], response_model_exclude_none=True)
async def list_posts(
    service: ContentSvc,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[Post]:
    """All posts in every status, newest first."""
    return await service.list_posts(limit)


@router.post("/posts", response_model=Post, status_code=201, response_model_exclude_none=True)
async def create_post(body: PostCreate, service: ContentSvc) -> Post:
    """Create a post.

    Reading time is computed from the content. Returns 409 Conflict if the slug
    is already taken for the post's locale.
    """
    return await service.create_post(body)


@router.get("/posts/{post_id}", response_model=Post, response_model_exclude_none=True)
async def get_post(post_id: str, service: ContentSvc) -> Post:
    return await service.get_post(post_id)


@router.put("/posts/{post_id}", response_model=Post, response_model_exclude_none=True)
async def update_post(post_id: str, body: PostUpdate, service: ContentSvc) -> Post:
    """Apply a partial update to a post; first publication stamps publishedAt."""
    return await service.update_post(post_id, body)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(post_id: str, service: ContentSvc) -> Response:
    await service.delete_post(post_id)
    return Response(status_code=204)


# SEO pages


@router.get("/seo/pages", response_model=list[SeoPage], response_model_exclude_none=True)
async def list_seo_pages(service: ContentSvc) -> list[SeoPage]:
    return await service.list_seo_pages()


@router.post("/seo/pages", response_model=SeoPage, status_code=201, response_model_exclude_none=True)
async def create_seo_page(body: SeoPageCreate, service: ContentSvc) -> SeoPage:
    """Create an override, or replace the one already stored for the same path and locale."""
    return await service.save_seo_page(body)


@router.get("/seo/pages/{page_id}", response_model=SeoPage, response_model_exclude_none=True)
async def get_seo_page(page_id: str, service: ContentSvc) -> SeoPage:
    return await service.get_seo_page(page_id)


@router.put("/seo/pages/{page_id}", response_model=SeoPage, response_model_exclude_none=True)
async def update_seo_page(page_id: str, body: SeoPageCreate, service: ContentSvc) -> SeoPage:
    await service.get_seo_page(page_id)
    return await service.save_seo_page(body, page_id=page_id)


@router.delete("/seo/pages/{page_id}", status_code=204)
async def delete_seo_page(page_id: str, service: ContentSvc) -> Response:
    await service.delete_seo_page(page_id)
    return Response(status_code=204)


# Redirects


@router.get("/seo/redirects", response_model=list[Redirect])
async def list_redirects(service: ContentSvc) -> list[Redirect]:
    return await service.list_redirects()


@router.post("/seo/redirects", response_model=Redirect, status_code=201)
async def create_redirect(body: RedirectCreate, service: ContentSvc) -> Redirect:
    """Create a redirect.

    Returns 409 Conflict if a redirect from the same source exists.
    """
    return await service.create_redirect(body)


@router.put("/seo/redirects/{redirect_id}", response_model=Redirect)
async def update_redirect(redirect_id: str, body: RedirectCreate, service: ContentSvc) -> Redirect:
    return await service.update_redirect(redirect_id, body)


@router.delete("/seo/redirects/{redirect_id}", status_code=204)
async def delete_redirect(redirect_id: str, service: ContentSvc) -> Response:
    await service.delete_redirect(redirect_id)
    return Response(status_code=204)
