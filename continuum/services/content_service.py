"""Blog posts, SEO page overrides and redirects."""

import logging
import math

from redis import Redis, RedisError

from continuum.core.exceptions import ConflictError, NotFoundError
from continuum.core.redis import cache_get, cache_set
from continuum.models.common import new_id, utcnow
from continuum.models.content import (
    Post,
    PostCreate,
    PostStatus,
    PostUpdate,
    Redirect,
    RedirectCreate,
    SeoPage,
    SeoPageCreate,
)
from continuum.repositories.post_repo import PostRepository
from continuum.repositories.seo_repo import SeoRepository

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
TAXONOMY_CACHE_SECONDS = 300


def reading_time(content: str) -> int:
    """Minutes to read ``content``; never less than one."""
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


class ContentService:
    """Service for blog posts, redirects and SEO page overrides."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.redis = redis
        self.posts = PostRepository(redis)
        self.seo = SeoRepository(redis)

    # Public blog

    async def list_published(
        self,
        locale: str,
        tag: str | None = None,
        category: str | None = None,
        limit: int = 50,
    ) -> list[Post]:
        """List published posts for a locale.

        Args:
            locale: Post locale
            tag: Only posts carrying this tag
            category: Only posts in this category
            limit: Maximum number of posts scanned, newest first

        Returns:
            Matching posts, newest first
        """
        posts = [
            post
            for post in await self.posts.get_all(limit)
            if post.status == PostStatus.PUBLISHED and post.locale == locale
        ]
        if tag:
            posts = [post for post in posts if tag in post.tags]
        if category:
            posts = [post for post in posts if post.category == category]
        return posts

    async def get_published(self, locale: str, slug: str) -> Post:
        """Get a published post by slug.

        Args:
            locale: Post locale
            slug: URL slug

        Returns:
            The post

        Raises:
            NotFoundError: If no published post has this slug
        """
        post = await self.posts.get_by_slug(locale, slug)
        if post is None or post.status != PostStatus.PUBLISHED:
            raise NotFoundError(resource="Post", detail="Post not found")
        return post

    async def record_view(self, post_id: str) -> None:
        """Fire-and-forget view counter."""
        try:
            await self.posts.increment_views(post_id)
        except RedisError:
            logger.warning("Post view increment failed", extra={"post_id": post_id}, exc_info=True)

    async def get_taxonomy(self, locale: str) -> dict[str, list[str]]:
        """Get the tags and categories used by published posts, cached briefly.

        Args:
            locale: Post locale

        Returns:
            ``{"tags": [...], "categories": [...]}``, both sorted
        """
        cache_key = f"blog-taxonomy:{locale}"
        cached = cache_get(self.redis, cache_key)
        if cached is not None:
            return cached

        tags: set[str] = set()
        categories: set[str] = set()
        for post in await self.list_published(locale):
            tags.update(post.tags)
            if post.category:
                categories.add(post.category)
        taxonomy = {"tags": sorted(tags), "categories": sorted(categories)}
        cache_set(self.redis, cache_key, taxonomy, TAXONOMY_CACHE_SECONDS)
        return taxonomy

    def _invalidate_taxonomy(self, locale: str) -> None:
        self.redis.delete(f"cache:blog-taxonomy:{locale}")

    # Admin posts

    async def list_posts(self, limit: int = 50) -> list[Post]:
        return await self.posts.get_all(limit)

    async def get_post(self, post_id: str) -> Post:
        post = await self.posts.get(post_id)
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        return post

    async def _check_slug(self, locale: str, slug: str, post_id: str | None = None) -> None:
        existing = await self.posts.get_by_slug(locale, slug)
        if existing is not None and existing.id != post_id:
            raise ConflictError(f"A post with slug '{slug}' already exists")

    async def create_post(self, data: PostCreate) -> Post:
        """Create a post, computing its reading time.

        Args:
            data: Post fields

        Returns:
            The created post

        Raises:
            ConflictError: If the slug is taken for the locale
        """
        await self._check_slug(data.locale, data.slug)
        post = Post(
            id=new_id("post"),
            **data.model_dump(),
            reading_time=reading_time(data.content),
        )
        if post.status == PostStatus.PUBLISHED:
            post.published_at = post.created_at
        await self.posts.save(post)
        self._invalidate_taxonomy(post.locale)
        logger.info("Post created", extra={"post_id": post.id})
        return post

    async def update_post(self, post_id: str, updates: PostUpdate) -> Post:
        """Apply a partial update to a post.

        Publishing for the first time stamps ``publishedAt``.

        Args:
            post_id: Post ID
            updates: Fields to change

        Returns:
            The updated post

        Raises:
            NotFoundError: If the post does not exist
            ConflictError: If the new slug is taken for the locale
        """
        post = await self.get_post(post_id)
        changes = updates.model_dump(exclude_unset=True)
        if "seo" in changes:
            changes["seo"] = updates.seo
        if updates.slug and updates.slug != post.slug:
            await self._check_slug(post.locale, updates.slug, post.id)
        if updates.content is not None:
            changes["reading_time"] = reading_time(updates.content)
        if updates.status == PostStatus.PUBLISHED and post.published_at is None:
            changes["published_at"] = utcnow()

        post = post.model_copy(update={**changes, "updated_at": utcnow()})
        await self.posts.save(post)
        self._invalidate_taxonomy(post.locale)
        return post

    async def delete_post(self, post_id: str) -> None:
        post = await self.get_post(post_id)
        await self.posts.delete(post)
        self._invalidate_taxonomy(post.locale)

    # Redirects

    async def list_redirects(self) -> list[Redirect]:
        return await self.seo.list_redirects()

    async def create_redirect(self, data: RedirectCreate) -> Redirect:
        """Create a redirect.

        Args:
            data: Source, destination and status code

        Returns:
            The created redirect

        Raises:
            ConflictError: If a redirect from the same source exists
        """
        if await self.seo.get_redirect_for_path(data.source):
            raise ConflictError(f"A redirect from '{data.source}' already exists")
        redirect = Redirect(id=new_id("redirect"), **data.model_dump())
        return await self.seo.save_redirect(redirect)

    async def update_redirect(self, redirect_id: str, data: RedirectCreate) -> Redirect:
        existing = await self.seo.get_redirect(redirect_id)
        if existing is None:
            raise NotFoundError(resource="Redirect", resource_id=redirect_id)
        if data.source != existing.source and await self.seo.get_redirect_for_path(data.source):
            raise ConflictError(f"A redirect from '{data.source}' already exists")
        redirect = existing.model_copy(update=data.model_dump())
        return await self.seo.save_redirect(redirect)

    async def delete_redirect(self, redirect_id: str) -> None:
        redirect = await self.seo.get_redirect(redirect_id)
        if redirect is None:
            raise NotFoundError(resource="Redirect", resource_id=redirect_id)
        await self.seo.delete_redirect(redirect)

    async def find_redirect(self, path: str) -> Redirect | None:
        return await self.seo.get_redirect_for_path(path)

    # SEO pages

    async def list_seo_pages(self) -> list[SeoPage]:
        return await self.seo.list_pages()

    async def get_seo_page(self, page_id: str) -> SeoPage:
        page = await self.seo.get_page(page_id)
        if page is None:
            raise NotFoundError(resource="SEO page", resource_id=page_id)
        return page

    async def save_seo_page(self, data: SeoPageCreate, page_id: str | None = None) -> SeoPage:
        """Create, or replace when ``page_id`` is given.

        Without ``page_id`` an override already stored for the same path and
        locale is replaced in place.

        Args:
            data: Override fields
            page_id: ID of the page to replace

        Returns:
            The stored page

        Raises:
            NotFoundError: If ``page_id`` is given but unknown
        """
        if page_id is not None:
            await self.get_seo_page(page_id)
        else:
            existing = await self.seo.get_page_for_path(data.locale, data.path)
            page_id = existing.id if existing else None
        page = SeoPage(id=page_id or new_id("seo"), **data.model_dump(), updated_at=utcnow())
        return await self.seo.save_page(page)

    async def delete_seo_page(self, page_id: str) -> None:
        page = await self.get_seo_page(page_id)
        await self.seo.delete_page(page)

    async def get_seo_for_path(self, locale: str, path: str) -> SeoPage | None:
        return await self.seo.get_page_for_path(locale, path)
