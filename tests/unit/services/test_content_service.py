"""Tests for blog and SEO content service."""

import fakeredis
import pytest

from continuum.core.exceptions import ConflictError, NotFoundError
from continuum.models.content import (
    PostCreate,
    PostStatus,
    PostUpdate,
    RedirectCreate,
    SeoPageCreate,
)
from continuum.services.content_service import ContentService, reading_time


@pytest.fixture
def service(redis_client: fakeredis.FakeRedis) -> ContentService:
    return ContentService(redis_client)


def _post(slug: str = "senior-dog-nutrition", **kwargs: object) -> PostCreate:
    data: dict[str, object] = {
        "title": "Senior dog nutrition",
        "slug": slug,
        "content": "word " * 450,
        "author": "Dr Vet",
        "status": PostStatus.PUBLISHED,
        "tags": ["nutrition"],
        "category": "guides",
    }
    data.update(kwargs)
    return PostCreate(**data)


class TestReadingTime:
    @pytest.mark.parametrize(
        ("words", "minutes"),
        [(0, 1), (1, 1), (200, 1), (201, 2), (1000, 5)],
    )
    def test_minutes(self, words: int, minutes: int) -> None:
        assert reading_time("w " * words) == minutes


class TestPosts:
    async def test_create_published(self, service: ContentService) -> None:
        post = await service.create_post(_post())

        assert post.reading_time == 3
        assert post.published_at is not None
        assert (await service.get_published("en", post.slug)).id == post.id

    async def test_draft_is_hidden(self, service: ContentService) -> None:
        post = await service.create_post(_post(status=PostStatus.DRAFT))

        assert post.published_at is None
        assert await service.list_published("en") == []
        with pytest.raises(NotFoundError):
            await service.get_published("en", post.slug)

    async def test_slug_unique_per_locale(self, service: ContentService) -> None:
        await service.create_post(_post())
        await service.create_post(_post(locale="es"))

        with pytest.raises(ConflictError):
            await service.create_post(_post())

    async def test_list_filters(self, service: ContentService) -> None:
        await service.create_post(_post("a", tags=["cats"], category="news"))
        await service.create_post(_post("b"))
        await service.create_post(_post("c", locale="fr"))

        assert [p.slug for p in await service.list_published("en", tag="cats")] == ["a"]
        assert [p.slug for p in await service.list_published("en", category="guides")] == ["b"]
        assert {p.slug for p in await service.list_published("en")} == {"a", "b"}

    async def test_newest_first(self, service: ContentService) -> None:
        await service.create_post(_post("first"))
        await service.create_post(_post("second"))

        assert [p.slug for p in await service.list_posts()] == ["second", "first"]

    async def test_update_publishes_and_renames(self, service: ContentService) -> None:
        post = await service.create_post(_post(status=PostStatus.DRAFT))

        updated = await service.update_post(
            post.id,
            PostUpdate(slug="new-slug", status=PostStatus.PUBLISHED, content="short"),
        )

        assert updated.published_at is not None
        assert updated.reading_time == 1
        assert (await service.get_published("en", "new-slug")).id == post.id
        with pytest.raises(NotFoundError):
            await service.get_published("en", "senior-dog-nutrition")

    async def test_update_slug_conflict(self, service: ContentService) -> None:
        await service.create_post(_post("taken"))
        post = await service.create_post(_post("mine"))

        with pytest.raises(ConflictError):
            await service.update_post(post.id, PostUpdate(slug="taken"))

    async def test_delete(self, service: ContentService) -> None:
        post = await service.create_post(_post())

        await service.delete_post(post.id)

        assert await service.list_posts() == []
        with pytest.raises(NotFoundError):
            await service.get_post(post.id)

    async def test_record_view(self, service: ContentService) -> None:
        post = await service.create_post(_post())

        await service.record_view(post.id)
        await service.record_view("post-missing")

        assert (await service.get_post(post.id)).views == 1


class TestTaxonomy:
    async def test_collects_and_invalidates(self, service: ContentService) -> None:
        await service.create_post(_post("a", tags=["cats", "aging"], category="news"))

        first = await service.get_taxonomy("en")
        assert first == {"tags": ["aging", "cats"], "categories": ["news"]}

        await service.create_post(_post("b", tags=["dogs"], category="guides"))
        second = await service.get_taxonomy("en")

        assert second["tags"] == ["aging", "cats", "dogs"]
        assert second["categories"] == ["guides", "news"]


class TestRedirects:
    async def test_create_and_find(self, service: ContentService) -> None:
        redirect = await service.create_redirect(
            RedirectCreate(source="/old", destination="/en/blog")
        )

        assert (await service.find_redirect("/old")) == redirect
        assert await service.find_redirect("/other") is None

    async def test_duplicate_source(self, service: ContentService) -> None:
        await service.create_redirect(RedirectCreate(source="/old", destination="/en/"))

        with pytest.raises(ConflictError):
            await service.create_redirect(RedirectCreate(source="/old", destination="/fr/"))

    async def test_update_moves_source(self, service: ContentService) -> None:
        redirect = await service.create_redirect(RedirectCreate(source="/old", destination="/en/"))

        await service.update_redirect(
            redirect.id, RedirectCreate(source="/older", destination="/en/", status_code=302)
        )

        assert await service.find_redirect("/old") is None
        moved = await service.find_redirect("/older")
        assert moved is not None
        assert moved.status_code == 302

    async def test_delete_missing(self, service: ContentService) -> None:
        with pytest.raises(NotFoundError):
            await service.delete_redirect("redirect-missing")

    def test_status_code_restricted(self) -> None:
        with pytest.raises(ValueError):
            RedirectCreate(source="/old", destination="/new", status_code=307)


class TestSeoPages:
    async def test_lookup_by_locale_and_path(self, service: ContentService) -> None:
        page = await service.save_seo_page(SeoPageCreate(path="/blog", title="Clinic blog"))

        assert await service.get_seo_for_path("en", "/blog") == page
        assert await service.get_seo_for_path("fr", "/blog") is None

    async def test_replace_moves_path(self, service: ContentService) -> None:
        page = await service.save_seo_page(SeoPageCreate(path="/blog", title="Blog"))

        await service.save_seo_page(SeoPageCreate(path="/articles", title="Articles"), page_id=page.id)

        assert await service.get_seo_for_path("en", "/blog") is None
        assert (await service.get_seo_page(page.id)).title == "Articles"
        assert len(await service.list_seo_pages()) == 1

    async def test_same_path_replaced_in_place(self, service: ContentService) -> None:
        first = await service.save_seo_page(SeoPageCreate(path="/blog", title="Blog"))

        second = await service.save_seo_page(SeoPageCreate(path="/blog", title="Journal"))

        assert second.id == first.id
        assert [p.title for p in await service.list_seo_pages()] == ["Journal"]

    async def test_replace_missing(self, service: ContentService) -> None:
        with pytest.raises(NotFoundError):
            await service.save_seo_page(SeoPageCreate(path="/x", title="X"), page_id="seo-missing")

    async def test_delete(self, service: ContentService) -> None:
        page = await service.save_seo_page(SeoPageCreate(path="/blog", title="Blog"))

        await service.delete_seo_page(page.id)

        assert await service.list_seo_pages() == []
