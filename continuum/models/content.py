"""Blog post and SEO schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field, field_validator

from continuum.core.i18n import LOCALES
from continuum.models.common import ApiModel, utcnow


class PostStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PostSeo(ApiModel):
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = Field(default_factory=list)


def _check_locale(value: str) -> str:
    if value not in LOCALES:
        raise ValueError(f"Unsupported locale '{value}'")
    return value


class Post(ApiModel):
    id: str
    locale: str
    title: str
    slug: str
    excerpt: str
    content: str
    author: str
    cover_image: str | None = None
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    status: PostStatus = PostStatus.DRAFT
    published_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    views: int = 0
    reading_time: int = 1
    seo: PostSeo | None = None


class PostCreate(ApiModel):
    locale: str = "en"
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    excerpt: str = ""
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    cover_image: str | None = None
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    status: PostStatus = PostStatus.DRAFT
    seo: PostSeo | None = None

    _locale = field_validator("locale")(_check_locale)


class PostUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1)
    slug: str | None = Field(default=None, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    excerpt: str | None = None
    content: str | None = None
    cover_image: str | None = None
    tags: list[str] | None = None
    category: str | None = None
    status: PostStatus | None = None
    seo: PostSeo | None = None


class Redirect(ApiModel):
    id: str
    source: str
    destination: str
    status_code: int = 301
    created_at: datetime = Field(default_factory=utcnow)


class RedirectCreate(ApiModel):
    source: str = Field(..., pattern=r"^/")
    destination: str = Field(..., min_length=1)
    status_code: int = 301

    @field_validator("status_code")
    @classmethod
    def permanent_or_temporary(cls, value: int) -> int:
        if value not in (301, 302):
            raise ValueError("Redirect status must be 301 or 302")
        return value


class SeoPage(ApiModel):
    """Per-page metadata overrides for a locale."""

    id: str
    path: str
    locale: str = "en"
    title: str
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    og_image: str | None = None
    no_index: bool = False
    updated_at: datetime = Field(default_factory=utcnow)


class SeoPageCreate(ApiModel):
    path: str = Field(..., pattern=r"^/")
    locale: str = "en"
    title: str = Field(..., min_length=1)
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    og_image: str | None = None
    no_index: bool = False

    _locale = field_validator("locale")(_check_locale)
