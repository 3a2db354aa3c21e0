"""Repository for redirects and per-page SEO overrides."""

from continuum.models.content import Redirect, SeoPage
from continuum.repositories.base import DocumentRepository


class SeoRepository(DocumentRepository):
    """Redirects keyed by source path and SEO overrides keyed by locale and path."""

    REDIRECT_INDEX = "redirects:index"
    PAGE_INDEX = "seo-pages:index"

    @staticmethod
    def redirect_key(redirect_id: str) -> str:
        return f"redirect:{redirect_id}"

    @staticmethod
    def redirect_source_key(source: str) -> str:
        return f"redirects:source:{source}"

    @staticmethod
    def page_key(page_id: str) -> str:
        return f"seo-page:{page_id}"

    @staticmethod
    def page_path_key(locale: str, path: str) -> str:
        return f"seo-pages:path:{locale}:{path}"

    # Redirects

    async def get_redirect(self, redirect_id: str) -> Redirect | None:
        return self._load(self.redirect_key(redirect_id), Redirect)

    async def save_redirect(self, redirect: Redirect) -> Redirect:
        """Store a redirect, moving its source lookup when the source changed.

        Args:
            redirect: The redirect to store

        Returns:
            The stored redirect
        """
        previous = await self.get_redirect(redirect.id)
        if previous and previous.source != redirect.source:
            self.redis.delete(self.redirect_source_key(previous.source))
        self._store(self.redirect_key(redirect.id), redirect)
        self.redis.sadd(self.REDIRECT_INDEX, redirect.id)
        self.redis.set(self.redirect_source_key(redirect.source), redirect.id)
        return redirect

    async def list_redirects(self) -> list[Redirect]:
        ids = sorted(self.redis.smembers(self.REDIRECT_INDEX))
        redirects = self._load_many((self.redirect_key(i) for i in ids), Redirect)
        return sorted(redirects, key=lambda r: r.source)

    async def get_redirect_for_path(self, path: str) -> Redirect | None:
        """Get the redirect for an exact source path.

        Args:
            path: Request path

        Returns:
            The redirect if one is configured, None otherwise
        """
        redirect_id = self.redis.get(self.redirect_source_key(path))
        if not redirect_id:
            return None
        return await self.get_redirect(redirect_id)

    async def delete_redirect(self, redirect: Redirect) -> None:
        self.redis.delete(self.redirect_key(redirect.id))
        if self.redis.get(self.redirect_source_key(redirect.source)) == redirect.id:
            self.redis.delete(self.redirect_source_key(redirect.source))
        self.redis.srem(self.REDIRECT_INDEX, redirect.id)

    # SEO pages

    async def get_page(self, page_id: str) -> SeoPage | None:
        return self._load(self.page_key(page_id), SeoPage)

    async def save_page(self, page: SeoPage) -> SeoPage:
        """Store an override, moving its path lookup when the path changed.

        Args:
            page: The override to store

        Returns:
            The stored override
        """
        previous = await self.get_page(page.id)
        if previous and (previous.locale, previous.path) != (page.locale, page.path):
            self.redis.delete(self.page_path_key(previous.locale, previous.path))
        self._store(self.page_key(page.id), page)
        self.redis.sadd(self.PAGE_INDEX, page.id)
        self.redis.set(self.page_path_key(page.locale, page.path), page.id)
        return page

    async def list_pages(self) -> list[SeoPage]:
        ids = sorted(self.redis.smembers(self.PAGE_INDEX))
        pages = self._load_many((self.page_key(i) for i in ids), SeoPage)
        return sorted(pages, key=lambda p: (p.path, p.locale))

    async def get_page_for_path(self, locale: str, path: str) -> SeoPage | None:
        """Get the override for a locale and path.

        Args:
            locale: Page locale
            path: Page path without the locale prefix

        Returns:
            The override if found, None otherwise
        """
        page_id = self.redis.get(self.page_path_key(locale, path))
        if not page_id:
            return None
        return await self.get_page(page_id)

    async def delete_page(self, page: SeoPage) -> None:
        self.redis.delete(self.page_key(page.id))
        self.redis.delete(self.page_path_key(page.locale, page.path))
        self.redis.srem(self.PAGE_INDEX, page.id)
