"""Repository for blog posts."""

from continuum.models.content import Post
from continuum.repositories.base import DocumentRepository


class PostRepository(DocumentRepository):
    """Posts with a newest-first id list and a per-locale slug lookup."""

    LIST_KEY = "posts:list"

    @staticmethod
    def post_key(post_id: str) -> str:
        return f"post:{post_id}"

    @staticmethod
    def slug_key(locale: str, slug: str) -> str:
        return f"posts:slug:{locale}:{slug}"

    async def get(self, post_id: str) -> Post | None:
        """Get a post by ID.

        Args:
            post_id: The post ID

        Returns:
            The post if found, None otherwise
        """
        return self._load(self.post_key(post_id), Post)

    async def get_by_slug(self, locale: str, slug: str) -> Post | None:
        """Get a post by locale and slug.

        Args:
            locale: Post locale
            slug: URL slug

        Returns:
            The post if found, None otherwise
        """
        post_id = self.redis.get(self.slug_key(locale, slug))
        if not post_id:
            return None
        return await self.get(post_id)

    async def save(self, post: Post) -> Post:
        """Store a post, moving its slug lookup when the slug changed.

        New posts go to the front of the list.

        Args:
            post: The post to store

        Returns:
            The stored post
        """
        previous = await self.get(post.id)
        if previous and (previous.locale, previous.slug) != (post.locale, post.slug):
            self.redis.delete(self.slug_key(previous.locale, previous.slug))

        self._store(self.post_key(post.id), post)
        self.redis.set(self.slug_key(post.locale, post.slug), post.id)
        if previous is None:
            self.redis.lrem(self.LIST_KEY, 0, post.id)
            self.redis.lpush(self.LIST_KEY, post.id)
        return post

    async def get_all(self, limit: int = 50) -> list[Post]:
        """List posts, newest first.

        Args:
            limit: Maximum number of posts

        Returns:
            Posts of every status and locale
        """
        ids = self.redis.lrange(self.LIST_KEY, 0, limit - 1)
        return self._load_many((self.post_key(i) for i in ids), Post)

    async def increment_views(self, post_id: str) -> int | None:
        """Bump the view count; returns the new count or ``None`` if the post is gone."""
        post = await self.get(post_id)
        if post is None:
            return None
        post.views += 1
        self._store(self.post_key(post.id), post)
        return post.views

    async def delete(self, post: Post) -> None:
        self.redis.delete(self.post_key(post.id))
        self.redis.delete(self.slug_key(post.locale, post.slug))
        self.redis.lrem(self.LIST_KEY, 0, post.id)
