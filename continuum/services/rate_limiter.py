"""Fixed-window rate limiter using Redis."""

import logging

from redis import Redis

from continuum.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class RateLimitExceeded(Exception):
    """Exception raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        remaining: int = 0,
        reset_time: int = 0,
    ) -> None:
        super().__init__(message)
        self.remaining = remaining
        self.reset_time = reset_time


class RateLimiter:
    """Rate limiter using Redis for counter storage.

    Each (type, identifier) pair gets a counter that expires one window after
    its first hit, so the limit applies per fixed window.
    """

    KEY_PREFIX = "ratelimit"

    def __init__(self, redis_client: Redis) -> None:  # type: ignore[type-arg]
        self.redis = redis_client

    def _make_key(self, key_type: str, identifier: str) -> str:
        """Generate a Redis key.

        Args:
            key_type: Type of rate limit (e.g., "contact", "login")
            identifier: Unique identifier (e.g., client IP)

        Returns:
            Redis key string
        """
        return f"{self.KEY_PREFIX}:{key_type}:{identifier}"

    async def check_and_increment(
        self,
        key_type: str,
        identifier: str,
        max_requests: int,
        window_seconds: int,
    ) -> dict[str, int]:
        """Count one request and check it against the limit.

        Args:
            key_type: Type of rate limit
            identifier: Unique identifier
            max_requests: Maximum requests allowed in the window
            window_seconds: Window length

        Returns:
            Dict with current_count, remaining, and reset_time

        Raises:
            RateLimitExceeded: If rate limit is exceeded
        """
        key = self._make_key(key_type, identifier)

        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        new_count, ttl = pipe.execute()

        # First hit in the window (or a counter that lost its expiry)
        if ttl is None or ttl < 0:
            self.redis.expire(key, window_seconds)
            ttl = window_seconds

        if new_count > max_requests:
            logger.warning(
                "Rate limit exceeded",
                extra={"limit_type": key_type, "count": new_count},
            )
            raise RateLimitExceeded(
                f"Rate limit exceeded. Max {max_requests} requests per {window_seconds} seconds.",
                remaining=0,
                reset_time=int(ttl),
            )

        return {
            "current_count": int(new_count),
            "remaining": max_requests - int(new_count),
            "reset_time": int(ttl),
        }

    async def get_usage(self, key_type: str, identifier: str) -> dict[str, int]:
        """Get current usage without incrementing.

        Args:
            key_type: Limit family, e.g. "contact"
            identifier: Client identifier (IP address)

        Returns:
            Dict with the current count and seconds until the window resets
        """
        key = self._make_key(key_type, identifier)

        pipe = self.redis.pipeline()
        pipe.get(key)
        pipe.ttl(key)
        current, ttl = pipe.execute()

        return {
            "current_count": int(current) if current else 0,
            "reset_time": max(0, ttl) if ttl and ttl > 0 else 0,
        }

    async def reset(self, key_type: str, identifier: str) -> bool:
        """Reset the counter for an identifier.

        Args:
            key_type: Limit family
            identifier: Client identifier

        Returns:
            True if a counter was deleted
        """
        deleted = self.redis.delete(self._make_key(key_type, identifier))
        return deleted > 0


class EndpointRateLimiter:
    """Per-IP limits for the public write endpoints and logins."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._rate_limiter = rate_limiter

    def _limits(self) -> dict[str, tuple[int, int]]:
        s = self.settings
        return {
            "contact": (s.contact_rate_limit, s.contact_rate_window_seconds),
            "login": (s.login_rate_limit, s.login_rate_window_seconds),
            "appointment": (s.appointment_rate_limit, s.appointment_rate_window_seconds),
        }

    async def consume(self, limit_type: str, identifier: str) -> dict[str, int]:
        """Consume one request of ``limit_type`` for ``identifier``.

        Args:
            limit_type: "contact", "login" or "appointment"
            identifier: Client IP address

        Returns:
            Usage after this request

        Raises:
            RateLimitExceeded: If the window's budget is used up
            KeyError: For an unknown limit type
        """
        max_requests, window = self._limits()[limit_type]
        return await self._rate_limiter.check_and_increment(
            key_type=limit_type,
            identifier=identifier,
            max_requests=max_requests,
            window_seconds=window,
        )
