"""Redis connection management and JSON document helpers."""

import json
from collections.abc import Iterator
from typing import Annotated, Any

from fastapi import Depends
from redis import Redis

from continuum.core.config import Settings, get_settings

CACHE_PREFIX = "cache"

# Global client (initialized on startup)
_client: Redis | None = None  # type: ignore[type-arg]


def create_client(settings: Settings) -> Redis:  # type: ignore[type-arg]
    """Create a Redis client that returns ``str`` values.

    Args:
        settings: Application settings

    Returns:
        Redis client for ``settings.redis_url``
    """
    return Redis.from_url(
        str(settings.redis_url),
        decode_responses=True,
        socket_timeout=5,
    )


def init_redis(settings: Settings | None = None) -> None:
    """Initialize the shared Redis client."""
    global _client
    if settings is None:
        settings = get_settings()
    _client = create_client(settings)


def get_client() -> Redis:  # type: ignore[type-arg]
    """Get the shared Redis client.

    Raises:
        RuntimeError: If ``init_redis`` has not been called
    """
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client


def get_redis() -> Iterator[Redis]:  # type: ignore[type-arg]
    """FastAPI dependency that provides the Redis client."""
    yield get_client()


# Type alias for dependency injection
RedisClient = Annotated[Redis, Depends(get_redis)]


def close_redis() -> None:
    """Close Redis connections."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def dump_json(value: Any) -> str:
    """Serialize a document for storage."""
    return json.dumps(value, default=str)


def load_json(raw: str | None) -> Any:
    """Deserialize a stored document, ``None`` when missing."""
    if raw is None:
        return None
    return json.loads(raw)


def cache_set(redis: Redis, key: str, value: Any, ttl_seconds: int = 3600) -> None:  # type: ignore[type-arg]
    """Store a JSON value under ``cache:{key}`` with a TTL.

    Args:
        redis: Redis client
        key: Cache key without the prefix
        value: JSON-serializable value
        ttl_seconds: Expiry in seconds
    """
    redis.setex(f"{CACHE_PREFIX}:{key}", ttl_seconds, dump_json(value))


def cache_get(redis: Redis, key: str) -> Any:  # type: ignore[type-arg]
    """Read a cached JSON value or ``None``."""
    return load_json(redis.get(f"{CACHE_PREFIX}:{key}"))
