"""Shared helpers for Redis-backed document repositories."""

from collections.abc import Iterable
from typing import TypeVar

from pydantic import BaseModel
from redis import Redis

from continuum.core.redis import load_json

ModelT = TypeVar("ModelT", bound=BaseModel)


class DocumentRepository:
    """Base for repositories storing one JSON document per key.

    Secondary indexes are plain sets, sorted sets or lists of ids that each
    repository maintains next to the document writes. Reads skip ids whose
    document is gone.
    """

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.redis = redis

    def _load(self, key: str, model: type[ModelT]) -> ModelT | None:
        data = load_json(self.redis.get(key))
        if data is None:
            return None
        return model.model_validate(data)

    def _load_many(self, keys: Iterable[str], model: type[ModelT]) -> list[ModelT]:
        keys = list(keys)
        if not keys:
            return []
        return [
            model.model_validate(load_json(raw))
            for raw in self.redis.mget(keys)
            if raw is not None
        ]

    def _store(self, key: str, document: BaseModel, ttl_seconds: int | None = None) -> None:
        payload = document.model_dump_json(by_alias=True, exclude_none=True)
        if ttl_seconds:
            self.redis.setex(key, ttl_seconds, payload)
        else:
            self.redis.set(key, payload)
