"""Tests for the Redis helpers."""

import fakeredis
import pytest

from continuum.core import redis as redis_module
from continuum.core.redis import cache_get, cache_set, dump_json, get_client, load_json


def test_json_helpers() -> None:
    assert load_json(None) is None
    assert load_json(dump_json({"a": [1, 2]})) == {"a": [1, 2]}


def test_cache_roundtrip_with_ttl(redis_client: fakeredis.FakeRedis) -> None:
    cache_set(redis_client, "blog-taxonomy:en", {"tags": ["longevity"]}, ttl_seconds=300)

    assert cache_get(redis_client, "blog-taxonomy:en") == {"tags": ["longevity"]}
    assert 0 < redis_client.ttl("cache:blog-taxonomy:en") <= 300


def test_cache_miss(redis_client: fakeredis.FakeRedis) -> None:
    assert cache_get(redis_client, "nothing") is None


def test_get_client_requires_init(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(redis_module, "_client", None)

    with pytest.raises(RuntimeError):
        get_client()
