"""Tests for index reconciliation."""

import fakeredis
import pytest

from continuum.models.client import ClientCreate
from continuum.models.content import PostCreate
from continuum.services.client_service import ClientService
from continuum.services.content_service import ContentService
from continuum.services.maintenance import IndexReconciler


@pytest.fixture
def reconciler(redis_client: fakeredis.FakeRedis) -> IndexReconciler:
    return IndexReconciler(redis_client)


async def _orphaned_client(redis_client: fakeredis.FakeRedis) -> str:
    client = await ClientService(redis_client).create_client(
        ClientCreate(email="gone@example.com", first_name="Gone", last_name="Client")
    )
    redis_client.delete(f"client:{client.id}")
    return client.id


class TestIndexReconciler:
    def test_clean_store(self, reconciler: IndexReconciler) -> None:
        report = reconciler.reconcile()

        assert report.total_removed == 0

    async def test_removes_dangling_members(
        self, reconciler: IndexReconciler, redis_client: fakeredis.FakeRedis
    ) -> None:
        client_id = await _orphaned_client(redis_client)

        report = reconciler.reconcile()

        assert report.removed["clients"] == 1
        assert report.removed["client-emails"] == 1
        assert client_id not in redis_client.smembers("clients:index")
        assert redis_client.get("clients:email:gone@example.com") is None

    async def test_dry_run_only_counts(
        self, reconciler: IndexReconciler, redis_client: fakeredis.FakeRedis
    ) -> None:
        client_id = await _orphaned_client(redis_client)

        report = reconciler.reconcile(dry_run=True)

        assert report.dry_run is True
        assert report.total_removed == 2
        assert client_id in redis_client.smembers("clients:index")

    async def test_live_documents_kept(
        self, reconciler: IndexReconciler, redis_client: fakeredis.FakeRedis
    ) -> None:
        content = ContentService(redis_client)
        kept = await content.create_post(
            PostCreate(title="Kept", slug="kept", content="text", author="Dr Vet")
        )
        lost = await content.create_post(
            PostCreate(title="Lost", slug="lost", content="text", author="Dr Vet")
        )
        redis_client.delete(f"post:{lost.id}")

        report = reconciler.reconcile()

        assert report.removed["posts"] == 1
        assert report.removed["post-slugs"] == 1
        assert redis_client.lrange("posts:list", 0, -1) == [kept.id]
        assert report.scanned["posts"] == 2
