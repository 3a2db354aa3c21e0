"""Tests for the operator CLI."""

import fakeredis
import pytest
from click.testing import CliRunner

from continuum import cli as cli_module
from continuum.cli import cli


@pytest.fixture
def runner(redis_client: fakeredis.FakeRedis, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """CLI runner whose commands talk to fakeredis."""
    monkeypatch.setattr(cli_module, "init_redis", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli_module, "close_redis", lambda: None)
    monkeypatch.setattr(cli_module, "get_client", lambda: redis_client)
    return CliRunner()


class TestInitAdmin:
    def test_creates_admin(self, runner: CliRunner, redis_client: fakeredis.FakeRedis) -> None:
        result = runner.invoke(
            cli, ["init-admin", "--email", "ops@example.com", "--password", "long-enough-pw"]
        )

        assert result.exit_code == 0
        assert "Created admin ops@example.com" in result.output

    def test_duplicate_admin(self, runner: CliRunner) -> None:
        args = ["init-admin", "--email", "ops@example.com", "--password", "long-enough-pw"]
        runner.invoke(cli, args)

        result = runner.invoke(cli, args)

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_short_password(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["init-admin", "--email", "ops@example.com", "--password", "short"])

        assert result.exit_code == 2


class TestInitTemplates:
    def test_seeds_once(self, runner: CliRunner) -> None:
        first = runner.invoke(cli, ["init-templates"])
        second = runner.invoke(cli, ["init-templates"])

        assert first.exit_code == 0
        assert "Created" in first.output
        assert "already exist" in second.output


class TestReconcileIndexes:
    def test_reports_stale_entries(
        self, runner: CliRunner, redis_client: fakeredis.FakeRedis
    ) -> None:
        redis_client.sadd("clients:index", "client-ghost")

        dry = runner.invoke(cli, ["reconcile-indexes", "--dry-run"])
        real = runner.invoke(cli, ["reconcile-indexes"])
        again = runner.invoke(cli, ["reconcile-indexes"])

        assert dry.exit_code == 0
        assert "Would remove" in dry.output
        assert "Removed" in real.output
        assert "Removed 0 stale entries" in again.output
