"""Operator commands: admin bootstrap, template seeding and index repair."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from continuum.core.config import get_settings
from continuum.core.exceptions import ConflictError
from continuum.core.redis import close_redis, get_client, init_redis


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _create_admin(email: str, password: str, name: str) -> None:
    from continuum.services.auth_service import AuthService

    service = AuthService(get_client(), get_settings())
    user = await service.create_admin(email, password, name=name)
    click.echo(f"Created admin {user.email} ({user.id})")


async def _seed_templates() -> list[str]:
    from continuum.services.template_service import TemplateService

    return await TemplateService(get_client()).seed_system_templates()


@click.group()
def cli() -> None:
    """Continuum Clinic operations."""
    _setup_logging()


@cli.command("init-admin")
@click.option("--email", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True)
@click.option("--name", default="Administrator", show_default=True)
def init_admin(email: str, password: str, name: str) -> None:
    """Create the back-office admin account."""
    if len(password) < 8:
        raise click.BadParameter("must be at least 8 characters", param_hint="--password")
    init_redis()
    try:
        asyncio.run(_create_admin(email, password, name))
    except ConflictError as e:
        raise click.ClickException(e.detail) from e
    finally:
        close_redis()


@cli.command("init-templates")
def init_templates() -> None:
    """Seed the built-in email templates that are missing."""
    init_redis()
    try:
        created = asyncio.run(_seed_templates())
    finally:
        close_redis()
    if created:
        click.echo(f"Created {len(created)} template(s): {', '.join(created)}")
    else:
        click.echo("All system templates already exist.")


@cli.command("reconcile-indexes")
@click.option("--dry-run", is_flag=True, help="Report stale index entries without removing them")
def reconcile_indexes(dry_run: bool) -> None:
    """Remove index members whose document no longer exists."""
    from continuum.services.maintenance import IndexReconciler

    init_redis()
    try:
        report = IndexReconciler(get_client()).reconcile(dry_run=dry_run)
    finally:
        close_redis()

    verb = "Would remove" if dry_run else "Removed"
    for name, scanned in report.scanned.items():
        removed = report.removed.get(name, 0)
        if removed:
            click.echo(f"{name}: {verb.lower()} {removed} of {scanned}")
    click.echo(f"{verb} {report.total_removed} stale entr{'y' if report.total_removed == 1 else 'ies'}")


@cli.command()
def serve() -> None:
    """Run the web application with uvicorn."""
    from continuum.main import run

    run()


if __name__ == "__main__":
    cli()
