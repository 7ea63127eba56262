"""Flask CLI commands for operator tasks that bypass the HTTP API."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from socialconnect.core.extensions import db
from socialconnect.services._shared.errors import NotFoundError
from socialconnect.services.admin.service import AdminService
from socialconnect.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("admin")
def admin_cli() -> None:
    """Administrative maintenance commands."""


@admin_cli.command("provision")
@click.argument("user_id", type=int)
@with_appcontext
def provision_command(user_id: int) -> None:
    """Grant administrator rights to USER_ID without the shared secret."""
    try:
        user = AdminService().promote(user_id)
    except NotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"User {user.id} ({user.username}) is now an administrator.")


@admin_cli.command("purge-tokens")
@with_appcontext
def purge_tokens_command() -> None:
    """Delete refresh token records past their expiry."""
    with SQLAlchemyUnitOfWork() as uow:
        removed = uow.refresh_tokens.purge_expired()
    LOGGER.info("cli.refresh_tokens_purged", extra={"count": removed})
    click.echo(f"Purged {removed} refresh token(s).")


@admin_cli.command("init-db")
@with_appcontext
def init_db_command() -> None:
    """Create missing tables for every registered model."""
    db.create_all()
    click.echo("Database schema is up to date.")
