"""Flask CLI commands for refresh-token storage hygiene."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from authsvc.services.auth.wiring import get_components

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token maintenance commands."""


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired() -> None:
    """Delete refresh tokens whose expiry has passed.

    Intended to run periodically (cron, systemd timer). The Redis backend
    expires keys natively; the command then only prunes per-user indexes.
    """
    store = get_components().refresh_store
    removed = store.purge_expired()
    LOGGER.info("purged expired refresh tokens", extra={"operation": "purge_expired", "count": removed})
    click.echo(f"Purged {removed} expired refresh tokens.")


@tokens_cli.command("revoke")
@click.argument("token_id", type=int)
@with_appcontext
def revoke(token_id: int) -> None:
    """Revoke a single refresh token by id, e.g. one reported as leaked."""
    store = get_components().refresh_store
    if not store.revoke(token_id):
        raise click.ClickException(f"No active refresh token with id {token_id}.")
    LOGGER.info("revoked refresh token", extra={"operation": "revoke_token", "count": 1})
    click.echo(f"Revoked refresh token {token_id}.")
