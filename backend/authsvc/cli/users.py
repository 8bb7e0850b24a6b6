"""Flask CLI commands for account state (soft deactivation)."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from authsvc.services.auth.wiring import get_components
from authsvc.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _set_active(email: str, active: bool) -> int:
    """Flip ``is_active`` for ``email`` and return the user id.

    :raises click.ClickException: If no user has that email.
    """
    with SQLAlchemyUnitOfWork() as uow:
        user = uow.users.get_by_email(email)
        if user is None:
            raise click.ClickException(f"No user with email {email!r}.")
        user_id = user.id
        uow.users.set_active(user_id, active)
    return user_id


@click.group("users")
def users_cli() -> None:
    """User account administration."""


@users_cli.command("deactivate")
@click.argument("email")
@click.option(
    "--keep-sessions",
    is_flag=True,
    help="Do not revoke the user's refresh tokens (they stay unusable while inactive).",
)
@with_appcontext
def deactivate(email: str, keep_sessions: bool) -> None:
    """Soft-deactivate the account registered under EMAIL."""
    user_id = _set_active(email, False)
    revoked = 0
    if not keep_sessions:
        revoked = get_components().refresh_store.revoke_all_for_user(user_id)
    LOGGER.info(
        "user deactivated",
        extra={"operation": "deactivate", "user_id": user_id, "count": revoked},
    )
    click.echo(f"Deactivated user {user_id}; revoked {revoked} refresh tokens.")


@users_cli.command("activate")
@click.argument("email")
@with_appcontext
def activate(email: str) -> None:
    """Re-activate the account registered under EMAIL."""
    user_id = _set_active(email, True)
    LOGGER.info("user activated", extra={"operation": "activate", "user_id": user_id})
    click.echo(f"Activated user {user_id}.")
