"""Refresh token repository.

Every state transition on a refresh token is a single conditional ``UPDATE``
whose predicate (``revoked = false AND expires_at > now``) is evaluated by the
database. Callers inspect the affected row count instead of reading the row
first, so two writers racing on the same hash can never both succeed.
"""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from authsvc.models.refresh_token import RefreshToken
from authsvc.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Fetch a token row by hash regardless of its state.

        Loaded attributes are refreshed from the database, since the
        conditional updates below bypass the identity map.
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = self.session.execute(stmt).scalars().first()
        return cast(RefreshToken | None, result)

    def find_active_by_hash(self, token_hash: str, now: datetime) -> RefreshToken | None:
        """Fetch a token row only when it is unrevoked and unexpired at ``now``.

        :param token_hash: SHA-256 hex digest of the secret.
        :param now: Reference instant (UTC).
        :returns: Matching row or ``None``.
        """
        stmt = (
            select(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .execution_options(populate_existing=True)
        )
        result = self.session.execute(stmt).scalars().first()
        return cast(RefreshToken | None, result)

    def consume(self, token_hash: str, now: datetime) -> bool:
        """Atomically revoke an active token.

        Issues ``UPDATE refresh_tokens SET revoked = true ... WHERE
        token_hash = :h AND revoked = false AND expires_at > :now``.

        :returns: ``True`` only for the caller whose update matched a row.
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(revoked=True, revoked_at=now, last_used_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def revoke(self, token_id: int, now: datetime) -> bool:
        """Revoke a single unrevoked token by id."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return bool(self.session.execute(stmt).rowcount)

    def revoke_by_hash(self, token_hash: str, now: datetime) -> bool:
        """Revoke a single unrevoked token by hash."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token_hash == token_hash, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return bool(self.session.execute(stmt).rowcount)

    def revoke_all_for_user(self, user_id: int, now: datetime) -> int:
        """Revoke every unrevoked, unexpired token of ``user_id``.

        :returns: Number of rows that flipped from active to revoked.
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def list_for_user(self, user_id: int) -> list[RefreshToken]:
        """Return all token rows of a user, oldest first."""
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars().all())

    def purge_expired(self, now: datetime) -> int:
        """Hard-delete rows whose ``expires_at`` is in the past."""
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
