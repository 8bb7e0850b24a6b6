from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast

from authsvc.models.base import as_utc
from authsvc.models.refresh_token import RefreshToken
from authsvc.services._shared.ports import DeviceInfo, RefreshTokenStore, RefreshTokenView
from authsvc.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _to_view(row: RefreshToken) -> RefreshTokenView:
    """Snapshot an ORM row into an immutable, session-independent view."""
    return RefreshTokenView(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=cast(datetime, as_utc(row.expires_at)),
        revoked=bool(row.revoked),
        revoked_at=as_utc(row.revoked_at),
        last_used_at=as_utc(row.last_used_at),
        user_agent=row.user_agent,
        ip_address=row.ip_address,
    )


@dataclass(slots=True)
class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store (table ``refresh_tokens``).

    Every call runs in its own Unit of Work and commits before returning, so a
    consumed token stays revoked even if the caller fails afterwards.

    :param rw_uow: Factory for read-write units of work.
    :param ro_uow: Factory for read-only units of work.
    """

    rw_uow: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork
    ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork

    @staticmethod
    def _now(now: datetime | None) -> datetime:
        return now or datetime.now(UTC)

    # -------------------- API ------------------------

    def issue(
        self,
        *,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        device: DeviceInfo | None = None,
    ) -> RefreshTokenView:
        device = device or DeviceInfo()
        with self.rw_uow() as uow:
            row = uow.refresh_tokens.add(
                RefreshToken(
                    user_id=user_id,
                    token_hash=token_hash,
                    expires_at=expires_at,
                    user_agent=device.user_agent,
                    ip_address=device.ip_address,
                    revoked=False,
                )
            )
            return _to_view(row)

    def find_active_by_hash(
        self, token_hash: str, *, now: datetime | None = None
    ) -> RefreshTokenView | None:
        with self.ro_uow() as uow:
            row = uow.refresh_tokens.find_active_by_hash(token_hash, self._now(now))
            return _to_view(row) if row is not None else None

    def consume(self, token_hash: str, *, now: datetime | None = None) -> RefreshTokenView | None:
        now = self._now(now)
        with self.rw_uow() as uow:
            if not uow.refresh_tokens.consume(token_hash, now):
                return None
            row = uow.refresh_tokens.get_by_hash(token_hash)
            return _to_view(row) if row is not None else None

    def revoke(self, token_id: int) -> bool:
        with self.rw_uow() as uow:
            return uow.refresh_tokens.revoke(token_id, self._now(None))

    def revoke_by_hash(self, token_hash: str) -> bool:
        with self.rw_uow() as uow:
            return uow.refresh_tokens.revoke_by_hash(token_hash, self._now(None))

    def revoke_all_for_user(self, user_id: int) -> int:
        with self.rw_uow() as uow:
            return uow.refresh_tokens.revoke_all_for_user(user_id, self._now(None))

    def list_for_user(self, user_id: int) -> list[RefreshTokenView]:
        with self.ro_uow() as uow:
            return [_to_view(row) for row in uow.refresh_tokens.list_for_user(user_id)]

    def purge_expired(self, *, now: datetime | None = None) -> int:
        with self.rw_uow() as uow:
            return uow.refresh_tokens.purge_expired(self._now(now))
