from __future__ import annotations

import hashlib
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

REFRESH_SECRET_BYTES = 32


def hash_refresh_token(secret: str) -> str:
    """Return the SHA-256 hex digest under which a refresh secret is stored."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def generate_refresh_secret() -> str:
    """Return a new opaque refresh secret (256 random bits, hex encoded)."""
    return secrets.token_bytes(REFRESH_SECRET_BYTES).hex()


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    """Best-effort client metadata captured when a refresh token is issued."""

    user_agent: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True)
class RefreshTokenView:
    """
    Read-model for a stored refresh token.

    :ivar id: Store-assigned identifier.
    :ivar user_id: Owner user id.
    :ivar token_hash: SHA-256 hex digest of the secret.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked: Whether the token was rotated or revoked.
    :ivar revoked_at: When ``revoked`` flipped, if it did.
    :ivar last_used_at: When the token was consumed by a refresh, if it was.
    """

    id: int
    user_id: int
    token_hash: str
    expires_at: datetime
    revoked: bool = False
    revoked_at: datetime | None = None
    last_used_at: datetime | None = None
    user_agent: str | None = None
    ip_address: str | None = None

    def is_active(self, now: datetime) -> bool:
        """Return ``True`` when the token is unrevoked and unexpired at ``now``."""
        return not self.revoked and self.expires_at > now


class RefreshTokenStore(Protocol):
    """
    Persistent store of refresh-token hashes.

    The store never sees plaintext secrets. ``consume`` MUST be atomic: of two
    concurrent callers presenting the same active hash exactly one receives
    the row.
    """

    def issue(
        self,
        *,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        device: DeviceInfo | None = None,
    ) -> RefreshTokenView:
        """Persist a new, unrevoked token hash."""

    def find_active_by_hash(
        self, token_hash: str, *, now: datetime | None = None
    ) -> RefreshTokenView | None:
        """Return the token when it is unrevoked and unexpired, else ``None``."""

    def consume(self, token_hash: str, *, now: datetime | None = None) -> RefreshTokenView | None:
        """
        Atomically revoke an active token and return its (revoked) view.

        :returns: ``None`` when the hash is unknown, expired, already revoked
            or another caller consumed it first.
        """

    def revoke(self, token_id: int) -> bool:
        """Revoke a single token by id. :returns: True if a row changed."""

    def revoke_by_hash(self, token_hash: str) -> bool:
        """Revoke a single token by hash. :returns: True if a row changed."""

    def revoke_all_for_user(self, user_id: int) -> int:
        """
        Revoke every active (unrevoked, unexpired) token of a user.

        :returns: Number of tokens that changed state.
        """

    def list_for_user(self, user_id: int) -> list[RefreshTokenView]:
        """List every stored token of a user, including revoked ones."""

    def purge_expired(self, *, now: datetime | None = None) -> int:
        """Delete expired tokens. :returns: Number of tokens removed."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock to make ``consume`` atomic in unit tests.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, RefreshTokenView] = {}
        self._seq = 0
        self._lock = threading.Lock()

    # ------------------------- helpers -------------------------

    @staticmethod
    def _now(now: datetime | None) -> datetime:
        return now or datetime.now(UTC)

    # -------------------------- API ----------------------------

    def issue(
        self,
        *,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        device: DeviceInfo | None = None,
    ) -> RefreshTokenView:
        device = device or DeviceInfo()
        with self._lock:
            if token_hash in self._by_hash:
                raise ValueError("Refresh token hash already stored.")
            self._seq += 1
            view = RefreshTokenView(
                id=self._seq,
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                user_agent=device.user_agent,
                ip_address=device.ip_address,
            )
            self._by_hash[token_hash] = view
            return view

    def find_active_by_hash(
        self, token_hash: str, *, now: datetime | None = None
    ) -> RefreshTokenView | None:
        view = self._by_hash.get(token_hash)
        if view is None or not view.is_active(self._now(now)):
            return None
        return view

    def consume(self, token_hash: str, *, now: datetime | None = None) -> RefreshTokenView | None:
        now = self._now(now)
        with self._lock:
            view = self._by_hash.get(token_hash)
            if view is None or not view.is_active(now):
                return None
            consumed = replace(view, revoked=True, revoked_at=now, last_used_at=now)
            self._by_hash[token_hash] = consumed
            return consumed

    def revoke(self, token_id: int) -> bool:
        with self._lock:
            for token_hash, view in self._by_hash.items():
                if view.id == token_id:
                    return self._revoke_locked(token_hash)
            return False

    def revoke_by_hash(self, token_hash: str) -> bool:
        with self._lock:
            return self._revoke_locked(token_hash)

    def _revoke_locked(self, token_hash: str) -> bool:
        view = self._by_hash.get(token_hash)
        if view is None or view.revoked:
            return False
        self._by_hash[token_hash] = replace(view, revoked=True, revoked_at=datetime.now(UTC))
        return True

    def revoke_all_for_user(self, user_id: int) -> int:
        now = self._now(None)
        with self._lock:
            hashes = [
                h for h, v in self._by_hash.items() if v.user_id == user_id and v.is_active(now)
            ]
            for h in hashes:
                self._revoke_locked(h)
            return len(hashes)

    def list_for_user(self, user_id: int) -> list[RefreshTokenView]:
        with self._lock:
            views = [v for v in self._by_hash.values() if v.user_id == user_id]
        return sorted(views, key=lambda v: v.id)

    def purge_expired(self, *, now: datetime | None = None) -> int:
        now = self._now(now)
        with self._lock:
            expired = [h for h, v in self._by_hash.items() if v.expires_at <= now]
            for h in expired:
                del self._by_hash[h]
            return len(expired)
