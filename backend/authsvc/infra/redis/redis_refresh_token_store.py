# comments in English; reST docstrings
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, cast

import redis  # type: ignore[import-untyped]

from authsvc.services._shared.ports import DeviceInfo, RefreshTokenStore, RefreshTokenView


def _s(value: Any, default: str = "") -> str:
    """Decode a Redis reply (bytes or str) into ``str``."""
    if value is None:
        return default
    if isinstance(value, bytes | bytearray):
        return value.decode()
    return str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store with atomic consumption.

    Layout
    ------
    ``rt:{hash}``
        Hash holding the token fields; key TTL equals the remaining lifetime,
        so Redis purges expired tokens on its own.
    ``rt:u:{user_id}``
        Set of token hashes issued to the user.
    ``rt:id:{id}``
        Pointer from the numeric id to the token hash.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"rt:{token_hash}"

    @staticmethod
    def _ku(user_id: int) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _kid(token_id: int) -> str:
        return f"rt:id:{token_id}"

    _SEQ_KEY = "rt:seq"

    @staticmethod
    def _to_ts(dt: datetime) -> float:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt.timestamp()

    @staticmethod
    def _from_ts(raw: str) -> datetime | None:
        return datetime.fromtimestamp(float(raw), tz=UTC) if raw else None

    @staticmethod
    def _now(now: datetime | None) -> datetime:
        return now or datetime.now(UTC)

    def _view(self, h: dict[Any, Any]) -> RefreshTokenView:
        fields = {_s(k): _s(v) for k, v in h.items()}
        return RefreshTokenView(
            id=int(fields["id"]),
            user_id=int(fields["user_id"]),
            token_hash=fields["token_hash"],
            expires_at=cast(datetime, self._from_ts(fields["expires_at"])),
            revoked=fields.get("revoked", "0") == "1",
            revoked_at=self._from_ts(fields.get("revoked_at", "")),
            last_used_at=self._from_ts(fields.get("last_used_at", "")),
            user_agent=fields.get("user_agent") or None,
            ip_address=fields.get("ip_address") or None,
        )

    def _members(self, user_id: int) -> list[str]:
        return sorted(_s(m) for m in self.r.smembers(self._ku(user_id)))

    # -------------------- API ------------------------

    def issue(
        self,
        *,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        device: DeviceInfo | None = None,
    ) -> RefreshTokenView:
        """
        Insert the token hash with a TTL matching its remaining lifetime.

        :raises ValueError: If the hash is already stored.
        """
        device = device or DeviceInfo()
        key = self._k(token_hash)
        exp_ts = self._to_ts(expires_at)
        ttl = max(1, math.ceil(exp_ts - self._to_ts(datetime.now(UTC))))
        token_id = int(self.r.incr(self._SEQ_KEY))

        mapping = {
            "id": str(token_id),
            "user_id": str(user_id),
            "token_hash": token_hash,
            "expires_at": repr(exp_ts),
            "revoked": "0",
            "revoked_at": "",
            "last_used_at": "",
            "user_agent": device.user_agent or "",
            "ip_address": device.ip_address or "",
        }

        with self.r.pipeline(transaction=True) as p:
            p.watch(key)
            if p.exists(key):
                p.unwatch()
                raise ValueError("Refresh token hash already stored.")
            p.multi()
            p.hset(key, mapping=mapping)
            p.expire(key, ttl)
            p.set(self._kid(token_id), token_hash, ex=ttl)
            p.sadd(self._ku(user_id), token_hash)
            p.execute()

        return self._view(mapping)

    def find_active_by_hash(
        self, token_hash: str, *, now: datetime | None = None
    ) -> RefreshTokenView | None:
        h = self.r.hgetall(self._k(token_hash))
        if not h:
            return None
        view = self._view(h)
        return view if view.is_active(self._now(now)) else None

    def consume(self, token_hash: str, *, now: datetime | None = None) -> RefreshTokenView | None:
        """
        Atomically revoke an active token using WATCH/MULTI/EXEC.

        If another client touches the key between the read and ``EXEC`` the
        transaction aborts and the check is repeated; the loser then observes
        ``revoked=1`` and gets ``None``.
        """
        now = self._now(now)
        now_raw = repr(self._to_ts(now))
        key = self._k(token_hash)

        # Retry loop for optimistic locking in case of concurrent modifications
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h:
                        p.unwatch()
                        return None
                    view = self._view(h)
                    if not view.is_active(now):
                        p.unwatch()
                        return None

                    p.multi()
                    p.hset(key, mapping={"revoked": "1", "revoked_at": now_raw, "last_used_at": now_raw})
                    p.execute()

                return RefreshTokenView(
                    id=view.id,
                    user_id=view.user_id,
                    token_hash=view.token_hash,
                    expires_at=view.expires_at,
                    revoked=True,
                    revoked_at=self._from_ts(now_raw),
                    last_used_at=self._from_ts(now_raw),
                    user_agent=view.user_agent,
                    ip_address=view.ip_address,
                )
            except redis.WatchError:
                continue

    def revoke(self, token_id: int) -> bool:
        token_hash = self.r.get(self._kid(token_id))
        if not token_hash:
            return False
        return self.revoke_by_hash(_s(token_hash))

    def revoke_by_hash(self, token_hash: str) -> bool:
        return self._revoke_keys([self._k(token_hash)]) == 1

    def revoke_all_for_user(self, user_id: int) -> int:
        members = self._members(user_id)
        if not members:
            return 0
        return self._revoke_keys([self._k(m) for m in members], active_at=datetime.now(UTC))

    def _revoke_keys(self, keys: list[str], active_at: datetime | None = None) -> int:
        """Flip ``revoked`` on every existing, unrevoked key in one transaction.

        With ``active_at`` set, keys already expired at that instant are left
        alone; their TTL may not have fired yet.

        :returns: Number of keys that changed state.
        """
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(*keys)
                    targets = [k for k in keys if _s(p.hget(k, "revoked")) == "0"]
                    if active_at is not None:
                        cutoff = self._to_ts(active_at)
                        targets = [k for k in targets if float(_s(p.hget(k, "expires_at"), "0")) > cutoff]
                    if not targets:
                        p.unwatch()
                        return 0
                    now_raw = repr(self._to_ts(datetime.now(UTC)))
                    p.multi()
                    for k in targets:
                        p.hset(k, mapping={"revoked": "1", "revoked_at": now_raw})
                    p.execute()
                    return len(targets)
            except redis.WatchError:
                continue

    def list_for_user(self, user_id: int) -> list[RefreshTokenView]:
        views: list[RefreshTokenView] = []
        stale: list[str] = []
        for token_hash in self._members(user_id):
            h = self.r.hgetall(self._k(token_hash))
            if h:
                views.append(self._view(h))
            else:
                # Underlying hash missing (expired/deleted) -> mark for cleanup
                stale.append(token_hash)
        if stale:
            self.r.srem(self._ku(user_id), *stale)
        return sorted(views, key=lambda v: v.id)

    def purge_expired(self, *, now: datetime | None = None) -> int:
        """
        Remove expired tokens and prune user indexes.

        Token hashes normally vanish through their key TTL; this sweeps index
        entries left behind and any hash whose ``expires_at`` already passed.

        :returns: Number of index entries removed.
        """
        now = self._now(now)
        removed = 0
        for raw_key in self.r.scan_iter(match="rt:u:*"):
            index_key = _s(raw_key)
            for token_hash in sorted(_s(m) for m in self.r.smembers(index_key)):
                key = self._k(token_hash)
                h = self.r.hgetall(key)
                if h:
                    view = self._view(h)
                    if view.expires_at > now:
                        continue
                    self.r.delete(key, self._kid(view.id))
                self.r.srem(index_key, token_hash)
                removed += 1
        return removed
