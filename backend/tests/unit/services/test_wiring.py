"""Unit tests for assembling the credential service from app config."""

from __future__ import annotations

import fakeredis
import pytest

from authsvc.infra.redis import RedisRefreshTokenStore
from authsvc.infra.sqlalchemy import SQLAlchemyRefreshTokenStore
from authsvc.services._shared.base import ServiceContext
from authsvc.services.auth import wiring


def test_sql_backend_is_the_default():
    assert isinstance(wiring.build_refresh_store({}), SQLAlchemyRefreshTokenStore)


def test_redis_backend_uses_shared_client(monkeypatch):
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
    monkeypatch.setattr(wiring, "get_redis", lambda: client)

    store = wiring.build_refresh_store({"REFRESH_TOKEN_BACKEND": "Redis"})

    assert isinstance(store, RedisRefreshTokenStore)
    assert store.r is client


def test_redis_backend_without_client_fails(session):
    with pytest.raises(RuntimeError, match="Redis client is not initialized"):
        wiring.build_refresh_store({"REFRESH_TOKEN_BACKEND": "redis"})


def test_components_follow_config(app, session):
    components = wiring.get_components()

    assert components.token_cfg.access_expires.total_seconds() == app.config["JWT_ACCESS_TOKEN_TTL"]
    assert components.token_cfg.refresh_expires.total_seconds() == app.config["JWT_REFRESH_TOKEN_TTL"]
    assert components.password_hasher.method == app.config["PASSWORD_HASH_METHOD"]


def test_services_share_one_dummy_hash(session):
    ctx = ServiceContext(request_id="req-1")

    first = wiring.build_credential_service(ctx)
    second = wiring.build_credential_service()

    assert first.ctx is ctx
    assert first.dummy_hash() == second.dummy_hash()
    assert first.hasher.compare("authsvc-timing-equalizer", first.dummy_hash())
