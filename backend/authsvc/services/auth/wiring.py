"""Build :class:`CredentialService` instances from the Flask app config."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from flask import Flask, current_app

from authsvc.core.extensions import get_redis
from authsvc.infra.hashing import WerkzeugPasswordHasher
from authsvc.infra.jwt import FlaskJWTTokenSigner
from authsvc.infra.redis import RedisRefreshTokenStore
from authsvc.infra.sqlalchemy import SQLAlchemyRefreshTokenStore
from authsvc.services._shared.base import ServiceContext
from authsvc.services._shared.ports import PasswordHasher, RefreshTokenStore, TokenSigner
from authsvc.services.auth.dto import AuthTokenConfig
from authsvc.services.auth.service import DUMMY_PASSWORD, CredentialService

EXTENSION_KEY = "authsvc.credentials"


@dataclass(slots=True)
class CredentialComponents:
    """Process-wide collaborators shared by every request's service instance."""

    password_hasher: PasswordHasher
    token_signer: TokenSigner
    refresh_store: RefreshTokenStore
    token_cfg: AuthTokenConfig
    _dummy_hash: str | None = field(default=None, repr=False)

    def dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.password_hasher.hash(DUMMY_PASSWORD)
        return self._dummy_hash


def build_refresh_store(config: dict[str, Any] | Any) -> RefreshTokenStore:
    """Return the refresh-token store selected by ``REFRESH_TOKEN_BACKEND``."""
    backend = str(config.get("REFRESH_TOKEN_BACKEND", "sql")).lower()
    if backend == "redis":
        return RedisRefreshTokenStore(r=get_redis())
    return SQLAlchemyRefreshTokenStore()


def build_components(app: Flask) -> CredentialComponents:
    cfg = app.config
    return CredentialComponents(
        password_hasher=WerkzeugPasswordHasher(method=cfg["PASSWORD_HASH_METHOD"]),
        token_signer=FlaskJWTTokenSigner(),
        refresh_store=build_refresh_store(cfg),
        token_cfg=AuthTokenConfig(
            access_expires=timedelta(seconds=int(cfg["JWT_ACCESS_TOKEN_TTL"])),
            refresh_expires=timedelta(seconds=int(cfg["JWT_REFRESH_TOKEN_TTL"])),
        ),
    )


def init_app(app: Flask) -> None:
    """Create the shared components once per application."""
    app.extensions[EXTENSION_KEY] = build_components(app)


def get_components() -> CredentialComponents:
    components = current_app.extensions.get(EXTENSION_KEY)
    if components is None:
        raise RuntimeError("Credential components are not initialized. Call init_app() first.")
    return components


def build_credential_service(ctx: ServiceContext | None = None) -> CredentialService:
    """
    Return a :class:`CredentialService` bound to the current app's components.

    :param ctx: Request-scoped context forwarded to the service.
    """
    components = get_components()
    return CredentialService(
        password_hasher=components.password_hasher,
        token_signer=components.token_signer,
        refresh_store=components.refresh_store,
        token_cfg=components.token_cfg,
        ctx=ctx,
        dummy_hash=components.dummy_hash(),
    )
