"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
# backend/migrations, independent of the working directory
MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"
migrate = Migrate(render_as_batch=True, directory=str(MIGRATIONS_DIR))
jwt = JWTManager()
redis_client: redis.Redis | None = None


def _configure_jwt(app: Flask) -> None:
    """Translate service-level token settings into Flask-JWT-Extended keys.

    Audience and issuer are both written into new tokens and required when
    decoding, so a token minted for another audience never verifies here.
    """
    cfg = app.config
    cfg.setdefault(
        "JWT_ACCESS_TOKEN_EXPIRES", timedelta(seconds=int(cfg["JWT_ACCESS_TOKEN_TTL"]))
    )
    cfg.setdefault("JWT_ENCODE_AUDIENCE", cfg.get("JWT_AUDIENCE"))
    cfg.setdefault("JWT_DECODE_AUDIENCE", cfg.get("JWT_AUDIENCE"))
    cfg.setdefault("JWT_ENCODE_ISSUER", cfg.get("JWT_ISSUER"))
    cfg.setdefault("JWT_DECODE_ISSUER", cfg.get("JWT_ISSUER"))


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT and (optionally) Redis.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`authsvc.models` package to ensure SQLAlchemy metadata is ready
        for migrations.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from authsvc import models as _models  # noqa: F401

    migrate.init_app(app, db)

    _configure_jwt(app)
    jwt.init_app(app)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
