"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

REFRESH_TOKEN_BACKENDS: Final[frozenset[str]] = frozenset({"sql", "redis"})

# Loads .env during development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Symmetric key used by ``flask-jwt-extended`` for signing access
        tokens. Required: :func:`validate_config` refuses an empty value.
    JWT_ACCESS_TOKEN_TTL: int
        Access token lifetime in seconds.
    JWT_REFRESH_TOKEN_TTL: int
        Refresh token lifetime in seconds (also the cookie ``Max-Age``).
    JWT_AUDIENCE: str
        ``aud`` claim written into and required from access tokens.
    JWT_ISSUER: str
        ``iss`` claim written into and required from access tokens.
    PASSWORD_HASH_METHOD: str
        Method string handed to :func:`werkzeug.security.generate_password_hash`.
    REFRESH_TOKEN_BACKEND: str
        ``"sql"`` (default) or ``"redis"``.
    REDIS_URL: str | None
        Connection URL used when the Redis backend is selected.
    REFRESH_COOKIE_NAME / _PATH / _SAMESITE / _SECURE / _DOMAIN:
        Attributes of the HTTP-only refresh-token cookie.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_TTL = env_int("JWT_ACCESS_TOKEN_TTL", 900)
    JWT_REFRESH_TOKEN_TTL = env_int("JWT_REFRESH_TOKEN_TTL", 604800)
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authsvc-clients")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "authsvc")
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Refresh token storage
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Refresh cookie
    REFRESH_COOKIE_NAME = "refresh_token"
    REFRESH_COOKIE_PATH = os.getenv("REFRESH_COOKIE_PATH", "/api/v1/auth")
    REFRESH_COOKIE_SAMESITE = os.getenv("REFRESH_COOKIE_SAMESITE", "Lax")
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", False)
    REFRESH_COOKIE_DOMAIN = os.getenv("REFRESH_COOKIE_DOMAIN") or None

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap PBKDF2 work factor so hashing does not dominate test time.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    REFRESH_TOKEN_BACKEND = "sql"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled and marks the refresh cookie as
    ``Secure`` unless explicitly disabled.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", True)


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Reject configurations the service cannot safely start with.

    :param config: Loaded Flask config mapping.
    :raises RuntimeError: When the signing secret is missing, a TTL is not
        positive, or the refresh-token backend is unknown.
    """
    secret = config.get("JWT_SECRET_KEY")
    if not isinstance(secret, str) or not secret.strip():
        raise RuntimeError("JWT_SECRET_KEY is not configured; refusing to start.")

    for key in ("JWT_ACCESS_TOKEN_TTL", "JWT_REFRESH_TOKEN_TTL"):
        if int(config.get(key) or 0) <= 0:
            raise RuntimeError(f"{key} must be a positive number of seconds.")

    backend = str(config.get("REFRESH_TOKEN_BACKEND", "sql")).lower()
    if backend not in REFRESH_TOKEN_BACKENDS:
        raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND {backend!r}.")
    if backend == "redis" and not config.get("REDIS_URL"):
        raise RuntimeError("REFRESH_TOKEN_BACKEND=redis requires REDIS_URL.")
