"""Unit tests for configuration loading and validation."""

from __future__ import annotations

import pytest

from authsvc.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
    validate_config,
)
from authsvc.factory import create_app

VALID = {
    "JWT_SECRET_KEY": "k" * 32,
    "JWT_ACCESS_TOKEN_TTL": 900,
    "JWT_REFRESH_TOKEN_TTL": 604800,
    "REFRESH_TOKEN_BACKEND": "sql",
}


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("true", True), ("YES", True), ("on", True), ("0", False), ("nope", False)],
)
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("FLAG", raw)

    assert env_bool("FLAG") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("FLAG", raising=False)

    assert env_bool("FLAG", True) is True


def test_env_int(monkeypatch):
    monkeypatch.setenv("TTL", " 42 ")
    assert env_int("TTL", 1) == 42

    monkeypatch.setenv("TTL", "")
    assert env_int("TTL", 7) == 7


@pytest.mark.parametrize(
    "name, cls",
    [
        ("development", DevelopmentConfig),
        ("testing", TestingConfig),
        ("PRODUCTION", ProductionConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_reads_app_env(monkeypatch, name, cls):
    monkeypatch.setenv("APP_ENV", name)

    assert get_config() is cls


def test_validate_config_accepts_valid_settings():
    validate_config(VALID)


@pytest.mark.parametrize(
    "override, message",
    [
        ({"JWT_SECRET_KEY": ""}, "JWT_SECRET_KEY"),
        ({"JWT_SECRET_KEY": "   "}, "JWT_SECRET_KEY"),
        ({"JWT_ACCESS_TOKEN_TTL": 0}, "JWT_ACCESS_TOKEN_TTL"),
        ({"JWT_REFRESH_TOKEN_TTL": -1}, "JWT_REFRESH_TOKEN_TTL"),
        ({"REFRESH_TOKEN_BACKEND": "memcached"}, "REFRESH_TOKEN_BACKEND"),
        ({"REFRESH_TOKEN_BACKEND": "redis", "REDIS_URL": None}, "REDIS_URL"),
    ],
)
def test_validate_config_rejects_unsafe_settings(override, message):
    with pytest.raises(RuntimeError, match=message):
        validate_config({**VALID, **override})


def test_create_app_refuses_empty_secret():
    class NoSecret(TestingConfig):
        JWT_SECRET_KEY = ""

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        create_app(NoSecret)
