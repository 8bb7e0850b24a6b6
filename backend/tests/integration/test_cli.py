"""Integration tests for the ``tokens`` and ``users`` CLI groups."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from authsvc.models.refresh_token import RefreshToken
from authsvc.models.user import User
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


def test_purge_expired_removes_only_expired_rows(runner, session) -> None:
    RefreshTokenFactory(expires_at=datetime.now(UTC) - timedelta(hours=1))
    RefreshTokenFactory(expires_at=datetime.now(UTC) - timedelta(days=2))
    keep = RefreshTokenFactory()

    result = runner.invoke(args=["tokens", "purge-expired"])

    assert result.exit_code == 0, result.output
    assert "Purged 2 expired refresh tokens." in result.output
    assert [t.id for t in session.query(RefreshToken).all()] == [keep.id]


def test_revoke_single_token(runner, session) -> None:
    target = RefreshTokenFactory()
    other = RefreshTokenFactory()

    result = runner.invoke(args=["tokens", "revoke", str(target.id)])

    assert result.exit_code == 0, result.output
    assert f"Revoked refresh token {target.id}." in result.output
    session.expire_all()
    assert session.get(RefreshToken, target.id).revoked is True
    assert session.get(RefreshToken, other.id).revoked is False


def test_revoke_twice_fails(runner, session) -> None:
    target = RefreshTokenFactory()
    runner.invoke(args=["tokens", "revoke", str(target.id)])

    result = runner.invoke(args=["tokens", "revoke", str(target.id)])

    assert result.exit_code != 0
    assert "No active refresh token" in result.output


def test_deactivate_revokes_sessions(runner, session) -> None:
    user = UserFactory(email="ann@example.com")
    for _ in range(2):
        RefreshTokenFactory(user_id=user.id)

    result = runner.invoke(args=["users", "deactivate", "ANN@example.com"])

    assert result.exit_code == 0, result.output
    assert "revoked 2 refresh tokens" in result.output
    session.expire_all()
    assert session.get(User, user.id).is_active is False
    assert all(t.revoked for t in session.query(RefreshToken).all())


def test_deactivate_can_keep_sessions(runner, session) -> None:
    user = UserFactory()
    RefreshTokenFactory(user_id=user.id)

    result = runner.invoke(args=["users", "deactivate", user.email, "--keep-sessions"])

    assert result.exit_code == 0, result.output
    session.expire_all()
    assert not any(t.revoked for t in session.query(RefreshToken).all())


def test_activate_restores_account(runner, session) -> None:
    user = UserFactory(is_active=False)

    result = runner.invoke(args=["users", "activate", user.email])

    assert result.exit_code == 0, result.output
    session.expire_all()
    assert session.get(User, user.id).is_active is True


def test_unknown_email_fails(runner, session) -> None:
    result = runner.invoke(args=["users", "deactivate", "nobody@example.com"])

    assert result.exit_code != 0
    assert "No user with email" in result.output
