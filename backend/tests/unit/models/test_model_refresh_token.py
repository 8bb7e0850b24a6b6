"""Unit tests for the :class:`RefreshToken` model."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from authsvc.models.refresh_token import RefreshToken
from authsvc.services._shared.ports import hash_refresh_token
from tests.factories.refresh_token import RefreshTokenFactory


def test_row_stores_only_the_hash(session):
    token = RefreshTokenFactory(secret="plain-secret")

    assert token.token_hash == hash_refresh_token("plain-secret")
    assert len(token.token_hash) == 64
    assert "plain-secret" not in token.token_hash


def test_token_hash_is_unique(session):
    existing = RefreshTokenFactory(secret="same")

    session.add(
        RefreshToken(
            user_id=existing.user_id,
            token_hash=hash_refresh_token("same"),
            expires_at=datetime.now(UTC) + timedelta(days=1),
        )
    )
    with pytest.raises(IntegrityError):
        session.flush()
    session.rollback()
