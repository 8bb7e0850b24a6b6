"""Unit tests for RefreshTokenRepository conditional updates."""

from datetime import UTC, datetime, timedelta

import pytest

from authsvc.repositories.refresh_token import RefreshTokenRepository
from authsvc.services._shared.ports import hash_refresh_token
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


def _now():
    return datetime.now(UTC)


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self):
        return RefreshTokenRepository()

    def test_find_active_by_hash(self, repo, session):
        token = RefreshTokenFactory(secret="s1")
        RefreshTokenFactory(secret="s2", revoked=True)

        assert repo.find_active_by_hash(hash_refresh_token("s1"), _now()).id == token.id
        assert repo.find_active_by_hash(hash_refresh_token("s2"), _now()) is None
        assert repo.find_active_by_hash(hash_refresh_token("s1"), _now() + timedelta(days=8)) is None

    def test_consume_succeeds_once(self, repo, session):
        RefreshTokenFactory(secret="s1")
        h = hash_refresh_token("s1")
        now = _now()

        assert repo.consume(h, now) is True
        assert repo.consume(h, now) is False
        session.commit()

        row = repo.get_by_hash(h)
        assert row.revoked is True
        assert row.revoked_at is not None
        assert row.last_used_at is not None

    def test_consume_refuses_expired_rows(self, repo, session):
        RefreshTokenFactory(secret="old", expires_at=_now() - timedelta(seconds=1))

        assert repo.consume(hash_refresh_token("old"), _now()) is False

    def test_revoke_by_id_and_hash(self, repo, session):
        a = RefreshTokenFactory(secret="a")
        RefreshTokenFactory(secret="b")

        assert repo.revoke(a.id, _now()) is True
        assert repo.revoke(a.id, _now()) is False
        assert repo.revoke_by_hash(hash_refresh_token("b"), _now()) is True
        assert repo.revoke_by_hash(hash_refresh_token("b"), _now()) is False

    def test_revoke_all_for_user_is_scoped(self, repo, session):
        owner = UserFactory()
        other = UserFactory()
        for _ in range(2):
            RefreshTokenFactory(user_id=owner.id)
        RefreshTokenFactory(user_id=owner.id, revoked=True)
        RefreshTokenFactory(user_id=other.id)

        assert repo.revoke_all_for_user(owner.id, _now()) == 2
        session.commit()

        assert all(t.revoked for t in repo.list_for_user(owner.id))
        assert not any(t.revoked for t in repo.list_for_user(other.id))

    def test_revoke_all_for_user_leaves_expired_rows(self, repo, session):
        owner = UserFactory()
        stale = RefreshTokenFactory(user_id=owner.id, expires_at=_now() - timedelta(minutes=1))
        RefreshTokenFactory(user_id=owner.id)

        assert repo.revoke_all_for_user(owner.id, _now()) == 1
        session.commit()

        assert repo.get_by_hash(stale.token_hash).revoked is False

    def test_list_for_user_is_ordered(self, repo, session):
        owner = UserFactory()
        ids = [RefreshTokenFactory(user_id=owner.id).id for _ in range(3)]

        assert [t.id for t in repo.list_for_user(owner.id)] == ids

    def test_purge_expired(self, repo, session):
        RefreshTokenFactory(secret="old", expires_at=_now() - timedelta(minutes=1))
        keep = RefreshTokenFactory(secret="new")

        assert repo.purge_expired(_now()) == 1
        session.commit()

        assert repo.get_by_hash(hash_refresh_token("old")) is None
        assert repo.get_by_hash(hash_refresh_token("new")).id == keep.id
