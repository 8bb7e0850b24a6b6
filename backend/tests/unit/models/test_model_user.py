"""Unit tests for the :class:`User` model validators and constraints."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from authsvc.models.user import User
from tests.factories.user import UserFactory


def _user(**overrides) -> User:
    fields = {"email": "ann@example.com", "name": "Ann Lee", "password_hash": "pbkdf2:x$y$z"}
    fields.update(overrides)
    return User(**fields)


def test_email_is_normalized():
    assert _user(email="  Ann@Example.COM ").email == "ann@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "ann@localhost"])
def test_malformed_email_is_rejected(email):
    with pytest.raises(ValueError):
        _user(email=email)


def test_name_is_trimmed():
    assert _user(name="  Ann Lee  ").name == "Ann Lee"


@pytest.mark.parametrize("name", ["", "Al", "  Al  "])
def test_short_name_is_rejected(name):
    with pytest.raises(ValueError, match="at least 3"):
        _user(name=name)


def test_empty_password_hash_is_rejected():
    with pytest.raises(ValueError):
        _user(password_hash="")


def test_defaults_after_insert(session):
    user = UserFactory()

    assert user.id is not None
    assert user.is_active is True
    assert user.last_login_at is None
    assert user.created_at is not None


def test_email_is_unique(session):
    UserFactory(email="dup@example.com")

    session.add(_user(email="DUP@example.com"))
    with pytest.raises(IntegrityError):
        session.flush()
    session.rollback()


def test_repr_contains_id(session):
    user = UserFactory()

    assert repr(user) == f"<User id={user.id}>"
