"""Unit tests for :class:`WerkzeugPasswordHasher`."""

from __future__ import annotations

import pytest

from authsvc.infra.hashing import WerkzeugPasswordHasher


@pytest.fixture
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_is_not_plaintext_and_verifies(hasher):
    hashed = hasher.hash("Secret123!")

    assert hashed != "Secret123!"
    assert hashed.startswith("pbkdf2:sha256:1000$")
    assert hasher.compare("Secret123!", hashed) is True


def test_hash_is_salted(hasher):
    assert hasher.hash("Secret123!") != hasher.hash("Secret123!")


def test_compare_rejects_wrong_password(hasher):
    hashed = hasher.hash("Secret123!")

    assert hasher.compare("secret123!", hashed) is False


@pytest.mark.parametrize(
    "malformed",
    [
        "",
        "not-a-hash",
        "md5$salt",
        "unknown-method$salt$deadbeef",
        "scrypt:99999999999999999999:8:1$a$b",
        "pbkdf2:sha256:99999999999999999999$a$b",
    ],
)
def test_compare_returns_false_for_malformed_hash(hasher, malformed):
    assert hasher.compare("Secret123!", malformed) is False


def test_hash_rejects_empty_plaintext(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")


def test_default_method_is_scrypt():
    hashed = WerkzeugPasswordHasher().hash("Secret123!")

    assert hashed.startswith("scrypt:")
