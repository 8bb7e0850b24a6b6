"""
authsvc.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for credential and token infrastructure.

These ports decouple the service layer from concrete implementations
of password hashing, access-token signing and refresh-token storage.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`, one-way hash and verify.

- :mod:`token_signer`:
    Defines :class:`~.TokenSigner` and :class:`~.AccessClaims` for signed,
    time-bounded access tokens.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenView` and
    :class:`~.DeviceInfo`, the hashing helpers, and an in-memory store.

Design Notes
------------
Concrete adapters (werkzeug, Flask-JWT-Extended, SQLAlchemy, Redis) live
under ``authsvc.infra``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .refresh_token_store import (
    DeviceInfo,
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    RefreshTokenView,
    generate_refresh_secret,
    hash_refresh_token,
)
from .token_signer import AccessClaims, TokenSigner

__all__ = [
    "AccessClaims",
    "DeviceInfo",
    "InMemoryRefreshTokenStore",
    "PasswordHasher",
    "RefreshTokenStore",
    "RefreshTokenView",
    "TokenSigner",
    "generate_refresh_secret",
    "hash_refresh_token",
]
