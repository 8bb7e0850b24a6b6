# authsvc/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from authsvc.services._shared.ports import DeviceInfo

__all__ = [
    "AuthTokenConfig",
    "DeviceInfo",
    "LogoutAllOut",
    "LogoutIn",
    "LogoutOut",
    "RefreshIn",
    "SignInIn",
    "SignUpIn",
    "SignUpOut",
    "TokenPairOut",
]

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignUpIn:
    """
    Input DTO for registration.

    :param email: User email (normalized by the model).
    :type email: str
    :param name: Display name (min 3 characters after trimming).
    :type name: str
    :param password: Raw password (hashed before storage).
    :type password: str
    """

    email: str
    name: str
    password: str


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh secret read from the cookie.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """Input DTO for logout; a missing secret still counts as logged out."""

    refresh_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignUpOut:
    message: str
    user_id: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Signed access token (bearer).
    :type access_token: str
    :param refresh_token: Opaque refresh secret; returned once, never stored.
    :type refresh_token: str
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass(frozen=True, slots=True)
class LogoutOut:
    message: str
    clear_cookie: bool = True


@dataclass(frozen=True, slots=True)
class LogoutAllOut:
    message: str
    revoked_count: int


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta
    refresh_expires: timedelta
