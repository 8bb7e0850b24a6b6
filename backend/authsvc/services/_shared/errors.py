"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories, ports,
adapters and application services.

Every error carries a stable machine ``code`` and a message that is safe to
show to clients. The translation to HTTP responses (RFC 7807) is handled by
``authsvc/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *markers: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name (``uq_users_email``) while SQLite
    reports the column (``UNIQUE constraint failed: users.email``), so callers
    may pass several markers; any match counts.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    *markers : str
        Constraint names or ``table.column`` fragments to look for.

    Returns
    -------
    bool
        True if the IntegrityError matches one of the markers.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    return any(marker.lower() in message for marker in markers)


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The API layer or BaseService will later translate them to APIError.
    """

    code: str = "service_error"
    default_message: str = "Service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# --------------------------------------------------------------------------- #
# Credential errors
# --------------------------------------------------------------------------- #


class InvalidInputError(ServiceError):
    """Raised when a command fails model-level validation (e.g. name too short)."""

    code = "invalid_input"
    default_message = "Invalid input"


class DuplicateEmailError(ServiceError):
    """Raised when sign-up targets an email that is already registered."""

    code = "duplicate_email"
    default_message = "Email already exists"


class InvalidCredentialsError(ServiceError):
    """Raised for an unknown email, an inactive account or a wrong password.

    The three cases share one message so callers cannot probe which emails
    are registered.
    """

    code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidRefreshTokenError(ServiceError):
    """Raised when a refresh secret is empty, unknown, expired or revoked."""

    code = "invalid_refresh_token"
    default_message = "Invalid refresh token"


class UserInactiveError(ServiceError):
    """Raised when a refresh resolves to a missing or deactivated user."""

    code = "user_inactive"
    default_message = "User account is not active"


class RegistrationFailedError(ServiceError):
    code = "registration_failed"
    default_message = "Registration failed"


class OperationFailedError(ServiceError):
    """Raised when a credential operation fails for a storage reason."""

    code = "operation_failed"
    default_message = "Operation failed"


class InvalidTokenError(ServiceError):
    """Raised by the token signer for any access-token verification failure."""

    code = "invalid_token"
    default_message = "Invalid token"
