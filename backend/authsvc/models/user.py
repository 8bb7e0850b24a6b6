"""User model: the identity that signs in and owns refresh tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, validates

from authsvc.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"
NAME_MIN_LENGTH = 3


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed) and unique.
    name : str
        Display name carried in access-token claims.
    password_hash : str
        Opaque salted hash produced by the configured password hasher.
        Never serialized, never logged.
    is_active : bool
        Soft-deactivation flag; inactive users cannot sign in or refresh.
    last_login_at : datetime | None
        Timestamp of the last successful sign-in.
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
        Index("ix_users_is_active", "is_active"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = normalize_email(value)
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """
        Trim the display name and enforce the minimum length.

        :raises ValueError: If the name is missing or too short.
        """
        if not isinstance(value, str):
            raise ValueError("Name is required.")
        v = value.strip()
        if len(v) < NAME_MIN_LENGTH:
            raise ValueError(f"Name must be at least {NAME_MIN_LENGTH} characters.")
        return v

    @validates("password_hash")
    def _require_hash(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("Password hash must be a non-empty string.")
        return value


def normalize_email(value: str) -> str:
    """Return the canonical (trimmed, lowercased) form of an email address."""
    return value.strip().lower()
