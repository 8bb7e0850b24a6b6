"""Refresh token model: one row per issued refresh-token secret."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from authsvc.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

TOKEN_HASH_UNIQUE_CONSTRAINT = "uq_refresh_tokens_token_hash"


class RefreshToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Server-side record of a refresh token.

    Only the SHA-256 hex digest of the opaque secret is stored; the secret
    itself lives in the client's cookie. Rotation never edits a row in place
    beyond flipping ``revoked``: the successor is a new row.

    Fields
    ------
    user_id : int
        Owning user.
    token_hash : str
        SHA-256 hex digest of the secret (unique).
    expires_at : datetime
        Absolute expiry; past it the row is unusable and may be purged.
    user_agent, ip_address : str | None
        Best-effort device metadata captured at issuance.
    revoked : bool
        ``True`` once rotated, logged out, or revoked by logout-all.
    revoked_at, last_used_at : datetime | None
        Audit timestamps stamped by the revoke/consume paths.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("token_hash", name=TOKEN_HASH_UNIQUE_CONSTRAINT),
        Index("ix_refresh_tokens_user_id_revoked", "user_id", "revoked"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )
