from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Identity claims carried by an access token.

    :ivar subject: User id rendered as an opaque string (``sub``).
    :ivar email: Account email.
    :ivar name: Display name.
    """

    subject: str
    email: str
    name: str


class TokenSigner(Protocol):
    """Port for creating and verifying signed, time-bounded access tokens."""

    def sign(self, claims: AccessClaims, ttl: timedelta) -> str:
        """Return a signed token for ``claims`` that expires after ``ttl``.

        A negative ``ttl`` yields a token that is already expired.
        """

    def verify(self, token: str) -> AccessClaims:
        """Return the claims of a valid token.

        :raises InvalidTokenError: On any signature, expiry, audience, issuer
            or token-type failure.
        """
