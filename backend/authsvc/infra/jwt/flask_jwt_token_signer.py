from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from authsvc.services._shared.errors import InvalidTokenError
from authsvc.services._shared.ports import AccessClaims, TokenSigner

ACCESS_TOKEN_TYPE = "access"


@dataclass(slots=True)
class FlaskJWTTokenSigner(TokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    Signing key, algorithm, audience and issuer come from the app config
    (``JWT_SECRET_KEY``, ``JWT_ALGORITHM``, ``JWT_ENCODE_*``/``JWT_DECODE_*``).

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def sign(self, claims: AccessClaims, ttl: timedelta) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        return cast(
            str,
            _create_access(
                identity=claims.subject,
                additional_claims={"email": claims.email, "name": claims.name},
                expires_delta=ttl,
            ),
        )

    def verify(self, token: str) -> AccessClaims:
        from flask_jwt_extended import decode_token

        if not isinstance(token, str) or not token:
            raise InvalidTokenError()
        try:
            payload = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise InvalidTokenError() from exc

        subject = payload.get("sub")
        email = payload.get("email")
        name = payload.get("name")
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError()
        if not all(isinstance(value, str) and value for value in (subject, email, name)):
            raise InvalidTokenError()
        return AccessClaims(subject=cast(str, subject), email=cast(str, email), name=cast(str, name))
