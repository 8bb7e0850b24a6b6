"""Refresh-token cookie helpers.

The refresh secret only travels in an HTTP-only cookie scoped to the auth
routes; its attributes come from the ``REFRESH_COOKIE_*`` settings.
"""

from __future__ import annotations

from flask import Response, current_app, request

from authsvc.core.errors import Unauthorized

MISSING_REFRESH_TOKEN_MESSAGE = "Refresh token not found"


def _cookie_kwargs() -> dict[str, object]:
    cfg = current_app.config
    return {
        "path": cfg.get("REFRESH_COOKIE_PATH", "/api/v1/auth"),
        "domain": cfg.get("REFRESH_COOKIE_DOMAIN") or None,
        "secure": bool(cfg.get("REFRESH_COOKIE_SECURE", False)),
        "httponly": True,
        "samesite": cfg.get("REFRESH_COOKIE_SAMESITE", "Lax"),
    }


def cookie_name() -> str:
    return str(current_app.config.get("REFRESH_COOKIE_NAME", "refresh_token"))


def read_refresh_cookie() -> str:
    """Return the refresh secret from the request cookie.

    :raises Unauthorized: If the cookie is absent or empty.
    """
    value = request.cookies.get(cookie_name())
    if not value:
        raise Unauthorized(MISSING_REFRESH_TOKEN_MESSAGE, code="missing_refresh_token")
    return value


def set_refresh_cookie(response: Response, secret: str) -> Response:
    """Attach the refresh secret with ``Max-Age`` equal to the refresh TTL."""
    response.set_cookie(
        cookie_name(),
        secret,
        max_age=int(current_app.config["JWT_REFRESH_TOKEN_TTL"]),
        **_cookie_kwargs(),  # type: ignore[arg-type]
    )
    return response


def clear_refresh_cookie(response: Response) -> Response:
    """Expire the refresh cookie with the same path/domain it was set with."""
    response.delete_cookie(cookie_name(), **_cookie_kwargs())  # type: ignore[arg-type]
    return response
