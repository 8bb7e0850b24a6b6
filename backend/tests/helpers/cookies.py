"""Parse ``Set-Cookie`` headers emitted by the auth endpoints."""

from __future__ import annotations

from http.cookies import SimpleCookie

REFRESH_COOKIE = "refresh_token"


def refresh_cookie(resp) -> dict[str, str | bool]:
    """Return the refresh cookie's value and attributes from ``resp``.

    Flag attributes (``HttpOnly``, ``Secure``) map to ``True`` when present.

    Raises
    ------
    AssertionError
        If the response does not set the refresh cookie.
    """

    for header in resp.headers.getlist("Set-Cookie"):
        jar = SimpleCookie()
        jar.load(header)
        if REFRESH_COOKIE not in jar:
            continue
        morsel = jar[REFRESH_COOKIE]
        attrs: dict[str, str | bool] = {"value": morsel.value}
        for key in ("path", "max-age", "samesite", "expires", "domain"):
            if morsel[key]:
                attrs[key] = morsel[key]
        lowered = header.lower()
        attrs["httponly"] = "httponly" in lowered
        attrs["secure"] = "; secure" in lowered
        return attrs
    raise AssertionError("refresh cookie was not set")
