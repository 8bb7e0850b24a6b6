"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Apply :class:`werkzeug.middleware.proxy_fix.ProxyFix` when enabled.

    ``request.remote_addr`` feeds the device metadata stored with each
    refresh token, so behind a reverse proxy it must come from
    ``X-Forwarded-For``. Controlled by ``USE_PROXYFIX`` (defaults to ``True``);
    a single trusted hop is assumed.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)
