"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from authsvc.core.logger import ensure_request_id
from authsvc.services._shared.base import ServiceContext
from authsvc.services._shared.ports import DeviceInfo
from authsvc.services.auth.service import CredentialService
from authsvc.services.auth.wiring import build_credential_service

F = TypeVar("F", bound=Callable[..., Any])

USER_AGENT_MAX_LENGTH = 512


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def service_context(actor_id: int | None = None) -> ServiceContext:
    """Capture the request id (and the verified actor, if any) for services."""

    return ServiceContext(request_id=ensure_request_id(), actor_id=actor_id)


def current_user_id() -> str:
    """Return the ``sub`` claim of the verified access token."""

    return str(get_jwt_identity())


def get_credential_service(actor_id: int | None = None) -> CredentialService:
    """Return a request-scoped :class:`CredentialService`."""

    return build_credential_service(ctx=service_context(actor_id))


def device_info() -> DeviceInfo:
    """Best-effort client metadata (``remote_addr`` is ProxyFix-aware)."""

    user_agent = request.headers.get("User-Agent") or None
    if user_agent:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
    return DeviceInfo(user_agent=user_agent, ip_address=request.remote_addr or None)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
