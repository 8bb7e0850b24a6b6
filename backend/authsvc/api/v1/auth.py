"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from authsvc.api.cookies import clear_refresh_cookie, read_refresh_cookie, set_refresh_cookie
from authsvc.api.deps import (
    current_user_id,
    device_info,
    get_credential_service,
    json_response,
    require_auth,
    timing,
)
from authsvc.schemas import SignInSchema, SignUpResponseSchema, SignUpSchema, TokenResponseSchema
from authsvc.services.auth.dto import LogoutIn, RefreshIn, SignInIn, SignUpIn, TokenPairOut

bp = Blueprint("auth", __name__)

sign_up_schema = SignUpSchema()
sign_in_schema = SignInSchema()
sign_up_response_schema = SignUpResponseSchema()
token_schema = TokenResponseSchema()


def _token_response(pair: TokenPairOut):
    body = {
        "data": token_schema.dump(
            {
                "access_token": pair.access_token,
                "token_type": pair.token_type,
                "expires_in": pair.expires_in,
            }
        )
    }
    return set_refresh_cookie(json_response(body), pair.refresh_token)


@bp.post("/sign-up")
@timing
def sign_up():
    """Register a new account. No tokens are issued."""

    data = sign_up_schema.load(request.get_json(silent=True) or {})
    result = get_credential_service().sign_up(SignUpIn(**data))
    body = {"data": sign_up_response_schema.dump(result)}
    return json_response(body, status=201)


@bp.post("/sign-in")
@timing
def sign_in():
    """Authenticate credentials, return an access token and set the refresh cookie."""

    data = sign_in_schema.load(request.get_json(silent=True) or {})
    pair = get_credential_service().sign_in(SignInIn(**data), device_info())
    return _token_response(pair)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh cookie and return a new access token."""

    secret = read_refresh_cookie()
    pair = get_credential_service().refresh(RefreshIn(refresh_token=secret), device_info())
    return _token_response(pair)


@bp.post("/logout")
@timing
def logout():
    """Revoke the refresh token carried by the cookie and clear it."""

    secret = read_refresh_cookie()
    result = get_credential_service().logout(LogoutIn(refresh_token=secret))
    response = json_response({"data": {"message": result.message}})
    if result.clear_cookie:
        clear_refresh_cookie(response)
    return response


@bp.delete("/logout-all")
@require_auth
@timing
def logout_all():
    """Revoke every refresh token of the authenticated user."""

    user_id = current_user_id()
    actor_id = int(user_id) if user_id.isdigit() else None
    result = get_credential_service(actor_id).logout_all(user_id)
    body = {"data": {"message": result.message, "revoked": result.revoked_count}}
    return clear_refresh_cookie(json_response(body))
