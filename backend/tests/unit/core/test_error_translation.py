"""Unit tests for mapping service errors to API problems."""

from __future__ import annotations

import pytest

from authsvc.core.errors import APIError, Conflict, InternalError, Unauthorized
from authsvc.services._shared.base import BaseService
from authsvc.services._shared.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    OperationFailedError,
    RegistrationFailedError,
    UserInactiveError,
)


@pytest.mark.parametrize(
    "error, api_cls, status",
    [
        (DuplicateEmailError(), Conflict, 409),
        (InvalidCredentialsError(), Unauthorized, 401),
        (InvalidRefreshTokenError(), Unauthorized, 401),
        (UserInactiveError(), Unauthorized, 401),
        (InvalidTokenError(), Unauthorized, 401),
        (RegistrationFailedError(), InternalError, 500),
        (OperationFailedError("Logout failed"), InternalError, 500),
        (InvalidInputError("Name must be at least 3 characters."), APIError, 400),
    ],
)
def test_translate_service_errors(error, api_cls, status):
    translated = BaseService.translate_exceptions(error)

    assert isinstance(translated, api_cls)
    assert translated.status_code == status
    assert translated.code == error.code
    assert translated.message == error.message


def test_unrelated_exceptions_pass_through():
    err = KeyError("x")

    assert BaseService.translate_exceptions(err) is err
