"""Factory Boy definition for :class:`authsvc.models.refresh_token.RefreshToken`."""

from __future__ import annotations

from datetime import timedelta

import factory

from authsvc.models.base import utcnow
from authsvc.models.refresh_token import RefreshToken
from authsvc.services._shared.ports import hash_refresh_token
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """
    Build persisted :class:`RefreshToken` rows.

    Pass ``secret="..."`` to control the plaintext; only its hash is stored.
    """

    class Meta:
        model = RefreshToken

    class Params:
        secret = factory.Sequence(lambda n: f"refresh-secret-{n}")

    id = None
    user_id = factory.LazyFunction(lambda: UserFactory().id)
    token_hash = factory.LazyAttribute(lambda o: hash_refresh_token(o.secret))
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))
    user_agent = "pytest"
    ip_address = "127.0.0.1"
    revoked = False
