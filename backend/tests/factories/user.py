"""Factory Boy definition for :class:`authsvc.models.user.User`."""

from __future__ import annotations

import factory

from authsvc.infra.hashing import WerkzeugPasswordHasher
from authsvc.models.user import User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Secret123!"

# Same cheap method as the testing config
_hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


class UserFactory(BaseFactory):
    """
    Build persisted :class:`User` instances.

    Pass ``password="..."`` to choose the plaintext; only its hash is stored.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker("name")
    password_hash = factory.LazyAttribute(lambda o: _hasher.hash(o.password))
    is_active = True
