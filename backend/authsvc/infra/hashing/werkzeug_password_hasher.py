from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from authsvc.services._shared.ports import PasswordHasher

DEFAULT_METHOD = "scrypt"


@dataclass(slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adapter over :mod:`werkzeug.security`.

    The output has the form ``method$salt$hash``; the salt is generated per
    call, so hashing the same password twice yields different strings.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:600000"``.
    :param salt_length: Length of the generated salt.
    """

    method: str = DEFAULT_METHOD
    salt_length: int = 16

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(plaintext, method=self.method, salt_length=self.salt_length)

    def compare(self, plaintext: str, hashed: str) -> bool:
        if not isinstance(plaintext, str) or not isinstance(hashed, str) or not hashed:
            return False
        try:
            return check_password_hash(hashed, plaintext)
        except (ValueError, OverflowError):
            # Unknown method prefix or a cost parameter hashlib cannot take
            return False
