from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing.

    Implementations embed the salt (and the algorithm parameters) in the
    returned string, so ``compare`` needs nothing but the stored value.
    """

    def hash(self, plaintext: str) -> str:
        """Return a salted one-way hash of ``plaintext``.

        :raises ValueError: If ``plaintext`` is empty.
        """

    def compare(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``.

        Never raises on mismatch; a malformed hash compares as ``False``.
        """
