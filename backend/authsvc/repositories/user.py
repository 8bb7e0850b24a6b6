"""User repository: lookups and account-state writes."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from authsvc.models.user import User, normalize_email
from authsvc.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never hashes or verifies passwords and never touches tokens; the
    Credential Service drives both through its ports.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == normalize_email(email))
        return bool(self.session.execute(stmt).first())

    # ---------------------------- State writes ----------------------------

    def touch_last_login(self, user_id: int, when: datetime) -> bool:
        """Stamp ``last_login_at`` with a single ``UPDATE``.

        :returns: ``True`` when a row was updated.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(last_login_at=when)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def set_active(self, user_id: int, active: bool) -> bool:
        """Activate or soft-deactivate an account.

        :returns: ``True`` when a row was updated.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(is_active=active)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)
