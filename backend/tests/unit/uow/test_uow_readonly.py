import pytest
from sqlalchemy import text
from sqlalchemy.orm import scoped_session

from authsvc.models.user import User
from authsvc.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from authsvc.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("UPDATE users SET is_active = 0 WHERE email = :email"),
                {"email": "x@example.com"},
            )

    def test_allows_reads(self, session):
        user = UserFactory()

        with ROuow() as uow:
            assert uow.users.get_by_email(user.email) is not None
            assert uow.users.get(user.id).email == user.email

    def test_enters_through_scoped_session_proxy(self, session):
        """
        The RO UoW wraps Flask-SQLAlchemy's scoped_session and must resolve it
        both inside and outside an already open transaction.
        """
        assert isinstance(ROuow().session, scoped_session)
        session.remove()
        with ROuow() as uow:
            assert uow.users.get_by_email("nobody@example.com") is None

        session.execute(text("SELECT 1"))
        assert session().in_transaction()
        with ROuow() as uow:
            assert uow.users.exists_by_email("nobody@example.com") is False

    def test_disallows_commit(self, session):
        """
        RO UoW must reject commit().
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, session):
        user_id = UserFactory(email="keep@example.com").id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            assert uow.users.get(user_id).email == "keep@example.com"

    def test_guards_are_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        assert session.query(User).count() == 1


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build(email="new@example.com"))

        session.remove()
        assert session.query(User).filter_by(email="new@example.com").count() == 1

    def test_rolls_back_on_error(self, session):
        with pytest.raises(ValueError), RWuow() as uow:
            uow.users.add(UserFactory.build(email="lost@example.com"))
            raise ValueError("boom")

        assert session.query(User).filter_by(email="lost@example.com").count() == 0
