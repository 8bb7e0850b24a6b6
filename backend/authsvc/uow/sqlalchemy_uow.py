"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from authsvc.core.extensions import db
from authsvc.repositories import RefreshTokenRepository, UserRepository
from authsvc.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent transaction.
    """

    def __init__(self) -> None:
        """Initialise the Unit of Work with a shared SQLAlchemy session.

        All repositories receive the same session instance so that they operate
        within the identical transactional context.
        """
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Applies ``SET TRANSACTION READ ONLY`` on dialects that support it
      (PostgreSQL, MySQL/MariaDB).
    - Installs portable write-guards and always rolls back on exit.
    - Disallows ``commit()``.

    Notes
    -----
    *SQLite*: the read-only flag is not supported; write-guards still prevent
    writes.
    """

    # Guard patterns for portable "no write" at driver level
    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    )
    _READONLY_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(session=db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Enter a read-only scope on the session's current transaction.

        ``SET TRANSACTION READ ONLY`` is only valid as the first statement of a
        transaction, so it is issued when the session has not begun one yet.
        """
        fresh = not self._concrete_session().in_transaction()
        self._conn = self.session.connection()
        dialect = self._conn.dialect.name

        if fresh and self.enforce_db_readonly and dialect in self._READONLY_DIALECTS:
            try:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
            except SQLAlchemyError as exc:
                current_app.logger.warning(
                    "SET TRANSACTION READ ONLY failed (%s). Falling back to guards-only.", exc
                )

        self._install_listeners()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Remove guards, then end the transaction with a rollback."""
        try:
            self._remove_listeners()
        finally:
            self._conn = None
            self.rollback()

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        """Rollback the current transaction if active."""
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _concrete_session(self) -> Session:
        """Resolve Flask-SQLAlchemy's scoped proxy to the session of this scope."""
        return self.session() if isinstance(self.session, scoped_session) else self.session

    def _install_listeners(self) -> None:
        """Install ORM/db-level listeners to prevent any write attempt."""
        if self._listeners_installed:
            return

        # 1) Block ORM flushes that would emit DML.
        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        # Bind to the concrete session; a scoped_session target would guard every
        # session of the factory.
        session = self._concrete_session()
        event.listen(session, "before_flush", _before_flush)

        # 2) Block raw DML/DDL at cursor level (covers text() / core emits).
        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        # Keep refs for removal
        self._ro__before_flush = _before_flush
        self._ro__before_cursor_execute = _before_cursor_execute
        self._ro__session = session
        self._ro__target = target
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        """Detach previously installed listeners."""
        if not self._listeners_installed:
            return

        with suppress(Exception):
            event.remove(self._ro__session, "before_flush", self._ro__before_flush)

        with suppress(Exception):
            event.remove(self._ro__target, "before_cursor_execute", self._ro__before_cursor_execute)

        self._listeners_installed = False
