"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from boxoffice.core.extensions import db
from boxoffice.repositories import AccountRepository, RefreshTokenRepository
from boxoffice.uow.base import UnitOfWork

# Dialects that understand ``SET TRANSACTION READ ONLY``
_READ_ONLY_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.accounts = AccountRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW on the Flask-scoped session.

    Commits when the ``with`` block exits cleanly, rolls back otherwise.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session or db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
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
    Read-only UoW on the Flask-scoped session.

    - Refuses ORM flushes while active.
    - When it opens the transaction itself, issues ``SET TRANSACTION READ ONLY``
      on PostgreSQL and MySQL/MariaDB and rolls back on exit. SQLite relies on
      the flush guard alone.
    - When attached to a transaction already in progress, leaves it untouched.
    - ``commit()`` raises :class:`RuntimeError`.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session or db.session)
        self._owns_transaction = False
        self._guard_target: Session | None = None

    def _refuse_flush(self, session: Session, flush_context: Any, instances: Any) -> None:
        raise RuntimeError("Write attempted inside a read-only unit of work.")

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # scoped_session has no in_transaction(); events must target the thread's session
        target = self.session() if isinstance(self.session, scoped_session) else self.session
        self._owns_transaction = not target.in_transaction()
        if self._owns_transaction:
            dialect = target.get_bind().dialect.name
            if dialect in _READ_ONLY_DIALECTS:
                try:
                    target.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError:
                    target.rollback()
        event.listen(target, "before_flush", self._refuse_flush)
        self._guard_target = target
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._guard_target is not None:
                event.remove(self._guard_target, "before_flush", self._refuse_flush)
                self._guard_target = None
        finally:
            if self._owns_transaction:
                self.rollback()

    def commit(self) -> None:
        raise RuntimeError("commit() is not allowed in a read-only unit of work.")

    def rollback(self) -> None:
        self.session.rollback()
