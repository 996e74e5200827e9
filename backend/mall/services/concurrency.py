# Overview: Transaction helpers: row locking, retry on contention, and the unit of work.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; UnitOfWork takes the write
    lock up front with BEGIN IMMEDIATE instead.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Each attempt starts from a rolled back
    session, so func must re-read everything it depends on.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


class UnitOfWork:
    """
    One isolated, all-or-nothing transaction.

        with UnitOfWork() as uow:
            row = uow.locked(query).first()
            uow.add(obj)

    Leaving the block commits; any exception (including a failed commit)
    rolls everything back and propagates.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def __enter__(self) -> "UnitOfWork":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
            return False
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise
        return False

    def begin(self) -> None:
        # SQLite serializes writers at BEGIN IMMEDIATE; other backends rely
        # on the row locks taken by locked().
        if self.session.get_bind().dialect.name == "sqlite":
            self.session.execute(text("BEGIN IMMEDIATE"))

    def locked(self, query):
        return lock_for_update(query)

    def add(self, obj) -> None:
        self.session.add(obj)

    def delete(self, obj) -> None:
        self.session.delete(obj)

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
