"""Helpers for committing through the SQLAlchemy session.

SQLite holds a write lock for the whole transaction, so two requests that
write at the same moment can see ``database is locked``. :func:`safe_commit`
retries those commits with exponential backoff. :func:`persistence_guard`
turns any remaining SQLAlchemy failure into a retryable
:class:`~quizflow_app.core.error_handlers.PersistenceError` after rolling
the session back.
"""

from __future__ import annotations

import time
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.session import Session

from ..core.error_handlers import PersistenceError
from ..core.logging_config import get_logger

logger = get_logger('db')

LOCK_MESSAGES = ("database is locked", "database is busy")


def _is_lock_error(error: OperationalError) -> bool:
    message = str(error).lower()
    return any(token in message for token in LOCK_MESSAGES)


def safe_commit(
    session: Session,
    retries: int = 5,
    initial_delay: float = 0.1,
) -> None:
    """Commit, retrying only while SQLite reports a lock.

    Raises:
        OperationalError: after ``retries`` lock failures, or immediately
            for any other operational error.
    """

    delay = initial_delay
    for attempt in range(retries):
        try:
            session.commit()
            return
        except OperationalError as exc:  # pragma: no cover - retriable path
            session.rollback()
            if attempt == retries - 1 or not _is_lock_error(exc):
                raise
            logger.warning("Commit hit a lock (attempt %s/%s), retrying in %.2fs", attempt + 1, retries, delay)
            time.sleep(delay)
            delay *= 2


@contextmanager
def persistence_guard(session: Session, operation: str):
    """Run a unit of store work, mapping SQLAlchemy failures to PersistenceError."""

    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Store operation '%s' failed: %s", operation, exc, exc_info=True)
        raise PersistenceError(operation=operation) from exc
