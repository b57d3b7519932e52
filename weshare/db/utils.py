from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Optional, Type, TypeVar

from sqlalchemy.orm import Session as DbSession

from .database import Database, get_database

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


@contextmanager
def get_db(database: Optional[Database] = None) -> Generator[DbSession, None, None]:
    """Read-only session; nothing is committed."""
    session = (database or get_database()).session()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction_scope(database: Optional[Database] = None) -> Generator[DbSession, None, None]:
    session = (database or get_database()).session()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.debug("Rolled back transaction after %s", type(exc).__name__)
        raise
    finally:
        session.close()


def owned_record(
    session: DbSession,
    model: Type[RecordT],
    record_id: Optional[str],
    owner_id: str,
) -> Optional[RecordT]:
    """Fetch a row by primary key, treating rows of other owners as missing."""
    if not record_id:
        return None
    record = session.get(model, record_id)
    if record is None or getattr(record, "user_id", None) != owner_id:
        return None
    return record


__all__ = ["get_db", "owned_record", "transaction_scope"]
