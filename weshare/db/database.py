from __future__ import annotations

from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_settings


def _sqlite_engine_options(url: str) -> dict:
    database = make_url(url).database
    if not database or database == ":memory:":
        # One shared connection, otherwise every session sees an empty database.
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
    return {"connect_args": {"check_same_thread": False, "timeout": 30}}


class Database:
    """Engine plus session factory for the local mirror of the site tables."""

    def __init__(self, url: Optional[str] = None) -> None:
        self.url = url or get_settings().database_url
        self.is_sqlite = self.url.startswith("sqlite")
        options = _sqlite_engine_options(self.url) if self.is_sqlite else {"pool_pre_ping": True}
        self.engine = create_engine(self.url, future=True, **options)
        if self.is_sqlite:
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
            future=True,
        )

    def session(self):
        return self.SessionLocal()

    def ping(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()


def _set_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        # Contacts and analytics rows cascade with their site.
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA busy_timeout=30000;")
    finally:
        cursor.close()


_database: Optional[Database] = None


def get_database() -> Database:
    global _database
    if _database is None:
        _database = Database()
    return _database


def reset_database() -> None:
    global _database
    if _database is not None:
        _database.dispose()
    _database = None


__all__ = ["Database", "get_database", "reset_database"]
