"""Database handle: owns the SQLAlchemy engine and the contact store built on it.

Construct one Database per process (or session) and pass it to whoever needs the
store. The engine and store are created on first access, exactly once even when
several threads race for them.
"""

import logging
import os
import threading

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from contactbook.infrastructure.persistence.sql_store import SqlContactStore

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///contact-database.db"


def database_url_from_env() -> str:
    return os.environ.get("CONTACTS_DATABASE_URL", DEFAULT_DATABASE_URL).strip()


def create_contacts_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for url. SQLite connections are shareable across threads;
    an in-memory SQLite database uses one static connection so all threads see it."""
    parsed = make_url(url)
    kwargs: dict = {"echo": echo}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(parsed, **kwargs)


class Database:
    """Explicit handle to the contact database."""

    def __init__(self, url: str | None = None, *, echo: bool = False) -> None:
        self.url = url or database_url_from_env()
        self._echo = echo
        self._lock = threading.Lock()
        self._engine: Engine | None = None
        self._store: SqlContactStore | None = None
        self._closed = False

    @property
    def store(self) -> SqlContactStore:
        store = self._store
        if store is not None:
            return store
        with self._lock:
            if self._closed:
                raise RuntimeError("Database is closed")
            if self._store is None:
                logger.info("Opening contact database")
                self._engine = create_contacts_engine(self.url, echo=self._echo)
                self._store = SqlContactStore(self._engine)
            return self._store

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._store = None

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
