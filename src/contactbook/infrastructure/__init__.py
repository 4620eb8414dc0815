"""Infrastructure layer: concrete implementations of application ports."""

from contactbook.infrastructure.database import (
    DEFAULT_DATABASE_URL,
    Database,
    create_contacts_engine,
    database_url_from_env,
)
from contactbook.infrastructure.memory_store import InMemoryContactStore
from contactbook.infrastructure.persistence.sql_store import SqlContactStore

__all__ = [
    "DEFAULT_DATABASE_URL",
    "Database",
    "InMemoryContactStore",
    "SqlContactStore",
    "create_contacts_engine",
    "database_url_from_env",
]
