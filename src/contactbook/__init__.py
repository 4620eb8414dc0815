"""
Contactbook core: clean-architecture layout.

- domain: the Contact entity. No outer dependencies.
- application: ContactService, ContactRepository, ports (ContactStore), live queries, permission gate.
- infrastructure: adapters (SqlContactStore, InMemoryContactStore) and the Database handle.
"""

from contactbook.application import (
    READ_CONTACTS,
    ContactbookError,
    ContactRepository,
    ContactService,
    ContactStore,
    LiveQuery,
    PermissionDenied,
    PermissionGate,
    Snapshot,
    StorageError,
    Subscription,
)
from contactbook.domain import Contact
from contactbook.infrastructure import Database, InMemoryContactStore, SqlContactStore

__all__ = [
    "READ_CONTACTS",
    "Contact",
    "ContactRepository",
    "ContactService",
    "ContactStore",
    "ContactbookError",
    "Database",
    "InMemoryContactStore",
    "LiveQuery",
    "PermissionDenied",
    "PermissionGate",
    "Snapshot",
    "SqlContactStore",
    "StorageError",
    "Subscription",
]
