"""Application layer: use cases, ports, live queries. Depends only on domain."""

from contactbook.application.contact_service import ContactService
from contactbook.application.errors import (
    ContactbookError,
    PermissionDenied,
    StorageError,
)
from contactbook.application.live import LiveQuery, Snapshot, Subscription
from contactbook.application.permissions import READ_CONTACTS, PermissionGate
from contactbook.application.ports import ContactStore
from contactbook.application.repository import ContactRepository

__all__ = [
    "READ_CONTACTS",
    "ContactRepository",
    "ContactService",
    "ContactStore",
    "ContactbookError",
    "LiveQuery",
    "PermissionDenied",
    "PermissionGate",
    "Snapshot",
    "StorageError",
    "Subscription",
]
