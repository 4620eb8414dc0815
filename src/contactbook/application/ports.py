"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from contactbook.application.live import LiveQuery
from contactbook.domain import Contact


class ContactStore(Protocol):
    """Durable table of contacts keyed by caller-assigned id."""

    def insert(self, contact: Contact) -> bool:
        """Add the contact unless its id is taken. Returns True if a row was written."""
        ...

    def update(self, contact: Contact) -> bool:
        """Replace the row with contact.id. Returns False (no-op) if there is none."""
        ...

    def delete(self, contact: Contact | int) -> bool:
        """Remove the row with the given contact's id. Returns False if absent."""
        ...

    def get_by_id(self, contact_id: int) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def query_all(self) -> LiveQuery:
        """Return the live, name-ordered list of all contacts."""
        ...
