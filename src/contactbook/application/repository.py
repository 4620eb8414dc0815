"""Contact repository: domain-facing entry point over a ContactStore."""

import logging

from contactbook.application.live import LiveQuery
from contactbook.application.ports import ContactStore
from contactbook.domain import Contact

logger = logging.getLogger(__name__)


class ContactRepository:
    """Delegates to the store. Blocking; run mutations off the caller's thread."""

    def __init__(self, store: ContactStore) -> None:
        self._store = store

    @property
    def all_contacts(self) -> LiveQuery:
        return self._store.query_all()

    def insert(self, contact: Contact) -> bool:
        logger.debug("Inserting contact with id %s", contact.id)
        return self._store.insert(contact)

    def update(self, contact: Contact) -> bool:
        logger.debug("Updating contact with id %s", contact.id)
        return self._store.update(contact)

    def delete(self, contact: Contact | int) -> bool:
        logger.debug(
            "Deleting contact with id %s",
            contact.id if isinstance(contact, Contact) else contact,
        )
        return self._store.delete(contact)

    def get_by_id(self, contact_id: int) -> Contact | None:
        return self._store.get_by_id(contact_id)
