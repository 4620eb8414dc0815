"""In-memory implementation of ContactStore (no DB)."""

import threading

from contactbook.application.live import LiveQuery, Snapshot
from contactbook.domain import Contact, sort_key


def _contact_id(contact: Contact | int) -> int:
    return contact.id if isinstance(contact, Contact) else contact


class InMemoryContactStore:
    """Stores contacts in a dict keyed by id. Same semantics as the SQL store, lost on exit."""

    def __init__(self, contacts: list[Contact] | None = None) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[int, Contact] = {}
        for contact in contacts or []:
            self._by_id.setdefault(contact.id, contact)
        self._live = LiveQuery(self._load_all, lock=self._lock)

    def _load_all(self) -> Snapshot:
        return tuple(sorted(self._by_id.values(), key=sort_key))

    def insert(self, contact: Contact) -> bool:
        with self._lock:
            if contact.id in self._by_id:
                return False
            self._by_id[contact.id] = contact
            self._live.refresh()
            return True

    def update(self, contact: Contact) -> bool:
        with self._lock:
            if contact.id not in self._by_id:
                return False
            self._by_id[contact.id] = contact
            self._live.refresh()
            return True

    def delete(self, contact: Contact | int) -> bool:
        with self._lock:
            if self._by_id.pop(_contact_id(contact), None) is None:
                return False
            self._live.refresh()
            return True

    def get_by_id(self, contact_id: int) -> Contact | None:
        with self._lock:
            return self._by_id.get(contact_id)

    def query_all(self) -> LiveQuery:
        return self._live
