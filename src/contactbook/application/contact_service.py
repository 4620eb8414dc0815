"""Contact service: dispatches mutations to a background worker and exposes the live list."""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from contactbook.application.live import LiveQuery
from contactbook.application.permissions import PermissionGate
from contactbook.application.repository import ContactRepository
from contactbook.domain import Contact

logger = logging.getLogger(__name__)


class ContactService:
    """
    Bridge between an event-driven presentation layer and the repository.
    Mutations return a Future immediately; effects show up on all_contacts.
    One instance per session: construct at session start, close at session end.
    """

    def __init__(
        self,
        repository: ContactRepository,
        permission_gate: PermissionGate,
        *,
        executor: Executor | None = None,
    ) -> None:
        permission_gate.require()
        self._repo = repository
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="contacts-io"
        )
        self._closed = False

    @property
    def all_contacts(self) -> LiveQuery:
        """Live, name-ordered contact list."""
        return self._repo.all_contacts

    def insert(self, contact: Contact) -> Future:
        """Insert unless the id exists. Future resolves to True if a row was written."""
        return self._dispatch("insert", self._repo.insert, contact)

    def update(self, contact: Contact) -> Future:
        """Replace by id. Future resolves to False when no such contact exists."""
        return self._dispatch("update", self._repo.update, contact)

    def delete(self, contact: Contact | int) -> Future:
        """Delete by id. Future resolves to False when no such contact exists."""
        return self._dispatch("delete", self._repo.delete, contact)

    def contacts(self) -> list[Contact]:
        """Return the current snapshot of all contacts, ordered by name."""
        return list(self.all_contacts.value)

    def get_contact(self, contact_id: int) -> Contact | None:
        return self._repo.get_by_id(contact_id)

    def close(self) -> None:
        """Stop accepting mutations. Waits for queued ones when the executor is ours."""
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "ContactService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _dispatch(self, operation: str, fn, contact) -> Future:
        if self._closed:
            raise RuntimeError("ContactService is closed")
        future = self._executor.submit(fn, contact)
        future.add_done_callback(lambda f: _log_failure(operation, contact, f))
        return future


def _log_failure(operation: str, contact, future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        contact_id = contact.id if isinstance(contact, Contact) else contact
        logger.error(
            "Contact %s failed for id %s",
            operation,
            contact_id,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
