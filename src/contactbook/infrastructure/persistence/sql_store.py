"""SQL implementation of ContactStore (SQLAlchemy Core over SQLite).

One table, one row per contact:
contacts(id INTEGER PRIMARY KEY, name TEXT, phoneNumber TEXT, imageReference TEXT NULL).
Ids are supplied by the caller, never generated. Every write runs in its own
transaction under the store lock, and the live query is refreshed after commit.
"""

import threading

from sqlalchemy import Column, Integer, MetaData, Table, Text, delete, select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from contactbook.application.errors import StorageError
from contactbook.application.live import LiveQuery, Snapshot
from contactbook.domain import Contact

metadata = MetaData()

contacts_table = Table(
    "contacts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", Text, nullable=False),
    Column("phoneNumber", Text, nullable=False, key="phone_number"),
    Column("imageReference", Text, nullable=True, key="image_reference"),
)

_SELECT_ALL = select(contacts_table).order_by(
    contacts_table.c.name.asc(), contacts_table.c.id.asc()
)


def _contact_id(contact: Contact | int) -> int:
    return contact.id if isinstance(contact, Contact) else contact


def _row_to_contact(row) -> Contact:
    m = row._mapping
    return Contact(
        id=m[contacts_table.c.id],
        name=m[contacts_table.c.name],
        phone_number=m[contacts_table.c.phone_number] or "",
        image_reference=m[contacts_table.c.image_reference],
    )


class SqlContactStore:
    """Stores contacts in a relational table. Creates the table on construction if missing."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._lock = threading.RLock()
        try:
            metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StorageError("Could not create contacts table") from exc
        self._live = LiveQuery(self._load_all, lock=self._lock)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _load_all(self) -> Snapshot:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(_SELECT_ALL).all()
        except SQLAlchemyError as exc:
            raise StorageError("Could not read contacts") from exc
        return tuple(_row_to_contact(row) for row in rows)

    def _write(self, statement, action: str) -> bool:
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    changed = conn.execute(statement).rowcount > 0
            except SQLAlchemyError as exc:
                raise StorageError(f"Could not {action} contact") from exc
            if changed:
                self._live.refresh()
            return changed

    def insert(self, contact: Contact) -> bool:
        statement = (
            insert(contacts_table)
            .values(
                id=contact.id,
                name=contact.name,
                phone_number=contact.phone_number,
                image_reference=contact.image_reference,
            )
            .on_conflict_do_nothing(index_elements=[contacts_table.c.id])
        )
        return self._write(statement, "insert")

    def update(self, contact: Contact) -> bool:
        statement = (
            update(contacts_table)
            .where(contacts_table.c.id == contact.id)
            .values(
                name=contact.name,
                phone_number=contact.phone_number,
                image_reference=contact.image_reference,
            )
        )
        return self._write(statement, "update")

    def delete(self, contact: Contact | int) -> bool:
        statement = delete(contacts_table).where(
            contacts_table.c.id == _contact_id(contact)
        )
        return self._write(statement, "delete")

    def get_by_id(self, contact_id: int) -> Contact | None:
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    select(contacts_table).where(contacts_table.c.id == contact_id)
                ).first()
        except SQLAlchemyError as exc:
            raise StorageError("Could not read contact") from exc
        if row is None:
            return None
        return _row_to_contact(row)

    def query_all(self) -> LiveQuery:
        return self._live
