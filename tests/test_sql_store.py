"""Tests specific to SqlContactStore: table layout, durability, storage failures."""

import pytest
from sqlalchemy import inspect

from contactbook.application import StorageError
from contactbook.domain import Contact
from contactbook.infrastructure import SqlContactStore, create_contacts_engine
from contactbook.infrastructure.persistence.sql_store import metadata


@pytest.fixture
def engine():
    engine = create_contacts_engine("sqlite://")
    yield engine
    engine.dispose()


def test_table_layout(engine) -> None:
    SqlContactStore(engine)
    columns = {c["name"]: c for c in inspect(engine).get_columns("contacts")}
    assert list(columns) == ["id", "name", "phoneNumber", "imageReference"]
    assert columns["imageReference"]["nullable"] is True
    assert columns["name"]["nullable"] is False
    pk = inspect(engine).get_pk_constraint("contacts")
    assert pk["constrained_columns"] == ["id"]


def test_null_image_reference_stored_as_null(engine) -> None:
    store = SqlContactStore(engine)
    store.insert(Contact(id=1, name="Bob", phone_number="555-1000"))
    with engine.connect() as conn:
        value = conn.exec_driver_sql(
            "SELECT imageReference FROM contacts WHERE id = 1"
        ).scalar_one()
    assert value is None


def test_contacts_survive_reopen(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'contacts.db'}"
    first = create_contacts_engine(url)
    SqlContactStore(first).insert(Contact(id=7, name="Carol", phone_number="555-7000"))
    first.dispose()

    second = create_contacts_engine(url)
    try:
        store = SqlContactStore(second)
        assert store.query_all().value == (
            Contact(id=7, name="Carol", phone_number="555-7000"),
        )
    finally:
        second.dispose()


def test_storage_failure_propagates_and_live_query_recovers(engine) -> None:
    store = SqlContactStore(engine)
    store.insert(Contact(id=1, name="Bob"))
    received = []
    subscription = store.query_all().subscribe(received.append)

    with engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE contacts")

    with pytest.raises(StorageError) as excinfo:
        store.insert(Contact(id=2, name="Ann"))
    assert excinfo.value.__cause__ is not None
    with pytest.raises(StorageError):
        store.get_by_id(1)

    # Last good snapshot and subscription survive the failure.
    assert store.query_all().value == (Contact(id=1, name="Bob"),)
    assert subscription.active
    assert len(received) == 1

    metadata.create_all(engine)
    assert store.insert(Contact(id=2, name="Ann")) is True
    assert received[-1] == (Contact(id=2, name="Ann"),)


def test_concurrent_inserts_are_all_applied(tmp_path) -> None:
    from concurrent.futures import ThreadPoolExecutor

    engine = create_contacts_engine(f"sqlite:///{tmp_path / 'contacts.db'}")
    try:
        store = SqlContactStore(engine)
        contacts = [Contact(id=i, name=f"Person {i:03d}") for i in range(50)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(store.insert, contacts))
        assert all(results)
        assert [c.id for c in store.query_all().value] == list(range(50))
    finally:
        engine.dispose()


def test_snapshot_reload_failure_after_commit_recovers(engine, monkeypatch) -> None:
    store = SqlContactStore(engine)
    store.insert(Contact(id=1, name="Bob"))
    received = []
    store.query_all().subscribe(received.append)

    live = store.query_all()
    real_loader = live._loader
    calls = []

    def fail_once():
        calls.append(1)
        if len(calls) == 1:
            raise StorageError("Could not read contacts")
        return real_loader()

    monkeypatch.setattr(live, "_loader", fail_once)

    with pytest.raises(StorageError):
        store.insert(Contact(id=2, name="Ann"))
    # The row was committed even though the snapshot could not be published.
    assert store.get_by_id(2) == Contact(id=2, name="Ann")

    assert [c.name for c in store.query_all().value] == ["Ann", "Bob"]
    assert [c.name for c in received[-1]] == ["Ann", "Bob"]
