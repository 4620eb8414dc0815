"""Unit tests for LiveQuery and Subscription."""

import logging

import pytest

from contactbook.application import LiveQuery
from contactbook.domain import Contact


class _Source:
    def __init__(self) -> None:
        self.rows: list[Contact] = []
        self.loads = 0
        self.fail = False

    def load(self):
        self.loads += 1
        if self.fail:
            raise RuntimeError("disk unavailable")
        return tuple(self.rows)


def test_value_is_loaded_lazily_once() -> None:
    source = _Source()
    live = LiveQuery(source.load)
    assert source.loads == 0
    assert live.value == ()
    assert live.value == ()
    assert source.loads == 1


def test_subscribe_delivers_current_snapshot_then_updates() -> None:
    source = _Source()
    live = LiveQuery(source.load)
    received = []
    live.subscribe(received.append)
    assert received == [()]

    source.rows.append(Contact(id=1, name="Bob"))
    live.refresh()
    assert received[-1] == (Contact(id=1, name="Bob"),)
    assert isinstance(received[-1], tuple)


def test_cancel_stops_delivery_and_is_idempotent() -> None:
    live = LiveQuery(_Source().load)
    received = []
    sub = live.subscribe(received.append)
    assert live.subscriber_count() == 1
    sub.cancel()
    sub.cancel()
    assert not sub.active
    assert live.subscriber_count() == 0
    live.refresh()
    assert received == [()]


def test_subscription_context_manager_cancels() -> None:
    live = LiveQuery(_Source().load)
    with live.subscribe(lambda snapshot: None) as sub:
        assert sub.active
    assert not sub.active
    assert live.subscriber_count() == 0


def test_failing_subscriber_does_not_block_others(caplog) -> None:
    live = LiveQuery(_Source().load)
    received = []

    def broken(snapshot):
        raise ValueError("render failed")

    with caplog.at_level(logging.ERROR):
        live.subscribe(broken)
        live.subscribe(received.append)
        live.refresh()
    assert received == [(), ()]
    assert "subscriber failed" in caplog.text


def test_failed_refresh_reloads_on_next_read_and_republishes() -> None:
    source = _Source()
    source.rows.append(Contact(id=1, name="Bob"))
    live = LiveQuery(source.load)
    received = []
    live.subscribe(received.append)

    # The change lands in the source but publishing it fails.
    source.rows.append(Contact(id=2, name="Ann"))
    source.fail = True
    with pytest.raises(RuntimeError):
        live.refresh()
    assert live.subscriber_count() == 1
    assert len(received) == 1

    source.fail = False
    assert len(live.value) == 2
    assert len(received[-1]) == 2
    assert len(received) == 2

    # Later reads use the cache again without publishing.
    live.value
    assert len(received) == 2


def test_read_during_failure_raises_instead_of_serving_stale_data() -> None:
    source = _Source()
    live = LiveQuery(source.load)
    live.value
    source.fail = True
    with pytest.raises(RuntimeError):
        live.refresh()
    with pytest.raises(RuntimeError):
        live.value


def test_subscribe_that_cannot_load_registers_nothing() -> None:
    source = _Source()
    source.fail = True
    live = LiveQuery(source.load)
    received = []
    with pytest.raises(RuntimeError):
        live.subscribe(received.append)
    assert live.subscriber_count() == 0

    source.fail = False
    live.refresh()
    assert received == []
