"""Live query: a publish-subscribe channel of immutable contact snapshots.

A store owns one LiveQuery for its full, name-ordered contact list. Subscribers
get the current snapshot as soon as they subscribe and a fresh one after every
mutation that changes rows. Snapshots are tuples, so subscribers can hold on to
them without copying.
"""

import logging
import threading
from collections.abc import Callable

from contactbook.domain import Contact

logger = logging.getLogger(__name__)

Snapshot = tuple[Contact, ...]
Subscriber = Callable[[Snapshot], None]


class Subscription:
    """Handle returned by LiveQuery.subscribe. Cancel to stop deliveries."""

    def __init__(self, live: "LiveQuery", callback: Subscriber) -> None:
        self._live = live
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._live._detach(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()


class LiveQuery:
    """Continuously updated result of a query, pushed to any number of subscribers."""

    def __init__(
        self,
        loader: Callable[[], Snapshot],
        *,
        lock=None,
    ) -> None:
        # Stores pass their write lock so mutation and publication share one lock.
        self._loader = loader
        self._lock = lock or threading.RLock()
        self._subscriptions: list[Subscription] = []
        self._value: Snapshot | None = None
        self._stale = False

    @property
    def value(self) -> Snapshot:
        """Latest snapshot. Loaded on first access, and again after a failed refresh."""
        with self._lock:
            if self._value is None:
                self._value = tuple(self._loader())
                if self._stale:
                    # Subscribers missed the change whose refresh failed.
                    self._stale = False
                    self._publish(self._value)
            return self._value

    def subscribe(self, callback: Subscriber) -> Subscription:
        """Register callback and deliver the current snapshot to it right away.
        Nothing is registered if the snapshot cannot be loaded."""
        with self._lock:
            snapshot = self.value
            subscription = Subscription(self, callback)
            self._subscriptions.append(subscription)
            self._deliver(subscription, snapshot)
        return subscription

    def refresh(self) -> Snapshot:
        """Reload the snapshot and publish it. Loader errors propagate and drop the
        cached snapshot, so the next read reloads and republishes."""
        with self._lock:
            try:
                snapshot = tuple(self._loader())
            except Exception:
                self._value = None
                self._stale = True
                raise
            self._value = snapshot
            self._stale = False
            self._publish(snapshot)
            return snapshot

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _publish(self, snapshot: Snapshot) -> None:
        for subscription in list(self._subscriptions):
            self._deliver(subscription, snapshot)

    def _detach(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @staticmethod
    def _deliver(subscription: Subscription, snapshot: Snapshot) -> None:
        if not subscription.active:
            return
        try:
            subscription._callback(snapshot)
        except Exception:
            logger.exception("Live query subscriber failed; continuing delivery")
