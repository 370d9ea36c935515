"""Push delivery of a day's entries after committed mutations."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from food_tracker.domain.entries import FoodEntry
from food_tracker.services.queries import QueryService

logger = logging.getLogger(__name__)

EntriesCallback = Callable[[list[FoodEntry]], None]


@dataclass(eq=False)
class Subscription:
    """Handle for a callback registered against one day."""

    date: int
    callback: EntriesCallback
    _hub: "LiveEntries"
    active: bool = True

    def cancel(self) -> None:
        """Stop delivering entries to the callback."""
        if self.active:
            self.active = False
            self._hub.discard(self)


@dataclass
class LiveEntries:
    """Notifies subscribers with fresh day snapshots after each commit."""

    query_service: QueryService
    _subscriptions: dict[int, list[Subscription]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def subscribe(self, date: int, callback: EntriesCallback) -> Subscription:
        """Register a callback for a day and deliver its current entries."""
        subscription = Subscription(date=date, callback=callback, _hub=self)
        with self._lock:
            self._subscriptions.setdefault(date, []).append(subscription)
        self._deliver(subscription, self.query_service.entries_for_date(date))
        return subscription

    def discard(self, subscription: Subscription) -> None:
        """Remove a subscription; unknown subscriptions are ignored."""
        with self._lock:
            subscribers = self._subscriptions.get(subscription.date, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscriptions.pop(subscription.date, None)

    def subscriber_count(self, date: int) -> int:
        """Return how many active subscriptions watch a day."""
        with self._lock:
            return len(self._subscriptions.get(date, []))

    def notify(self, date: int) -> None:
        """Push the current entries of a day to its subscribers."""
        with self._lock:
            subscribers = list(self._subscriptions.get(date, []))
        if not subscribers:
            return
        try:
            entries = self.query_service.entries_for_date(date)
        except Exception:
            logger.exception("Failed to refresh entries for day %d", date)
            return
        for subscription in subscribers:
            self._deliver(subscription, entries)

    @staticmethod
    def _deliver(subscription: Subscription, entries: list[FoodEntry]) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(list(entries))
        except Exception:
            logger.exception("Entries subscriber failed for day %d", subscription.date)


@dataclass
class DaySelector:
    """Follows a single selected day, replacing the subscription on change."""

    live: LiveEntries
    callback: EntriesCallback
    _current: Subscription | None = None

    @property
    def date(self) -> int | None:
        """Return the selected day, if any."""
        return self._current.date if self._current else None

    def set_date(self, date: int) -> None:
        """Select a day, cancelling interest in the previous one first."""
        if self._current is not None and self._current.date == date:
            return
        self.close()
        self._current = self.live.subscribe(date, self.callback)

    def close(self) -> None:
        """Cancel the current subscription."""
        if self._current is not None:
            self._current.cancel()
            self._current = None
