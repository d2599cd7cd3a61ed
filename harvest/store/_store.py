"""
Resource cache store — the single mutable home of cache entries.

All state changes go through upsert(). Subscribers are notified
synchronously after each merge.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import replace
from itertools import count
from typing import Any

import structlog

from harvest.store._types import CacheEntry, Subscriber, Unsubscribe

log = structlog.get_logger("harvest.store")

type EvictListener = Callable[[str], None]


class CacheStore:
    """
    Keyed store of cache entries with subscriber notification.

    Unused entries (no subscribers, nothing in flight) are tracked in
    least-recently-touched order and evicted past `max_unused_entries`.

    Example:
        store = CacheStore(max_unused_entries=100)
        unsubscribe = store.subscribe("Lands", on_change)
        store.upsert("Lands", status=Status.LOADING)
        unsubscribe()
    """

    def __init__(self, max_unused_entries: int | None = None) -> None:
        self._max_unused = max_unused_entries
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._subscribers: dict[str, dict[int, Subscriber]] = {}
        self._unused: OrderedDict[str, None] = OrderedDict()
        self._evict_listeners: list[EvictListener] = []
        self._ids = count()

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    def get(self, key: str) -> CacheEntry[Any] | None:
        return self._entries.get(key)

    def keys(self) -> Iterator[str]:
        return iter(tuple(self._entries))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ───────────────────────────────────────────────────────────────────────────
    # Writes
    # ───────────────────────────────────────────────────────────────────────────

    def _apply(self, key: str, patch: dict[str, Any]) -> CacheEntry[Any]:
        current = self._entries.get(key)
        if current is None:
            current = CacheEntry(key=key)
        entry = replace(current, **patch)
        self._entries[key] = entry
        self._track_usage(entry)
        return entry

    def upsert(self, key: str, **patch: Any) -> CacheEntry[Any]:
        """
        Merge a partial state transition into the entry for key.

        Creates the entry if absent, then notifies subscribers.
        Unknown fields raise TypeError.

        Example:
            store.upsert(key, status=Status.SUCCESS, data=lands, in_flight=None)
        """
        entry = self._apply(key, patch)
        self._notify(entry)
        return entry

    def _notify(self, entry: CacheEntry[Any]) -> None:
        for callback in tuple(self._subscribers.get(entry.key, {}).values()):
            try:
                callback(entry)
            except Exception:
                log.exception("store.subscriber_failed", key=entry.key)

    # ───────────────────────────────────────────────────────────────────────────
    # Subscriptions
    # ───────────────────────────────────────────────────────────────────────────

    def subscribe(self, key: str, callback: Subscriber) -> Unsubscribe:
        """
        Register callback for every upsert of key.

        Returns an idempotent unsubscribe function.
        """
        token = next(self._ids)
        callbacks = self._subscribers.setdefault(key, {})
        callbacks[token] = callback
        self._apply(key, {"subscriber_count": len(callbacks)})

        def unsubscribe() -> None:
            registered = self._subscribers.get(key)
            if registered is None or registered.pop(token, None) is None:
                return
            if not registered:
                del self._subscribers[key]
            if key in self._entries:
                self._apply(key, {"subscriber_count": len(registered)})

        return unsubscribe

    # ───────────────────────────────────────────────────────────────────────────
    # Eviction
    # ───────────────────────────────────────────────────────────────────────────

    def on_evict(self, listener: EvictListener) -> Unsubscribe:
        """Register listener called with each evicted key."""
        self._evict_listeners.append(listener)

        def remove() -> None:
            if listener in self._evict_listeners:
                self._evict_listeners.remove(listener)

        return remove

    def _track_usage(self, entry: CacheEntry[Any]) -> None:
        if entry.subscriber_count > 0 or entry.in_flight is not None:
            self._unused.pop(entry.key, None)
            return

        self._unused[entry.key] = None
        self._unused.move_to_end(entry.key)

        if self._max_unused is None:
            return
        while len(self._unused) > self._max_unused:
            oldest = next(iter(self._unused))
            self.evict(oldest)

    def evict(self, key: str) -> bool:
        """Remove entry and tell evict listeners. Returns True if it existed."""
        entry = self._entries.pop(key, None)
        self._unused.pop(key, None)
        self._subscribers.pop(key, None)
        if entry is None:
            return False
        log.debug("store.evicted", key=key)
        for listener in tuple(self._evict_listeners):
            listener(key)
        return True

    def clear(self) -> None:
        """Evict everything."""
        for key in tuple(self._entries):
            self.evict(key)


__all__ = ("CacheStore", "EvictListener")
