"""
Tag index — invalidation fan-out.

Holds non-owning back references tag → keys. The store stays the
source of truth for entry existence; evicted keys are pruned here.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from harvest.store import CacheStore, Unsubscribe

log = structlog.get_logger("harvest.tags")

type InvalidateListener = Callable[[frozenset[str]], None]


# ═══════════════════════════════════════════════════════════════════════════════
# Tag Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def tag(kind: str, id: object | None = None) -> str:
    """
    Build a tag.

    Example:
        tag("Lands")          # "Lands"
        tag("Lands", "l-42")  # "Lands:l-42"
    """
    if id is None:
        return kind
    return f"{kind}:{id}"


# ═══════════════════════════════════════════════════════════════════════════════
# Tag Index
# ═══════════════════════════════════════════════════════════════════════════════


class TagIndex:
    """
    Maps tags to the cache keys depending on them.

    invalidate() marks every dependent entry stale in the store, then
    hands the staled keys to listeners (the query executor refetches
    the subscribed ones).

    Example:
        index = TagIndex(store)
        index.register("Lands", {"Lands"})
        staled = index.invalidate("Lands")
    """

    def __init__(self, store: CacheStore) -> None:
        self._store = store
        self._keys_by_tag: dict[str, set[str]] = {}
        self._tags_by_key: dict[str, frozenset[str]] = {}
        self._listeners: list[InvalidateListener] = []
        store.on_evict(self.prune)

    # ───────────────────────────────────────────────────────────────────────────
    # Registration
    # ───────────────────────────────────────────────────────────────────────────

    def register_dependency(self, tag: str, key: str) -> None:
        """Record that key depends on tag."""
        self._keys_by_tag.setdefault(tag, set()).add(key)
        self._tags_by_key[key] = self._tags_by_key.get(key, frozenset()) | {tag}

    def register(self, key: str, tags: Iterable[str]) -> None:
        """Replace the full tag set of key."""
        self.prune(key)
        for t in tags:
            self.register_dependency(t, key)

    def prune(self, key: str) -> None:
        """Drop every registration of key."""
        tags = self._tags_by_key.pop(key, frozenset())
        for t in tags:
            keys = self._keys_by_tag.get(t)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._keys_by_tag[t]

    def keys_for(self, tag: str) -> frozenset[str]:
        return frozenset(self._keys_by_tag.get(tag, ()))

    def tags_for(self, key: str) -> frozenset[str]:
        return self._tags_by_key.get(key, frozenset())

    # ───────────────────────────────────────────────────────────────────────────
    # Invalidation
    # ───────────────────────────────────────────────────────────────────────────

    def on_invalidate(self, listener: InvalidateListener) -> Unsubscribe:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _mark_stale(self, keys: Iterable[str]) -> frozenset[str]:
        staled: set[str] = set()
        for key in keys:
            entry = self._store.get(key)
            if entry is None:
                self.prune(key)
                continue
            self._store.upsert(
                key,
                stale=True,
                invalidated_through=entry.generation,
            )
            staled.add(key)
        return frozenset(staled)

    def invalidate(self, tag: str) -> frozenset[str]:
        """
        Stale every entry depending on tag.

        Returns the staled keys. Unknown tags are a no-op.
        """
        return self.invalidate_many((tag,))

    def invalidate_many(self, tags: Iterable[str]) -> frozenset[str]:
        """Stale the union of entries depending on any of tags."""
        tags = tuple(dict.fromkeys(tags))
        keys: set[str] = set()
        for t in tags:
            keys |= self._keys_by_tag.get(t, set())

        staled = self._mark_stale(sorted(keys))
        log.debug("tags.invalidated", tags=tags, keys=sorted(staled))
        if staled:
            for listener in tuple(self._listeners):
                listener(staled)
        return staled


__all__ = ("tag", "TagIndex", "InvalidateListener")
