"""
Store — keyed cache entries with subscriber notification.

    from harvest import store as S

    cache = S.CacheStore(max_unused_entries=256)
    cache.upsert("Lands", status=S.Status.LOADING)
"""

from __future__ import annotations

from harvest.store._types import (
    Status,
    CacheEntry,
    Subscriber,
    Unsubscribe,
)
from harvest.store._store import CacheStore, EvictListener

__all__ = (
    "Status",
    "CacheEntry",
    "Subscriber",
    "Unsubscribe",
    "CacheStore",
    "EvictListener",
)
