"""
Cache store types.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Any

from harvest.transport._types import TransportError

# ═══════════════════════════════════════════════════════════════════════════════
# Status: Entry Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class Status(Enum):
    """
    State of a cache entry.

    Lifecycle:
        UNINITIALIZED → LOADING → SUCCESS
                                → ERROR
        SUCCESS / ERROR → LOADING (refetch)
    """

    UNINITIALIZED = auto()
    LOADING = auto()
    SUCCESS = auto()
    ERROR = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Entry: Stored State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheEntry[T]:
    """
    Snapshot of one cached resource.

    Note: Immutable. CacheStore.upsert replaces the snapshot.

    generation: number of the newest started request for this key.
    invalidated_through: invalidation covers requests up to this generation.
    stale: a tag of this entry was invalidated after `data` was requested.
    """

    key: str
    status: Status = Status.UNINITIALIZED
    data: T | None = None
    error: TransportError | None = None
    tags: frozenset[str] = frozenset()
    subscriber_count: int = 0
    in_flight: asyncio.Future[Any] | None = None
    generation: int = 0
    invalidated_through: int = 0
    stale: bool = False
    fulfilled_at: datetime | None = None

    @property
    def is_loading(self) -> bool:
        return self.status is Status.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is Status.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is Status.ERROR

    @property
    def is_fresh(self) -> bool:
        """Success that no invalidation has touched."""
        return self.status is Status.SUCCESS and not self.stale


type Subscriber = Callable[[CacheEntry[Any]], None]
"""Called with the new snapshot after every upsert of its key."""

type Unsubscribe = Callable[[], None]


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Status",
    "CacheEntry",
    "Subscriber",
    "Unsubscribe",
)
