"""
Cache policy — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

# ═══════════════════════════════════════════════════════════════════════════════
# Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """
    Cache policy configuration.

    refetch_on_invalidate:
        True: an invalidated entry with subscribers refetches immediately.
        False: invalidated entries refetch on the next query only.

    max_unused_entries:
        Bound on entries with zero subscribers and nothing in flight.
        Oldest unused entries are evicted first. None keeps everything
        for the life of the context.

    Example:
        policy = (
            CachePolicy()
            .with_refetch_on_invalidate(False)
            .with_max_unused_entries(64)
        )

    Note: Immutable. Each method returns new CachePolicy.
    """

    refetch_on_invalidate: bool = True
    max_unused_entries: int | None = 256

    def with_refetch_on_invalidate(self, enabled: bool = True) -> CachePolicy:
        """Choose eager (True) or lazy (False) refetch after invalidation."""
        return CachePolicy(
            refetch_on_invalidate=enabled,
            max_unused_entries=self.max_unused_entries,
        )

    def with_max_unused_entries(self, limit: int | None) -> CachePolicy:
        """
        Bound unused entries.

        Example:
            .with_max_unused_entries(100)
            .with_max_unused_entries(None)  # never evict
        """
        if limit is not None and limit < 0:
            raise ValueError("max_unused_entries must be >= 0 or None")
        return CachePolicy(
            refetch_on_invalidate=self.refetch_on_invalidate,
            max_unused_entries=limit,
        )


__all__ = ("CachePolicy",)
