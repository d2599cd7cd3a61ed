"""
Tags — invalidation scoping.

    from harvest import tags as G

    index = G.TagIndex(store)
    index.register(key, {G.tag("UserLands", user_id)})
    index.invalidate(G.tag("UserLands", user_id))
"""

from __future__ import annotations

from harvest.tags._index import tag, TagIndex, InvalidateListener

__all__ = (
    "tag",
    "TagIndex",
    "InvalidateListener",
)
