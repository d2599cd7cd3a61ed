"""
Param helpers shared by the resource tables.
"""

from __future__ import annotations

from harvest._types import Params
from harvest.query import SkipFn


def require(params: Params, name: str) -> str:
    """Fetch a required identifier from params."""
    value = (params or {}).get(name)
    if not value:
        raise KeyError(f"missing required param {name!r}")
    return str(value)


def missing(name: str) -> SkipFn:
    """Skip condition: param `name` absent or empty."""

    def skip(params: Params) -> bool:
        return not (params or {}).get(name)

    return skip


__all__ = ("require", "missing")
