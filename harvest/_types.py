"""
Core types for harvest.

Re-exports from kungfu + shared aliases.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Json = Any
"""Decoded JSON payload as returned by a transport."""

type Params = Mapping[str, Any] | None
"""Resource parameters. None for parameterless kinds."""

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Keys
# ═══════════════════════════════════════════════════════════════════════════════

def cache_key(kind: str, params: Params = None) -> str:
    """
    Deterministic key for (kind, params).

    Example:
        cache_key("Lands")                       # "Lands"
        cache_key("UserLands", {"user_id": "u1"})  # 'UserLands({"user_id":"u1"})'
    """
    if not params:
        return kind
    encoded = json.dumps(dict(params), sort_keys=True, separators=(",", ":"), default=str)
    return f"{kind}({encoded})"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Json",
    "Params",
    "Lazy",
    "cache_key",
)
