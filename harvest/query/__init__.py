"""
Query — cached, deduplicated reads.

    from harvest import query as Q

    GET_LANDS = Q.define("Lands").provides(["Lands"])
    result = await executor.query(GET_LANDS)
    sub = executor.subscribe(GET_LANDS, None, on_change)
"""

from __future__ import annotations

from harvest.query._types import (
    TagsFn,
    Decoder,
    SkipFn,
    QueryDefinition,
    define,
    QueryResult,
    Subscription,
)
from harvest.query._executor import QueryExecutor

__all__ = (
    "TagsFn",
    "Decoder",
    "SkipFn",
    "QueryDefinition",
    "define",
    "QueryResult",
    "Subscription",
    "QueryExecutor",
)
