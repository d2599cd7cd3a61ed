"""
Query types — resource declarations and results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from harvest._types import Json, Params, cache_key
from harvest.store import Status, Unsubscribe

# ═══════════════════════════════════════════════════════════════════════════════
# Function Types
# ═══════════════════════════════════════════════════════════════════════════════

type TagsFn[T] = Callable[[Params, T | None], Iterable[str]]
"""Tags of an entry from its params and (once resolved) its data."""

type Decoder[T] = Callable[[Json], T]

type SkipFn = Callable[[Params], bool]


def _identity(raw: Json) -> Any:
    return raw


def _no_tags(params: Params, data: object) -> Iterable[str]:
    return ()


def _never(params: Params) -> bool:
    return False


# ═══════════════════════════════════════════════════════════════════════════════
# Query Definition: Declarative Resource
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class QueryDefinition[T]:
    """
    Declarative read resource.

    Fluent: each method returns a new definition.

    Example:
        GET_USER_LANDS = (
            Q.define("UserLands")
            .provides(lambda params, _: [tag("UserLands", params["user_id"])])
            .decoding(parse_lands)
            .skip_when(lambda params: not (params or {}).get("user_id"))
        )
    """

    kind: str
    tags_fn: TagsFn[T] = _no_tags
    decoder: Decoder[T] = _identity
    skip_fn: SkipFn = _never

    def provides(self, source: TagsFn[T] | str | Iterable[str]) -> QueryDefinition[T]:
        """Set tags from a tag, a static collection or a function of (params, data)."""
        if isinstance(source, str):
            source = (source,)
        if callable(source):
            fn: TagsFn[T] = source
        else:
            static = tuple(source)
            fn = lambda params, data: static  # noqa: E731
        return QueryDefinition(
            kind=self.kind,
            tags_fn=fn,
            decoder=self.decoder,
            skip_fn=self.skip_fn,
        )

    def decoding[U](self, decoder: Decoder[U]) -> QueryDefinition[U]:
        """Set payload decoder."""
        return QueryDefinition(
            kind=self.kind,
            tags_fn=self.tags_fn,  # type: ignore[arg-type]
            decoder=decoder,
            skip_fn=self.skip_fn,
        )

    def skip_when(self, fn: SkipFn) -> QueryDefinition[T]:
        """Set skip condition (e.g. a required identifier is missing)."""
        return QueryDefinition(
            kind=self.kind,
            tags_fn=self.tags_fn,
            decoder=self.decoder,
            skip_fn=fn,
        )

    def key(self, params: Params = None) -> str:
        return cache_key(self.kind, params)

    def tags_for(self, params: Params, data: T | None) -> frozenset[str]:
        return frozenset(self.tags_fn(params, data))

    def parse(self, raw: Json) -> T:
        return self.decoder(raw)

    def is_skipped(self, params: Params) -> bool:
        return self.skip_fn(params)


def define(kind: str) -> QueryDefinition[Json]:
    """
    Start a query definition for a resource kind.

    Example:
        GET_LANDS = Q.define("Lands").provides(["Lands"])
    """
    return QueryDefinition(kind=kind)


# ═══════════════════════════════════════════════════════════════════════════════
# Query Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class QueryResult[T]:
    """
    Successful (or skipped) query outcome.

    Note: from_cache is True when no transport call was made for this caller.
    """

    key: str | None
    status: Status
    data: T | None
    from_cache: bool


# ═══════════════════════════════════════════════════════════════════════════════
# Subscription
# ═══════════════════════════════════════════════════════════════════════════════


def _noop() -> None:
    return None


@dataclass(slots=True)
class Subscription:
    """
    Active consumer of a cache entry.

    initial: background task of the first query, None when skipped.
    """

    key: str | None
    initial: asyncio.Task[Any] | None = None
    _unsubscribe: Unsubscribe = field(default=_noop, repr=False)
    active: bool = True

    def unsubscribe(self) -> None:
        """Detach. In-flight requests keep running and still fill the cache."""
        if not self.active:
            return
        self.active = False
        self._unsubscribe()


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "TagsFn",
    "Decoder",
    "SkipFn",
    "QueryDefinition",
    "define",
    "QueryResult",
    "Subscription",
)
