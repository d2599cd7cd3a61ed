"""
Query executor — cached reads with request deduplication.

Per key, at most one request is attached to. A request only lands in
the store if it is still the newest one started for its key.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from itertools import count
from typing import Any

import structlog
from combinators import lift as L
from kungfu import Error, LazyCoroResult, Ok, Result

from harvest._policy import CachePolicy
from harvest._types import Params
from harvest.auth import AuthSession
from harvest.query._types import QueryDefinition, QueryResult, Subscription
from harvest.store import CacheEntry, CacheStore, Status, Subscriber
from harvest.tags import TagIndex
from harvest.transport import Transport, TransportError, as_transport_error

log = structlog.get_logger("harvest.query")

type Origin = tuple[QueryDefinition[Any], Params]


def _can_attach(entry: CacheEntry[Any]) -> bool:
    """In-flight request whose answer no invalidation has outdated."""
    return (
        entry.status is Status.LOADING
        and entry.in_flight is not None
        and entry.invalidated_through < entry.generation
    )


class QueryExecutor:
    """
    Runs query definitions against the store.

    Example:
        executor = QueryExecutor(store, index, transport)
        result = await executor.query(api.GET_LANDS)
        match result:
            case Ok(r):
                print(r.data, r.from_cache)
            case Error(e):
                print(e.status, e.detail)
    """

    def __init__(
        self,
        store: CacheStore,
        tags: TagIndex,
        transport: Transport,
        *,
        session: AuthSession | None = None,
        policy: CachePolicy | None = None,
    ) -> None:
        self._store = store
        self._tags = tags
        self._transport = transport
        self._session = session
        self._policy = policy or CachePolicy()
        self._origins: dict[str, Origin] = {}
        self._tasks: set[asyncio.Task[Any]] = set()
        self._subscriptions: dict[int, Subscription] = {}
        self._subscription_ids = count()
        tags.on_invalidate(self._on_invalidated)
        store.on_evict(self._forget)

    # ───────────────────────────────────────────────────────────────────────────
    # Public API
    # ───────────────────────────────────────────────────────────────────────────

    def select[T](
        self,
        definition: QueryDefinition[T],
        params: Params = None,
    ) -> CacheEntry[T] | None:
        """Current entry for (definition, params), no side effects."""
        return self._store.get(definition.key(params))

    def query[T](
        self,
        definition: QueryDefinition[T],
        params: Params = None,
        *,
        skip: bool = False,
        force: bool = False,
    ) -> LazyCoroResult[QueryResult[T], TransportError]:
        """
        Read a resource.

        Fresh entry → cached data, no transport call.
        Loading entry → attach to its request.
        Otherwise → start one request.
        force=True always starts a new request.
        """

        async def execute() -> Result[QueryResult[T], TransportError]:
            if skip or definition.is_skipped(params):
                return Ok(QueryResult(key=None, status=Status.UNINITIALIZED, data=None, from_cache=False))

            key = definition.key(params)
            entry = self._store.get(key)

            if not force and entry is not None:
                if _can_attach(entry):
                    log.debug("query.attached", key=key, generation=entry.generation)
                    outcome = await asyncio.shield(entry.in_flight)
                    return self._finish(key, outcome)
                if entry.is_fresh:
                    return Ok(QueryResult(key=key, status=entry.status, data=entry.data, from_cache=True))

            task = self._start(definition, params)
            outcome = await asyncio.shield(task)
            return self._finish(key, outcome)

        return LazyCoroResult(execute)

    def refetch[T](
        self,
        definition: QueryDefinition[T],
        params: Params = None,
    ) -> LazyCoroResult[QueryResult[T], TransportError]:
        """Force a new request regardless of freshness."""
        return self.query(definition, params, force=True)

    def subscribe[T](
        self,
        definition: QueryDefinition[T],
        params: Params,
        callback: Subscriber,
        *,
        skip: bool = False,
    ) -> Subscription:
        """
        Become an active consumer of a resource.

        Registers callback with the store and starts the initial query in
        the background. Skipped subscriptions are inert.
        """
        if skip or definition.is_skipped(params):
            return Subscription(key=None)

        key = definition.key(params)
        self._origins[key] = (definition, params)
        unsubscribe = self._store.subscribe(key, callback)
        initial = self._spawn(self._initial(definition, params))
        token = next(self._subscription_ids)

        def detach() -> None:
            self._subscriptions.pop(token, None)
            unsubscribe()

        subscription = Subscription(key=key, initial=initial, _unsubscribe=detach)
        self._subscriptions[token] = subscription
        return subscription

    def detach_all(self) -> None:
        """Unsubscribe every live subscription; their `active` turns False."""
        for subscription in tuple(self._subscriptions.values()):
            subscription.unsubscribe()

    def cancel_all(self) -> None:
        """Cancel every request still running."""
        for task in tuple(self._tasks):
            task.cancel()

    # ───────────────────────────────────────────────────────────────────────────
    # Requests
    # ───────────────────────────────────────────────────────────────────────────

    async def _initial[T](
        self,
        definition: QueryDefinition[T],
        params: Params,
    ) -> Result[QueryResult[T], TransportError]:
        return await self.query(definition, params)

    def _spawn(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _start[T](
        self,
        definition: QueryDefinition[T],
        params: Params,
    ) -> asyncio.Task[Result[T, TransportError]]:
        key = definition.key(params)
        entry = self._store.get(key)
        generation = (entry.generation if entry is not None else 0) + 1
        previous = entry.data if entry is not None else None

        self._origins[key] = (definition, params)
        tags = definition.tags_for(params, previous)
        self._tags.register(key, tags)

        task = self._spawn(self._fetch(definition, params, key, generation))
        log.debug("query.started", key=key, generation=generation)
        self._store.upsert(
            key,
            status=Status.LOADING,
            error=None,
            in_flight=task,
            generation=generation,
            tags=tags,
        )
        return task

    async def _fetch[T](
        self,
        definition: QueryDefinition[T],
        params: Params,
        key: str,
        generation: int,
    ) -> Result[T, TransportError]:
        token = self._session.token if self._session is not None else None

        async def call() -> T:
            raw = await self._transport.fetch_resource(definition.kind, params, token)
            return definition.parse(raw)

        result = await L.catching_async(call, on_error=as_transport_error)

        entry = self._store.get(key)
        if entry is None or entry.generation != generation:
            log.debug("query.superseded", key=key, generation=generation)
            return result

        match result:
            case Ok(data):
                tags = definition.tags_for(params, data)
                self._tags.register(key, tags)
                self._store.upsert(
                    key,
                    status=Status.SUCCESS,
                    data=data,
                    error=None,
                    in_flight=None,
                    tags=tags,
                    stale=entry.invalidated_through >= generation,
                    fulfilled_at=datetime.now(UTC),
                )
            case Error(e):
                log.warning("query.failed", key=key, status=e.status, detail=e.detail)
                self._store.upsert(
                    key,
                    status=Status.ERROR,
                    error=e,
                    in_flight=None,
                )
        return result

    def _finish[T](
        self,
        key: str,
        outcome: Result[T, TransportError],
    ) -> Result[QueryResult[T], TransportError]:
        match outcome:
            case Ok(data):
                return Ok(QueryResult(key=key, status=Status.SUCCESS, data=data, from_cache=False))
            case Error(e):
                return Error(e)

    # ───────────────────────────────────────────────────────────────────────────
    # Store / Tag Index Events
    # ───────────────────────────────────────────────────────────────────────────

    def _on_invalidated(self, keys: frozenset[str]) -> None:
        if not self._policy.refetch_on_invalidate:
            return
        for key in sorted(keys):
            entry = self._store.get(key)
            origin = self._origins.get(key)
            if entry is None or origin is None or entry.subscriber_count == 0:
                continue
            log.debug("query.refetch_on_invalidate", key=key)
            self._start(*origin)

    def _forget(self, key: str) -> None:
        self._origins.pop(key, None)


__all__ = ("QueryExecutor",)
