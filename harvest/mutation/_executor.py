"""
Mutation executor — writes followed by tag invalidation.
"""

from __future__ import annotations

from typing import Any

import structlog
from combinators import lift as L
from kungfu import Error, LazyCoroResult, Ok, Result

from harvest._types import Params
from harvest.auth import AuthSession
from harvest.mutation._types import MutationDefinition
from harvest.tags import TagIndex
from harvest.transport import Transport, TransportError, as_transport_error

log = structlog.get_logger("harvest.mutation")


class MutationExecutor:
    """
    Runs mutation definitions.

    On success the definition's tags are invalidated before the result
    is handed back, so no later query can read the old data as fresh.
    On failure nothing is invalidated and nothing is retried.

    Example:
        result = await mutations.mutate(api.CREATE_LAND, body=new_land)
        match result:
            case Ok(land):
                ...
            case Error(e):
                show(e.detail)
    """

    def __init__(
        self,
        tags: TagIndex,
        transport: Transport,
        *,
        session: AuthSession | None = None,
    ) -> None:
        self._tags = tags
        self._transport = transport
        self._session = session

    def mutate[T](
        self,
        definition: MutationDefinition[T],
        params: Params = None,
        body: Any = None,
    ) -> LazyCoroResult[T, TransportError]:
        """
        Perform one write and invalidate what it affects.

        Missing required params fail before anything is sent. A tag or
        hook failure after a committed write comes back as an Error too.
        """
        transport = self._transport
        session = self._session

        async def call() -> T:
            token = session.token if session is not None else None
            raw = await transport.send_mutation(definition.kind, params, body, token)
            return definition.parse(raw)

        def settle(data: T) -> LazyCoroResult[tuple[str, ...], TransportError]:
            async def run() -> tuple[str, ...]:
                tags = definition.tags_for(params, data)
                if tags:
                    self._tags.invalidate_many(tags)
                if definition.on_success_fn is not None:
                    definition.on_success_fn(data, session)
                return tags

            return L.catching_async(run, on_error=as_transport_error)

        async def execute() -> Result[T, TransportError]:
            missing = definition.missing_params(params)
            if missing:
                log.warning("mutation.rejected", kind=definition.kind, missing=missing)
                return Error(TransportError(None, f"{definition.kind} requires params: {', '.join(missing)}"))

            result = await L.catching_async(call, on_error=as_transport_error)
            match result:
                case Ok(data):
                    match await settle(data):
                        case Ok(tags):
                            log.debug("mutation.succeeded", kind=definition.kind, invalidated=tags)
                            return Ok(data)
                        case Error(e):
                            log.error("mutation.settle_failed", kind=definition.kind, detail=e.detail)
                            return Error(TransportError(None, f"{definition.kind} was applied but not settled: {e.detail}"))
                case Error(e):
                    log.warning(
                        "mutation.failed",
                        kind=definition.kind,
                        status=e.status,
                        detail=e.detail,
                    )
                    return Error(e)

        return LazyCoroResult(execute)


__all__ = ("MutationExecutor",)
