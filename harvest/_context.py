"""
Cache context — explicit wiring of store, tags, executors, cart, session.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from harvest._policy import CachePolicy
from harvest.auth import AuthSession
from harvest.cart import CartStore
from harvest.mutation import MutationExecutor
from harvest.query import QueryExecutor
from harvest.store import CacheStore
from harvest.tags import TagIndex
from harvest.transport import Transport

log = structlog.get_logger("harvest.context")

# ═══════════════════════════════════════════════════════════════════════════════
# Context Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class ContextBuilder:
    """
    Fluent context builder.

    Example:
        ctx = (
            harvest.context(transport)
            .session(AuthSession())
            .policy(CachePolicy().with_max_unused_entries(64))
            .build()
        )
    """

    _transport: Transport
    _session: AuthSession | None
    _policy: CachePolicy

    def session(self, s: AuthSession) -> ContextBuilder:
        """Set the auth session read for tokens."""
        return ContextBuilder(
            _transport=self._transport,
            _session=s,
            _policy=self._policy,
        )

    def policy(self, p: CachePolicy) -> ContextBuilder:
        """Set cache policy."""
        return ContextBuilder(
            _transport=self._transport,
            _session=self._session,
            _policy=p,
        )

    def build(self) -> CacheContext:
        """Build an empty context."""
        session = self._session if self._session is not None else AuthSession()
        return CacheContext(self._transport, session=session, policy=self._policy)


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Context
# ═══════════════════════════════════════════════════════════════════════════════


class CacheContext:
    """
    One isolated client-side cache.

    Starts empty. clear() cancels running requests and empties the
    store, the tag index and the cart; the context stays usable.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        session: AuthSession | None = None,
        policy: CachePolicy | None = None,
    ) -> None:
        self.policy = policy or CachePolicy()
        self.session = session or AuthSession()
        self.transport = transport
        self.store = CacheStore(max_unused_entries=self.policy.max_unused_entries)
        self.tags = TagIndex(self.store)
        self.queries = QueryExecutor(
            self.store,
            self.tags,
            transport,
            session=self.session,
            policy=self.policy,
        )
        self.mutations = MutationExecutor(self.tags, transport, session=self.session)
        self.cart = CartStore()

    def clear(self) -> None:
        """
        Tear down all cached and session-local state.

        Live subscriptions (and the CartViews built on them) become
        inactive; consumers subscribe again to follow the fresh cache.
        """
        log.debug("context.cleared", entries=len(self.store))
        self.queries.detach_all()
        self.queries.cancel_all()
        self.store.clear()
        self.cart.clear()


def context(transport: Transport) -> ContextBuilder:
    """
    Create context builder for a transport.

    Example:
        ctx = harvest.context(HttpTransport(api.ROUTES)).build()
        result = await ctx.queries.query(api.GET_LANDS)
    """
    return ContextBuilder(
        _transport=transport,
        _session=None,
        _policy=CachePolicy(),
    )


__all__ = ("ContextBuilder", "CacheContext", "context")
