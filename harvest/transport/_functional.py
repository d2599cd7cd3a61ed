"""
Function-based transport builder.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from harvest._types import Json, Params
from harvest.transport._types import TransportError

# ═══════════════════════════════════════════════════════════════════════════════
# Function Types
# ═══════════════════════════════════════════════════════════════════════════════

type FetchFn = Callable[[str, Params, str | None], Awaitable[Json]]
type SendFn = Callable[[str, Params, Any, str | None], Awaitable[Json]]


async def _no_send(kind: str, params: Params, body: Any, token: str | None) -> Json:
    raise TransportError(None, f"transport has no mutation handler (kind={kind})")


# ═══════════════════════════════════════════════════════════════════════════════
# Functional Transport
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FunctionalTransport:
    """
    Transport built from functions.

    Example:
        transport = transport_from(
            fetch=api.read,
            send=api.write,
        )
    """

    _fetch: FetchFn
    _send: SendFn

    async def fetch_resource(
        self,
        kind: str,
        params: Params,
        token: str | None = None,
    ) -> Json:
        return await self._fetch(kind, params, token)

    async def send_mutation(
        self,
        kind: str,
        params: Params,
        body: Any,
        token: str | None = None,
    ) -> Json:
        return await self._send(kind, params, body, token)


def transport_from(
    fetch: FetchFn,
    send: SendFn | None = None,
) -> FunctionalTransport:
    """
    Create Transport from functions.

    Example:
        async def fetch(kind, params, token):
            return db[kind]

        transport = transport_from(fetch=fetch)
    """
    return FunctionalTransport(
        _fetch=fetch,
        _send=send if send is not None else _no_send,
    )


__all__ = (
    "FunctionalTransport",
    "transport_from",
)
