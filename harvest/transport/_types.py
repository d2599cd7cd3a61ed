"""
Transport types — the network collaborator boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from harvest._types import Json, Params

# ═══════════════════════════════════════════════════════════════════════════════
# Transport Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class TransportError(Exception):
    """
    Failed fetch or mutation.

    status: HTTP status code, None when the request never got a response.
    detail: Server-provided message or the failure description.

    Not frozen: the interpreter writes traceback fields on raise.
    """

    status: int | None
    detail: str

    def __str__(self) -> str:
        if self.status is None:
            return self.detail
        return f"{self.status}: {self.detail}"

    @property
    def is_unauthorized(self) -> bool:
        return self.status in (401, 403)


def as_transport_error(e: Exception) -> TransportError:
    """Map any exception raised by a transport to TransportError."""
    if isinstance(e, TransportError):
        return e
    return TransportError(None, str(e) or type(e).__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Transport Protocol: Users Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class Transport(Protocol):
    """
    Network collaborator used by the query and mutation executors.

    Both methods return decoded JSON or raise TransportError.
    The token is opaque here; a transport decides how to attach it.

    Example:
        class RecordingTransport:
            def __init__(self) -> None:
                self.calls: list[str] = []

            async def fetch_resource(self, kind, params, token=None):
                self.calls.append(kind)
                return []

            async def send_mutation(self, kind, params, body, token=None):
                self.calls.append(kind)
                return body
    """

    async def fetch_resource(
        self,
        kind: str,
        params: Params,
        token: str | None = None,
    ) -> Json:
        """Read a resource."""
        ...

    async def send_mutation(
        self,
        kind: str,
        params: Params,
        body: Any,
        token: str | None = None,
    ) -> Json:
        """Perform a write."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "TransportError",
    "as_transport_error",
    "Transport",
)
