"""
Transport — the network collaborator.

    from harvest import transport as T

    transport = T.HttpTransport(api.ROUTES, T.TransportConfig())
    fake = T.transport_from(fetch=fake_fetch, send=fake_send)
"""

from __future__ import annotations

from harvest.transport._types import (
    Transport,
    TransportError,
    as_transport_error,
)
from harvest.transport._functional import FunctionalTransport, transport_from
from harvest.transport._http import (
    DEFAULT_BASE_URL,
    Route,
    TransportConfig,
    HttpTransport,
)

__all__ = (
    "Transport",
    "TransportError",
    "as_transport_error",
    "FunctionalTransport",
    "transport_from",
    "DEFAULT_BASE_URL",
    "Route",
    "TransportConfig",
    "HttpTransport",
)
