"""
HTTP transport over httpx.

Maps resource kinds to REST routes, injects the bearer token and turns
non-2xx responses into TransportError.
"""

from __future__ import annotations

import string
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

import httpx
import structlog

from harvest._types import Json, Params
from harvest.transport._types import TransportError

log = structlog.get_logger("harvest.transport")

DEFAULT_BASE_URL = "http://localhost:8000/api/"

# ═══════════════════════════════════════════════════════════════════════════════
# Route
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Route:
    """
    REST route for a resource kind.

    Path placeholders are filled from params; for GET routes the
    remaining params become the query string.

    Example:
        Route("GET", "lands/user/{user_id}")
    """

    method: str
    path: str

    @property
    def placeholders(self) -> frozenset[str]:
        return frozenset(
            name for _, name, _, _ in string.Formatter().parse(self.path) if name
        )

    def render(self, params: Params) -> tuple[str, dict[str, Any]]:
        """Return (url path, leftover params)."""
        values = dict(params or {})
        names = self.placeholders
        missing = names - values.keys()
        if missing:
            raise KeyError(f"missing path params for {self.path!r}: {sorted(missing)}")
        path = self.path.format(**{n: values[n] for n in names})
        rest = {k: v for k, v in values.items() if k not in names and v is not None}
        return path, rest


# ═══════════════════════════════════════════════════════════════════════════════
# Config
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TransportConfig:
    """
    HTTP transport configuration.

    Example:
        config = TransportConfig().with_base_url("https://api.example.org/api/")
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0

    def with_base_url(self, url: str) -> TransportConfig:
        return replace(self, base_url=url)

    def with_timeout(self, seconds: float) -> TransportConfig:
        return replace(self, timeout=seconds)


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP Transport
# ═══════════════════════════════════════════════════════════════════════════════


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        for field in ("detail", "message", "error"):
            if field in payload:
                return str(payload[field])
    return response.text


class HttpTransport:
    """
    Transport talking to the marketplace REST API.

    Note: Owns its httpx.AsyncClient unless one is passed in.

    Example:
        transport = HttpTransport(api.ROUTES)
        lands = await transport.fetch_resource("Lands", None)
        await transport.aclose()
    """

    def __init__(
        self,
        routes: Mapping[str, Route],
        config: TransportConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._routes = dict(routes)
        self._config = config or TransportConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
        )

    def _route(self, kind: str) -> Route:
        try:
            return self._routes[kind]
        except KeyError:
            raise KeyError(f"no route for resource kind {kind!r}") from None

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _send(
        self,
        route: Route,
        params: Params,
        body: Any,
        token: str | None,
    ) -> Json:
        path, rest = route.render(params)
        query = rest if route.method == "GET" else None
        try:
            response = await self._client.request(
                route.method,
                path,
                params=query,
                json=body,
                headers=self._headers(token),
            )
        except httpx.HTTPError as e:
            log.warning("transport.network_error", method=route.method, path=path, error=str(e))
            raise TransportError(None, str(e) or type(e).__name__) from e

        if response.is_error:
            detail = _error_detail(response)
            log.warning(
                "transport.http_error",
                method=route.method,
                path=path,
                status=response.status_code,
                detail=detail,
            )
            raise TransportError(response.status_code, detail)

        if not response.content:
            return None
        return response.json()

    async def fetch_resource(
        self,
        kind: str,
        params: Params,
        token: str | None = None,
    ) -> Json:
        return await self._send(self._route(kind), params, None, token)

    async def send_mutation(
        self,
        kind: str,
        params: Params,
        body: Any,
        token: str | None = None,
    ) -> Json:
        return await self._send(self._route(kind), params, body, token)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = (
    "DEFAULT_BASE_URL",
    "Route",
    "TransportConfig",
    "HttpTransport",
)
