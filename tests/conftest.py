"""Shared pytest fixtures and fakes for harvest tests."""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from itertools import count
from typing import Any

import pytest

import harvest
from harvest import CacheContext, CachePolicy, Error, Ok
from harvest.auth import AuthSession, AuthUser
from harvest.transport import TransportError, transport_from


def expect_ok(result: Any) -> Any:
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e!r})")


def expect_error(result: Any) -> Any:
    match result:
        case Error(e):
            return e
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")


async def settle(rounds: int = 20) -> None:
    """Let spawned tasks make progress."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def land_doc(land_id: str, owner_id: str, title: str = "Plot") -> dict[str, Any]:
    return {
        "_id": land_id,
        "owner_id": owner_id,
        "title": title,
        "description": "Irrigated field",
        "area": 4.5,
        "price_per_acre": 1200,
        "soil_type": "loam",
        "water_availability": "high",
        "status": "available",
    }


def product_doc(product_id: str, price: float, name: str = "Neem Oil", stock: int = 10) -> dict[str, Any]:
    return {
        "_id": product_id,
        "name": name,
        "category": "Organic",
        "price": price,
        "stock_quantity": stock,
    }


@dataclass
class FakeApi:
    """In-memory marketplace server speaking the transport protocol."""

    lands: dict[str, dict[str, Any]] = field(default_factory=dict)
    products: dict[str, dict[str, Any]] = field(default_factory=dict)
    orders: dict[str, dict[str, Any]] = field(default_factory=dict)
    profiles: dict[str, dict[str, Any]] = field(default_factory=dict)
    users_by_token: dict[str, str] = field(default_factory=dict)
    failures: dict[str, TransportError] = field(default_factory=dict)
    delay: float = 0.0
    calls: Counter[str] = field(default_factory=Counter)
    tokens_seen: list[str | None] = field(default_factory=list)
    _ids: Any = field(default_factory=lambda: count(100))

    def _user(self, token: str | None) -> str:
        if token is None or token not in self.users_by_token:
            raise TransportError(401, "Not authorized, no token")
        return self.users_by_token[token]

    async def fetch(self, kind: str, params: Any, token: str | None) -> Any:
        self.calls[kind] += 1
        self.tokens_seen.append(token)
        await asyncio.sleep(self.delay)
        if kind in self.failures:
            raise self.failures[kind]

        params = dict(params or {})
        match kind:
            case "Lands":
                return list(self.lands.values())
            case "UserLands":
                return [land for land in self.lands.values() if land["owner_id"] == params["user_id"]]
            case "Products":
                category = params.get("category")
                return [p for p in self.products.values() if category in (None, p["category"])]
            case "UserOrders":
                user_id = self._user(token)
                return [o for o in self.orders.values() if o["user_id"] == user_id]
            case "AllOrders":
                return list(self.orders.values())
            case "Profile":
                if params["user_id"] not in self.profiles:
                    raise TransportError(404, "User not found")
                return self.profiles[params["user_id"]]
        raise TransportError(404, f"unknown resource {kind}")

    async def send(self, kind: str, params: Any, body: Any, token: str | None) -> Any:
        self.calls[kind] += 1
        self.tokens_seen.append(token)
        await asyncio.sleep(self.delay)
        if kind in self.failures:
            raise self.failures[kind]

        params = dict(params or {})
        match kind:
            case "createLand":
                land = {**land_doc(f"l{next(self._ids)}", self._user(token)), **body}
                self.lands[land["_id"]] = land
                return land
            case "updateLand":
                land = self.lands[params["land_id"]]
                land.update(body)
                return land
            case "deleteLand":
                self.lands.pop(params["land_id"], None)
                return None
            case "createProduct":
                product = {"_id": f"p{next(self._ids)}", "stock_quantity": 0, **body}
                self.products[product["_id"]] = product
                return product
            case "updateProduct":
                product = self.products[params["product_id"]]
                product.update(body)
                return product
            case "deleteProduct":
                self.products.pop(params["product_id"], None)
                return None
            case "placeOrder":
                order_id = f"o{next(self._ids)}"
                order = {"_id": order_id, "user_id": self._user(token), **body}
                self.orders[order_id] = order
                return {"message": "Order placed successfully", "orderId": order_id, "order": order}
            case "updateProfile":
                profile = self.profiles[params["user_id"]]
                profile.update(body)
                return profile
            case "login" | "signup":
                token = f"token-{body['email']}"
                user_id = f"u-{body['email']}"
                self.users_by_token[token] = user_id
                return {
                    "message": "ok",
                    "token": token,
                    "role": body.get("role", "farmer"),
                    "user_id": user_id,
                    "full_name": body.get("full_name", "Test User"),
                }
        raise TransportError(404, f"unknown mutation {kind}")


@pytest.fixture
def fake_api() -> FakeApi:
    api = FakeApi()
    api.lands = {
        "l1": land_doc("l1", "owner-1", "North field"),
        "l2": land_doc("l2", "owner-2", "River plot"),
    }
    api.products = {
        "p1": product_doc("p1", 50, "Neem Oil"),
        "p2": product_doc("p2", 30, "Pyrethrin Spray"),
    }
    api.profiles = {
        "owner-1": {"_id": "owner-1", "email": "o1@example.com", "full_name": "Olu", "role": "landowner"},
    }
    api.users_by_token = {"owner-token": "owner-1", "farmer-token": "farmer-1"}
    return api


@pytest.fixture
def session() -> AuthSession:
    return AuthSession("owner-token", AuthUser(id="owner-1", role="landowner", full_name="Olu"))


@pytest.fixture
def ctx(fake_api: FakeApi, session: AuthSession) -> CacheContext:
    return (
        harvest.context(transport_from(fetch=fake_api.fetch, send=fake_api.send))
        .session(session)
        .policy(CachePolicy())
        .build()
    )
