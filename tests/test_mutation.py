from __future__ import annotations

import pytest

import harvest
from harvest import CacheContext, api
from harvest import mutation as M
from harvest.auth import AuthSession
from harvest.store import CacheEntry, Status
from harvest.transport import TransportError, transport_from

from conftest import FakeApi, expect_error, expect_ok


def _stale(ctx: CacheContext, definition, params=None) -> bool:
    return ctx.queries.select(definition, params).stale


async def _warm_lands(ctx: CacheContext) -> None:
    await ctx.queries.query(api.GET_LANDS)
    await ctx.queries.query(api.GET_USER_LANDS, {"user_id": "owner-1"})
    await ctx.queries.query(api.GET_USER_LANDS, {"user_id": "owner-2"})
    await ctx.queries.query(api.GET_PRODUCTS)


# ═══════════════════════════════════════════════════════════════════════════════
# Definitions
# ═══════════════════════════════════════════════════════════════════════════════


def test_invalidated_tags_are_deduplicated_in_order() -> None:
    definition = M.define("touch").invalidates(["B", "A", "B"])

    assert definition.tags_for(None, None) == ("B", "A")


def test_single_string_is_one_tag() -> None:
    definition = M.define("placeOrder").invalidates("Orders")

    assert definition.tags_for(None, None) == ("Orders",)


def test_hook_survives_a_later_decoder() -> None:
    def hook(data: object, session: AuthSession | None) -> None:
        return None

    definition = M.define("login").on_success(hook).decoding(api.AuthResponse.model_validate)

    assert definition.on_success_fn is hook


def test_required_params_are_reported_missing() -> None:
    assert api.DELETE_LAND.missing_params({"land_id": "l1"}) == ("owner_id",)
    assert api.DELETE_LAND.missing_params(None) == ("land_id", "owner_id")
    assert api.DELETE_LAND.missing_params({"land_id": "l1", "owner_id": "u1"}) == ()


def test_tags_can_depend_on_params_and_response() -> None:
    land = api.Land.model_validate({"_id": "l9", "owner_id": "u7", "title": "x", "area": 1, "price_per_acre": 2})

    assert api.CREATE_LAND.tags_for(None, land) == ("Lands", "UserLands:u7")
    assert api.UPDATE_LAND.tags_for({"land_id": "l9"}, land) == ("Lands:l9", "UserLands:u7")
    assert api.DELETE_LAND.tags_for({"land_id": "l9", "owner_id": "u7"}, None) == ("Lands", "UserLands:u7")


# ═══════════════════════════════════════════════════════════════════════════════
# Invalidation Map
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_land_stales_lists_of_that_owner(ctx: CacheContext, fake_api: FakeApi) -> None:
    await _warm_lands(ctx)

    land = expect_ok(await ctx.mutations.mutate(api.CREATE_LAND, body={"title": "Hill terrace"}))

    assert land.owner_id == "owner-1"
    assert _stale(ctx, api.GET_LANDS)
    assert _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-1"})
    assert not _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-2"})
    assert not _stale(ctx, api.GET_PRODUCTS)
    assert fake_api.calls["Lands"] == 1


@pytest.mark.asyncio
async def test_update_land_reaches_lists_through_item_tag(ctx: CacheContext) -> None:
    await _warm_lands(ctx)

    expect_ok(await ctx.mutations.mutate(api.UPDATE_LAND, {"land_id": "l2"}, {"title": "Renamed"}))

    assert _stale(ctx, api.GET_LANDS)
    assert _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-2"})
    assert not _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-1"})


@pytest.mark.asyncio
async def test_delete_land_uses_owner_from_params(ctx: CacheContext, fake_api: FakeApi) -> None:
    await _warm_lands(ctx)

    result = expect_ok(await ctx.mutations.mutate(api.DELETE_LAND, {"land_id": "l1", "owner_id": "owner-1"}))

    assert result is None
    assert "l1" not in fake_api.lands
    assert _stale(ctx, api.GET_LANDS)
    assert _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-1"})
    assert not _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-2"})


@pytest.mark.asyncio
async def test_product_mutations_leave_orders_alone(ctx: CacheContext) -> None:
    await ctx.queries.query(api.GET_PRODUCTS)
    await ctx.queries.query(api.GET_USER_ORDERS)

    expect_ok(await ctx.mutations.mutate(api.UPDATE_PRODUCT, {"product_id": "p1"}, {"price": 45}))

    assert _stale(ctx, api.GET_PRODUCTS)
    assert not _stale(ctx, api.GET_USER_ORDERS)


@pytest.mark.asyncio
async def test_place_order_stales_every_order_list(ctx: CacheContext) -> None:
    await ctx.queries.query(api.GET_PRODUCTS)
    await ctx.queries.query(api.GET_USER_ORDERS)
    await ctx.queries.query(api.GET_ALL_ORDERS)

    body = {"items": [{"product_id": "p1", "quantity": 1, "price_at_purchase": 50}], "total_amount": 50}
    placed = expect_ok(await ctx.mutations.mutate(api.PLACE_ORDER, body=body))

    assert placed.order_id.startswith("o")
    assert placed.order.total_amount == 50
    assert _stale(ctx, api.GET_USER_ORDERS)
    assert _stale(ctx, api.GET_ALL_ORDERS)
    assert not _stale(ctx, api.GET_PRODUCTS)


@pytest.mark.asyncio
async def test_update_profile_stales_that_profile(ctx: CacheContext) -> None:
    profile = expect_ok(await ctx.queries.query(api.GET_PROFILE, {"user_id": "owner-1"}))
    assert profile.data.full_name == "Olu"

    updated = expect_ok(
        await ctx.mutations.mutate(api.UPDATE_PROFILE, {"user_id": "owner-1"}, {"full_name": "Olu A."})
    )

    assert updated.full_name == "Olu A."
    assert _stale(ctx, api.GET_PROFILE, {"user_id": "owner-1"})


# ═══════════════════════════════════════════════════════════════════════════════
# Failure
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_failed_mutation_invalidates_nothing(ctx: CacheContext, fake_api: FakeApi) -> None:
    await _warm_lands(ctx)
    fake_api.failures["createLand"] = TransportError(400, "Title is required")

    error = expect_error(await ctx.mutations.mutate(api.CREATE_LAND, body={}))

    assert error.status == 400
    assert error.detail == "Title is required"
    assert not _stale(ctx, api.GET_LANDS)
    assert not _stale(ctx, api.GET_USER_LANDS, {"user_id": "owner-1"})
    assert fake_api.calls["createLand"] == 1


@pytest.mark.asyncio
async def test_delete_without_owner_sends_nothing(ctx: CacheContext, fake_api: FakeApi) -> None:
    await _warm_lands(ctx)

    error = expect_error(await ctx.mutations.mutate(api.DELETE_LAND, {"land_id": "l1"}))

    assert error.status is None
    assert "owner_id" in error.detail
    assert fake_api.calls["deleteLand"] == 0
    assert "l1" in fake_api.lands
    assert not _stale(ctx, api.GET_LANDS)


@pytest.mark.asyncio
async def test_failing_tags_after_write_come_back_as_error(ctx: CacheContext, fake_api: FakeApi) -> None:
    def broken(params: object, data: object) -> list[str]:
        raise LookupError("no owner in response")

    definition = M.define("deleteLand").invalidates(broken)

    error = expect_error(await ctx.mutations.mutate(definition, {"land_id": "l2"}))

    assert fake_api.calls["deleteLand"] == 1
    assert "no owner in response" in error.detail


@pytest.mark.asyncio
async def test_failing_hook_after_write_comes_back_as_error(ctx: CacheContext) -> None:
    await ctx.queries.query(api.GET_PRODUCTS)

    def hook(data: object, session: AuthSession | None) -> None:
        raise RuntimeError("listener exploded")

    definition = api.CREATE_PRODUCT.on_success(hook)
    body = {"name": "Garlic Spray", "category": "Botanical", "price": 12}

    error = expect_error(await ctx.mutations.mutate(definition, body=body))

    assert "listener exploded" in error.detail
    assert _stale(ctx, api.GET_PRODUCTS)


@pytest.mark.asyncio
async def test_read_only_transport_rejects_writes(fake_api: FakeApi) -> None:
    ctx = harvest.context(transport_from(fetch=fake_api.fetch)).build()

    error = expect_error(await ctx.mutations.mutate(api.CREATE_PRODUCT, body={}))

    assert error.status is None
    assert "no mutation handler" in error.detail


@pytest.mark.asyncio
async def test_unauthorized_mutation_is_reported(ctx: CacheContext, session: AuthSession) -> None:
    session.logout()

    error = expect_error(await ctx.mutations.mutate(api.CREATE_LAND, body={"title": "x"}))

    assert error.is_unauthorized


# ═══════════════════════════════════════════════════════════════════════════════
# Subscribers See The Refresh
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_subscriber_sees_stale_then_fresh_data(ctx: CacheContext, fake_api: FakeApi) -> None:
    seen: list[CacheEntry] = []
    params = {"user_id": "owner-1"}
    sub = ctx.queries.subscribe(api.GET_USER_LANDS, params, seen.append)
    await sub.initial
    assert [land.id for land in seen[-1].data] == ["l1"]
    seen.clear()

    created = expect_ok(await ctx.mutations.mutate(api.CREATE_LAND, body={"title": "Orchard"}))
    await ctx.queries.select(api.GET_USER_LANDS, params).in_flight

    assert [(e.status, e.stale) for e in seen] == [
        (Status.SUCCESS, True),
        (Status.LOADING, True),
        (Status.SUCCESS, False),
    ]
    assert [land.id for land in seen[-1].data] == ["l1", created.id]
    assert fake_api.calls["UserLands"] == 2
    sub.unsubscribe()


# ═══════════════════════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_stores_credentials(ctx: CacheContext, session: AuthSession, fake_api: FakeApi) -> None:
    session.logout()
    changes: list[str | None] = []
    session.listen(lambda s: changes.append(s.token))

    response = expect_ok(
        await ctx.mutations.mutate(api.LOGIN, body={"email": "asha@example.com", "password": "secret"})
    )

    assert response.token == "token-asha@example.com"
    assert session.is_authenticated
    assert session.user_id == "u-asha@example.com"
    assert session.user.role == "farmer"
    assert changes == ["token-asha@example.com"]

    expect_ok(await ctx.queries.query(api.GET_USER_ORDERS))
    assert fake_api.tokens_seen[-1] == "token-asha@example.com"


@pytest.mark.asyncio
async def test_signup_signs_the_user_in(ctx: CacheContext, session: AuthSession) -> None:
    session.logout()

    body = {"email": "kofi@example.com", "password": "pw", "full_name": "Kofi", "role": "landowner"}
    expect_ok(await ctx.mutations.mutate(api.SIGNUP, body=body))

    assert session.user.full_name == "Kofi"
    assert session.user.role == "landowner"


@pytest.mark.asyncio
async def test_failed_login_keeps_session_signed_out(ctx: CacheContext, session: AuthSession, fake_api: FakeApi) -> None:
    session.logout()
    fake_api.failures["login"] = TransportError(401, "Invalid credentials")

    error = expect_error(await ctx.mutations.mutate(api.LOGIN, body={"email": "x@y.z", "password": "no"}))

    assert error.detail == "Invalid credentials"
    assert not session.is_authenticated
