from __future__ import annotations

import asyncio

import pytest

import harvest
from harvest import CacheContext, CachePolicy, api
from harvest import cart as K
from harvest.auth import AuthSession
from harvest.transport import transport_from

from conftest import FakeApi, expect_ok, settle


def test_builder_is_immutable(fake_api: FakeApi) -> None:
    builder = harvest.context(transport_from(fetch=fake_api.fetch))
    lazy = builder.policy(CachePolicy().with_refetch_on_invalidate(False))

    assert builder.build().policy.refetch_on_invalidate is True
    assert lazy.build().policy.refetch_on_invalidate is False


def test_build_creates_signed_out_session(fake_api: FakeApi) -> None:
    ctx = harvest.context(transport_from(fetch=fake_api.fetch)).build()

    assert isinstance(ctx.session, AuthSession)
    assert not ctx.session.is_authenticated
    assert len(ctx.store) == 0


def test_policy_bounds_the_store(fake_api: FakeApi) -> None:
    policy = CachePolicy().with_max_unused_entries(1)
    ctx = harvest.context(transport_from(fetch=fake_api.fetch)).policy(policy).build()

    ctx.store.upsert("a")
    ctx.store.upsert("b")

    assert list(ctx.store.keys()) == ["b"]


def test_policy_rejects_negative_bound() -> None:
    with pytest.raises(ValueError):
        CachePolicy().with_max_unused_entries(-1)


@pytest.mark.asyncio
async def test_contexts_do_not_share_state(fake_api: FakeApi) -> None:
    transport = transport_from(fetch=fake_api.fetch)
    first = harvest.context(transport).build()
    second = harvest.context(transport).build()

    await first.queries.query(api.GET_LANDS)
    first.cart.add("p1")

    assert first.queries.select(api.GET_LANDS) is not None
    assert second.queries.select(api.GET_LANDS) is None
    assert len(second.cart.state) == 0

    result = expect_ok(await second.queries.query(api.GET_LANDS))
    assert result.from_cache is False
    assert fake_api.calls["Lands"] == 2


@pytest.mark.asyncio
async def test_clear_resets_everything(ctx: CacheContext, fake_api: FakeApi) -> None:
    await ctx.queries.query(api.GET_LANDS)
    ctx.cart.add("p1")

    fake_api.delay = 0.05
    pending = asyncio.create_task(_refetch(ctx))
    await settle()

    ctx.clear()

    assert len(ctx.store) == 0
    assert len(ctx.cart.state) == 0
    assert ctx.tags.keys_for("Lands") == frozenset()
    await asyncio.gather(pending, return_exceptions=True)
    assert len(ctx.store) == 0

    fake_api.delay = 0.0
    result = expect_ok(await ctx.queries.query(api.GET_LANDS))
    assert result.from_cache is False


async def _refetch(ctx: CacheContext):
    return await ctx.queries.refetch(api.GET_LANDS)


@pytest.mark.asyncio
async def test_clear_detaches_live_subscriptions(ctx: CacheContext, fake_api: FakeApi) -> None:
    seen: list[object] = []
    sub = ctx.queries.subscribe(api.GET_LANDS, None, seen.append)
    await sub.initial
    view = K.CartView(ctx.cart, ctx.queries, api.GET_PRODUCTS)
    await view.subscription.initial

    ctx.clear()

    assert sub.active is False
    assert view.active is False
    seen.clear()
    await ctx.queries.query(api.GET_LANDS)
    assert seen == []

    again = ctx.queries.subscribe(api.GET_LANDS, None, seen.append)
    assert again.active is True
    await again.initial
    assert ctx.store.get("Lands").subscriber_count == 1
    view.close()
