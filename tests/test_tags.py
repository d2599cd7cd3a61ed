from __future__ import annotations

from harvest.store import CacheStore, Status
from harvest.tags import TagIndex, tag


def _index_with(*registrations: tuple[str, set[str]]) -> tuple[CacheStore, TagIndex]:
    store = CacheStore()
    index = TagIndex(store)
    for key, tags in registrations:
        store.upsert(key, status=Status.SUCCESS, generation=1)
        index.register(key, tags)
    return store, index


def test_tag_helper() -> None:
    assert tag("Lands") == "Lands"
    assert tag("UserLands", "u1") == "UserLands:u1"
    assert tag("Profile", 7) == "Profile:7"


def test_invalidate_only_touches_dependents() -> None:
    store, index = _index_with(
        ("Lands", {"Lands"}),
        ("UserLands(u1)", {"UserLands:u1"}),
    )

    staled = index.invalidate("Lands")

    assert staled == frozenset({"Lands"})
    assert store.get("Lands").stale is True
    assert store.get("UserLands(u1)").stale is False


def test_invalidate_records_generation() -> None:
    store, index = _index_with(("Lands", {"Lands"}))
    store.upsert("Lands", generation=4)

    index.invalidate("Lands")

    assert store.get("Lands").invalidated_through == 4


def test_unknown_tag_is_a_noop() -> None:
    store, index = _index_with(("Lands", {"Lands"}))
    calls: list[frozenset[str]] = []
    index.on_invalidate(calls.append)

    assert index.invalidate("Nothing") == frozenset()
    assert calls == []
    assert store.get("Lands").stale is False


def test_invalidate_many_unions_dependents() -> None:
    store, index = _index_with(
        ("Lands", {"Lands", "Lands:l1"}),
        ("UserLands(u1)", {"UserLands:u1"}),
        ("Products", {"Products"}),
    )
    calls: list[frozenset[str]] = []
    index.on_invalidate(calls.append)

    staled = index.invalidate_many(["Lands:l1", "UserLands:u1", "Lands"])

    assert staled == frozenset({"Lands", "UserLands(u1)"})
    assert calls == [staled]
    assert store.get("Products").stale is False


def test_register_replaces_previous_tags() -> None:
    _, index = _index_with(("Lands", {"Lands", "Lands:l1"}))

    index.register("Lands", {"Lands", "Lands:l2"})

    assert index.tags_for("Lands") == frozenset({"Lands", "Lands:l2"})
    assert index.keys_for("Lands:l1") == frozenset()
    assert index.keys_for("Lands:l2") == frozenset({"Lands"})


def test_missing_entries_are_pruned_on_invalidate() -> None:
    store = CacheStore()
    index = TagIndex(store)
    index.register_dependency("Orders", "AllOrders")

    assert index.invalidate("Orders") == frozenset()
    assert index.keys_for("Orders") == frozenset()
