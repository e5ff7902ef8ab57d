from __future__ import annotations

import operator
from typing import Any

from minstore import SelectorSubscription, create, same_value, shallow_equal, subscribe_with_selector


def _slice_recorder() -> tuple[list[tuple[Any, Any]], Any]:
    calls: list[tuple[Any, Any]] = []

    def listener(current: Any, previous: Any) -> None:
        calls.append((current, previous))

    return calls, listener


def test_slice_listener_fires_only_when_slice_changes() -> None:
    store = create(lambda s, g, a: {"a": 1, "b": 2})
    calls, listener = _slice_recorder()
    store.subscribe(listener, selector=lambda s: s["a"])

    store.set_state({"b": 99})
    assert calls == []

    store.set_state({"a": 2})
    assert calls == [(2, 1)]


def test_subscribe_selector_tracks_previous_slice() -> None:
    store = create(lambda s, g, a: {"a": 1})
    calls, listener = _slice_recorder()
    store.subscribe_selector(listener, lambda s: s["a"])

    store.set_state({"a": 2})
    store.set_state({"a": 2})
    store.set_state({"a": 5})

    assert calls == [(2, 1), (5, 2)]


def test_selector_runs_at_registration_without_notifying() -> None:
    store = create(lambda s, g, a: {"a": 1})
    selector_calls: list[Any] = []
    calls, listener = _slice_recorder()

    def selector(state: dict[str, int]) -> int:
        selector_calls.append(state)
        return state["a"]

    store.subscribe(listener, selector=selector)

    assert selector_calls == [{"a": 1}]
    assert calls == []


def test_equality_only_uses_whole_state_as_slice() -> None:
    store = create(lambda s, g, a: {"a": 1, "b": 2})
    calls, listener = _slice_recorder()
    store.subscribe(listener, equality_fn=lambda old, new: old["a"] == new["a"])
    before = store.get_state()

    store.set_state({"b": 3})
    assert calls == []

    store.set_state({"a": 2})
    assert len(calls) == 1
    assert calls[0][0] is store.get_state()
    # The stored slice was not advanced by the ignored {"b": 3} commit.
    assert calls[0][1] is before


def test_default_equality_compares_containers_by_identity() -> None:
    store = create(lambda s, g, a: {"a": 1, "b": 2})
    calls, listener = _slice_recorder()
    store.subscribe(listener, selector=lambda s: {"a": s["a"]})

    store.set_state({"b": 3})

    assert calls == [({"a": 1}, {"a": 1})]


def test_shallow_equal_suppresses_fresh_container_slices() -> None:
    store = create(lambda s, g, a: {"a": 1, "b": 2, "c": 3})
    calls, listener = _slice_recorder()
    store.subscribe(listener, selector=lambda s: (s["a"], s["b"]), equality_fn=shallow_equal)

    store.set_state({"c": 4})
    assert calls == []

    store.set_state({"b": 5})
    assert calls == [((1, 5), (1, 2))]


def test_unsubscribe_removes_slice_listener() -> None:
    store = create(lambda s, g, a: {"a": 1})
    calls, listener = _slice_recorder()
    unsubscribe = store.subscribe(listener, selector=lambda s: s["a"])
    assert store.listener_count == 1

    unsubscribe()
    unsubscribe()
    store.set_state({"a": 2})

    assert calls == []
    assert store.listener_count == 0


def test_slice_computed_from_latest_state_after_nested_update() -> None:
    store = create(lambda s, g, a: {"a": 0})
    calls, listener = _slice_recorder()

    def escalate(state: dict[str, int], previous: dict[str, int]) -> None:
        if state["a"] == 1:
            store.set_state({"a": 2})

    store.subscribe(escalate)
    store.subscribe(listener, selector=lambda s: s["a"])

    store.set_state({"a": 1})

    assert calls == [(2, 0)]


def test_subscribe_with_selector_registers_subscription_record() -> None:
    store = create(lambda s, g, a: {"a": 1})
    calls, listener = _slice_recorder()

    subscribe_with_selector(store, listener, operator.itemgetter("a"))
    record = next(iter(store._listeners.values()))  # noqa: SLF001

    assert isinstance(record, SelectorSubscription)
    assert record.current_slice == 1

    store.set_state({"a": 3})
    assert record.current_slice == 3
    assert calls == [(3, 1)]


def test_shallow_equal_mappings() -> None:
    shared = object()
    assert shallow_equal({"x": shared}, {"x": shared})
    assert not shallow_equal({"x": shared}, {"x": object()})
    assert not shallow_equal({"x": shared}, {"y": shared})


def test_shallow_equal_sequences_and_scalars() -> None:
    shared = object()
    assert shallow_equal([shared, 1], (shared, 1))
    assert not shallow_equal([shared], [shared, shared])
    assert shallow_equal("abc", "abc")
    assert not shallow_equal("abc", ["a", "b", "c"])
    assert shallow_equal(1.5, 1.5)


def test_default_equality_ignores_recomputed_equal_number() -> None:
    store = create(lambda s, g, a: {"a": 500, "b": 500, "c": 0})
    calls, listener = _slice_recorder()
    store.subscribe(listener, selector=lambda s: s["a"] + s["b"])

    store.set_state({"c": 1})
    assert calls == []

    store.set_state({"b": 501})
    assert calls == [(1001, 1000)]


def test_default_equality_ignores_rebuilt_equal_string() -> None:
    store = create(lambda s, g, a: {"name": "adaada"})
    calls, listener = _slice_recorder()
    store.subscribe_selector(listener, lambda s: s["name"])

    store.set_state({"name": "".join(["ada", "ada"])})

    assert calls == []


def test_same_value_by_value_for_scalars_only() -> None:
    assert same_value(10**6, int("1000000"))
    assert same_value("ab", "".join(["a", "b"]))
    assert same_value(float("nan"), float("nan"))
    assert not same_value(True, 1)
    assert not same_value(1, 1.0)
    assert not same_value({"a": 1}, {"a": 1})
    assert not same_value([1], [1])
