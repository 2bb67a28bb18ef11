from typing import NewType

import jax.numpy as jnp
import pytest

import genz
from genz import Stored
from genz_arena import (
    SafetyMode,
    SafetyPolicy,
    alloc,
    gather,
    init_arena,
    scatter,
)
from genz_core.errors import GenzSafetyModeError

Node = NewType("Node", int)
Edge = NewType("Edge", int)

pytestmark = [
    pytest.mark.arena,
    pytest.mark.backend_matrix,
    pytest.mark.usefixtures("backend_device"),
]


def test_alloc_then_gather_reads_back_values():
    def _body(brand):
        arena = init_arena(brand, 8)
        arena, idx = alloc(arena, jnp.array([5, 6, 7], dtype=jnp.int32))
        res = gather(arena, idx)
        return (
            [int(v) for v in res.values],
            bool(jnp.all(res.ok)),
            bool(jnp.any(res.corrupt)),
            int(arena.count),
        )

    assert genz.with_single_type(Node, _body) == ([5, 6, 7], True, False, 3)


def test_index_from_same_type_other_arena_is_rejected():
    def _outer(a):
        arena_a, idx_a = alloc(init_arena(a, 4), jnp.array([1], dtype=jnp.int32))

        def _inner(b):
            arena_b, _ = alloc(init_arena(b, 4), jnp.array([2], dtype=jnp.int32))
            with pytest.raises(genz.ExtentMismatchError):
                gather(arena_b, idx_a)
            with pytest.raises(genz.ExtentMismatchError):
                scatter(arena_b, idx_a, jnp.array([9], dtype=jnp.int32))
            return int(gather(arena_a, idx_a).values[0])

        return genz.with_single_type(Node, _inner)

    assert genz.with_single_type(Node, _outer) == 1


def test_index_across_types_in_one_extent_is_rejected():
    def _body(extent, markers):
        nodes = init_arena(markers[0], 4)
        edges = init_arena(markers[1], 4)
        nodes, node_idx = alloc(nodes, jnp.array([3], dtype=jnp.int32))
        with pytest.raises(genz.ExtentMismatchError, match="was required"):
            gather(edges, node_idx)
        return True

    assert genz.with_type_tuple((Node, Edge), _body)


def test_overflow_sets_oom_and_corrupts_under_default_policy():
    def _body(brand):
        arena = init_arena(brand, 2)
        arena, _ = alloc(arena, jnp.array([1], dtype=jnp.int32))
        arena, idx = alloc(arena, jnp.array([2, 3], dtype=jnp.int32))
        res = gather(arena, idx)
        return (
            bool(arena.oom),
            int(arena.count),
            [int(i) for i in idx.idx],
            [bool(c) for c in res.corrupt],
        )

    assert genz.with_single_type(Node, _body) == (True, 1, [2, 2], [True, True])


@pytest.mark.parametrize(
    "mode, expected_values, expected_ok, expected_corrupt",
    [
        ("corrupt", [4, 5], [True, False], [False, True]),
        ("clamp", [4, 5], [True, True], [False, False]),
        ("drop", [4, 0], [True, False], [False, False]),
    ],
)
def test_gather_policy_modes(mode, expected_values, expected_ok, expected_corrupt):
    def _body(brand):
        arena = init_arena(brand, 4)
        arena, _ = alloc(arena, jnp.array([4, 5], dtype=jnp.int32))
        idx = arena_index(brand, [0, 9])
        res = gather(arena, idx, policy=SafetyPolicy(mode))
        return (
            [int(v) for v in res.values],
            [bool(v) for v in res.ok],
            [bool(v) for v in res.corrupt],
        )

    assert genz.with_single_type(Node, _body) == (
        expected_values,
        expected_ok,
        expected_corrupt,
    )


def arena_index(brand, values):
    from genz_arena import ArenaIndex

    return ArenaIndex(brand=brand, idx=jnp.array(values, dtype=jnp.int32))


def test_scatter_overwrites_live_slots_only():
    def _body(brand):
        arena = init_arena(brand, 4)
        arena, idx = alloc(arena, jnp.array([1, 2], dtype=jnp.int32))
        arena = scatter(arena, arena_index(brand, [1, 3]), jnp.array([8, 9], dtype=jnp.int32))
        return [int(v) for v in arena.values]

    assert genz.with_single_type(Node, _body) == [1, 8, 0, 0]


def test_stored_arena_round_trip():
    stored = Stored.construct_from_type(Node, lambda brand: init_arena(brand, 4))
    stored.update(lambda a: alloc(a, jnp.array([10, 20], dtype=jnp.int32))[0])
    assert stored.with_ref(lambda a: int(a.count)) == 2
    assert stored.with_ref(lambda a: [int(v) for v in a.values[:2]]) == [10, 20]

    def _read(a):
        return int(gather(a, arena_index(a.brand, [1])).values[0])

    assert stored.with_ref(_read) == 20


def test_stored_arena_index_cannot_escape():
    stored = Stored.construct_from_type(Node, lambda brand: init_arena(brand, 4))
    with pytest.raises(genz.ExtentEscapeError):
        stored.with_ref(lambda a: alloc(a, jnp.array([1], dtype=jnp.int32))[1])


def test_closed_arena_is_rejected():
    lazy = genz.GenzConfig(guard_mode="lazy")
    leaked = genz.with_single_type(Node, lambda brand: init_arena(brand, 2), cfg=lazy)
    with pytest.raises(genz.ExtentEscapeError):
        alloc(leaked, jnp.array([1], dtype=jnp.int32))


def test_init_arena_validates_inputs():
    with pytest.raises(TypeError, match="Marker"):
        init_arena("brand", 4)
    with pytest.raises(ValueError, match="positive"):
        genz.with_single_type(Node, lambda brand: init_arena(brand, 0))


def test_unknown_safety_mode_is_rejected():
    with pytest.raises(GenzSafetyModeError, match="unknown safety mode"):
        SafetyPolicy("wrap")


def test_safety_mode_strings_are_normalized():
    assert SafetyPolicy(" Drop ").mode is SafetyMode.DROP
    assert SafetyPolicy(SafetyMode.CLAMP).mode is SafetyMode.CLAMP
    assert SafetyPolicy().mode is SafetyMode.CORRUPT
