"""Fixed-capacity jax arenas branded by a marker.

An arena and every index it hands out carry the same marker. Index
operations check the brand before touching device arrays, so an index
allocated in one arena is rejected by every other arena, including arenas
for the same logical type opened in another extent.

The arena is a NamedTuple of a marker and jax arrays, so it is a storable
value as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

import jax.numpy as jnp

from genz.marker import Marker, require_brand
from genz_core.errors import GenzSafetyModeError


class SafetyMode(str, Enum):
    """How ``gather`` treats indices outside the arena's live slots."""

    CORRUPT = "corrupt"
    CLAMP = "clamp"
    DROP = "drop"


@dataclass(frozen=True, slots=True)
class SafetyPolicy:
    """Out-of-bounds policy for arena gathers.

    corrupt reports the read in ``GatherResult.corrupt``; clamp reads the
    nearest live slot; drop reads zeros. Only corrupt ever flags a read.
    """

    mode: SafetyMode | str = SafetyMode.CORRUPT

    def __post_init__(self):
        mode = self.mode
        if isinstance(mode, str) and not isinstance(mode, SafetyMode):
            mode = {m.value: m for m in SafetyMode}.get(mode.strip().lower(), mode)
        if not isinstance(mode, SafetyMode):
            raise GenzSafetyModeError(mode=self.mode)
        object.__setattr__(self, "mode", mode)


DEFAULT_SAFETY_POLICY = SafetyPolicy()


class BrandedArena(NamedTuple):
    brand: Marker
    values: jnp.ndarray
    count: jnp.ndarray
    oom: jnp.ndarray


class ArenaIndex(NamedTuple):
    brand: Marker
    idx: jnp.ndarray


class GatherResult(NamedTuple):
    values: jnp.ndarray
    ok: jnp.ndarray
    corrupt: jnp.ndarray


def init_arena(brand: Marker, capacity: int, dtype=jnp.int32) -> BrandedArena:
    if not isinstance(brand, Marker):
        raise TypeError("init_arena expected Marker brand")
    if capacity <= 0:
        raise ValueError("arena capacity must be positive")
    return BrandedArena(
        brand=brand,
        values=jnp.zeros(capacity, dtype=dtype),
        count=jnp.array(0, dtype=jnp.int32),
        oom=jnp.array(False, dtype=jnp.bool_),
    )


def _require_index(arena: BrandedArena, index: ArenaIndex, label: str) -> None:
    if not isinstance(index, ArenaIndex):
        raise TypeError(f"{label} expected ArenaIndex")
    require_brand(arena.brand, index.brand, label=label)


def alloc(arena: BrandedArena, values) -> tuple[BrandedArena, ArenaIndex]:
    """Append ``values``; on overflow set ``oom`` and return sentinel indices."""
    require_brand(arena.brand, label="arena.alloc")
    values = jnp.asarray(values, dtype=arena.values.dtype)
    capacity = arena.values.shape[0]
    n = values.shape[0]
    start = arena.count.astype(jnp.int32)
    ok = (start + n <= capacity) & (~arena.oom)
    idx = start + jnp.arange(n, dtype=jnp.int32)
    # Sentinel == capacity is dropped by scatter and flagged by gather.
    idx = jnp.where(ok, idx, jnp.int32(capacity))
    new_values = arena.values.at[idx].set(values, mode="drop")
    new_arena = arena._replace(
        values=new_values,
        count=jnp.where(ok, start + n, start).astype(jnp.int32),
        oom=arena.oom | ~ok,
    )
    return new_arena, ArenaIndex(brand=arena.brand, idx=idx)


def gather(
    arena: BrandedArena,
    index: ArenaIndex,
    label: str = "arena.gather",
    *,
    policy: SafetyPolicy | None = None,
) -> GatherResult:
    """Policy-aware gather of live slots through a branded index."""
    _require_index(arena, index, label)
    if policy is None:
        policy = DEFAULT_SAFETY_POLICY
    size = arena.count.astype(jnp.int32)
    idx_i = jnp.asarray(index.idx, dtype=jnp.int32)
    ok = (idx_i >= 0) & (idx_i < size)
    idx_safe = jnp.clip(idx_i, 0, jnp.maximum(size - 1, 0))
    if policy.mode == SafetyMode.DROP:
        idx_safe = jnp.where(ok, idx_safe, jnp.int32(0))
    values = arena.values[idx_safe]
    if policy.mode == SafetyMode.DROP:
        values = jnp.where(ok, values, jnp.zeros_like(values))
    if policy.mode == SafetyMode.CORRUPT:
        corrupt = ~ok
    else:
        corrupt = jnp.zeros_like(ok, dtype=jnp.bool_)
    if policy.mode == SafetyMode.CLAMP:
        ok = jnp.ones_like(ok, dtype=jnp.bool_)
    return GatherResult(values=values, ok=ok, corrupt=corrupt)


def scatter(
    arena: BrandedArena,
    index: ArenaIndex,
    values,
    label: str = "arena.scatter",
) -> BrandedArena:
    """Overwrite live slots through a branded index; other slots are dropped."""
    _require_index(arena, index, label)
    idx_i = jnp.asarray(index.idx, dtype=jnp.int32)
    capacity = arena.values.shape[0]
    live = (idx_i >= 0) & (idx_i < arena.count)
    idx_i = jnp.where(live, idx_i, jnp.int32(capacity))
    values = jnp.asarray(values, dtype=arena.values.dtype)
    return arena._replace(values=arena.values.at[idx_i].set(values, mode="drop"))


__all__ = [
    "SafetyMode",
    "SafetyPolicy",
    "DEFAULT_SAFETY_POLICY",
    "BrandedArena",
    "ArenaIndex",
    "GatherResult",
    "init_arena",
    "alloc",
    "gather",
    "scatter",
]
