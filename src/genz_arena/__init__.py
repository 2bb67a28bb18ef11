from genz_arena.arena import (
    DEFAULT_SAFETY_POLICY,
    ArenaIndex,
    BrandedArena,
    GatherResult,
    SafetyMode,
    SafetyPolicy,
    alloc,
    gather,
    init_arena,
    scatter,
)

__all__ = [
    "ArenaIndex",
    "BrandedArena",
    "GatherResult",
    "alloc",
    "gather",
    "init_arena",
    "scatter",
    "DEFAULT_SAFETY_POLICY",
    "SafetyMode",
    "SafetyPolicy",
]
