from __future__ import annotations

from enum import Enum

from genz_core.errors import GenzGuardModeError


class GuardMode(str, Enum):
    STRICT = "strict"
    LAZY = "lazy"


def coerce_guard_mode(
    mode: GuardMode | str | None, *, context: str | None = None
) -> GuardMode:
    if mode is None or mode == "":
        return GuardMode.STRICT
    if isinstance(mode, GuardMode):
        return mode
    if isinstance(mode, str):
        value = mode.strip().lower()
        if value == GuardMode.STRICT.value:
            return GuardMode.STRICT
        if value == GuardMode.LAZY.value:
            return GuardMode.LAZY
    raise GenzGuardModeError(
        mode=mode,
        allowed=(GuardMode.STRICT.value, GuardMode.LAZY.value),
        context=context,
    )


__all__ = [
    "GuardMode",
    "coerce_guard_mode",
]
