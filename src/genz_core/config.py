from __future__ import annotations

from dataclasses import dataclass
import os

from genz_core.modes import GuardMode, coerce_guard_mode

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name, "").strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


@dataclass(frozen=True, slots=True)
class GenzConfig:
    """Guard configuration for extent checks (control-plane).

    guard_mode:
      - "strict": scan activation results on return and on dereference
      - "lazy": only reject escaped extents when they are dereferenced
    thread_guard: reject extents dereferenced off their owning thread.
    """

    guard_mode: GuardMode | str = GuardMode.STRICT
    thread_guard: bool = True

    def __post_init__(self):
        object.__setattr__(
            self,
            "guard_mode",
            coerce_guard_mode(self.guard_mode, context="GenzConfig.guard_mode"),
        )

    @property
    def strict(self) -> bool:
        return self.guard_mode == GuardMode.STRICT

    @staticmethod
    def from_env() -> "GenzConfig":
        if _env_flag("GENZ_TEST_GUARDS", False):
            return GenzConfig(guard_mode=GuardMode.STRICT, thread_guard=True)
        guard_mode = coerce_guard_mode(
            os.environ.get("GENZ_GUARD_MODE", ""), context="GENZ_GUARD_MODE"
        )
        thread_guard = _env_flag("GENZ_THREAD_GUARD", True)
        return GenzConfig(guard_mode=guard_mode, thread_guard=thread_guard)


DEFAULT_GENZ_CONFIG = GenzConfig.from_env()


__all__ = ["GenzConfig", "DEFAULT_GENZ_CONFIG"]
