from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class DuplicateLogicalTypeError(ValueError):
    """A requested type tuple names the same logical type more than once."""

    names: tuple[str, ...]
    duplicates: tuple[tuple[int, int], ...]
    context: str | None = None

    def __str__(self) -> str:
        pairs = ", ".join(
            f"{self.names[i]} at {i} and {j}" for i, j in self.duplicates
        )
        return f"duplicate logical type in tuple: {pairs}"


@dataclass(frozen=True)
class ExtentViolationError(RuntimeError):
    """Base class for extent consistency violations."""

    message: str
    label: str | None = None

    def __str__(self) -> str:
        if self.label:
            return f"{self.message} in {self.label}"
        return self.message


@dataclass(frozen=True)
class ExtentEscapeError(ExtentViolationError):
    pass


@dataclass(frozen=True)
class ExtentMismatchError(ExtentViolationError):
    pass


@dataclass(frozen=True)
class ExtentThreadError(ExtentViolationError):
    pass


@dataclass(frozen=True)
class AccessConflictError(ExtentViolationError):
    pass


@dataclass(frozen=True)
class GenzGuardModeError(ValueError):
    mode: object
    allowed: tuple[str, ...] = ("strict", "lazy")
    context: str | None = None

    def __str__(self) -> str:
        return f"unknown guard_mode={self.mode!r}"


@dataclass(frozen=True)
class GenzSafetyModeError(ValueError):
    mode: object
    allowed: tuple[str, ...] = ("corrupt", "clamp", "drop")
    context: str | None = None

    def __str__(self) -> str:
        return f"unknown safety mode={self.mode!r}"


def _names_tuple(values: Iterable[object]) -> tuple[str, ...]:
    return tuple(str(v) for v in values)


__all__ = [
    "DuplicateLogicalTypeError",
    "ExtentViolationError",
    "ExtentEscapeError",
    "ExtentMismatchError",
    "ExtentThreadError",
    "AccessConflictError",
    "GenzGuardModeError",
    "GenzSafetyModeError",
    "_names_tuple",
]
