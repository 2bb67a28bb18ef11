"""Storable bridge.

``Stored`` owns a value built inside an extent after erasing every extent tag
it carries to the root extent. The bound shape is only reachable again through
bounded access: each ``with_ref`` / ``with_mut`` / ``update`` call opens a fresh
access extent, rebinds the erased value to it and hands that view to the
callback. Which concrete extent is used does not matter; what matters is that
one extent is threaded consistently through the view for the call, and that
nothing tagged with it survives the call.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Sequence, TypeVar

from genz_core.config import DEFAULT_GENZ_CONFIG, GenzConfig
from genz_core.descriptors import LogicalType
from genz_core.errors import AccessConflictError, ExtentEscapeError, ExtentMismatchError

from genz.convert import collect_extents, extents_in, rebind
from genz.distinct import mint_tuple, prove_distinct, try_mint_tuple
from genz.extent import ROOT_EXTENT, Extent, Scope, _reject_escape, open_extent
from genz.marker import Marker, mint

logger = logging.getLogger(__name__)

T = TypeVar("T")
Z = TypeVar("Z")

_WRITER = -1


def _require_bound_to(value, extent: Extent, label: str) -> None:
    for tag in extents_in(value):
        if tag is extent or tag is ROOT_EXTENT:
            continue
        if isinstance(tag, Scope):
            raise ExtentEscapeError("scope tokens cannot be stored", label=label)
        raise ExtentMismatchError(
            f"value carries foreign {tag!r} where {extent!r} was required",
            label=label,
        )


def erase(value: T, extent: Extent, *, label: str = "erase") -> T:
    """Convert a value bound to ``extent`` into its root-extent form."""
    _require_bound_to(value, extent, label)
    return rebind(value, ROOT_EXTENT)


class Stored(Generic[T]):
    """Long-term owner of an extent-erased value."""

    __slots__ = ("_erased", "_cfg", "_borrow")

    def __init__(self, erased: T, *, cfg: GenzConfig = DEFAULT_GENZ_CONFIG):
        self._erased = erased
        self._cfg = cfg
        self._borrow = 0

    @classmethod
    def construct_from_extent(
        cls,
        f: Callable[[Extent], T],
        *,
        cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
    ) -> "Stored[T]":
        def _build(extent: Extent):
            return cls(erase(f(extent), extent, label="construct_from_extent"), cfg=cfg)

        stored = open_extent(_build, cfg=cfg)
        logger.debug("stored %s", type(stored._erased).__name__)
        return stored

    @classmethod
    def construct_from_type(
        cls,
        logical_type: LogicalType,
        f: Callable[[Marker], T],
        *,
        cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
    ) -> "Stored[T]":
        return cls.construct_from_extent(
            lambda extent: f(mint(extent, logical_type, cfg=cfg)), cfg=cfg
        )

    @classmethod
    def try_construct_from_tuple(
        cls,
        logical_types: Sequence[LogicalType],
        f: Callable[[Extent, tuple[Marker, ...]], T],
        *,
        cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
    ) -> "Stored[T] | None":
        def _build(extent: Extent):
            markers = try_mint_tuple(logical_types, extent, cfg=cfg)
            if markers is None:
                return None
            value = f(extent, markers)
            return cls(erase(value, extent, label="try_construct_from_tuple"), cfg=cfg)

        return open_extent(_build, cfg=cfg)

    @classmethod
    def construct_from_tuple(
        cls,
        logical_types: Sequence[LogicalType],
        f: Callable[[Extent, tuple[Marker, ...]], T],
        *,
        cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
    ) -> "Stored[T]":
        def _build(extent: Extent):
            proof = prove_distinct(logical_types, context="construct_from_tuple")
            value = f(extent, mint_tuple(proof, extent, cfg=cfg))
            return cls(erase(value, extent, label="construct_from_tuple"), cfg=cfg)

        return open_extent(_build, cfg=cfg)

    def _acquire(self, writer: bool, label: str) -> None:
        if writer:
            if self._borrow != 0:
                raise AccessConflictError(
                    "stored value is already being accessed", label=label
                )
            self._borrow = _WRITER
            return
        if self._borrow == _WRITER:
            raise AccessConflictError(
                "stored value is being mutated", label=label
            )
        self._borrow += 1

    def _release(self, writer: bool) -> None:
        if writer:
            self._borrow = 0
        else:
            self._borrow -= 1

    def _access(self, g, *, writer: bool, replace: bool, label: str):
        self._acquire(writer, label)
        try:

            def _body(extent: Extent):
                view = rebind(self._erased, extent)
                result = g(view)
                if replace:
                    self._erased = erase(result, extent, label=label)
                    return None
                if self._cfg.strict:
                    _reject_escape(result, extent, label)
                if writer:
                    self._erased = erase(view, extent, label=label)
                return result

            return open_extent(_body, cfg=self._cfg)
        finally:
            self._release(writer)

    def with_ref(self, g: Callable[[T], Z]) -> Z:
        """Invoke ``g`` with a bound view; changes to the view are discarded."""
        return self._access(g, writer=False, replace=False, label="Stored.with_ref")

    def with_mut(self, g: Callable[[T], Z]) -> Z:
        """Invoke ``g`` with a bound view and store the view back afterwards."""
        return self._access(g, writer=True, replace=False, label="Stored.with_mut")

    def update(self, g: Callable[[T], T]) -> None:
        """Replace the stored value with ``g(view)``, for immutable shapes."""
        self._access(g, writer=True, replace=True, label="Stored.update")

    def __copy__(self):
        raise TypeError("stored values cannot be duplicated")

    def __deepcopy__(self, memo):
        raise TypeError("stored values cannot be duplicated")

    def __repr__(self) -> str:
        return f"Stored({type(self._erased).__name__})"


@rebind.register(Stored)
def _rebind_stored(value: Stored, extent: Extent) -> Stored:
    return value


@collect_extents.register(Stored)
def _collect_stored(value: Stored, out: list, seen: set) -> None:
    return None


__all__ = [
    "Stored",
    "erase",
]
