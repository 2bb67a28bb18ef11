"""Marker mint.

A marker is the pair (extent, descriptor): proof that one logical type is
claimed within one extent. Markers carry no payload and cannot be copied,
pickled or constructed directly; the only way to obtain two markers for the
same type is to open two extents, and those markers then differ by extent.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from genz_core.config import DEFAULT_GENZ_CONFIG, GenzConfig
from genz_core.descriptors import LogicalType, TypeDescriptor, descriptor_of
from genz_core.errors import ExtentMismatchError

from genz.convert import collect_extents, rebind
from genz.extent import Extent, open_extent, require_live, require_same_extent

T = TypeVar("T")
Z = TypeVar("Z")

_MINT = object()


class Marker(Generic[T]):
    """Opaque token: logical type ``T`` is unique within one extent.

    ``extent`` checks liveness under the config the marker was minted with.
    """

    __slots__ = ("_extent", "_descriptor", "_cfg")

    def __init__(
        self,
        extent: Extent,
        descriptor: TypeDescriptor,
        *,
        cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
        _token=None,
    ):
        if _token is not _MINT:
            raise TypeError("markers are only created by the mint")
        self._extent = extent
        self._descriptor = descriptor
        self._cfg = cfg

    @property
    def extent(self) -> Extent:
        require_live(self._extent, label="Marker.extent", cfg=self._cfg)
        return self._extent

    @property
    def descriptor(self) -> TypeDescriptor:
        return self._descriptor

    def __eq__(self, other) -> bool:
        if not isinstance(other, Marker):
            return NotImplemented
        return self._extent is other._extent and self._descriptor == other._descriptor

    def __hash__(self) -> int:
        return hash((id(self._extent), self._descriptor))

    def __copy__(self):
        raise TypeError("markers cannot be duplicated")

    def __deepcopy__(self, memo):
        raise TypeError("markers cannot be duplicated")

    def __reduce__(self):
        raise TypeError("markers cannot be pickled")

    def __repr__(self) -> str:
        return f"Marker({self._descriptor}, {self._extent!r})"


def _new_marker(extent: Extent, descriptor: TypeDescriptor, cfg: GenzConfig) -> Marker:
    return Marker(extent, descriptor, cfg=cfg, _token=_MINT)


@rebind.register(Marker)
def _rebind_marker(value: Marker, extent: Extent) -> Marker:
    return _new_marker(extent, value._descriptor, value._cfg)


@collect_extents.register(Marker)
def _collect_marker(value: Marker, out: list, seen: set) -> None:
    out.append(value._extent)


def mint(
    extent: Extent,
    logical_type: LogicalType,
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Marker:
    """Tag ``logical_type`` with ``extent``.

    No uniqueness check happens here; callers get uniqueness from a fresh
    extent (``with_single_type``) or from the prover (``try_mint_tuple``).
    """
    require_live(extent, label="mint", cfg=cfg)
    return _new_marker(extent, descriptor_of(logical_type), cfg)


def extent_of(marker: Marker, *, cfg: GenzConfig = DEFAULT_GENZ_CONFIG) -> Extent:
    require_live(marker._extent, label="extent_of", cfg=cfg)
    return marker._extent


def with_single_type(
    logical_type: LogicalType,
    body: Callable[[Marker], Z],
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Z:
    """Invoke ``body`` with a marker for ``logical_type`` in a fresh extent."""
    return open_extent(lambda extent: body(mint(extent, logical_type, cfg=cfg)), cfg=cfg)


def require_brand(
    expected: Marker,
    *markers: Marker,
    label: str = "require_brand",
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Marker:
    """Check that every marker equals ``expected``.

    Markers for the same descriptor from another activation, and markers for
    another descriptor in the same extent, both raise ExtentMismatchError.
    """
    for marker in (expected, *markers):
        if not isinstance(marker, Marker):
            raise TypeError(f"{label} expected Marker, got {type(marker).__name__}")
    require_same_extent(expected, *markers, label=label, cfg=cfg)
    for marker in markers:
        if marker._descriptor != expected._descriptor:
            raise ExtentMismatchError(
                f"marker for {marker._descriptor} where {expected._descriptor} was required",
                label=label,
            )
    return expected


__all__ = [
    "Marker",
    "mint",
    "extent_of",
    "with_single_type",
    "require_brand",
]
