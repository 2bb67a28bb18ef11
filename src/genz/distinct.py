"""Distinctness prover.

Given a tuple of logical types, decide whether every pair is distinct and,
only then, mint one marker per type inside a single shared extent. The check
is the plain O(N^2) pairwise comparison: N is a small, fixed arity at every
real call site.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Sequence, TypeVar

from genz_core.config import DEFAULT_GENZ_CONFIG, GenzConfig
from genz_core.descriptors import LogicalType, TypeDescriptor, descriptors_of
from genz_core.errors import DuplicateLogicalTypeError, _names_tuple

from genz.extent import Extent, open_extent, require_live
from genz.marker import Marker, _new_marker

logger = logging.getLogger(__name__)

Z = TypeVar("Z")


@dataclass(frozen=True, slots=True)
class DistinctProof:
    """Witness that ``descriptors`` are pairwise distinct."""

    descriptors: tuple[TypeDescriptor, ...]


def _require_types(logical_types: Sequence[LogicalType], label: str) -> tuple:
    if isinstance(logical_types, (str, bytes)) or not isinstance(
        logical_types, (tuple, list)
    ):
        raise TypeError(f"{label} expected a tuple of logical types")
    if not logical_types:
        raise TypeError(f"{label} requires at least one logical type")
    return tuple(logical_types)


def find_duplicates(logical_types: Sequence[LogicalType]) -> tuple[tuple[int, int], ...]:
    """Return every unordered position pair (i, j), i < j, naming the same type."""
    ids = descriptors_of(logical_types)
    pairs = []
    for i in range(len(ids)):
        for j in range(i + 1, len(ids)):
            if ids[i] == ids[j]:
                pairs.append((i, j))
    return tuple(pairs)


def is_distinct(logical_types: Sequence[LogicalType]) -> bool:
    return not find_duplicates(logical_types)


def prove_distinct(
    logical_types: Sequence[LogicalType], *, context: str | None = None
) -> DistinctProof:
    """Return a DistinctProof or raise DuplicateLogicalTypeError."""
    types = _require_types(logical_types, context or "prove_distinct")
    ids = descriptors_of(types)
    duplicates = find_duplicates(ids)
    if duplicates:
        logger.debug("duplicate logical types %s at %s", ids, duplicates)
        raise DuplicateLogicalTypeError(
            names=_names_tuple(ids), duplicates=duplicates, context=context
        )
    return DistinctProof(descriptors=ids)


def mint_tuple(
    proof: DistinctProof,
    extent: Extent,
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> tuple[Marker, ...]:
    """Mint one marker per proven descriptor, all in ``extent``, in order."""
    require_live(extent, label="mint_tuple", cfg=cfg)
    return tuple(_new_marker(extent, d, cfg) for d in proof.descriptors)


def try_mint_tuple(
    logical_types: Sequence[LogicalType],
    extent: Extent,
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> tuple[Marker, ...] | None:
    types = _require_types(logical_types, "try_mint_tuple")
    require_live(extent, label="try_mint_tuple", cfg=cfg)
    if len(types) == 1:
        return mint_tuple(DistinctProof(descriptors_of(types)), extent, cfg=cfg)
    try:
        proof = prove_distinct(types, context="try_mint_tuple")
    except DuplicateLogicalTypeError:
        return None
    return mint_tuple(proof, extent, cfg=cfg)


def try_with_type_tuple(
    logical_types: Sequence[LogicalType],
    body: Callable[[Extent, tuple[Marker, ...]], Z],
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Z | None:
    """Invoke ``body(extent, markers)`` if every type in the tuple is distinct.

    Returns None, without invoking ``body``, when the tuple repeats a type.
    """
    types = _require_types(logical_types, "try_with_type_tuple")

    def _body(extent: Extent):
        markers = try_mint_tuple(types, extent, cfg=cfg)
        if markers is None:
            return None
        return body(extent, markers)

    return open_extent(_body, cfg=cfg)


def with_type_tuple(
    logical_types: Sequence[LogicalType],
    body: Callable[[Extent, tuple[Marker, ...]], Z],
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Z:
    """Like ``try_with_type_tuple``, but a repeated type raises."""
    types = _require_types(logical_types, "with_type_tuple")

    def _body(extent: Extent):
        proof = prove_distinct(types, context="with_type_tuple")
        return body(extent, mint_tuple(proof, extent, cfg=cfg))

    return open_extent(_body, cfg=cfg)


__all__ = [
    "DistinctProof",
    "find_duplicates",
    "is_distinct",
    "prove_distinct",
    "mint_tuple",
    "try_mint_tuple",
    "try_with_type_tuple",
    "with_type_tuple",
]
