"""Capability tokens branded by invariant extents.

Single control surface for the extent authority, marker mint, distinctness
prover and storable bridge.
"""

from genz_core.config import DEFAULT_GENZ_CONFIG, GenzConfig
from genz_core.descriptors import LogicalType, TypeDescriptor, descriptor_of
from genz_core.errors import (
    AccessConflictError,
    DuplicateLogicalTypeError,
    ExtentEscapeError,
    ExtentMismatchError,
    ExtentThreadError,
    ExtentViolationError,
    GenzGuardModeError,
)
from genz_core.modes import GuardMode

from genz.convert import collect_extents, extents_in, rebind
from genz.extent import (
    ROOT_EXTENT,
    Extent,
    Scope,
    open_extent,
    open_scope,
    require_live,
    require_same_extent,
)
from genz.marker import Marker, extent_of, require_brand, with_single_type
from genz.distinct import (
    DistinctProof,
    find_duplicates,
    is_distinct,
    prove_distinct,
    try_mint_tuple,
    try_with_type_tuple,
    with_type_tuple,
)
from genz.storable import Stored, erase

__all__ = [
    "GenzConfig",
    "DEFAULT_GENZ_CONFIG",
    "GuardMode",
    "LogicalType",
    "TypeDescriptor",
    "descriptor_of",
    "AccessConflictError",
    "DuplicateLogicalTypeError",
    "ExtentEscapeError",
    "ExtentMismatchError",
    "ExtentThreadError",
    "ExtentViolationError",
    "GenzGuardModeError",
    "rebind",
    "collect_extents",
    "extents_in",
    "ROOT_EXTENT",
    "Extent",
    "Scope",
    "open_extent",
    "open_scope",
    "require_live",
    "require_same_extent",
    "Marker",
    "extent_of",
    "require_brand",
    "with_single_type",
    "DistinctProof",
    "find_duplicates",
    "is_distinct",
    "prove_distinct",
    "try_mint_tuple",
    "try_with_type_tuple",
    "with_type_tuple",
    "Stored",
    "erase",
]
