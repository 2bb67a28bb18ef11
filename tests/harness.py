"""Shared helpers for extent/marker tests."""

from typing import NewType

import genz

U8 = NewType("U8", int)
U16 = NewType("U16", int)
U32 = NewType("U32", int)


def leak_extent():
    """Return an extent after its activation has closed (lazy guards)."""
    cfg = genz.GenzConfig(guard_mode="lazy")
    return genz.open_extent(lambda extent: extent, cfg=cfg)


def leak_marker(logical_type=U8):
    cfg = genz.GenzConfig(guard_mode="lazy")
    return genz.with_single_type(logical_type, lambda marker: marker, cfg=cfg)


def tuple_markers(logical_types):
    """Return the descriptors of the markers minted for ``logical_types``."""
    return genz.try_with_type_tuple(
        logical_types,
        lambda _, markers: tuple(m.descriptor for m in markers),
    )


def shares_extent(*markers) -> bool:
    try:
        genz.require_same_extent(*markers)
    except genz.ExtentMismatchError:
        return False
    return True
