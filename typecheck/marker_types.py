from typing import TYPE_CHECKING, NewType, assert_type

import genz
from genz import Extent, Marker, Stored


if TYPE_CHECKING:
    U8 = NewType("U8", int)

    assert_type(genz.open_extent(lambda extent: 1), int)
    assert_type(genz.with_single_type(U8, lambda marker: "u8"), str)
    assert_type(genz.try_with_type_tuple((U8, int), lambda e, ms: len(ms)), int | None)
    assert_type(genz.with_type_tuple((U8, int), lambda e, ms: len(ms)), int)

    stored = Stored.construct_from_extent(lambda extent: (extent, 3))
    assert_type(stored.with_ref(lambda v: v[1]), int)
    assert_type(genz.ROOT_EXTENT, Extent)

    def _brand_of(marker: Marker[U8]) -> Extent:
        return marker.extent

    bad_marker: Marker[U8] = genz.ROOT_EXTENT  # type: ignore
    _ = stored.with_ref(1)  # type: ignore
