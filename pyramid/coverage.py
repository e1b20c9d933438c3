from __future__ import annotations

import logging
import math
from typing import Iterator, Tuple

from common.types import TileIndex
from pyramid.mercator import MercatorPyramid


log = logging.getLogger(__name__)


def tile_range(
    pyramid: MercatorPyramid,
    south: float,
    west: float,
    north: float,
    east: float,
    zoom: int,
) -> Tuple[int, int, int, int]:
    """
    Inclusive TMS tile range (tminx, tminy, tmaxx, tmaxy) covering a lat/lon box.

    The north and east edges are half-open: a box ending exactly on a tile
    boundary does not pick up the tile that only touches that edge. The range
    is clipped to the pyramid, so a box touching +/-180 or the Mercator
    latitude limit never yields tiles outside [0, 2**zoom - 1].
    """
    if south > north or west > east:
        raise ValueError(f"Invalid bounds: south={south} west={west} north={north} east={east}")
    tminx, tminy = pyramid.lat_lon_to_tile(south, west, zoom)

    px, py = pyramid.lat_lon_to_pixels(north, east, zoom)
    # rejects NaN/inf before the ceil below
    pyramid.pixels_to_tile(px, py)
    ts = pyramid.tile_size
    tmaxx = max(tminx, math.ceil(px / ts) - 1)
    tmaxy = max(tminy, math.ceil(py / ts) - 1)

    last = 2 ** zoom - 1
    tminx, tminy = max(0, tminx), max(0, tminy)
    tmaxx, tmaxy = min(last, tmaxx), min(last, tmaxy)
    log.debug("tile_range zoom=%d -> x %d..%d y %d..%d", zoom, tminx, tmaxx, tminy, tmaxy)
    return tminx, tminy, tmaxx, tmaxy


def tiles_for_bounds(
    pyramid: MercatorPyramid,
    south: float,
    west: float,
    north: float,
    east: float,
    zoom: int,
) -> Iterator[TileIndex]:
    """Yield every tile of the box, row by row from south to north, west to east."""
    tminx, tminy, tmaxx, tmaxy = tile_range(pyramid, south, west, north, east, zoom)
    for ty in range(tminy, tmaxy + 1):
        for tx in range(tminx, tmaxx + 1):
            yield TileIndex(tx, ty, zoom)
