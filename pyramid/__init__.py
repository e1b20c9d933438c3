"""
Spherical-Mercator tile pyramid

Converts coordinates through the slippy-map stack:
WGS84 lat/lon <-> EPSG:3857 meters <-> pyramid pixels <-> TMS tiles
<-> Google/XYZ tiles <-> Microsoft QuadKeys.

Entry point:
    python -m pyramid.cli ZOOM LAT LON [LATMAX LONMAX]
"""
from .mercator import MercatorPyramid
from .quadkey import quad_key_children, quad_key_parent, quad_key_to_tile
from .coverage import tile_range, tiles_for_bounds

__all__ = [
    "MercatorPyramid",
    "quad_key_to_tile",
    "quad_key_parent",
    "quad_key_children",
    "tile_range",
    "tiles_for_bounds",
]
