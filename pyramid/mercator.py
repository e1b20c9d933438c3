"""
TMS Global Mercator pyramid (EPSG:3857 / EPSG:900913).

Conversions between the coordinate spaces used by slippy-map tile servers:

     LatLon      <->      Meters      <->      Pixels      <->      Tile
  WGS84 degrees     spherical Mercator    pyramid pixels      TMS (tx, ty)
    EPSG:4326          EPSG:3857          at a zoom level     Google / QuadKey

Pixel and tile coordinates follow TMS: origin (0, 0) at the bottom-left of
the projected extent [-origin_shift, origin_shift]^2, y growing northward.

Numeric methods accept Python scalars or numpy arrays. Scalars come back as
plain float/int, arrays come back as arrays of the broadcast shape.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

import numpy as np


log = logging.getLogger(__name__)

EARTH_RADIUS_M = 6378137.0  # WGS84 semi-major axis, used as the sphere radius
DEFAULT_TILE_SIZE = 256
MAX_ZOOM_LEVELS = 30        # zoom_for_pixel_size scans 0..29


def _out_float(a: np.ndarray) -> Any:
    return float(a) if a.ndim == 0 else a


def _out_int(a: np.ndarray) -> Any:
    a = a.astype(np.int64)
    return int(a) if a.ndim == 0 else a


def _check_zoom(zoom: int) -> int:
    if isinstance(zoom, bool) or not isinstance(zoom, (int, np.integer)) or zoom < 0:
        raise ValueError(f"zoom must be a non-negative integer, got {zoom!r}")
    return int(zoom)


@dataclass(frozen=True)
class MercatorPyramid:
    """
    Immutable tile pyramid configuration.

    Params:
        tile_size: tile edge in pixels (conventionally a power of two)
        legacy_tile_rounding: use the historical ceil(p / tile_size) - 1 rule in
            pixels_to_tile instead of floor(p / tile_size). The two only differ
            when a pixel coordinate is an exact multiple of tile_size.
        strict: reject inputs that would otherwise produce NaN/inf or
            out-of-pyramid tiles with ValueError
    """
    tile_size: int = DEFAULT_TILE_SIZE
    legacy_tile_rounding: bool = False
    strict: bool = False
    initial_resolution: float = field(init=False, repr=False)
    origin_shift: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.tile_size, bool) or not isinstance(self.tile_size, (int, np.integer)) or self.tile_size <= 0:
            raise ValueError(f"tile_size must be a positive integer, got {self.tile_size!r}")
        object.__setattr__(self, "tile_size", int(self.tile_size))
        # 156543.03392804097 for tile_size 256
        object.__setattr__(self, "initial_resolution", 2 * math.pi * EARTH_RADIUS_M / self.tile_size)
        # 20037508.342789244
        object.__setattr__(self, "origin_shift", 2 * math.pi * EARTH_RADIUS_M / 2.0)
        log.debug("MercatorPyramid tile_size=%d initial_resolution=%.12f", self.tile_size, self.initial_resolution)

    # ----------------------------
    # Construction helpers
    # ----------------------------
    @classmethod
    def default(cls) -> "MercatorPyramid":
        return cls(DEFAULT_TILE_SIZE)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "MercatorPyramid":
        """Build from a loaded config mapping (uses its `pyramid` section)."""
        p: Dict[str, Any] = dict(cfg.get("pyramid") or {})
        return cls(
            tile_size=p.get("tile_size", DEFAULT_TILE_SIZE),
            legacy_tile_rounding=bool(p.get("legacy_tile_rounding", False)),
            strict=bool(p.get("strict", False)),
        )

    # ----------------------------
    # Validation
    # ----------------------------
    def _require_finite(self, name: str, *values: np.ndarray) -> None:
        for v in values:
            if not np.all(np.isfinite(v)):
                raise ValueError(f"{name} must be finite")

    def _require_tile_in_pyramid(self, tx: Any, ty: Any, zoom: int) -> None:
        n = 2 ** zoom
        tx_a, ty_a = np.asarray(tx), np.asarray(ty)
        if np.any((tx_a < 0) | (tx_a >= n)) or np.any((ty_a < 0) | (ty_a >= n)):
            raise ValueError(f"tile ({tx}, {ty}) outside pyramid at zoom {zoom}")

    # ----------------------------
    # Geographic <-> projected
    # ----------------------------
    def lat_lon_to_meters(self, lat: Any, lon: Any) -> Tuple[Any, Any]:
        """Converts given lat/lon in WGS84 Datum to XY in Spherical Mercator EPSG:900913."""
        lat = np.asarray(lat, dtype=float)
        lon = np.asarray(lon, dtype=float)
        if self.strict:
            self._require_finite("lat/lon", lat, lon)
            if np.any((lat <= -90.0) | (lat >= 90.0)):
                raise ValueError("lat must be strictly inside (-90, 90)")

        mx = lon * self.origin_shift / 180.0
        with np.errstate(divide="ignore", invalid="ignore"):
            my = np.log(np.tan((90.0 + lat) * math.pi / 360.0)) / (math.pi / 180.0)
        my = my * self.origin_shift / 180.0
        return _out_float(mx), _out_float(my)

    def meters_to_lat_lon(self, mx: Any, my: Any) -> Tuple[Any, Any]:
        """Converts XY point from Spherical Mercator EPSG:900913 to lat/lon in WGS84 Datum."""
        mx = np.asarray(mx, dtype=float)
        my = np.asarray(my, dtype=float)
        if self.strict:
            self._require_finite("mx/my", mx, my)

        lon = (mx / self.origin_shift) * 180.0
        lat = (my / self.origin_shift) * 180.0
        with np.errstate(over="ignore", invalid="ignore"):
            lat = 180.0 / math.pi * (2.0 * np.arctan(np.exp(lat * math.pi / 180.0)) - math.pi / 2.0)
        return _out_float(lat), _out_float(lon)

    # ----------------------------
    # Projected <-> pixels
    # ----------------------------
    def resolution(self, zoom: int) -> float:
        """Resolution (meters/pixel) for given zoom level (measured at Equator)."""
        return self.initial_resolution / (2 ** _check_zoom(zoom))

    def pixels_to_meters(self, px: Any, py: Any, zoom: int) -> Tuple[Any, Any]:
        """Converts pixel coordinates in given zoom level of pyramid to EPSG:900913."""
        res = self.resolution(zoom)
        px = np.asarray(px, dtype=float)
        py = np.asarray(py, dtype=float)
        if self.strict:
            self._require_finite("px/py", px, py)
        mx = px * res - self.origin_shift
        my = py * res - self.origin_shift
        return _out_float(mx), _out_float(my)

    def meters_to_pixels(self, mx: Any, my: Any, zoom: int) -> Tuple[Any, Any]:
        """Converts EPSG:900913 to pyramid pixel coordinates in given zoom level."""
        res = self.resolution(zoom)
        mx = np.asarray(mx, dtype=float)
        my = np.asarray(my, dtype=float)
        if self.strict:
            self._require_finite("mx/my", mx, my)
        px = (mx + self.origin_shift) / res
        py = (my + self.origin_shift) / res
        return _out_float(px), _out_float(py)

    def pixels_to_raster(self, px: Any, py: Any, zoom: int) -> Tuple[Any, Any]:
        """Move the origin of pixel coordinates to the top-left corner."""
        map_size = self.tile_size << _check_zoom(zoom)
        px = np.asarray(px, dtype=float)
        py = np.asarray(py, dtype=float)
        return _out_float(px), _out_float(map_size - py)

    def lat_lon_to_pixels(self, lat: Any, lon: Any, zoom: int) -> Tuple[Any, Any]:
        mx, my = self.lat_lon_to_meters(lat, lon)
        return self.meters_to_pixels(mx, my, zoom)

    # ----------------------------
    # Pixels <-> tiles
    # ----------------------------
    def pixels_to_tile(self, px: Any, py: Any) -> Tuple[Any, Any]:
        """
        Returns the tile covering the given pixel coordinates.

        Default rule is floor(p / tile_size): a pixel on a tile edge belongs to
        the tile to its right/above. legacy_tile_rounding keeps ceil(...) - 1,
        which assigns edge pixels to the tile left/below instead.
        """
        px = np.asarray(px, dtype=float)
        py = np.asarray(py, dtype=float)
        # integer indices cannot carry NaN/inf
        self._require_finite("px/py", px, py)
        ts = float(self.tile_size)
        if self.legacy_tile_rounding:
            tx = np.ceil(px / ts) - 1
            ty = np.ceil(py / ts) - 1
        else:
            tx = np.floor(px / ts)
            ty = np.floor(py / ts)
        return _out_int(tx), _out_int(ty)

    def meters_to_tile(self, mx: Any, my: Any, zoom: int) -> Tuple[Any, Any]:
        """Returns tile for given mercator coordinates."""
        px, py = self.meters_to_pixels(mx, my, zoom)
        return self.pixels_to_tile(px, py)

    def lat_lon_to_tile(self, lat: Any, lon: Any, zoom: int) -> Tuple[Any, Any]:
        mx, my = self.lat_lon_to_meters(lat, lon)
        return self.meters_to_tile(mx, my, zoom)

    def tile_bounds(self, tx: Any, ty: Any, zoom: int) -> Tuple[Any, Any, Any, Any]:
        """Returns bounds of the given tile in EPSG:900913 coordinates as (minx, miny, maxx, maxy)."""
        tx = np.asarray(tx, dtype=np.int64)
        ty = np.asarray(ty, dtype=np.int64)
        minx, miny = self.pixels_to_meters(tx * self.tile_size, ty * self.tile_size, zoom)
        maxx, maxy = self.pixels_to_meters((tx + 1) * self.tile_size, (ty + 1) * self.tile_size, zoom)
        return minx, miny, maxx, maxy

    def tile_lat_lon_bounds(self, tx: Any, ty: Any, zoom: int) -> Tuple[Any, Any, Any, Any]:
        """Returns bounds of the given tile in WGS84 degrees as (min_lat, min_lon, max_lat, max_lon)."""
        minx, miny, maxx, maxy = self.tile_bounds(tx, ty, zoom)
        min_lat, min_lon = self.meters_to_lat_lon(minx, miny)
        max_lat, max_lon = self.meters_to_lat_lon(maxx, maxy)
        return min_lat, min_lon, max_lat, max_lon

    def zoom_for_pixel_size(self, pixel_size: float) -> int:
        """
        Maximal scaledown zoom of the pyramid closest to the pixel_size.

        Raises ValueError when pixel_size is finer than every level in 0..29
        (or is NaN).
        """
        for i in range(MAX_ZOOM_LEVELS):
            if pixel_size > self.resolution(i):
                return i - 1 if i != 0 else 0  # never scale up past zoom 0
        raise ValueError(f"Invalid pixel_size: {pixel_size}")

    # ----------------------------
    # Tile numbering
    # ----------------------------
    def google_tile(self, tx: Any, ty: Any, zoom: int) -> Tuple[Any, Any]:
        """Converts TMS tile coordinates to Google (XYZ) tile coordinates."""
        zoom = _check_zoom(zoom)
        if self.strict:
            self._require_tile_in_pyramid(tx, ty, zoom)
        # origin moves from bottom-left to top-left corner of the extent
        return tx, (2 ** zoom - 1) - ty

    def quad_tree(self, tx: int, ty: int, zoom: int) -> str:
        """Converts TMS tile coordinates to a Microsoft QuadKey."""
        zoom = _check_zoom(zoom)
        if self.strict:
            self._require_tile_in_pyramid(tx, ty, zoom)
        tx = int(tx)
        ty = (2 ** zoom - 1) - int(ty)

        digits = []
        for i in range(zoom - 1, -1, -1):
            digit = 0
            mask = 1 << i
            if tx & mask:
                digit += 1
            if ty & mask:
                digit += 2
            digits.append(str(digit))
        return "".join(digits)
