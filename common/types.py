from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator
import math


@dataclass(frozen=True, slots=True)
class LatLon:
    """
    WGS84 position in degrees.

    Latitude must stay strictly inside (-90, 90): the Mercator projection
    diverges at the poles.
    """
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            raise ValueError("lat/lon must be finite")
        if not (-90.0 < self.lat < 90.0):
            raise ValueError(f"lat out of range (-90, 90): {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"lon out of range [-180, 180]: {self.lon}")


@dataclass(frozen=True, slots=True)
class TileIndex:
    """
    Tile address in TMS numbering: (0, 0) is the bottom-left tile and
    y increases northward.
    """
    x: int
    y: int
    zoom: int

    def __post_init__(self) -> None:
        if self.zoom < 0:
            raise ValueError("zoom must be >= 0")

    def __iter__(self) -> Iterator[int]:
        # allows `tx, ty, zoom = tile`
        return iter((self.x, self.y, self.zoom))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned box as (minx, miny, maxx, maxy)."""
    minx: float
    miny: float
    maxx: float
    maxy: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.minx, self.miny, self.maxx, self.maxy))

    def to_list(self) -> list:
        return [self.minx, self.miny, self.maxx, self.maxy]
