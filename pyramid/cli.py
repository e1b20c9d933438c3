#!/usr/bin/env python3
"""
Inspect the tiles covering a point or a lat/lon box.

For each tile prints its TMS and Google indices, QuadKey, EPSG:3857 extent and
WGS84 extent.

Examples:
  python -m pyramid.cli 12 48.6263556 2.2492123
  python -m pyramid.cli 8 45.0 5.0 46.0 7.0 --json
  python -m pyramid.cli 3 0 0 --tile-size 512 --config config/pyramid.yaml
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Dict, List, Optional

from common.config import load_config
from common.logging_setup import get_logger, setup_logging
from common.types import Bounds, LatLon, TileIndex
from pyramid.coverage import tiles_for_bounds
from pyramid.mercator import MercatorPyramid


log = get_logger("pyramid.cli")


def describe_tile(pyramid: MercatorPyramid, tile: TileIndex) -> Dict:
    tx, ty, zoom = tile
    gx, gy = pyramid.google_tile(tx, ty, zoom)
    meters = Bounds(*pyramid.tile_bounds(tx, ty, zoom))
    # (min_lat, min_lon, max_lat, max_lon) reordered into x/y form
    min_lat, min_lon, max_lat, max_lon = pyramid.tile_lat_lon_bounds(tx, ty, zoom)
    wgs84 = Bounds(min_lon, min_lat, max_lon, max_lat)
    return {
        "tms": tile.to_dict(),
        "google": {"x": int(gx), "y": int(gy), "zoom": zoom},
        "quadkey": pyramid.quad_tree(tx, ty, zoom),
        "epsg3857": meters.to_list(),
        "wgs84": wgs84.to_list(),
    }


def format_tile(d: Dict) -> str:
    t, g = d["tms"], d["google"]
    m, w = d["epsg3857"], d["wgs84"]
    return "\n".join([
        f"{t['zoom']}/{t['x']}/{t['y']} ( TileMapService: z / x / y )",
        f"\tGoogle: {g['x']} {g['y']}",
        f"\tQuadkey: {d['quadkey']}",
        f"\tEPSG:3857 Extent: ({m[0]}, {m[1]}, {m[2]}, {m[3]})",
        f"\tWGS84 Extent: ({w[1]}, {w[0]}, {w[3]}, {w[2]})",
    ])


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pyramid", description="Spherical Mercator tile inspector")
    ap.add_argument("zoom", type=int, help="Zoom level")
    ap.add_argument("lat", type=float, help="Latitude (or south edge of a box)")
    ap.add_argument("lon", type=float, help="Longitude (or west edge of a box)")
    ap.add_argument("latmax", type=float, nargs="?", default=None, help="North edge of a box")
    ap.add_argument("lonmax", type=float, nargs="?", default=None, help="East edge of a box")
    ap.add_argument("--config", default=None, help="YAML config (default: $PYRAMID_CONFIG or config/pyramid.yaml)")
    ap.add_argument("--tile-size", type=int, default=None, help="Override pyramid.tile_size")
    ap.add_argument("--json", action="store_true", help="Print one JSON object per tile")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if (args.latmax is None) != (args.lonmax is None):
        ap.error("latmax and lonmax must be given together")

    try:
        cfg = load_config(args.config)
        log_cfg = cfg.get("logging", {})
        setup_logging(log_cfg.get("level"), log_cfg.get("format"), force=True)

        if args.tile_size is not None:
            cfg["pyramid"]["tile_size"] = args.tile_size
        pyramid = MercatorPyramid.from_config(cfg)

        south_west = LatLon(args.lat, args.lon)
        north_east = south_west if args.latmax is None else LatLon(args.latmax, args.lonmax)

        n = 0
        for tile in tiles_for_bounds(
            pyramid, south_west.lat, south_west.lon, north_east.lat, north_east.lon, args.zoom
        ):
            d = describe_tile(pyramid, tile)
            print(json.dumps(d) if args.json else format_tile(d))
            n += 1
        log.debug("printed %d tiles", n)
    except ValueError as e:
        log.error("pyramid: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
