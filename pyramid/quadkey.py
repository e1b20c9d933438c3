from __future__ import annotations

from typing import List

from common.types import TileIndex


_DIGITS = "0123"


def _validate(quad_key: str) -> None:
    bad = [c for c in quad_key if c not in _DIGITS]
    if bad:
        raise ValueError(f"Invalid quad key {quad_key!r}: digits must be 0-3")


def quad_key_to_tile(quad_key: str) -> TileIndex:
    """
    Decode a Microsoft QuadKey into a TMS tile (inverse of MercatorPyramid.quad_tree).

    Each digit carries one bit of x (value 1) and one bit of the top-left-origin
    row (value 2), most significant first. The row is flipped back to TMS at the end.
    """
    _validate(quad_key)
    zoom = len(quad_key)
    tx = gy = 0
    for i, c in enumerate(quad_key):
        mask = 1 << (zoom - 1 - i)
        digit = int(c)
        if digit & 1:
            tx |= mask
        if digit & 2:
            gy |= mask
    ty = (2 ** zoom - 1) - gy
    return TileIndex(tx, ty, zoom)


def quad_key_parent(quad_key: str) -> str:
    _validate(quad_key)
    if not quad_key:
        raise ValueError("The zoom 0 tile has no parent")
    return quad_key[:-1]


def quad_key_children(quad_key: str) -> List[str]:
    """The four quad keys one zoom level deeper, in digit order."""
    _validate(quad_key)
    return [quad_key + d for d in _DIGITS]
