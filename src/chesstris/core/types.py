"""Coordinate type alias and grid helpers.

Grid layout:
    x grows to the right, y grows downward.
    (0, 0) is the top-left cell; row 0 is the spawn row.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeAlias

Coord: TypeAlias = tuple[int, int]

KING_OFFSETS: tuple[Coord, ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def shifted(coord: Coord, dx: int, dy: int) -> Coord:
    """Return *coord* translated by (dx, dy)."""
    return (coord[0] + dx, coord[1] + dy)


def translate_all(coords: Iterable[Coord], dx: int, dy: int) -> tuple[Coord, ...]:
    """Translate every coordinate in *coords*."""
    return tuple((x + dx, y + dy) for x, y in coords)


def in_rect(coord: Coord, x: int, y: int, width: int, height: int) -> bool:
    """Whether *coord* lies inside the rectangle anchored at (x, y)."""
    cx, cy = coord
    return x <= cx < x + width and y <= cy < y + height


def rects_overlap(
    a: tuple[int, int, int, int],
    b: tuple[int, int, int, int],
) -> bool:
    """Whether two (x, y, width, height) rectangles share at least one cell."""
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


def coord_name(coord: Coord) -> str:
    """Human-readable name, e.g. (3, 7) -> '3,7'."""
    return f"{coord[0]},{coord[1]}"
