"""Canonical tetromino shapes and the box rotation transform.

Each shape is stored as block offsets inside a square bounding box.  Rotating
a piece rotates the box by 90 degrees, so offsets always stay inside it.
"""

from __future__ import annotations

from chesstris.core.enums import Rotation, TetrominoKind
from chesstris.core.types import Coord


def _cells(rows: tuple[str, ...]) -> tuple[Coord, ...]:
    return tuple(
        (col, row)
        for row, line in enumerate(rows)
        for col, ch in enumerate(line)
        if ch == "#"
    )


_SHAPE_ROWS: dict[TetrominoKind, tuple[str, ...]] = {
    TetrominoKind.I: ("....", "####", "....", "...."),
    TetrominoKind.J: ("#..", "###", "..."),
    TetrominoKind.L: ("..#", "###", "..."),
    TetrominoKind.O: ("##", "##"),
    TetrominoKind.S: (".##", "##.", "..."),
    TetrominoKind.T: (".#.", "###", "..."),
    TetrominoKind.Z: ("##.", ".##", "..."),
}

SHAPES: dict[TetrominoKind, tuple[Coord, ...]] = {
    kind: _cells(rows) for kind, rows in _SHAPE_ROWS.items()
}

BOX_SIZES: dict[TetrominoKind, int] = {
    kind: len(rows) for kind, rows in _SHAPE_ROWS.items()
}

COLORS: dict[TetrominoKind, int] = {
    TetrominoKind.I: 0x00FFFF,
    TetrominoKind.J: 0x0000FF,
    TetrominoKind.L: 0xFF7F00,
    TetrominoKind.O: 0xFFFF00,
    TetrominoKind.S: 0x00FF00,
    TetrominoKind.T: 0x800080,
    TetrominoKind.Z: 0xFF0000,
}

# Tried in order after an in-place rotation fails; the first valid one wins.
WALL_KICKS: tuple[Coord, ...] = ((1, 0), (-1, 0), (0, -1), (2, 0), (-2, 0))


def rotate_cells(
    cells: tuple[Coord, ...],
    box: int,
    rotation: Rotation,
) -> tuple[Coord, ...]:
    """Rotate *cells* by 90 degrees inside a ``box``-sized square."""
    last = box - 1
    if rotation == Rotation.CLOCKWISE:
        return tuple((last - row, col) for col, row in cells)
    return tuple((row, last - col) for col, row in cells)
