"""Board - dense grid of cells shared by tetromino blocks and chess pieces."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from chesstris.core.piece import ChessPiece, LockedBlock
from chesstris.core.types import Coord


class MalformedBoard(ValueError):
    """Raised when a grid does not match its declared dimensions."""


@dataclass(slots=True)
class Cell:
    """One grid cell: at most one occupant, plus home-zone ownership."""

    x: int
    y: int
    block: LockedBlock | None = None
    piece: ChessPiece | None = None
    zone_owner: str | None = None

    @property
    def in_home_zone(self) -> bool:
        return self.zone_owner is not None

    @property
    def is_empty(self) -> bool:
        return self.block is None and self.piece is None


class Board:
    """Mutable ``width`` x ``height`` grid indexed by (x, y)."""

    __slots__ = ("_width", "_height", "_rows")

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid board size: {width}x{height}")
        self._width = width
        self._height = height
        self._rows: list[list[Cell]] = [
            [Cell(x, y) for x in range(width)] for y in range(height)
        ]

    # -- Dimensions -----------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    # -- Element access -------------------------------------------------------

    def cell(self, x: int, y: int) -> Cell | None:
        """Cell at (x, y), or ``None`` when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self._rows[y][x]

    def __iter__(self) -> Iterator[Cell]:
        for row in self._rows:
            yield from row

    def piece_at(self, x: int, y: int) -> ChessPiece | None:
        cell = self.cell(x, y)
        return cell.piece if cell is not None else None

    def block_at(self, x: int, y: int) -> LockedBlock | None:
        cell = self.cell(x, y)
        return cell.block if cell is not None else None

    def is_occupied(self, x: int, y: int) -> bool:
        """Whether an in-bounds cell holds a block or a piece."""
        cell = self.cell(x, y)
        return cell is not None and not cell.is_empty

    def can_hold_blocks(self, coords: Iterable[Coord]) -> bool:
        """Whether every coordinate is in bounds and unoccupied."""
        for x, y in coords:
            cell = self.cell(x, y)
            if cell is None or not cell.is_empty:
                return False
        return True

    # -- Mutation -------------------------------------------------------------

    def place_block(self, x: int, y: int, block: LockedBlock) -> bool:
        cell = self.cell(x, y)
        if cell is None or cell.piece is not None:
            return False
        cell.block = block
        return True

    def place_piece(self, piece: ChessPiece) -> bool:
        """Put *piece* on its own square; the square must be empty."""
        cell = self.cell(piece.x, piece.y)
        if cell is None or not cell.is_empty:
            return False
        cell.piece = piece
        return True

    def remove_piece(self, piece: ChessPiece) -> None:
        cell = self.cell(piece.x, piece.y)
        if cell is not None and cell.piece is piece:
            cell.piece = None

    def relocate_piece(self, piece: ChessPiece, x: int, y: int) -> None:
        """Move *piece* to (x, y); the destination must not hold a block.

        Any piece already on the destination is displaced; capture bookkeeping
        is the caller's job.
        """
        target = self.cell(x, y)
        if target is None or target.block is not None:
            raise ValueError(f"Cannot move piece onto ({x}, {y})")
        self.remove_piece(piece)
        piece.x = x
        piece.y = y
        target.piece = piece

    def mark_zone(self, x: int, y: int, width: int, height: int, owner: str) -> None:
        for yy in range(y, y + height):
            for xx in range(x, x + width):
                cell = self.cell(xx, yy)
                if cell is not None:
                    cell.zone_owner = owner

    # -- Row sweeping ---------------------------------------------------------

    def is_row_complete(self, y: int) -> bool:
        """Every cell occupied and at least one of them holds a block."""
        row = self._rows[y]
        return all(not c.is_empty for c in row) and any(
            c.block is not None for c in row
        )

    def clear_full_rows(self) -> int:
        """Sweep complete rows bottom-up and return how many were cleared.

        Chess pieces are fixed terrain: in each column the non-piece cells at or
        above a cleared row pass their blocks down by one slot.
        """
        cleared = 0
        y = self._height - 1
        while y >= 0:
            if self.is_row_complete(y):
                self._collapse_row(y)
                cleared += 1
                continue  # re-check the same row after the shift
            y -= 1
        return cleared

    def _collapse_row(self, y: int) -> None:
        for x in range(self._width):
            if self._rows[y][x].piece is not None:
                continue
            column = [
                self._rows[yy][x]
                for yy in range(y, -1, -1)
                if self._rows[yy][x].piece is None
            ]
            for lower, upper in zip(column, column[1:]):
                lower.block = upper.block
            if column:
                column[-1].block = None

    # -- Validation -----------------------------------------------------------

    def is_well_formed(self) -> bool:
        if len(self._rows) != self._height:
            return False
        for y, row in enumerate(self._rows):
            if len(row) != self._width:
                return False
            for x, cell in enumerate(row):
                if cell.x != x or cell.y != y:
                    return False
                if cell.block is not None and cell.piece is not None:
                    return False
        return True

    def validate(self) -> None:
        """Raise :class:`MalformedBoard` unless the grid is consistent."""
        if not self.is_well_formed():
            raise MalformedBoard(
                f"Board grid does not match {self._width}x{self._height}"
            )

    # -- Dunder helpers -------------------------------------------------------

    def __repr__(self) -> str:
        lines: list[str] = []
        for row in self._rows:
            chars = []
            for cell in row:
                if cell.piece is not None:
                    chars.append(str(cell.piece))
                elif cell.block is not None:
                    chars.append("#")
                elif cell.in_home_zone:
                    chars.append(",")
                else:
                    chars.append(".")
            lines.append("".join(chars))
        return "\n".join(lines)
