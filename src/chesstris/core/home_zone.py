"""Home zones: each player's reserved rectangle and its placement on the board."""

from __future__ import annotations

import random
from dataclasses import dataclass

from chesstris.core.board import Board
from chesstris.core.enums import PieceKind, Seat
from chesstris.core.shapes import BOX_SIZES
from chesstris.core.types import Coord, in_rect, rects_overlap

ZONE_WIDTH = 8
ZONE_HEIGHT = 2

BACK_ROW: tuple[PieceKind, ...] = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)

_RANDOM_ATTEMPTS = 64

# Every kind spawns centred inside the widest box.
SPAWN_SPAN = max(BOX_SIZES.values())


@dataclass(slots=True)
class HomeZone:
    """A player's rectangle; its king must stay inside it.

    ``forward`` is the pawn direction along y (-1 up, +1 down).
    """

    owner: str
    x: int
    y: int
    width: int = ZONE_WIDTH
    height: int = ZONE_HEIGHT
    king_id: str | None = None
    forward: int = -1

    @property
    def rect(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def contains(self, coord: Coord) -> bool:
        return in_rect(coord, self.x, self.y, self.width, self.height)

    @property
    def front_row(self) -> int:
        """Row holding the pawns (the side facing ``forward``)."""
        return self.y if self.forward < 0 else self.y + self.height - 1

    @property
    def back_row(self) -> int:
        return self.y + self.height - 1 if self.forward < 0 else self.y

    def cells(self) -> list[Coord]:
        return [
            (x, y)
            for y in range(self.y, self.y + self.height)
            for x in range(self.x, self.x + self.width)
        ]


def spawn_columns(board: Board) -> range:
    """Columns a freshly spawned tetromino of any kind can cover."""
    first = board.width // 2 - SPAWN_SPAN // 2
    return range(first, first + SPAWN_SPAN)


def _top_seat_x(board: Board) -> int:
    """Beside the spawn columns, so a straight drop never lands on the army."""
    columns = spawn_columns(board)
    if columns.stop + ZONE_WIDTH <= board.width:
        return columns.stop
    if columns.start - ZONE_WIDTH >= 0:
        return columns.start - ZONE_WIDTH
    return (board.width - ZONE_WIDTH) // 2


def seat_anchor(seat: Seat, board: Board, spawn_rows: int) -> Coord:
    """Canonical top-left corner for one of the first four seats."""
    w, h = board.width, board.height
    centre_x = (w - ZONE_WIDTH) // 2
    middle_y = h // 2 - 1
    return {
        Seat.BOTTOM: (centre_x, h - ZONE_HEIGHT),
        Seat.TOP: (_top_seat_x(board), spawn_rows),
        Seat.LEFT: (0, middle_y),
        Seat.RIGHT: (w - ZONE_WIDTH, middle_y),
    }[seat]


def fallback_anchors(board: Board, spawn_rows: int) -> tuple[Coord, ...]:
    """Fixed candidates tried after the canonical seats: the four corners."""
    w, h = board.width, board.height
    return (
        (0, spawn_rows),
        (w - ZONE_WIDTH, spawn_rows),
        (0, h - ZONE_HEIGHT),
        (w - ZONE_WIDTH, h - ZONE_HEIGHT),
    )


def zone_fits(board: Board, rect: tuple[int, int, int, int], others: list[HomeZone]) -> bool:
    """In bounds, clear of other zones and free of blocks and pieces."""
    x, y, width, height = rect
    if not (board.in_bounds(x, y) and board.in_bounds(x + width - 1, y + height - 1)):
        return False
    if any(rects_overlap(rect, zone.rect) for zone in others):
        return False
    return all(
        not board.is_occupied(xx, yy)
        for yy in range(y, y + height)
        for xx in range(x, x + width)
    )


def find_zone_anchor(
    board: Board,
    seat_index: int,
    others: list[HomeZone],
    *,
    spawn_rows: int,
    rng: random.Random,
) -> Coord | None:
    """Pick the top-left corner for the zone of seat *seat_index*."""
    candidates: list[Coord] = []
    if 0 <= seat_index < len(Seat):
        candidates.append(seat_anchor(Seat(seat_index), board, spawn_rows))
    candidates.extend(fallback_anchors(board, spawn_rows))

    for x, y in candidates:
        if zone_fits(board, (x, y, ZONE_WIDTH, ZONE_HEIGHT), others):
            return (x, y)

    max_x = board.width - ZONE_WIDTH
    max_y = board.height - ZONE_HEIGHT
    if max_x < 0 or max_y < spawn_rows:
        return None
    for _ in range(_RANDOM_ATTEMPTS):
        x = rng.randint(0, max_x)
        y = rng.randint(spawn_rows, max_y)
        if zone_fits(board, (x, y, ZONE_WIDTH, ZONE_HEIGHT), others):
            return (x, y)
    return None


def forward_for(board: Board, y: int) -> int:
    """Pawns face the vertical centre of the board."""
    return 1 if y + ZONE_HEIGHT / 2 < board.height / 2 else -1
