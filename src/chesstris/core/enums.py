"""Core enumerations for the board, tetrominoes and chess pieces."""

from __future__ import annotations

from enum import IntEnum, StrEnum, auto


class TetrominoKind(StrEnum):
    """The seven canonical falling-block shapes."""

    I = "I"
    J = "J"
    L = "L"
    O = "O"
    S = "S"
    T = "T"
    Z = "Z"


class PieceKind(IntEnum):
    """Chess piece kinds ordered by conventional value."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    def __str__(self) -> str:
        return self.name.lower()


class Direction(IntEnum):
    """Translation requested for the falling piece."""

    LEFT = auto()
    RIGHT = auto()
    DOWN = auto()

    @property
    def offset(self) -> tuple[int, int]:
        return _DIRECTION_OFFSETS[self]


_DIRECTION_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
}


class Rotation(IntEnum):
    """Rotation sense; the value is the rotation-index step (mod 4)."""

    CLOCKWISE = 1
    COUNTERCLOCKWISE = 3


class Seat(IntEnum):
    """Canonical seating for the first four players."""

    BOTTOM = 0
    TOP = 1
    LEFT = 2
    RIGHT = 3


class EliminationReason(IntEnum):
    """Why a player lost active status."""

    KING_CAPTURED = auto()
    KING_LEFT_HOME_ZONE = auto()
