"""Piece and block value objects."""

from __future__ import annotations

from dataclasses import dataclass

from chesstris.core.enums import PieceKind, TetrominoKind
from chesstris.core.types import Coord, coord_name

_CHARS: dict[PieceKind, str] = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}

# Resource cost when buying a piece into a home zone.  Kings are not for sale.
PIECE_COSTS: dict[PieceKind, int] = {
    PieceKind.PAWN: 1,
    PieceKind.KNIGHT: 3,
    PieceKind.BISHOP: 3,
    PieceKind.ROOK: 5,
    PieceKind.QUEEN: 9,
}


@dataclass(frozen=True, slots=True)
class Sponsor:
    """Opaque attachment handed out by the bidding collaborator."""

    sponsor_id: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class LockedBlock:
    """A tetromino block committed into the grid."""

    kind: TetrominoKind
    color: int
    owner: str | None = None
    sponsor: Sponsor | None = None


@dataclass(slots=True, eq=False)
class ChessPiece:
    """A chess piece on the shared board.

    Identity-based equality: two pieces with the same kind and square are still
    different pieces.  Captured pieces are flagged, never deleted.
    """

    piece_id: str
    kind: PieceKind
    owner: str
    x: int
    y: int
    moved: bool = False
    captured: bool = False
    forward_distance: int = 0  # pawn squares advanced toward its facing
    promoted: bool = False

    @property
    def position(self) -> Coord:
        return (self.x, self.y)

    def __str__(self) -> str:
        return _CHARS[self.kind]

    def __repr__(self) -> str:
        state = " captured" if self.captured else ""
        return f"<ChessPiece {self.piece_id} {self.kind.name.lower()} @ {coord_name(self.position)}{state}>"
