"""Legal destination generation for chess pieces on the shared board."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chesstris.core.enums import PieceKind
from chesstris.core.types import KING_OFFSETS, Coord, shifted

if TYPE_CHECKING:
    from chesstris.core.board import Board
    from chesstris.core.piece import ChessPiece

# Only king and pawn movement is defined.  Every other kind uses king steps
# as a placeholder until sliding and knight rules are settled.
PLACEHOLDER_KINDS: frozenset[PieceKind] = frozenset(
    {PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT}
)


class MoveGenerator:
    """Computes destination sets against a :class:`Board`.

    Args:
        board: Grid to read occupancy from.
        pawn_forward: Maps an owner to the y-direction its pawns advance in.
    """

    __slots__ = ("_board", "_pawn_forward")

    def __init__(self, board: Board, pawn_forward: dict[str, int] | None = None) -> None:
        self._board = board
        self._pawn_forward = pawn_forward or {}

    def legal_moves(self, piece: ChessPiece) -> frozenset[Coord]:
        if piece.captured:
            return frozenset()
        if piece.kind == PieceKind.PAWN:
            return self._pawn_moves(piece)
        return self._step_moves(piece)

    def has_any_move(self, pieces: list[ChessPiece]) -> bool:
        return any(self.legal_moves(p) for p in pieces)

    # -- Per-kind generators ---------------------------------------------------

    def _step_moves(self, piece: ChessPiece) -> frozenset[Coord]:
        targets: set[Coord] = set()
        for dx, dy in KING_OFFSETS:
            x, y = shifted(piece.position, dx, dy)
            cell = self._board.cell(x, y)
            if cell is None or cell.block is not None:
                continue
            if cell.piece is not None and cell.piece.owner == piece.owner:
                continue
            targets.add((x, y))
        return frozenset(targets)

    def _pawn_moves(self, piece: ChessPiece) -> frozenset[Coord]:
        dy = self._pawn_forward.get(piece.owner, -1)
        targets: set[Coord] = set()

        ahead = self._board.cell(piece.x, piece.y + dy)
        if ahead is not None and ahead.is_empty:
            targets.add((ahead.x, ahead.y))

        for dx in (-1, 1):
            cell = self._board.cell(piece.x + dx, piece.y + dy)
            if cell is None or cell.piece is None:
                continue
            if cell.piece.owner != piece.owner:
                targets.add((cell.x, cell.y))
        return frozenset(targets)
