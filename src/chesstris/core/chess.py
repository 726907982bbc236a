"""Chess phase: home-zone setup, selection, moves, captures and eliminations."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field

from chesstris.core.board import Board
from chesstris.core.enums import EliminationReason, PieceKind
from chesstris.core.home_zone import (
    BACK_ROW,
    ZONE_HEIGHT,
    ZONE_WIDTH,
    HomeZone,
    find_zone_anchor,
    forward_for,
)
from chesstris.core.move_generator import MoveGenerator
from chesstris.core.piece import ChessPiece
from chesstris.core.rules import Rules
from chesstris.core.types import Coord

_LOGGER = logging.getLogger(__name__)

EliminationNotifier = Callable[[str, EliminationReason], None]
CaptureCallback = Callable[[ChessPiece, ChessPiece], None]  # captured, by
PromotionCallback = Callable[[ChessPiece], None]
TransferCallback = Callable[[str, str, int], None]  # from owner, to owner, count

# Forward squares a pawn must cover before it becomes a knight.
PROMOTION_DISTANCE = 8
PROMOTION_KIND = PieceKind.KNIGHT


@dataclass
class ChessEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_capture: list[CaptureCallback] = field(default_factory=list)
    on_promotion: list[PromotionCallback] = field(default_factory=list)
    on_transfer: list[TransferCallback] = field(default_factory=list)


class ChessSystem:
    """Chess rules on the shared board.

    Args:
        board: Grid shared with the tetromino system.
        notify_elimination: Called once per player who loses active status.
        spawn_rows: Rows kept free for spawning tetrominoes.
        rng: Random source for fallback zone placement.
    """

    __slots__ = (
        "_board",
        "_notify",
        "_spawn_rows",
        "_rng",
        "_zones",
        "_pieces",
        "_captured",
        "_eliminated",
        "_selected",
        "_legal",
        "events",
    )

    def __init__(
        self,
        board: Board,
        notify_elimination: EliminationNotifier,
        *,
        spawn_rows: int = 4,
        rng: random.Random | None = None,
    ) -> None:
        self._board = board
        self._notify = notify_elimination
        self._spawn_rows = spawn_rows
        self._rng = rng or random.Random()
        self._zones: dict[str, HomeZone] = {}
        self._pieces: dict[str, ChessPiece] = {}
        self._captured: list[ChessPiece] = []
        self._eliminated: set[str] = set()
        self._selected: ChessPiece | None = None
        self._legal: frozenset[Coord] = frozenset()
        self.events = ChessEvents()

    # -- Properties -----------------------------------------------------------

    @property
    def board(self) -> Board:
        return self._board

    @property
    def zones(self) -> dict[str, HomeZone]:
        return self._zones

    @property
    def pieces(self) -> list[ChessPiece]:
        """Pieces still on the board."""
        return [p for p in self._pieces.values() if not p.captured]

    @property
    def captured(self) -> list[ChessPiece]:
        return list(self._captured)

    @property
    def selected(self) -> ChessPiece | None:
        return self._selected

    @property
    def legal_targets(self) -> frozenset[Coord]:
        """Destinations cached by the last successful :meth:`select`."""
        return self._legal

    def piece(self, piece_id: str) -> ChessPiece | None:
        return self._pieces.get(piece_id)

    def pieces_of(self, owner: str) -> list[ChessPiece]:
        return [p for p in self.pieces if p.owner == owner]

    def restore(
        self,
        board: Board,
        zones: list[HomeZone],
        pieces: list[ChessPiece],
        eliminated: set[str],
    ) -> None:
        """Replace every piece, zone and selection (used by snapshots)."""
        self._board = board
        self._zones = {zone.owner: zone for zone in zones}
        self._pieces = {p.piece_id: p for p in pieces}
        self._captured = [p for p in pieces if p.captured]
        self._eliminated = set(eliminated)
        self.deselect()

    # -- Setup ----------------------------------------------------------------

    def init_home_zone(self, owner: str, seat_index: int) -> HomeZone | None:
        """Place *owner*'s zone and populate it with a full army."""
        if owner in self._zones:
            return None
        anchor = find_zone_anchor(
            self._board,
            seat_index,
            list(self._zones.values()),
            spawn_rows=self._spawn_rows,
            rng=self._rng,
        )
        if anchor is None:
            _LOGGER.warning("No room for a home zone for %s (seat %d)", owner, seat_index)
            return None

        x, y = anchor
        zone = HomeZone(owner=owner, x=x, y=y, forward=forward_for(self._board, y))
        self._board.mark_zone(x, y, ZONE_WIDTH, ZONE_HEIGHT, owner)

        counts: dict[PieceKind, int] = {}
        for col, kind in enumerate(BACK_ROW):
            piece = self._add_piece(owner, kind, x + col, zone.back_row, counts)
            if kind == PieceKind.KING:
                zone.king_id = piece.piece_id
        for col in range(ZONE_WIDTH):
            self._add_piece(owner, PieceKind.PAWN, x + col, zone.front_row, counts)

        self._zones[owner] = zone
        _LOGGER.debug("Home zone for %s at %d,%d", owner, x, y)
        return zone

    def place_piece(self, owner: str, kind: PieceKind, x: int, y: int) -> ChessPiece | None:
        """Add a new piece on an empty cell of *owner*'s own zone."""
        zone = self._zones.get(owner)
        if zone is None or kind == PieceKind.KING or not zone.contains((x, y)):
            return None
        if self._board.is_occupied(x, y):
            return None
        counts = {
            k: sum(1 for p in self._pieces.values() if p.owner == owner and p.kind == k)
            for k in PieceKind
        }
        return self._add_piece(owner, kind, x, y, counts)

    # -- Selection ------------------------------------------------------------

    def legal_moves(self, piece: ChessPiece) -> frozenset[Coord]:
        return self._generator().legal_moves(piece)

    def has_legal_move(self, owner: str) -> bool:
        return self._generator().has_any_move(self.pieces_of(owner))

    def select(self, x: int, y: int, acting_player: str) -> bool:
        """Select the acting player's piece at (x, y) and cache its moves."""
        piece = self._board.piece_at(x, y)
        if piece is None or piece.owner != acting_player:
            return False
        self._selected = piece
        self._legal = self.legal_moves(piece)
        return True

    def deselect(self) -> None:
        self._selected = None
        self._legal = frozenset()

    # -- Moving ---------------------------------------------------------------

    def move(self, x: int, y: int) -> bool:
        """Move the selected piece to a cached legal destination."""
        piece = self._selected
        if piece is None or (x, y) not in self._legal:
            return False

        target = self._board.piece_at(x, y)
        if target is not None and target.owner != piece.owner:
            self._capture(target, piece)

        advanced = piece.kind == PieceKind.PAWN and y - piece.y == self._forward(piece.owner)
        self._board.relocate_piece(piece, x, y)
        piece.moved = True
        if advanced:
            piece.forward_distance += 1
            if piece.forward_distance >= PROMOTION_DISTANCE:
                self._promote(piece)
        self.deselect()
        self.check_home_zones()
        return True

    def check_home_zones(self) -> list[str]:
        """Signal every owner whose king is no longer at home."""
        homeless = Rules.homeless_owners(self._zones.values(), self._pieces)
        eliminated = []
        for owner in homeless:
            if self._eliminate(owner, EliminationReason.KING_LEFT_HOME_ZONE):
                eliminated.append(owner)
        return eliminated

    def is_eliminated(self, owner: str) -> bool:
        return owner in self._eliminated

    # -- Internal -------------------------------------------------------------

    def _generator(self) -> MoveGenerator:
        forward = {owner: zone.forward for owner, zone in self._zones.items()}
        return MoveGenerator(self._board, forward)

    def _forward(self, owner: str) -> int:
        zone = self._zones.get(owner)
        return zone.forward if zone is not None else -1

    def _add_piece(
        self,
        owner: str,
        kind: PieceKind,
        x: int,
        y: int,
        counts: dict[PieceKind, int],
    ) -> ChessPiece:
        counts[kind] = counts.get(kind, 0) + 1
        piece_id = f"{owner}-{kind.name.lower()}-{counts[kind]}"
        while piece_id in self._pieces:
            counts[kind] += 1
            piece_id = f"{owner}-{kind.name.lower()}-{counts[kind]}"
        piece = ChessPiece(piece_id=piece_id, kind=kind, owner=owner, x=x, y=y)
        self._board.place_piece(piece)
        self._pieces[piece_id] = piece
        return piece

    def _capture(self, target: ChessPiece, by: ChessPiece) -> None:
        self._board.remove_piece(target)
        target.captured = True
        self._captured.append(target)
        _LOGGER.debug("%s captured %s", by.piece_id, target.piece_id)
        for cb in self.events.on_capture:
            cb(target, by)
        if target.kind == PieceKind.KING:
            self._transfer_army(target.owner, by.owner)
            self._eliminate(target.owner, EliminationReason.KING_CAPTURED)

    def _promote(self, pawn: ChessPiece) -> None:
        pawn.kind = PROMOTION_KIND
        pawn.promoted = True
        _LOGGER.debug("%s promoted at %d,%d", pawn.piece_id, pawn.x, pawn.y)
        for cb in self.events.on_promotion:
            cb(pawn)

    def _transfer_army(self, loser: str, captor: str) -> None:
        """Hand the loser's remaining pieces to the captor."""
        army = self.pieces_of(loser)
        for piece in army:
            piece.owner = captor
            if piece.kind == PieceKind.PAWN:
                piece.forward_distance = 0
        _LOGGER.info("%d pieces of %s pass to %s", len(army), loser, captor)
        for cb in self.events.on_transfer:
            cb(loser, captor, len(army))

    def _eliminate(self, owner: str, reason: EliminationReason) -> bool:
        if owner in self._eliminated:
            return False
        self._eliminated.add(owner)
        self._notify(owner, reason)
        return True
