"""Core domain layer — pure chesstris rules with zero external dependencies.

Quick start::

    from chesstris.core import Board, TetrominoSystem, Direction

    board = Board(10, 20)
    tetrominoes = TetrominoSystem(board)
    tetrominoes.spawn()
    tetrominoes.move(Direction.LEFT)
    tetrominoes.hard_drop()
"""

from chesstris.core.board import Board, Cell, MalformedBoard
from chesstris.core.chess import ChessEvents, ChessSystem, EliminationNotifier
from chesstris.core.enums import (
    Direction,
    EliminationReason,
    PieceKind,
    Rotation,
    Seat,
    TetrominoKind,
)
from chesstris.core.home_zone import HomeZone
from chesstris.core.move_generator import MoveGenerator
from chesstris.core.piece import PIECE_COSTS, ChessPiece, LockedBlock, Sponsor
from chesstris.core.rules import Rules
from chesstris.core.tetromino import (
    FallingPiece,
    LockResult,
    TetrominoEvents,
    TetrominoSystem,
)
from chesstris.core.types import Coord

__all__ = [
    # Enums
    "Direction",
    "EliminationReason",
    "PieceKind",
    "Rotation",
    "Seat",
    "TetrominoKind",
    # Types
    "Coord",
    # Domain objects
    "Board",
    "Cell",
    "ChessPiece",
    "FallingPiece",
    "HomeZone",
    "LockResult",
    "LockedBlock",
    "MalformedBoard",
    "MoveGenerator",
    "PIECE_COSTS",
    "Rules",
    "Sponsor",
    # Subsystems
    "ChessEvents",
    "ChessSystem",
    "EliminationNotifier",
    "TetrominoEvents",
    "TetrominoSystem",
]
