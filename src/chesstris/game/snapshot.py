"""Whole-game snapshots as plain JSON-compatible dicts.

Used to mirror state to and from an authoritative peer.  An incoming snapshot
replaces local state wholesale; nothing is merged.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chesstris.core.board import Board, MalformedBoard
from chesstris.core.enums import PieceKind, TetrominoKind
from chesstris.core.home_zone import HomeZone
from chesstris.core.piece import ChessPiece, LockedBlock, Sponsor
from chesstris.core.tetromino import FallingPiece
from chesstris.game.interfaces import GameEndReason, TurnPhase
from chesstris.game.player import Player
from chesstris.game.state import TurnState

if TYPE_CHECKING:
    from chesstris.core.chess import ChessSystem
    from chesstris.core.tetromino import TetrominoSystem

SNAPSHOT_VERSION = 1


@dataclass(slots=True)
class DecodedGame:
    """Everything needed to rebuild an engine from a snapshot."""

    board: Board
    players: list[Player]
    zones: list[HomeZone]
    pieces: list[ChessPiece]
    eliminated: set[str]
    falling: FallingPiece | None
    preview: list[TetrominoKind]
    held: TetrominoKind | None
    hold_used: bool
    turn: TurnState
    paused: bool


# ── Encoding ─────────────────────────────────────────────────────────────────


def _sponsor_to_dict(sponsor: Sponsor | None) -> dict[str, str] | None:
    if sponsor is None:
        return None
    return {"sponsor_id": sponsor.sponsor_id, "name": sponsor.name}


def _falling_to_dict(piece: FallingPiece | None) -> dict[str, Any] | None:
    if piece is None:
        return None
    return {
        "kind": piece.kind.value,
        "cells": [list(c) for c in piece.cells],
        "x": piece.x,
        "y": piece.y,
        "rotation": piece.rotation,
        "sponsor": _sponsor_to_dict(piece.sponsor),
        "owner": piece.owner,
    }


def encode_game(
    *,
    board: Board,
    players: list[Player],
    chess: ChessSystem,
    tetrominoes: TetrominoSystem,
    turn: TurnState,
    paused: bool,
) -> dict[str, Any]:
    """Serialise the full engine state."""
    blocks = [
        {
            "x": cell.x,
            "y": cell.y,
            "kind": cell.block.kind.value,
            "color": cell.block.color,
            "owner": cell.block.owner,
            "sponsor": _sponsor_to_dict(cell.block.sponsor),
        }
        for cell in board
        if cell.block is not None
    ]
    pieces = [
        {
            "piece_id": p.piece_id,
            "kind": p.kind.name,
            "owner": p.owner,
            "x": p.x,
            "y": p.y,
            "moved": p.moved,
            "captured": p.captured,
            "forward_distance": p.forward_distance,
            "promoted": p.promoted,
        }
        for p in [*chess.pieces, *chess.captured]
    ]
    return {
        "version": SNAPSHOT_VERSION,
        "board": {"width": board.width, "height": board.height, "blocks": blocks},
        "players": [
            {
                "player_id": p.player_id,
                "name": p.name,
                "resources": p.resources,
                "score": p.score,
                "level": p.level,
                "lines_cleared": p.lines_cleared,
                "eliminated": p.eliminated,
            }
            for p in players
        ],
        "zones": [
            {
                "owner": z.owner,
                "x": z.x,
                "y": z.y,
                "width": z.width,
                "height": z.height,
                "king_id": z.king_id,
                "forward": z.forward,
            }
            for z in chess.zones.values()
        ],
        "pieces": pieces,
        "eliminated": sorted(p.player_id for p in players if p.eliminated),
        "tetromino": {
            "falling": _falling_to_dict(tetrominoes.falling),
            "preview": [k.value for k in tetrominoes.next_kinds],
            "held": tetrominoes.held_kind.value if tetrominoes.held_kind else None,
            "hold_used": tetrominoes.hold_used,
        },
        "turn": {
            "current_player": turn.current_player,
            "phase": turn.phase.name,
            "turn_number": turn.turn_number,
            "winner": turn.winner,
            "end_reason": turn.end_reason.name,
        },
        "paused": paused,
    }


# ── Decoding ─────────────────────────────────────────────────────────────────


def _sponsor_from_dict(data: dict[str, Any] | None) -> Sponsor | None:
    if data is None:
        return None
    return Sponsor(sponsor_id=str(data["sponsor_id"]), name=str(data.get("name", "")))


def _falling_from_dict(data: dict[str, Any] | None) -> FallingPiece | None:
    if data is None:
        return None
    return FallingPiece(
        kind=TetrominoKind(data["kind"]),
        cells=tuple((int(c[0]), int(c[1])) for c in data["cells"]),
        x=int(data["x"]),
        y=int(data["y"]),
        rotation=int(data["rotation"]) % 4,
        sponsor=_sponsor_from_dict(data.get("sponsor")),
        owner=data.get("owner"),
    )


def decode_game(data: Any) -> DecodedGame:
    """Rebuild state from :func:`encode_game` output.

    Raises:
        MalformedBoard: The grid content is inconsistent.
        AttributeError, KeyError, TypeError, ValueError: The payload is not a
            snapshot.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Snapshot must be a mapping, got {type(data).__name__}")
    if data.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {data.get('version')!r}")

    board_data = data["board"]
    board = Board(int(board_data["width"]), int(board_data["height"]))

    zones = [
        HomeZone(
            owner=str(z["owner"]),
            x=int(z["x"]),
            y=int(z["y"]),
            width=int(z["width"]),
            height=int(z["height"]),
            king_id=z.get("king_id"),
            forward=int(z["forward"]),
        )
        for z in data["zones"]
    ]
    for zone in zones:
        board.mark_zone(zone.x, zone.y, zone.width, zone.height, zone.owner)

    for b in board_data["blocks"]:
        block = LockedBlock(
            kind=TetrominoKind(b["kind"]),
            color=int(b["color"]),
            owner=b.get("owner"),
            sponsor=_sponsor_from_dict(b.get("sponsor")),
        )
        if not board.in_bounds(int(b["x"]), int(b["y"])):
            raise MalformedBoard(f"Block outside board at {b['x']},{b['y']}")
        board.place_block(int(b["x"]), int(b["y"]), block)

    pieces: list[ChessPiece] = []
    for p in data["pieces"]:
        piece = ChessPiece(
            piece_id=str(p["piece_id"]),
            kind=PieceKind[p["kind"]],
            owner=str(p["owner"]),
            x=int(p["x"]),
            y=int(p["y"]),
            moved=bool(p["moved"]),
            captured=bool(p["captured"]),
            forward_distance=int(p.get("forward_distance", 0)),
            promoted=bool(p.get("promoted", False)),
        )
        if not piece.captured and not board.place_piece(piece):
            raise MalformedBoard(f"Piece {piece.piece_id} cannot stand on {piece.x},{piece.y}")
        pieces.append(piece)
    board.validate()

    players = [
        Player(
            player_id=str(p["player_id"]),
            name=str(p.get("name", "")),
            resources=int(p["resources"]),
            score=int(p["score"]),
            level=int(p["level"]),
            lines_cleared=int(p["lines_cleared"]),
            eliminated=bool(p["eliminated"]),
        )
        for p in data["players"]
    ]

    tetromino = data["tetromino"]
    turn_data = data["turn"]
    turn = TurnState(
        current_player=turn_data["current_player"],
        phase=TurnPhase[turn_data["phase"]],
        turn_number=int(turn_data["turn_number"]),
        winner=turn_data.get("winner"),
        end_reason=GameEndReason[turn_data["end_reason"]],
    )
    return DecodedGame(
        board=board,
        players=players,
        zones=zones,
        pieces=pieces,
        eliminated=set(data["eliminated"]),
        falling=_falling_from_dict(tetromino["falling"]),
        preview=[TetrominoKind(k) for k in tetromino["preview"]],
        held=TetrominoKind(tetromino["held"]) if tetromino["held"] else None,
        hold_used=bool(tetromino["hold_used"]),
        turn=turn,
        paused=bool(data["paused"]),
    )
