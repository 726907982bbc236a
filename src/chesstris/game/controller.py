"""GameEngine — the central orchestrator of a chesstris game.

Coordinates: Board, TetrominoSystem, ChessSystem, ScoreLedger, TurnState.
Emits events via simple callbacks so a renderer / tests can subscribe.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from chesstris.core.board import Board
from chesstris.core.chess import ChessSystem
from chesstris.core.enums import Direction, EliminationReason, PieceKind, Rotation, TetrominoKind
from chesstris.core.piece import PIECE_COSTS, ChessPiece
from chesstris.core.rules import Rules
from chesstris.core.tetromino import FallingPiece, LockResult, TetrominoSystem
from chesstris.core.types import Coord
from chesstris.game.clock import GravityClock, gravity_interval_ms
from chesstris.game.config import GameConfig
from chesstris.game.interfaces import (
    GameEndReason,
    IGravityTimer,
    INetworkMirror,
    ISponsorProvider,
    NullNetworkMirror,
    NullSponsorProvider,
    TurnPhase,
)
from chesstris.game.ledger import ScoreLedger
from chesstris.game.player import Player
from chesstris.game.snapshot import decode_game, encode_game
from chesstris.game.state import TurnState, next_active

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

StateCallback = Callable[[TurnState], None]
PhaseCallback = Callable[[TurnPhase], None]
ScoreCallback = Callable[[Player], None]
CaptureCallback = Callable[[ChessPiece, ChessPiece], None]  # captured, by
PromotionCallback = Callable[[ChessPiece], None]
TransferCallback = Callable[[str, str, int], None]  # from owner, to owner, count
EliminationCallback = Callable[[str, EliminationReason], None]
GameOverCallback = Callable[[str | None], None]  # winner id


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_state_changed: list[StateCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_score_changed: list[ScoreCallback] = field(default_factory=list)
    on_piece_captured: list[CaptureCallback] = field(default_factory=list)
    on_pawn_promoted: list[PromotionCallback] = field(default_factory=list)
    on_pieces_transferred: list[TransferCallback] = field(default_factory=list)
    on_player_eliminated: list[EliminationCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)


# ── Network message names ────────────────────────────────────────────────────

MSG_RESOURCES = "updateResources"
MSG_SCORE = "updateScore"
MSG_PAUSE = "pauseGame"
MSG_RESUME = "resumeGame"


# ── Engine ───────────────────────────────────────────────────────────────────


class GameEngine:
    """Runs one shared board: tetromino placement, then one chess move, per
    active player in seating order.

    Thread-safety: every method is a synchronous transition meant to be
    called from a single thread.  Gravity ticks come from an
    :class:`IGravityTimer` that the host wires to :meth:`gravity_tick`.

    Rejected actions return ``False`` / ``None``; nothing raises for an
    illegal move.
    """

    __slots__ = (
        "_config",
        "_rng",
        "_sponsors",
        "_network",
        "_timer",
        "_ledger",
        "_board",
        "_tetrominoes",
        "_chess",
        "_players",
        "_order",
        "_turn",
        "_paused",
        "events",
        "__weakref__",  # Qt signals hold bound methods weakly
    )

    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        sponsor_provider: ISponsorProvider | None = None,
        network: INetworkMirror | None = None,
        gravity_timer: IGravityTimer | None = None,
        rng: random.Random | None = None,
        local_player_id: str | None = None,
    ) -> None:
        self._config = config or GameConfig()
        self._rng = rng or random.Random(self._config.seed)
        self._sponsors: ISponsorProvider = sponsor_provider or NullSponsorProvider()
        self._network: INetworkMirror = network or NullNetworkMirror()
        self._timer: IGravityTimer = gravity_timer or GravityClock()
        self._ledger = ScoreLedger(
            lines_per_level=self._config.lines_per_level,
            max_resources=self._config.max_resources,
            local_step=self._config.local_resource_step,
            local_player_id=local_player_id,
        )
        self._players: dict[str, Player] = {}
        self._order: list[str] = []
        self._turn = TurnState()
        self._paused = False
        self.events = GameEvents()
        self._board = Board(self._config.board_width, self._config.board_height)
        self._tetrominoes = self._make_tetrominoes(self._board)
        self._chess = self._make_chess(self._board)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def board(self) -> Board:
        return self._board

    @property
    def turn(self) -> TurnState:
        return self._turn

    @property
    def phase(self) -> TurnPhase:
        return self._turn.phase

    @property
    def players(self) -> list[Player]:
        """Players in seating order."""
        return [self._players[pid] for pid in self._order]

    def player(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    @property
    def current_player(self) -> Player | None:
        if self._turn.current_player is None:
            return None
        return self._players.get(self._turn.current_player)

    @property
    def active_players(self) -> list[str]:
        return [pid for pid in self._order if self._players[pid].is_active]

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_finished(self) -> bool:
        return self._turn.is_finished

    @property
    def tetrominoes(self) -> TetrominoSystem:
        return self._tetrominoes

    @property
    def chess(self) -> ChessSystem:
        return self._chess

    @property
    def ledger(self) -> ScoreLedger:
        return self._ledger

    @property
    def gravity_timer(self) -> IGravityTimer:
        return self._timer

    @property
    def falling(self) -> FallingPiece | None:
        return self._tetrominoes.falling

    @property
    def legal_targets(self) -> frozenset[Coord]:
        """Destinations of the selected chess piece."""
        return self._chess.legal_targets

    # ── Game lifecycle ───────────────────────────────────────────────────

    def new_game(self, player_ids: Sequence[str]) -> None:
        """Start a fresh game; seats follow the order of *player_ids*.

        Raises:
            ValueError: No players, duplicate ids, or no room for a home zone.
        """
        ids = list(player_ids)
        if not ids:
            raise ValueError("A game needs at least one player")
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate player ids: {ids}")

        self._timer.stop()
        self._reset_systems(Board(self._config.board_width, self._config.board_height))
        self._players = {
            pid: Player(player_id=pid, resources=self._config.starting_resources)
            for pid in ids
        }
        self._order = ids
        for seat, pid in enumerate(ids):
            if self._chess.init_home_zone(pid, seat) is None:
                raise ValueError(f"No room on the board for a home zone for {pid!r}")

        self._turn = TurnState(current_player=ids[0])
        self._paused = False
        self._tetrominoes.owner = ids[0]
        self._tetrominoes.spawn()
        _LOGGER.info("New game: %d players on %dx%d", len(ids), self._board.width, self._board.height)

        self._emit_phase(TurnPhase.PLACING)
        self._sync_timer()
        self._emit_state()

    def pause(self) -> bool:
        if self._paused or self._turn.is_finished:
            return False
        self._paused = True
        self._timer.stop()
        self._mirror(MSG_PAUSE, {"paused": True})
        self._emit_state()
        return True

    def resume(self) -> bool:
        """Lift the pause; the gravity timer restarts from zero."""
        if not self._paused:
            return False
        self._paused = False
        self._sync_timer()
        self._mirror(MSG_RESUME, {"paused": False})
        self._emit_state()
        return True

    # ── Tetromino phase ──────────────────────────────────────────────────

    def spawn(self, kind: TetrominoKind | None = None) -> FallingPiece | None:
        """Replace the falling piece (administrative reset)."""
        if not self._accepts(TurnPhase.PLACING):
            return None
        piece = self._tetrominoes.spawn(kind)
        self._emit_state()
        return piece

    def move(self, direction: Direction) -> bool:
        """Shift the falling piece; a blocked DOWN move locks it."""
        if not self._accepts(TurnPhase.PLACING):
            return False
        moved = self._tetrominoes.move(direction)
        self._emit_state()
        return moved

    def rotate(self, rotation: Rotation = Rotation.CLOCKWISE) -> bool:
        if not self._accepts(TurnPhase.PLACING):
            return False
        rotated = self._tetrominoes.rotate(rotation)
        if rotated:
            self._emit_state()
        return rotated

    def hard_drop(self) -> int | None:
        """Drop and lock; returns the distance fallen."""
        if not self._accepts(TurnPhase.PLACING):
            return None
        distance = self._tetrominoes.hard_drop()
        self._emit_state()
        return distance

    def lock(self) -> int | None:
        """Lock in place; returns the number of cleared rows."""
        if not self._accepts(TurnPhase.PLACING):
            return None
        cleared = self._tetrominoes.lock()
        self._emit_state()
        return cleared

    def hold(self) -> bool:
        if not self._accepts(TurnPhase.PLACING):
            return False
        held = self._tetrominoes.hold()
        if held:
            self._emit_state()
        return held

    def ghost(self) -> FallingPiece | None:
        return self._tetrominoes.ghost()

    def gravity_tick(self) -> bool:
        """One gravity step; ignored outside an unpaused PLACING phase."""
        return self.move(Direction.DOWN)

    def gravity_interval_ms(self) -> int:
        player = self.current_player
        level = player.level if player is not None else 1
        return gravity_interval_ms(
            level,
            base_ms=self._config.base_gravity_ms,
            min_ms=self._config.min_gravity_ms,
        )

    # ── Chess phase ──────────────────────────────────────────────────────

    def select(self, x: int, y: int, acting_player: str | None = None) -> bool:
        """Select one of the current player's pieces."""
        if not self._accepts(TurnPhase.MOVING):
            return False
        actor = acting_player or self._turn.current_player
        if actor != self._turn.current_player:
            return False
        return self._chess.select(x, y, actor)

    def deselect(self) -> None:
        self._chess.deselect()

    def legal_moves(self, piece: ChessPiece) -> frozenset[Coord]:
        return self._chess.legal_moves(piece)

    def move_piece(self, x: int, y: int) -> bool:
        """Move the selected piece; a success ends the current turn."""
        if not self._accepts(TurnPhase.MOVING):
            return False
        if not self._chess.move(x, y):
            return False
        if not self._check_game_over():
            self._advance_turn()
        self._emit_state()
        return True

    def purchase_piece(
        self,
        kind: PieceKind,
        x: int,
        y: int,
        acting_player: str | None = None,
    ) -> ChessPiece | None:
        """Buy a piece onto an empty cell of the current player's zone."""
        if self._paused or self._turn.is_finished or not self._ensure_board():
            return None
        actor = acting_player or self._turn.current_player
        player = self._players.get(actor) if actor is not None else None
        if player is None or actor != self._turn.current_player:
            return None
        cost = PIECE_COSTS.get(kind)
        if cost is None or not self._ledger.can_afford(player, cost):
            return None

        piece = self._chess.place_piece(player.player_id, kind, x, y)
        if piece is None:
            return None
        self._ledger.subtract_resources(player, cost)
        self._mirror_resources(player)
        _LOGGER.debug("%s bought %s for %d", player.player_id, piece.piece_id, cost)
        self._emit_state()
        return piece

    # ── Ledger ───────────────────────────────────────────────────────────

    def update_score(self, player_id: str, lines_cleared: int) -> int | None:
        """Award points to *player_id*; ``None`` for an unknown player."""
        player = self._players.get(player_id)
        if player is None:
            return None
        points = self._apply_score(player, lines_cleared)
        self._emit_state()
        return points

    def set_resources(self, player_id: str, amount: int) -> int | None:
        player = self._players.get(player_id)
        if player is None:
            return None
        balance = self._ledger.set_resources(player, amount)
        self._mirror_resources(player)
        self._emit_state()
        return balance

    def add_resources(self, player_id: str, amount: int) -> int | None:
        player = self._players.get(player_id)
        if player is None:
            return None
        balance = self._ledger.add_resources(player, amount)
        self._mirror_resources(player)
        self._emit_state()
        return balance

    def subtract_resources(self, player_id: str, amount: int) -> bool:
        player = self._players.get(player_id)
        if player is None or not self._ledger.subtract_resources(player, amount):
            return False
        self._mirror_resources(player)
        self._emit_state()
        return True

    # ── Snapshots ────────────────────────────────────────────────────────

    def snapshot(self) -> dict[str, Any]:
        return encode_game(
            board=self._board,
            players=self.players,
            chess=self._chess,
            tetrominoes=self._tetrominoes,
            turn=self._turn,
            paused=self._paused,
        )

    def replace_state(self, data: Any) -> bool:
        """Replace all local state with an authoritative snapshot.

        An undecodable snapshot rebuilds a fresh game for the current players
        and returns ``False``.
        """
        try:
            decoded = decode_game(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            _LOGGER.warning("Rejected game snapshot, rebuilding default state: %s", exc)
            self._rebuild()
            return False

        self._timer.stop()
        self._board = decoded.board
        self._tetrominoes.board = decoded.board
        self._tetrominoes.restore(
            decoded.falling, decoded.preview, decoded.held, decoded.hold_used
        )
        self._tetrominoes.owner = decoded.turn.current_player
        self._chess.restore(decoded.board, decoded.zones, decoded.pieces, decoded.eliminated)
        self._players = {p.player_id: p for p in decoded.players}
        self._order = [p.player_id for p in decoded.players]
        self._turn = decoded.turn
        self._paused = decoded.paused
        _LOGGER.debug("Replaced state at turn %d", self._turn.turn_number)

        self._emit_phase(self._turn.phase)
        self._sync_timer()
        self._emit_state()
        return True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _make_tetrominoes(self, board: Board) -> TetrominoSystem:
        system = TetrominoSystem(
            board,
            sponsors=self._sponsors,
            rng=self._rng,
            preview_size=self._config.preview_size,
        )
        system.events.on_lock.append(self._on_lock)
        return system

    def _make_chess(self, board: Board) -> ChessSystem:
        system = ChessSystem(
            board,
            self._on_eliminated,
            spawn_rows=self._config.spawn_rows,
            rng=self._rng,
        )
        system.events.on_capture.append(self._on_capture)
        system.events.on_promotion.append(self._on_promotion)
        system.events.on_transfer.append(self._on_transfer)
        return system

    def _reset_systems(self, board: Board) -> None:
        self._board = board
        self._tetrominoes = self._make_tetrominoes(board)
        self._chess = self._make_chess(board)

    def _rebuild(self) -> None:
        """Recover from a structural fault with a fresh default game."""
        if self._order:
            self.new_game(list(self._order))
            return
        self._timer.stop()
        self._reset_systems(Board(self._config.board_width, self._config.board_height))
        self._turn = TurnState()
        self._paused = False
        self._emit_state()

    def _ensure_board(self) -> bool:
        """Rebuild if the grid is malformed; ``False`` means a rebuild happened."""
        if self._board.is_well_formed():
            return True
        _LOGGER.warning("Malformed board detected, starting a fresh game")
        self._rebuild()
        return False

    def _accepts(self, phase: TurnPhase) -> bool:
        if self._paused or self._turn.phase != phase or self._turn.current_player is None:
            return False
        return self._ensure_board()

    def _apply_score(self, player: Player, lines_cleared: int) -> int:
        level = player.level
        points = self._ledger.update_score(player, lines_cleared)
        if player.level != level:
            _LOGGER.info("%s reached level %d", player.player_id, player.level)
            if player.player_id == self._turn.current_player and self._timer.is_running:
                self._timer.set_interval(self.gravity_interval_ms())
        self._mirror(
            MSG_SCORE,
            {
                "player_id": player.player_id,
                "score": player.score,
                "level": player.level,
                "lines": player.lines_cleared,
            },
        )
        for cb in self.events.on_score_changed:
            cb(player)
        return points

    def _on_lock(self, result: LockResult) -> None:
        player = self.current_player
        if player is not None:
            self._apply_score(player, result.cleared_rows)

        if self._tetrominoes.is_topped_out():
            scores = {pid: self._players[pid].score for pid in self.active_players}
            self._finish(Rules.top_scorer(scores), GameEndReason.TOPPED_OUT)
            return

        self._turn.phase = TurnPhase.MOVING
        self._emit_phase(TurnPhase.MOVING)
        self._sync_timer()
        if player is not None and not self._chess.has_legal_move(player.player_id):
            _LOGGER.debug("%s has no chess move, passing", player.player_id)
            self._advance_turn()

    def _on_capture(self, captured: ChessPiece, by: ChessPiece) -> None:
        for cb in self.events.on_piece_captured:
            cb(captured, by)

    def _on_promotion(self, pawn: ChessPiece) -> None:
        for cb in self.events.on_pawn_promoted:
            cb(pawn)

    def _on_transfer(self, loser: str, captor: str, count: int) -> None:
        for cb in self.events.on_pieces_transferred:
            cb(loser, captor, count)

    def _on_eliminated(self, player_id: str, reason: EliminationReason) -> None:
        player = self._players.get(player_id)
        if player is None or player.eliminated:
            return
        player.eliminated = True
        _LOGGER.info("%s eliminated (%s)", player_id, reason.name.lower())
        for cb in self.events.on_player_eliminated:
            cb(player_id, reason)

    def _check_game_over(self) -> bool:
        if len(self._order) < 2:
            return False
        active = self.active_players
        if not Rules.is_decided(active):
            return False
        self._finish(Rules.winner(active), GameEndReason.LAST_PLAYER_STANDING)
        return True

    def _advance_turn(self) -> None:
        nxt = next_active(self._order, self._turn.current_player, set(self.active_players))
        if nxt is None:
            self._finish(None, GameEndReason.LAST_PLAYER_STANDING)
            return
        self._chess.deselect()
        self._turn.begin_turn(nxt)
        self._tetrominoes.owner = nxt
        falling = self._tetrominoes.falling
        if falling is not None:
            falling.owner = nxt
        self._emit_phase(TurnPhase.PLACING)
        self._sync_timer()

    def _finish(self, winner: str | None, reason: GameEndReason) -> None:
        self._turn.finish(winner, reason)
        self._chess.deselect()
        self._timer.stop()
        _LOGGER.info("Game over (%s), winner: %s", reason.name.lower(), winner)
        self._emit_phase(TurnPhase.FINISHED)
        for cb in self.events.on_game_over:
            cb(winner)

    def _sync_timer(self) -> None:
        """Run gravity only during an unpaused PLACING phase."""
        if self._paused or self._turn.phase != TurnPhase.PLACING:
            self._timer.stop()
            return
        interval = self.gravity_interval_ms()
        if self._timer.is_running:
            self._timer.set_interval(interval)
        else:
            self._timer.start(interval)

    def _mirror(self, name: str, payload: dict[str, Any]) -> None:
        if self._network.is_online:
            self._network.send(name, payload)

    def _mirror_resources(self, player: Player) -> None:
        self._mirror(
            MSG_RESOURCES,
            {"player_id": player.player_id, "resources": player.resources},
        )
        for cb in self.events.on_score_changed:
            cb(player)

    def _emit_state(self) -> None:
        for cb in self.events.on_state_changed:
            cb(self._turn)

    def _emit_phase(self, phase: TurnPhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)
