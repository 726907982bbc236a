"""Turn state — who acts, in which phase, and how the game ended."""

from __future__ import annotations

from dataclasses import dataclass

from chesstris.game.interfaces import GameEndReason, TurnPhase


@dataclass
class TurnState:
    """Pure data for the turn state machine.

    ``PLACING`` → ``MOVING`` → next active player's ``PLACING``; ``FINISHED``
    is terminal.
    """

    current_player: str | None = None
    phase: TurnPhase = TurnPhase.PLACING
    turn_number: int = 1
    winner: str | None = None
    end_reason: GameEndReason = GameEndReason.NONE

    @property
    def is_finished(self) -> bool:
        return self.phase == TurnPhase.FINISHED

    def finish(self, winner: str | None, reason: GameEndReason) -> None:
        self.phase = TurnPhase.FINISHED
        self.winner = winner
        self.end_reason = reason

    def begin_turn(self, player_id: str) -> None:
        self.current_player = player_id
        self.phase = TurnPhase.PLACING
        self.turn_number += 1


def next_active(order: list[str], current: str | None, active: set[str]) -> str | None:
    """The first active player after *current* in seating *order*."""
    if not order:
        return None
    start = order.index(current) + 1 if current in order else 0
    for step in range(len(order)):
        candidate = order[(start + step) % len(order)]
        if candidate in active:
            return candidate
    return None
