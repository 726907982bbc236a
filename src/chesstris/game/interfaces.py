"""Interfaces for the game layer and its external collaborators.

The engine depends on these protocols, never on concrete transports or
timers.  Every collaborator has a null implementation so optional
capabilities are always callable.
"""

from __future__ import annotations

from enum import IntEnum, auto
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from chesstris.core.enums import TetrominoKind
    from chesstris.core.piece import Sponsor


# ── Turn FSM states ──────────────────────────────────────────────────────────


class TurnPhase(IntEnum):
    """Finite-state-machine states for a turn."""

    PLACING = auto()  # tetromino phase
    MOVING = auto()  # chess phase
    FINISHED = auto()


class GameEndReason(IntEnum):
    """Why the game reached its terminal state."""

    NONE = 0
    LAST_PLAYER_STANDING = auto()
    TOPPED_OUT = auto()


# ── Collaborator protocols ───────────────────────────────────────────────────


class ISponsorProvider(Protocol):
    """Bidding collaborator that may attach a sponsor to a new piece."""

    def request_sponsor(self, kind: TetrominoKind) -> Sponsor | None: ...


class INetworkMirror(Protocol):
    """Outbound mirror for resource, score and pause mutations."""

    @property
    def is_online(self) -> bool:
        """Connected and not in offline mode."""
        ...

    def send(self, name: str, payload: dict[str, Any]) -> None: ...


class IGravityTimer(Protocol):
    """Recurring gravity tick source.

    The host wires ticks to :meth:`GameEngine.gravity_tick`; the engine only
    starts, stops and retunes the timer.
    """

    @property
    def is_running(self) -> bool: ...

    def start(self, interval_ms: int) -> None: ...

    def stop(self) -> None: ...

    def set_interval(self, interval_ms: int) -> None: ...


# ── Null implementations ─────────────────────────────────────────────────────


class NullSponsorProvider:
    """No bidding collaborator: pieces never carry a sponsor."""

    def request_sponsor(self, kind: TetrominoKind) -> Sponsor | None:
        return None


class NullNetworkMirror:
    """Offline mirror: nothing is sent."""

    @property
    def is_online(self) -> bool:
        return False

    def send(self, name: str, payload: dict[str, Any]) -> None:
        pass
