"""Game management layer — engine, players, ledger, gravity, state machine.

Quick start::

    from chesstris.game import GameEngine

    engine = GameEngine()
    engine.new_game(["alice", "bob"])
    engine.hard_drop()        # alice places a tetromino...
    engine.select(8, 22)      # ...then moves one chess piece
    engine.move_piece(8, 21)
"""

from chesstris.game.clock import GravityClock, gravity_interval_ms
from chesstris.game.config import GameConfig
from chesstris.game.controller import GameEngine, GameEvents
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
from chesstris.game.state import TurnState

__all__ = [
    "GameConfig",
    "GameEndReason",
    "GameEngine",
    "GameEvents",
    "GravityClock",
    "IGravityTimer",
    "INetworkMirror",
    "ISponsorProvider",
    "NullNetworkMirror",
    "NullSponsorProvider",
    "Player",
    "ScoreLedger",
    "TurnPhase",
    "TurnState",
    "gravity_interval_ms",
]
