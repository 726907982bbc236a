"""Player record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Player:
    """A participant and their bookkeeping.

    ``resources`` is kept within the configured bounds by
    :class:`~chesstris.game.ledger.ScoreLedger`, not here.
    """

    player_id: str
    name: str = ""
    resources: int = 0
    score: int = 0
    level: int = 1
    lines_cleared: int = 0
    eliminated: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            self.name = f"Player ({self.player_id})"

    @property
    def is_active(self) -> bool:
        return not self.eliminated
