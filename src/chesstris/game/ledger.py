"""Score, level, lines and resource bookkeeping.

The clamps below are local sanity guards; authoritative validation belongs
to a server-side collaborator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chesstris.game.player import Player

LINE_POINTS: dict[int, int] = {0: 0, 1: 40, 2: 100, 3: 300, 4: 1200}
MAX_LINES_PER_LOCK = 4


def _as_amount(value: object) -> int:
    """Whole-number view of a resource amount; anything unusable is 0."""
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return 0


class ScoreLedger:
    """Applies scoring and resource rules to :class:`Player` records.

    Args:
        lines_per_level: Cleared lines needed per level.
        max_resources: Upper resource bound (lower bound is 0).
        local_step: Largest increase accepted in one call for the local player.
        local_player_id: The player this process acts for, if any.
    """

    __slots__ = ("_lines_per_level", "_max_resources", "_local_step", "local_player_id")

    def __init__(
        self,
        *,
        lines_per_level: int = 10,
        max_resources: int = 9999,
        local_step: int = 20,
        local_player_id: str | None = None,
    ) -> None:
        self._lines_per_level = lines_per_level
        self._max_resources = max_resources
        self._local_step = local_step
        self.local_player_id = local_player_id

    # ── Score ────────────────────────────────────────────────────────────

    def update_score(self, player: Player, lines_cleared: int) -> int:
        """Award points for a lock that cleared *lines_cleared* rows.

        Out-of-range input counts as zero lines.  Returns the points awarded.
        """
        if not isinstance(lines_cleared, int) or not 0 <= lines_cleared <= MAX_LINES_PER_LOCK:
            lines_cleared = 0

        level = max(1, player.level)
        points = min(LINE_POINTS[lines_cleared] * level, LINE_POINTS[4] * level)

        player.score += points
        player.lines_cleared += lines_cleared
        if player.lines_cleared >= level * self._lines_per_level:
            ceiling = player.lines_cleared // self._lines_per_level + 1
            player.level = min(level + 1, ceiling)
        return points

    # ── Resources ────────────────────────────────────────────────────────

    def set_resources(self, player: Player, amount: int) -> int:
        """Set the balance, clamped to bounds; returns the new balance."""
        amount = max(0, min(_as_amount(amount), self._max_resources))
        previous = player.resources
        if (
            player.player_id == self.local_player_id
            and amount - previous > self._local_step
        ):
            amount = previous + self._local_step
        player.resources = amount
        return amount

    def add_resources(self, player: Player, amount: int) -> int:
        return self.set_resources(player, player.resources + max(0, _as_amount(amount)))

    def subtract_resources(self, player: Player, amount: int) -> bool:
        """Deduct *amount*; fails without mutation if the balance is short."""
        amount = _as_amount(amount)
        if amount < 0 or amount > player.resources:
            return False
        player.resources -= amount
        return True

    def can_afford(self, player: Player, amount: int) -> bool:
        return 0 <= _as_amount(amount) <= player.resources
