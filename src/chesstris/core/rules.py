"""High-level rules: home-zone occupancy, elimination and winner detection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chesstris.core.home_zone import HomeZone
    from chesstris.core.piece import ChessPiece


class Rules:
    """Static rule-checker over pieces and home zones."""

    @staticmethod
    def king_at_home(zone: HomeZone, pieces_by_id: Mapping[str, ChessPiece]) -> bool:
        """Whether the zone's king is alive and standing inside the zone."""
        if zone.king_id is None:
            return False
        king = pieces_by_id.get(zone.king_id)
        if king is None or king.captured:
            return False
        return zone.contains(king.position)

    @staticmethod
    def homeless_owners(
        zones: Iterable[HomeZone],
        pieces_by_id: Mapping[str, ChessPiece],
    ) -> list[str]:
        """Owners whose king is missing from their home zone."""
        return [
            zone.owner for zone in zones if not Rules.king_at_home(zone, pieces_by_id)
        ]

    @staticmethod
    def is_decided(active_players: list[str]) -> bool:
        return len(active_players) <= 1

    @staticmethod
    def winner(active_players: list[str]) -> str | None:
        """The last active player, once the game is decided."""
        if len(active_players) == 1:
            return active_players[0]
        return None

    @staticmethod
    def top_scorer(scores: Mapping[str, int]) -> str | None:
        """Player with the strictly highest score, or ``None`` on a tie."""
        if not scores:
            return None
        best = max(scores.values())
        leaders = [pid for pid, score in scores.items() if score == best]
        return leaders[0] if len(leaders) == 1 else None
