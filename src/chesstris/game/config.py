"""Game configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any


@dataclass
class GameConfig:
    """All tunable game settings."""

    # Board
    board_width: int = 24
    board_height: int = 24
    spawn_rows: int = 4  # rows kept free of home zones

    # Tetrominoes
    preview_size: int = 3

    # Resources
    starting_resources: int = 0
    max_resources: int = 9999
    local_resource_step: int = 20  # largest single increase for the local player

    # Levels / gravity
    lines_per_level: int = 10
    base_gravity_ms: int = 800
    min_gravity_ms: int = 100

    seed: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GameConfig:
        """Build a config from a plain mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
