"""Falling-piece mechanics: spawn, move, rotate, drop, lock, ghost."""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol

from chesstris.core.enums import Direction, Rotation, TetrominoKind
from chesstris.core.piece import LockedBlock, Sponsor
from chesstris.core.shapes import BOX_SIZES, COLORS, SHAPES, WALL_KICKS, rotate_cells
from chesstris.core.types import Coord, translate_all

if TYPE_CHECKING:
    from chesstris.core.board import Board

_LOGGER = logging.getLogger(__name__)

SPAWN_Y = 0


class SponsorSource(Protocol):
    """Anything able to attach a sponsor to a freshly spawned piece."""

    def request_sponsor(self, kind: TetrominoKind) -> Sponsor | None: ...


@dataclass(slots=True)
class FallingPiece:
    """The active tetromino: block offsets relative to an origin."""

    kind: TetrominoKind
    cells: tuple[Coord, ...]
    x: int
    y: int
    rotation: int = 0
    sponsor: Sponsor | None = None
    owner: str | None = None

    @property
    def color(self) -> int:
        return COLORS[self.kind]

    def blocks(self) -> tuple[Coord, ...]:
        """Absolute board coordinates of every block."""
        return translate_all(self.cells, self.x, self.y)

    def copy(self) -> FallingPiece:
        return replace(self)


@dataclass(frozen=True, slots=True)
class LockResult:
    """Outcome of committing a falling piece into the grid."""

    piece: FallingPiece
    cleared_rows: int


LockCallback = Callable[[LockResult], None]
SpawnCallback = Callable[[FallingPiece], None]


@dataclass
class TetrominoEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_lock: list[LockCallback] = field(default_factory=list)
    on_spawn: list[SpawnCallback] = field(default_factory=list)


class TetrominoSystem:
    """Owns the single falling piece of one board.

    Validation failures return ``False``/``None``; nothing here raises for an
    illegal move.
    """

    __slots__ = (
        "_board",
        "_falling",
        "_preview",
        "_preview_size",
        "_held",
        "_hold_used",
        "_rng",
        "_sponsors",
        "owner",
        "events",
    )

    def __init__(
        self,
        board: Board,
        *,
        sponsors: SponsorSource | None = None,
        rng: random.Random | None = None,
        preview_size: int = 3,
    ) -> None:
        self._board = board
        self._falling: FallingPiece | None = None
        self._preview: deque[TetrominoKind] = deque()
        self._preview_size = max(1, preview_size)
        self._held: TetrominoKind | None = None
        self._hold_used = False
        self._rng = rng or random.Random()
        self._sponsors = sponsors
        self.owner: str | None = None
        self.events = TetrominoEvents()
        self._fill_preview()

    # -- Properties -----------------------------------------------------------

    @property
    def board(self) -> Board:
        return self._board

    @board.setter
    def board(self, board: Board) -> None:
        self._board = board

    @property
    def falling(self) -> FallingPiece | None:
        return self._falling

    @property
    def held_kind(self) -> TetrominoKind | None:
        return self._held

    @property
    def next_kinds(self) -> tuple[TetrominoKind, ...]:
        return tuple(self._preview)

    def restore(
        self,
        falling: FallingPiece | None,
        preview: list[TetrominoKind],
        held: TetrominoKind | None,
        hold_used: bool,
    ) -> None:
        """Replace the whole falling-piece state (used by snapshots)."""
        self._falling = falling
        self._preview = deque(preview)
        self._fill_preview()
        self._held = held
        self._hold_used = hold_used

    @property
    def hold_used(self) -> bool:
        return self._hold_used

    # -- Spawning -------------------------------------------------------------

    def spawn_origin(self, kind: TetrominoKind) -> Coord:
        return (self._board.width // 2 - BOX_SIZES[kind] // 2, SPAWN_Y)

    def spawn(self, kind: TetrominoKind | None = None) -> FallingPiece:
        """Create a new falling piece, replacing any current one."""
        if kind is None:
            kind = self._preview.popleft()
            self._fill_preview()
        x, y = self.spawn_origin(kind)
        piece = FallingPiece(
            kind=kind,
            cells=SHAPES[kind],
            x=x,
            y=y,
            sponsor=self._request_sponsor(kind),
            owner=self.owner,
        )
        self._falling = piece
        self._hold_used = False
        for cb in self.events.on_spawn:
            cb(piece)
        return piece

    def hold(self) -> bool:
        """Swap the falling kind with the held one, once per spawned piece."""
        if self._falling is None or self._hold_used:
            return False
        current = self._falling.kind
        swap_in = self._held
        self._held = current
        self.spawn(swap_in)
        self._hold_used = True
        return True

    # -- Movement -------------------------------------------------------------

    def can_place(self, cells: tuple[Coord, ...], x: int, y: int) -> bool:
        return self._board.can_hold_blocks(translate_all(cells, x, y))

    def move(self, direction: Direction) -> bool:
        """Shift the piece one cell; a blocked DOWN move locks it."""
        piece = self._falling
        if piece is None:
            return False
        dx, dy = direction.offset
        if self.can_place(piece.cells, piece.x + dx, piece.y + dy):
            piece.x += dx
            piece.y += dy
            return True
        if direction == Direction.DOWN:
            self.lock()
        return False

    def rotate(self, rotation: Rotation = Rotation.CLOCKWISE) -> bool:
        """Rotate 90 degrees, trying wall kicks in order when blocked."""
        piece = self._falling
        if piece is None:
            return False
        if piece.kind == TetrominoKind.O:
            return True

        cells = rotate_cells(piece.cells, BOX_SIZES[piece.kind], rotation)
        for dx, dy in ((0, 0), *WALL_KICKS):
            if self.can_place(cells, piece.x + dx, piece.y + dy):
                piece.cells = cells
                piece.x += dx
                piece.y += dy
                piece.rotation = (piece.rotation + int(rotation)) % 4
                return True
        return False

    def hard_drop(self) -> int | None:
        """Drop until blocked, lock, and return the distance fallen."""
        piece = self._falling
        if piece is None:
            return None
        distance = 0
        while self.can_place(piece.cells, piece.x, piece.y + 1):
            piece.y += 1
            distance += 1
        self.lock()
        return distance

    # -- Locking --------------------------------------------------------------

    def lock(self) -> int | None:
        """Commit the piece into the grid, sweep rows and spawn the next one.

        Returns the number of cleared rows, or ``None`` if nothing was falling.
        """
        piece = self._falling
        if piece is None:
            return None
        block = LockedBlock(
            kind=piece.kind,
            color=piece.color,
            owner=piece.owner,
            sponsor=piece.sponsor,
        )
        for x, y in piece.blocks():
            self._board.place_block(x, y, block)
        cleared = self._board.clear_full_rows()
        self._falling = None
        _LOGGER.debug("Locked %s at %d,%d (%d rows)", piece.kind, piece.x, piece.y, cleared)

        result = LockResult(piece=piece, cleared_rows=cleared)
        self.spawn()
        for cb in self.events.on_lock:
            cb(result)
        return cleared

    # -- Queries --------------------------------------------------------------

    def ghost(self) -> FallingPiece | None:
        """Projection of the falling piece onto its resting row."""
        if self._falling is None:
            return None
        ghost = self._falling.copy()
        while self.can_place(ghost.cells, ghost.x, ghost.y + 1):
            ghost.y += 1
        return ghost

    def is_topped_out(self) -> bool:
        """The piece sits on the spawn row and cannot go anywhere."""
        piece = self._falling
        if piece is None or piece.y != SPAWN_Y:
            return False
        if not self.can_place(piece.cells, piece.x, piece.y):
            return True
        return not self.can_place(piece.cells, piece.x, piece.y + 1)

    # -- Internal -------------------------------------------------------------

    def _fill_preview(self) -> None:
        kinds = list(TetrominoKind)
        while len(self._preview) < self._preview_size:
            self._preview.append(self._rng.choice(kinds))

    def _request_sponsor(self, kind: TetrominoKind) -> Sponsor | None:
        if self._sponsors is None:
            return None
        try:
            return self._sponsors.request_sponsor(kind)
        except OSError as exc:
            _LOGGER.warning("Sponsor lookup failed, spawning without one: %s", exc)
            return None
