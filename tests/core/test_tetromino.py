"""Tests for TetrominoSystem — spawn, movement, rotation, locking."""

import random

import pytest

from chesstris.core.board import Board
from chesstris.core.enums import Direction, PieceKind, Rotation, TetrominoKind
from chesstris.core.piece import ChessPiece, LockedBlock, Sponsor
from chesstris.core.shapes import SHAPES
from chesstris.core.tetromino import SPAWN_Y, LockResult, TetrominoSystem

_BLOCK = LockedBlock(TetrominoKind.O, 0xFFFF00)


def _system(width: int = 10, height: int = 20, **kwargs: object) -> TetrominoSystem:
    return TetrominoSystem(Board(width, height), rng=random.Random(7), **kwargs)


class _StaticSponsors:
    def request_sponsor(self, kind: TetrominoKind) -> Sponsor | None:
        return Sponsor("s-1", f"Sponsor of {kind}")


class _OfflineSponsors:
    def request_sponsor(self, kind: TetrominoKind) -> Sponsor | None:
        raise ConnectionError("bidding service unreachable")


class TestSpawn:
    def test_spawn_given_kind(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.I)
        assert system.falling is piece
        assert piece.kind == TetrominoKind.I
        assert (piece.x, piece.y) == (3, SPAWN_Y)
        assert piece.rotation == 0
        assert piece.cells == SHAPES[TetrominoKind.I]

    def test_spawn_random_kind_comes_from_preview(self) -> None:
        system = _system()
        upcoming = system.next_kinds[0]
        piece = system.spawn()
        assert piece.kind == upcoming
        assert len(system.next_kinds) == 3

    def test_spawn_replaces_unlocked_piece(self) -> None:
        system = _system()
        first = system.spawn(TetrominoKind.T)
        second = system.spawn(TetrominoKind.S)
        assert system.falling is second
        assert first is not second

    def test_spawn_carries_owner(self) -> None:
        system = _system()
        system.owner = "alice"
        assert system.spawn(TetrominoKind.L).owner == "alice"

    def test_sponsor_attached(self) -> None:
        system = _system(sponsors=_StaticSponsors())
        piece = system.spawn(TetrominoKind.Z)
        assert piece.sponsor == Sponsor("s-1", "Sponsor of Z")

    def test_sponsor_failure_spawns_without_one(self) -> None:
        system = _system(sponsors=_OfflineSponsors())
        piece = system.spawn(TetrominoKind.Z)
        assert piece.sponsor is None

    def test_spawn_event_fires(self) -> None:
        system = _system()
        spawned: list[TetrominoKind] = []
        system.events.on_spawn.append(lambda p: spawned.append(p.kind))
        system.spawn(TetrominoKind.J)
        assert spawned == [TetrominoKind.J]


class TestMove:
    def test_left_until_wall(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.I)
        assert piece.x == 3
        for _ in range(3):
            assert system.move(Direction.LEFT)
        assert piece.x == 0
        assert not system.move(Direction.LEFT)
        assert piece.x == 0

    def test_right_until_wall(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.O)
        while system.move(Direction.RIGHT):
            pass
        assert max(x for x, _ in piece.blocks()) == 9

    def test_blocked_by_locked_block(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.O)
        system.board.place_block(piece.x - 1, piece.y, _BLOCK)
        assert not system.move(Direction.LEFT)
        assert piece.x == 4

    def test_blocked_by_chess_piece(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.O)
        pawn = ChessPiece("b-pawn-1", PieceKind.PAWN, "b", piece.x + 2, piece.y)
        system.board.place_piece(pawn)
        assert not system.move(Direction.RIGHT)

    def test_down_moves(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.T)
        assert system.move(Direction.DOWN)
        assert piece.y == 1

    def test_failed_down_locks(self) -> None:
        system = _system(height=4)
        piece = system.spawn(TetrominoKind.O)
        while piece.y < 2:
            system.move(Direction.DOWN)
        assert not system.move(Direction.DOWN)
        assert system.board.block_at(piece.x, 3) is not None
        assert system.falling is not piece

    def test_no_active_piece(self) -> None:
        system = _system()
        assert not system.move(Direction.LEFT)
        assert not system.rotate()
        assert system.hard_drop() is None
        assert system.lock() is None
        assert system.ghost() is None


class TestRotate:
    def test_square_is_noop_success(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.O)
        before = piece.cells
        assert system.rotate(Rotation.CLOCKWISE)
        assert system.rotate(Rotation.COUNTERCLOCKWISE)
        assert piece.cells == before
        assert piece.rotation == 0

    def test_in_place_rotation(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.T)
        x = piece.x
        assert system.rotate(Rotation.CLOCKWISE)
        assert piece.x == x
        assert piece.rotation == 1
        assert set(piece.cells) == {(1, 0), (1, 1), (2, 1), (1, 2)}

    def test_four_rotations_restore_layout(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.L)
        system.move(Direction.DOWN)
        original = set(piece.cells)
        for _ in range(4):
            assert system.rotate(Rotation.CLOCKWISE)
        assert set(piece.cells) == original
        assert piece.rotation == 0

    @pytest.mark.parametrize(
        ("rotation", "expected_index"),
        [(Rotation.CLOCKWISE, 1), (Rotation.COUNTERCLOCKWISE, 3)],
    )
    def test_wall_kick_right(self, rotation: Rotation, expected_index: int) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.T)
        while system.move(Direction.LEFT):
            pass
        for _ in range(5):
            system.move(Direction.DOWN)
        assert (piece.x, piece.y) == (0, 5)
        # blocks the in-place rotation but not the (+1, 0) kick
        system.board.place_block(1, 7, _BLOCK)

        assert system.rotate(rotation)
        assert piece.x == 1
        assert piece.y == 5
        assert piece.rotation == expected_index

    def test_kick_order_prefers_left_after_right(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.T)
        for _ in range(5):
            system.move(Direction.DOWN)
        x = piece.x
        # block the in-place (column x+1, row y+2) and the +1 kick (column x+2)
        system.board.place_block(x + 1, piece.y + 2, _BLOCK)
        system.board.place_block(x + 2, piece.y + 2, _BLOCK)
        assert system.rotate(Rotation.CLOCKWISE)
        assert piece.x == x - 1

    def test_rotation_fails_without_mutation(self) -> None:
        system = _system(width=3, height=3)
        piece = system.spawn(TetrominoKind.I)  # wider than the board
        assert piece.x == -1
        cells, x, y = piece.cells, piece.x, piece.y
        assert not system.rotate(Rotation.CLOCKWISE)
        assert (piece.cells, piece.x, piece.y, piece.rotation) == (cells, x, y, 0)


class TestDropAndLock:
    def test_hard_drop_distance(self) -> None:
        system = _system()
        system.spawn(TetrominoKind.I)
        assert system.hard_drop() == 18
        assert all(system.board.block_at(x, 19) is not None for x in range(3, 7))

    def test_hard_drop_matches_manual_descent(self) -> None:
        manual = _system()
        piece = manual.spawn(TetrominoKind.S)
        steps = 0
        while manual.move(Direction.DOWN):
            steps += 1
        dropped = _system()
        dropped.spawn(TetrominoKind.S)
        assert dropped.hard_drop() == steps
        assert piece.y == steps

    def test_lock_clears_row_and_spawns(self) -> None:
        system = _system()
        for x in range(10):
            if x not in range(3, 7):
                system.board.place_block(x, 19, _BLOCK)
        results: list[LockResult] = []
        system.events.on_lock.append(results.append)

        locked = system.spawn(TetrominoKind.I)
        locked.y = 18
        assert system.lock() == 1
        assert system.falling is not None
        assert system.falling is not locked
        assert results[0].cleared_rows == 1
        assert results[0].piece is locked
        assert all(system.board.block_at(x, 19) is None for x in range(10))

    def test_locked_blocks_keep_owner_and_sponsor(self) -> None:
        system = _system(sponsors=_StaticSponsors())
        system.owner = "bob"
        system.spawn(TetrominoKind.O)
        system.hard_drop()
        block = system.board.block_at(4, 19)
        assert block is not None
        assert block.owner == "bob"
        assert block.kind == TetrominoKind.O
        assert block.sponsor is not None


class TestGhostAndTopOut:
    def test_ghost_projects_without_mutating(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.O)
        ghost = system.ghost()
        assert ghost is not None
        assert ghost.y == 18
        assert piece.y == 0
        assert system.board.block_at(4, 19) is None

    def test_ghost_stops_on_blocks(self) -> None:
        system = _system()
        system.board.place_block(4, 10, _BLOCK)
        system.spawn(TetrominoKind.O)
        ghost = system.ghost()
        assert ghost is not None
        assert ghost.y == 8

    def test_not_topped_out_on_empty_board(self) -> None:
        system = _system()
        system.spawn(TetrominoKind.T)
        assert not system.is_topped_out()

    def test_topped_out_when_stack_reaches_spawn(self) -> None:
        system = _system()
        for x in range(10):
            system.board.place_block(x, 2, _BLOCK)
        system.spawn(TetrominoKind.T)
        assert system.is_topped_out()

    def test_not_topped_out_below_spawn_row(self) -> None:
        system = _system()
        piece = system.spawn(TetrominoKind.T)
        system.move(Direction.DOWN)
        system.board.place_block(piece.x, piece.y + 2, _BLOCK)
        assert not system.is_topped_out()


class TestHoldAndPreview:
    def test_preview_size(self) -> None:
        system = _system(preview_size=5)
        assert len(system.next_kinds) == 5

    def test_first_hold_stores_and_spawns_next(self) -> None:
        system = _system()
        system.spawn(TetrominoKind.T)
        upcoming = system.next_kinds[0]
        assert system.hold()
        assert system.held_kind == TetrominoKind.T
        assert system.falling is not None
        assert system.falling.kind == upcoming

    def test_hold_once_per_piece(self) -> None:
        system = _system()
        system.spawn(TetrominoKind.T)
        assert system.hold()
        assert not system.hold()

    def test_hold_swaps(self) -> None:
        system = _system()
        system.spawn(TetrominoKind.T)
        system.hold()
        system.hard_drop()
        current = system.falling
        assert current is not None
        assert system.hold()
        assert system.falling.kind == TetrominoKind.T
        assert system.held_kind == current.kind

    def test_hold_without_piece(self) -> None:
        assert not _system().hold()
