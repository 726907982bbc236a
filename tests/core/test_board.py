"""Tests for Board."""

import pytest

from chesstris.core.board import Board, MalformedBoard
from chesstris.core.enums import PieceKind, TetrominoKind
from chesstris.core.piece import ChessPiece, LockedBlock

_BLOCK = LockedBlock(TetrominoKind.T, 0x800080, owner="a")


def _piece(x: int, y: int, owner: str = "a", kind: PieceKind = PieceKind.PAWN) -> ChessPiece:
    return ChessPiece(piece_id=f"{owner}-{x}-{y}", kind=kind, owner=owner, x=x, y=y)


def _fill_row(board: Board, y: int, *, skip: tuple[int, ...] = ()) -> None:
    for x in range(board.width):
        if x not in skip:
            board.place_block(x, y, _BLOCK)


class TestBoardBasics:
    def test_dimensions(self) -> None:
        board = Board(10, 20)
        assert board.width == 10
        assert board.height == 20

    @pytest.mark.parametrize("size", [(0, 5), (5, 0), (-1, 3)])
    def test_invalid_size_raises(self, size: tuple[int, int]) -> None:
        with pytest.raises(ValueError):
            Board(*size)

    def test_out_of_bounds_cell_is_none(self) -> None:
        board = Board(4, 4)
        assert board.cell(-1, 0) is None
        assert board.cell(0, 4) is None
        assert board.cell(3, 3) is not None

    def test_new_board_is_empty(self) -> None:
        board = Board(4, 4)
        assert all(cell.is_empty for cell in board)
        assert len(list(board)) == 16


class TestOccupancy:
    def test_block_occupies(self) -> None:
        board = Board(4, 4)
        assert board.place_block(1, 1, _BLOCK)
        assert board.is_occupied(1, 1)
        assert board.block_at(1, 1) == _BLOCK

    def test_block_cannot_cover_piece(self) -> None:
        board = Board(4, 4)
        board.place_piece(_piece(2, 2))
        assert not board.place_block(2, 2, _BLOCK)
        assert board.block_at(2, 2) is None

    def test_piece_needs_empty_cell(self) -> None:
        board = Board(4, 4)
        board.place_block(0, 0, _BLOCK)
        assert not board.place_piece(_piece(0, 0))
        assert board.place_piece(_piece(1, 0))

    def test_can_hold_blocks(self) -> None:
        board = Board(4, 4)
        board.place_block(1, 1, _BLOCK)
        assert board.can_hold_blocks([(0, 0), (0, 1)])
        assert not board.can_hold_blocks([(0, 0), (1, 1)])
        assert not board.can_hold_blocks([(4, 0)])

    def test_relocate_piece(self) -> None:
        board = Board(4, 4)
        piece = _piece(0, 0)
        board.place_piece(piece)
        board.relocate_piece(piece, 1, 1)
        assert board.piece_at(0, 0) is None
        assert board.piece_at(1, 1) is piece
        assert piece.position == (1, 1)

    def test_relocate_onto_block_raises(self) -> None:
        board = Board(4, 4)
        piece = _piece(0, 0)
        board.place_piece(piece)
        board.place_block(1, 0, _BLOCK)
        with pytest.raises(ValueError):
            board.relocate_piece(piece, 1, 0)
        assert board.piece_at(0, 0) is piece

    def test_mark_zone(self) -> None:
        board = Board(6, 6)
        board.mark_zone(1, 1, 2, 2, "a")
        assert board.cell(1, 1).zone_owner == "a"
        assert board.cell(2, 2).in_home_zone
        assert not board.cell(3, 3).in_home_zone


class TestRowClearing:
    def test_single_full_row(self) -> None:
        board = Board(4, 6)
        _fill_row(board, 5)
        board.place_block(0, 4, _BLOCK)
        assert board.clear_full_rows() == 1
        # the block above shifted down into the cleared row
        assert board.block_at(0, 5) is not None
        assert board.block_at(0, 4) is None
        assert board.block_at(1, 5) is None

    def test_incomplete_row_stays(self) -> None:
        board = Board(4, 6)
        _fill_row(board, 5, skip=(2,))
        assert board.clear_full_rows() == 0
        assert board.block_at(0, 5) is not None

    def test_multiple_rows(self) -> None:
        board = Board(4, 6)
        _fill_row(board, 5)
        _fill_row(board, 4)
        _fill_row(board, 3, skip=(1,))
        assert board.clear_full_rows() == 2
        assert board.block_at(0, 5) is not None
        assert board.block_at(1, 5) is None
        assert board.block_at(0, 3) is None

    def test_row_of_pieces_only_is_not_complete(self) -> None:
        board = Board(3, 3)
        for x in range(3):
            board.place_piece(_piece(x, 2))
        assert not board.is_row_complete(2)
        assert board.clear_full_rows() == 0

    def test_pieces_are_fixed_terrain(self) -> None:
        board = Board(3, 4)
        piece = _piece(1, 3)
        board.place_piece(piece)
        board.place_block(0, 3, _BLOCK)
        board.place_block(2, 3, _BLOCK)
        board.place_block(1, 2, _BLOCK)
        assert board.clear_full_rows() == 1
        assert board.piece_at(1, 3) is piece
        # the column with the piece keeps its block above the piece
        assert board.block_at(1, 2) is not None
        assert board.block_at(0, 3) is None

    def test_blocks_flow_past_pieces(self) -> None:
        board = Board(2, 4)
        piece = _piece(0, 2)
        board.place_piece(piece)
        board.place_block(0, 1, _BLOCK)
        _fill_row(board, 3)
        assert board.clear_full_rows() == 1
        assert board.piece_at(0, 2) is piece
        assert board.block_at(0, 3) is not None
        assert board.block_at(0, 1) is None


class TestValidation:
    def test_fresh_board_is_well_formed(self) -> None:
        board = Board(5, 5)
        assert board.is_well_formed()
        board.validate()

    def test_ragged_grid_is_malformed(self) -> None:
        board = Board(5, 5)
        board._rows[2].pop()
        assert not board.is_well_formed()
        with pytest.raises(MalformedBoard):
            board.validate()

    def test_double_occupant_is_malformed(self) -> None:
        board = Board(3, 3)
        board.place_piece(_piece(1, 1))
        board.cell(1, 1).block = _BLOCK
        assert not board.is_well_formed()

    def test_malformed_is_value_error(self) -> None:
        assert issubclass(MalformedBoard, ValueError)
