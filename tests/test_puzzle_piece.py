import numpy as np
import pytest

from puzzle_defense.game.data.maps.errors import InvalidPieceError, OutOfBoundsError
from puzzle_defense.game.data.maps.puzzle_piece import DirectionFlags, PuzzlePiece, PuzzlePieceType

F, T = False, True


def piece(*rows, piece_type=PuzzlePieceType.ANY, **kwargs):
    return PuzzlePiece.from_rows(rows, piece_type, **kwargs)


class TestConstruction:
    def test_rejects_wrong_tile_count(self):
        with pytest.raises(InvalidPieceError):
            PuzzlePiece([0] * 24, PuzzlePieceType.MIDDLE)

    def test_rejects_non_integer_tiles(self):
        with pytest.raises(InvalidPieceError):
            PuzzlePiece([0.5] * 25, PuzzlePieceType.MIDDLE)

    def test_accepts_any_iterable_of_tiles(self):
        p = PuzzlePiece((0 for _ in range(25)), PuzzlePieceType.MIDDLE)
        assert p.tiles == (0,) * 25

    def test_short_generator_is_an_invalid_piece(self):
        with pytest.raises(InvalidPieceError):
            PuzzlePiece((0 for _ in range(24)), PuzzlePieceType.MIDDLE)

    def test_rejects_bad_rows(self):
        with pytest.raises(InvalidPieceError):
            PuzzlePiece.from_rows(["0000", "00000", "00000", "00000", "00000"], PuzzlePieceType.MIDDLE)
        with pytest.raises(InvalidPieceError):
            PuzzlePiece.from_rows(["0000x"] + ["00000"] * 4, PuzzlePieceType.MIDDLE)

    def test_invalid_piece_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            PuzzlePiece([], PuzzlePieceType.MIDDLE)

    def test_tiles_are_kept_row_major(self):
        p = PuzzlePiece(list(range(25)), PuzzlePieceType.MIDDLE)
        assert p.tiles == tuple(range(25))
        assert p.format_rows()[1] == "56789"


class TestEdges:
    def test_edges_of_documented_example(self):
        p = piece("00100",
                  "00100",
                  "11111",
                  "00000",
                  "00000")
        assert p.left_edge_openings == (F, F, T, F, F)
        assert p.right_edge_openings == (F, F, T, F, F)
        assert p.top_edge_openings == (F, F, T, F, F)
        assert p.bottom_edge_openings == (F, F, F, F, F)
        assert p.has_left_opening and p.has_right_opening and p.has_top_opening
        assert not p.has_bottom_opening
        assert p.opening_sides == DirectionFlags.UP | DirectionFlags.RIGHT | DirectionFlags.LEFT

    def test_non_opening_tiles_do_not_count(self):
        p = piece("22222",
                  "30003",
                  "30003",
                  "30003",
                  "22222")
        assert p.opening_sides == DirectionFlags.NONE
        assert p.is_blank

    def test_interior_openings_do_not_make_piece_non_blank(self):
        p = piece("00000",
                  "01110",
                  "01110",
                  "01110",
                  "00000")
        assert p.is_blank

    def test_edge_tuples_match_tile_positions(self, cross_rows):
        p = piece(*cross_rows)
        tiles = p.tiles
        for i in range(5):
            assert p.left_edge_openings[i] == (tiles[i * 5] == 1)
            assert p.right_edge_openings[i] == (tiles[i * 5 + 4] == 1)
            assert p.top_edge_openings[i] == (tiles[i] == 1)
            assert p.bottom_edge_openings[i] == (tiles[20 + i] == 1)


class TestCanFitTogether:
    def test_none_means_map_edge(self, cross_rows):
        assert piece(*cross_rows).can_fit_together(None) == DirectionFlags.ALL

    def test_documented_pair(self):
        a = piece("00100",
                  "00100",
                  "00111",
                  "00000",
                  "00000")
        b = piece("00000",
                  "00000",
                  "11111",
                  "01000",
                  "01000")
        assert a.can_fit_together(b) == DirectionFlags.LEFT | DirectionFlags.UP

    def test_direction_semantics(self):
        a = piece("00000",
                  "00000",
                  "10000",
                  "00000",
                  "00000")
        b = piece("00000",
                  "00000",
                  "00001",
                  "00000",
                  "00000")
        # a's left edge matches b's right edge: a may sit to the right of b
        assert a.can_fit_together(b) & DirectionFlags.RIGHT
        assert b.can_fit_together(a) & DirectionFlags.LEFT
        # closed edges match each other as well
        assert a.can_fit_together(b) & DirectionFlags.LEFT

    def test_symmetric_piece_fits_itself_everywhere(self, cross_rows):
        p = piece(*cross_rows)
        assert p.can_fit_together(p) == DirectionFlags.ALL

    def test_blank_pieces_fit_each_other_everywhere(self):
        a = PuzzlePiece([0] * 25, PuzzlePieceType.MIDDLE)
        b = PuzzlePiece([0] * 25, PuzzlePieceType.LEFT)
        assert a.can_fit_together(b) == DirectionFlags.ALL

    def test_nothing_fits(self, cross_rows):
        full = piece(*(["11111"] * 5))
        assert full.can_fit_together(piece(*cross_rows)) == DirectionFlags.NONE


class TestApplyToMapArray:
    def test_fills_top_right_quadrant_of_list(self, cross_rows):
        p = piece(*cross_rows)
        map_array = [9] * 100
        p.apply_to_map_array(map_array, 10, 5, 0)
        for r in range(5):
            for c in range(5):
                assert map_array[r * 10 + 5 + c] == p.tiles[r * 5 + c]
        # the rest is untouched
        assert all(map_array[r * 10 + c] == 9 for r in range(10) for c in range(5))
        assert all(v == 9 for v in map_array[50:])

    def test_numpy_array_is_written_in_place(self, cross_rows):
        p = piece(*cross_rows)
        map_array = np.zeros(10 * 5, dtype=np.int32)
        p.apply_to_map_array(map_array, 10, 0, 0)
        grid = map_array.reshape(5, 10)
        assert grid[2, :5].tolist() == [1, 1, 1, 1, 1]
        assert grid[:, 5:].sum() == 0

    @pytest.mark.parametrize("x, y", [(6, 0), (0, 6), (-1, 0), (10, 10)])
    def test_out_of_bounds(self, cross_rows, x, y):
        with pytest.raises(OutOfBoundsError):
            piece(*cross_rows).apply_to_map_array([0] * 100, 10, x, y)

    def test_non_positive_width(self, cross_rows):
        with pytest.raises(OutOfBoundsError):
            piece(*cross_rows).apply_to_map_array([0] * 25, 0, 0, 0)

    def test_single_piece_map_reproduces_tiles(self, cross_rows):
        p = piece(*cross_rows)
        map_array = [0] * 25
        p.apply_to_map_array(map_array, 5, 0, 0)
        assert tuple(map_array) == p.tiles


class TestMisc:
    def test_fits_column(self):
        p = piece(*(["00000"] * 5), piece_type=PuzzlePieceType.LEFT | PuzzlePieceType.MIDDLE)
        assert p.fits_column(PuzzlePieceType.LEFT)
        assert p.fits_column(PuzzlePieceType.MIDDLE)
        assert not p.fits_column(PuzzlePieceType.RIGHT)

    def test_dict_round_trip_keeps_weight_and_name(self, cross_rows):
        p = piece(*cross_rows, relative_weight=2.5, name="cross")
        copy = PuzzlePiece.from_dict(p.to_dict())
        assert copy == p
        assert copy.relative_weight == 2.5
        assert copy.name == "cross"
        assert hash(copy) == hash(p)

    def test_rebuilt_piece_has_identical_edges(self):
        original = piece("00100",
                         "00110",
                         "11011",
                         "00000",
                         "01000")
        rebuilt = PuzzlePiece(list(original.tiles), PuzzlePieceType.MIDDLE)
        assert rebuilt.left_edge_openings == original.left_edge_openings
        assert rebuilt.right_edge_openings == original.right_edge_openings
        assert rebuilt.top_edge_openings == original.top_edge_openings
        assert rebuilt.bottom_edge_openings == original.bottom_edge_openings
        assert (rebuilt.has_left_opening, rebuilt.has_right_opening,
                rebuilt.has_top_opening, rebuilt.has_bottom_opening) == (
            original.has_left_opening, original.has_right_opening,
            original.has_top_opening, original.has_bottom_opening)
        assert rebuilt.opening_sides == original.opening_sides

    def test_dump_returns_rows(self, cross_rows):
        text = piece(*cross_rows).dump("cross")
        assert text.splitlines() == ["cross"] + list(cross_rows)
