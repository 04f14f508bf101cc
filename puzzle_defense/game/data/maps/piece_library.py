"""
Built-in puzzle pieces.

Every edge of a built-in piece has one of three profiles:

    closed  00000
    narrow  00100   (one centred opening)
    wide    01110   (three centred openings)

Connector pieces are generated for every combination of profiles on the
four sides, so whatever a neighbour demands on a shared edge there is a
piece that can answer it. Handcrafted pieces reuse the same profiles with
more interesting interiors, and blank pieces fill cells outside the path
network.

A piece may be placed in the first column (LEFT) when its left side is
closed or narrow; the map entry is always a narrow gate. RIGHT works the
same way for the last column and the exit.
"""

from itertools import product
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from puzzle_defense.config import get_logger
from puzzle_defense.game.data.maps.config import EMPTY_TILE, OPENING_TILE, PUZZLE_PIECE_SIZE
from puzzle_defense.game.data.maps.errors import EmptyInputError
from puzzle_defense.game.data.maps.puzzle_piece import DirectionFlags, PuzzlePiece, PuzzlePieceType
from puzzle_defense.game.data.maps.utils import shallow_copy_array

CENTER = PUZZLE_PIECE_SIZE // 2

NARROW_BAND = slice(CENTER, CENTER + 1)
WIDE_BAND = slice(CENTER - 1, CENTER + 2)

CLOSED_EDGE = tuple(False for _ in range(PUZZLE_PIECE_SIZE))
NARROW_EDGE = tuple(NARROW_BAND.start <= i < NARROW_BAND.stop for i in range(PUZZLE_PIECE_SIZE))
WIDE_EDGE = tuple(WIDE_BAND.start <= i < WIDE_BAND.stop for i in range(PUZZLE_PIECE_SIZE))

SIDES = (DirectionFlags.UP, DirectionFlags.RIGHT, DirectionFlags.DOWN, DirectionFlags.LEFT)

# Selection weights
CONNECTOR_WEIGHT = 1.0
WIDE_SIDE_FACTOR = 0.6
HANDCRAFTED_WEIGHT = 1.5


def column_type_for(left_edge: Sequence[bool], right_edge: Sequence[bool]) -> PuzzlePieceType:
    """Columns a piece with these outer edges may occupy."""
    piece_type = PuzzlePieceType.MIDDLE
    if tuple(left_edge) in (CLOSED_EDGE, NARROW_EDGE):
        piece_type |= PuzzlePieceType.LEFT
    if tuple(right_edge) in (CLOSED_EDGE, NARROW_EDGE):
        piece_type |= PuzzlePieceType.RIGHT
    return piece_type


def build_connector_piece(sides: DirectionFlags, wide: DirectionFlags = DirectionFlags.NONE,
                          relative_weight: float = None) -> PuzzlePiece:
    """
    Piece whose openings run from each side in `sides` to the centre tile.

    Sides also listed in `wide` get a three-tile band instead of one.
    """
    if sides == DirectionFlags.NONE:
        raise ValueError("a connector needs at least one open side")
    if wide & ~sides:
        raise ValueError(f"wide sides {wide!r} are not all open in {sides!r}")

    grid = np.full((PUZZLE_PIECE_SIZE, PUZZLE_PIECE_SIZE), EMPTY_TILE, dtype=int)
    grid[CENTER, CENTER] = OPENING_TILE
    for side in SIDES:
        if not sides & side:
            continue
        band = WIDE_BAND if wide & side else NARROW_BAND
        if side == DirectionFlags.UP:
            grid[:CENTER + 1, band] = OPENING_TILE
        elif side == DirectionFlags.DOWN:
            grid[CENTER:, band] = OPENING_TILE
        elif side == DirectionFlags.LEFT:
            grid[band, :CENTER + 1] = OPENING_TILE
        else:
            grid[band, CENTER:] = OPENING_TILE

    if relative_weight is None:
        wide_count = sum(1 for side in SIDES if wide & side)
        relative_weight = CONNECTOR_WEIGHT * (WIDE_SIDE_FACTOR ** wide_count)

    piece_type = column_type_for(grid[:, 0] == OPENING_TILE, grid[:, -1] == OPENING_TILE)
    name = f"connector {sides!r} wide={wide!r}"
    return PuzzlePiece(grid.flatten().tolist(), piece_type, relative_weight=relative_weight, name=name)


def connector_pieces() -> List[PuzzlePiece]:
    """Every non-empty combination of closed/narrow/wide sides (80 pieces)."""
    pieces = []
    # 0 = closed, 1 = narrow, 2 = wide, per side in SIDES order
    for profile in product((0, 1, 2), repeat=len(SIDES)):
        sides = DirectionFlags.NONE
        wide = DirectionFlags.NONE
        for side, kind in zip(SIDES, profile):
            if kind:
                sides |= side
            if kind == 2:
                wide |= side
        if sides != DirectionFlags.NONE:
            pieces.append(build_connector_piece(sides, wide))
    return pieces


# ============================================================================
# HANDCRAFTED PIECES
# ============================================================================

HANDCRAFTED_ROWS: Dict[str, Tuple[Tuple[str, ...], float]] = {
    'winding pass': (("00000",
                      "01110",
                      "11011",
                      "00000",
                      "00000"), HANDCRAFTED_WEIGHT),
    'roundabout': (("00100",
                    "01110",
                    "11211",
                    "01110",
                    "00100"), HANDCRAFTED_WEIGHT),
    'plaza': (("00000",
               "11111",
               "11111",
               "11111",
               "00000"), HANDCRAFTED_WEIGHT),
    'north bend': (("00100",
                    "00110",
                    "00011",
                    "00000",
                    "00000"), HANDCRAFTED_WEIGHT),
    'south bend': (("00000",
                    "00000",
                    "11000",
                    "01100",
                    "00100"), HANDCRAFTED_WEIGHT),
    'split': (("00000",
               "00111",
               "11101",
               "00111",
               "00000"), HANDCRAFTED_WEIGHT),
}

BLANK_ROWS: Dict[str, Tuple[Tuple[str, ...], float]] = {
    'empty': (("00000",) * PUZZLE_PIECE_SIZE, 1.0),
    'pond': (("00000",
              "03300",
              "03330",
              "00330",
              "00000"), 0.5),
    'rocks': (("20000",
               "00020",
               "00000",
               "02000",
               "00002"), 0.5),
    'boulder field': (("00000",
                       "02200",
                       "02220",
                       "00000",
                       "00220"), 0.3),
}


def _pieces_from_rows(definitions: Dict[str, Tuple[Tuple[str, ...], float]]) -> List[PuzzlePiece]:
    pieces = []
    for name, (rows, weight) in definitions.items():
        left_edge = [row[0] == str(OPENING_TILE) for row in rows]
        right_edge = [row[-1] == str(OPENING_TILE) for row in rows]
        piece_type = column_type_for(left_edge, right_edge)
        pieces.append(PuzzlePiece.from_rows(rows, piece_type, relative_weight=weight, name=name))
    return pieces


def handcrafted_pieces() -> List[PuzzlePiece]:
    return _pieces_from_rows(HANDCRAFTED_ROWS)


def blank_pieces() -> List[PuzzlePiece]:
    return _pieces_from_rows(BLANK_ROWS)


# ============================================================================
# LIBRARY
# ============================================================================

class PieceLibrary:
    """
    A set of pieces plus a lookup of placement candidates.

    Candidates are keyed by (column class, required open sides) and
    computed the first time a key is asked for.
    """

    def __init__(self, pieces: Iterable[PuzzlePiece]):
        self.pieces: List[PuzzlePiece] = list(pieces)
        if not self.pieces:
            raise EmptyInputError("a piece library needs at least one piece")
        self._candidates: Dict[Tuple[int, int], List[PuzzlePiece]] = {}

    def candidates(self, column_class: PuzzlePieceType, required_sides: DirectionFlags) -> List[PuzzlePiece]:
        """
        Pieces allowed in `column_class` whose open sides are exactly
        `required_sides`. Returns a fresh list the caller may reorder.
        """
        key = (int(column_class), int(required_sides))
        if key not in self._candidates:
            self._candidates[key] = [
                piece for piece in self.pieces
                if piece.fits_column(column_class) and piece.opening_sides == required_sides
            ]
        return shallow_copy_array(self._candidates[key])

    @property
    def blank_pieces(self) -> List[PuzzlePiece]:
        return [piece for piece in self.pieces if piece.is_blank]

    def __len__(self):
        return len(self.pieces)

    def __iter__(self) -> Iterator[PuzzlePiece]:
        return iter(self.pieces)


def default_piece_library() -> PieceLibrary:
    """Connectors, handcrafted pieces and blanks."""
    pieces = connector_pieces() + handcrafted_pieces() + blank_pieces()
    get_logger(__name__).debug(f"Built default piece library with {len(pieces)} pieces")
    return PieceLibrary(pieces)
