"""
Puzzle pieces: fixed-size tile blocks whose edges must interlock.

A piece is PUZZLE_PIECE_SIZE x PUZZLE_PIECE_SIZE tiles, stored row-major.
Each edge is summarized as an "edge-opening" tuple of booleans, one per
tile along that edge, true where the tile is an opening. Two pieces fit
side by side exactly when the touching edges have identical tuples.

For example, this 5x5 piece

    00100
    00100
    11111
    00000
    00000

has left_edge_openings (F, F, T, F, F), top_edge_openings (F, F, T, F, F)
and no bottom openings.
"""

from enum import IntFlag
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pygame

from puzzle_defense.config import get_logger
from puzzle_defense.game.data.maps.config import OPENING_TILE, PUZZLE_PIECE_SIZE
from puzzle_defense.game.data.maps.errors import InvalidPieceError, OutOfBoundsError


class DirectionFlags(IntFlag):
    """Relative placement directions; OR them together to describe a set."""
    NONE = 0
    UP = 1       # 0001
    RIGHT = 2    # 0010
    DOWN = 4     # 0100
    LEFT = 8     # 1000
    ALL = UP | RIGHT | DOWN | LEFT


class PuzzlePieceType(IntFlag):
    """
    Which map columns a piece may occupy. LEFT is the first column, MIDDLE
    any column in between and RIGHT the last one.
    """
    NONE = 0
    LEFT = 1
    MIDDLE = 2
    RIGHT = 4
    ANY = LEFT | MIDDLE | RIGHT


EdgeOpenings = Tuple[bool, ...]


class PuzzlePiece:
    """
    One square block of tiles with its four derived edge profiles.

    The edge tuples and has-opening flags are computed once from `tiles`
    and only exposed read-only.
    """

    def __init__(self, tiles: Sequence[int], piece_type: PuzzlePieceType,
                 relative_weight: float = 1.0, name: Optional[str] = None):
        try:
            grid = np.asarray(list(tiles))
        except (TypeError, ValueError) as e:
            raise InvalidPieceError(f"tiles are not a flat sequence: {e}") from e
        if grid.size != PUZZLE_PIECE_SIZE * PUZZLE_PIECE_SIZE:
            raise InvalidPieceError(
                f"a puzzle piece needs {PUZZLE_PIECE_SIZE * PUZZLE_PIECE_SIZE} tiles, got {grid.size}"
            )
        if grid.ndim != 1 or not np.issubdtype(grid.dtype, np.integer):
            raise InvalidPieceError(f"tiles must be integers (got dtype {grid.dtype})")

        self._tiles = tuple(int(t) for t in grid)
        self.piece_type = PuzzlePieceType(piece_type)
        self.relative_weight = relative_weight
        self.name = name

        self._generate_edges(grid.reshape(PUZZLE_PIECE_SIZE, PUZZLE_PIECE_SIZE))

    def _generate_edges(self, grid: np.ndarray):
        # grid[:, 0][i] == tiles[i*SIZE], grid[0, :][i] == tiles[i], and so on
        openings = grid == OPENING_TILE
        self._left = tuple(bool(v) for v in openings[:, 0])
        self._right = tuple(bool(v) for v in openings[:, -1])
        self._top = tuple(bool(v) for v in openings[0, :])
        self._bottom = tuple(bool(v) for v in openings[-1, :])

        sides = DirectionFlags.NONE
        if any(self._top):
            sides |= DirectionFlags.UP
        if any(self._right):
            sides |= DirectionFlags.RIGHT
        if any(self._bottom):
            sides |= DirectionFlags.DOWN
        if any(self._left):
            sides |= DirectionFlags.LEFT
        self._opening_sides = sides

    # -------------------------
    # Construction helpers
    # -------------------------
    @classmethod
    def from_rows(cls, rows: Sequence[str], piece_type: PuzzlePieceType,
                  relative_weight: float = 1.0, name: Optional[str] = None) -> 'PuzzlePiece':
        """Build a piece from PUZZLE_PIECE_SIZE strings of single digits, e.g. "00100"."""
        if len(rows) != PUZZLE_PIECE_SIZE or any(len(row) != PUZZLE_PIECE_SIZE for row in rows):
            raise InvalidPieceError(f"expected {PUZZLE_PIECE_SIZE} rows of {PUZZLE_PIECE_SIZE} digits: {list(rows)}")
        try:
            tiles = [int(ch) for row in rows for ch in row]
        except ValueError as e:
            raise InvalidPieceError(f"rows must contain digits only: {list(rows)}") from e
        return cls(tiles, piece_type, relative_weight=relative_weight, name=name)

    def to_dict(self) -> dict:
        return {
            'tiles': list(self._tiles),
            'piece_type': int(self.piece_type),
            'relative_weight': self.relative_weight,
            'name': self.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PuzzlePiece':
        return cls(data['tiles'], PuzzlePieceType(data['piece_type']),
                   relative_weight=data.get('relative_weight', 1.0), name=data.get('name'))

    # -------------------------
    # Derived, read-only state
    # -------------------------
    @property
    def tiles(self) -> Tuple[int, ...]:
        return self._tiles

    @property
    def left_edge_openings(self) -> EdgeOpenings:
        return self._left

    @property
    def right_edge_openings(self) -> EdgeOpenings:
        return self._right

    @property
    def top_edge_openings(self) -> EdgeOpenings:
        return self._top

    @property
    def bottom_edge_openings(self) -> EdgeOpenings:
        return self._bottom

    @property
    def has_left_opening(self) -> bool:
        return bool(self._opening_sides & DirectionFlags.LEFT)

    @property
    def has_right_opening(self) -> bool:
        return bool(self._opening_sides & DirectionFlags.RIGHT)

    @property
    def has_top_opening(self) -> bool:
        return bool(self._opening_sides & DirectionFlags.UP)

    @property
    def has_bottom_opening(self) -> bool:
        return bool(self._opening_sides & DirectionFlags.DOWN)

    @property
    def is_blank(self) -> bool:
        """
        True when no edge tile is an opening.

        Interior openings are ignored: a piece that cannot connect to any
        neighbour counts as blank.
        """
        return self._opening_sides == DirectionFlags.NONE

    @property
    def opening_sides(self) -> DirectionFlags:
        """Sides with at least one opening, as DirectionFlags."""
        return self._opening_sides

    def fits_column(self, column_class: PuzzlePieceType) -> bool:
        """True if every flag of `column_class` is in this piece's type."""
        return (self.piece_type & column_class) == column_class

    # -------------------------
    # Compatibility
    # -------------------------
    def can_fit_together(self, other: Optional['PuzzlePiece']) -> DirectionFlags:
        """
        Directions in which this piece may sit next to `other`.

        RIGHT means this piece can sit to the right of `other` (our left
        edge matches its right edge); LEFT, DOWN and UP work the same way.

            A      B
            00100  00000
            00100  00000
            00111  11111
            00000  01000
            00000  01000

        A.can_fit_together(B) is LEFT | UP: A's right edge matches B's left
        edge, and A's closed bottom matches B's closed top.

        `other` is None at the edge of the map; nothing there constrains the
        placement, so every direction is allowed.
        """
        if other is None:
            return DirectionFlags.ALL

        flags = DirectionFlags.NONE
        if self._left == other._right:
            flags |= DirectionFlags.RIGHT
        if self._right == other._left:
            flags |= DirectionFlags.LEFT
        if self._top == other._bottom:
            flags |= DirectionFlags.DOWN
        if self._bottom == other._top:
            flags |= DirectionFlags.UP
        return flags

    # -------------------------
    # Rasterization
    # -------------------------
    def apply_to_map_array(self, map_array, width: int, x: int, y: int):
        """
        Write this piece into a flat, row-major map array.

        Row r and column c of the piece land on map_array[(y + r) * width + (x + c)].
        With a blank 10x10 map and x=5, y=0 the piece fills the top-right
        quadrant.

        Args:
            map_array: Flat list or 1-D numpy array, modified in place
            width: Map width in tiles
            x, y: Top-left tile of the piece on the map

        Raises:
            OutOfBoundsError: the piece would not lie entirely inside the map
        """
        if width <= 0:
            raise OutOfBoundsError(f"map width must be positive (got {width})")
        height = len(map_array) // width
        map_rect = pygame.Rect(0, 0, width, height)
        piece_rect = pygame.Rect(x, y, PUZZLE_PIECE_SIZE, PUZZLE_PIECE_SIZE)
        if not map_rect.contains(piece_rect):
            raise OutOfBoundsError(
                f"piece at ({x}, {y}) does not fit in a {width}x{height} map"
            )

        if isinstance(map_array, np.ndarray):
            view = map_array[:height * width].reshape(height, width)
            view[y:y + PUZZLE_PIECE_SIZE, x:x + PUZZLE_PIECE_SIZE] = np.reshape(
                self._tiles, (PUZZLE_PIECE_SIZE, PUZZLE_PIECE_SIZE))
            return

        for i, tile_value in enumerate(self._tiles):
            row, column = divmod(i, PUZZLE_PIECE_SIZE)
            map_array[(y + row) * width + x + column] = tile_value

    # -------------------------
    # Debug output
    # -------------------------
    def format_rows(self) -> List[str]:
        return [
            ''.join(str(t) for t in self._tiles[i * PUZZLE_PIECE_SIZE:(i + 1) * PUZZLE_PIECE_SIZE])
            for i in range(PUZZLE_PIECE_SIZE)
        ]

    def dump(self, label: Optional[str] = None) -> str:
        """Log the piece row by row at debug level and return the text."""
        lines = self.format_rows()
        if label is not None:
            lines = [label] + lines
        text = '\n'.join(lines)
        get_logger(__name__).debug('\n' + text)
        return text

    def __str__(self):
        return '\n'.join(self.format_rows())

    def __repr__(self):
        label = f" {self.name!r}" if self.name else ''
        return f"<PuzzlePiece{label} type={self.piece_type!r} sides={self._opening_sides!r}>"

    def __eq__(self, other):
        if not isinstance(other, PuzzlePiece):
            return NotImplemented
        return self._tiles == other._tiles and self.piece_type == other.piece_type

    def __hash__(self):
        return hash((self._tiles, int(self.piece_type)))
