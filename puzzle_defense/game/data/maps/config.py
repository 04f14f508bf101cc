"""
Map generation configuration.

Fixed tile values, tileset identifiers and the MapConfig dataclass holding
every tunable parameter of puzzle-piece map generation.
"""

from dataclasses import dataclass
from typing import Optional

# ============================================================================
# TILE VALUES
# ============================================================================

PUZZLE_PIECE_SIZE = 5  # length of a side of a puzzle piece, in tiles

EMPTY_TILE = 0      # filled background
OPENING_TILE = 1    # walkable / connective tile
ROCK_TILE = 2       # terrain variant, not walkable
WATER_TILE = 3      # terrain variant, not walkable

SPAWNER_TILE = 65   # blue spawner, marks overworld nodes
GRASS_TILE = 70     # overworld background
PATH_TILE = 72      # overworld road

# ============================================================================
# TILESETS
# ============================================================================

# Resolved by the renderer; generation treats them as opaque ids.
MARSH_TILESET_ID = 0
DESERT_TILESET_ID = 1
SNOW_TILESET_ID = 2
SPACESHIP_TILESET_ID = 3

TILESETS = {
    'marsh': MARSH_TILESET_ID,
    'desert': DESERT_TILESET_ID,
    'snow': SNOW_TILESET_ID,
    'spaceship': SPACESHIP_TILESET_ID,
}


@dataclass
class MapConfig:
    """
    Parameters for one generated gameplay map.

    Sizes are given in puzzle pieces; `width`/`height` convert to tiles.

    Attributes:
        width_in_pieces: Piece columns (first is LEFT, last is RIGHT)
        height_in_pieces: Piece rows
        seed: RNG seed, None for a random map
        fill_ratio: Share of piece cells that belong to the path network
        extra_edge_chance: Probability of opening a non-tree connection (loops)
        max_backtracks: Assembly backtracking budget per attempt
        max_generation_attempts: Fresh skeletons tried before giving up
        tileset_id: Tileset for the map, None to pick one at random
    """
    width_in_pieces: int = 6
    height_in_pieces: int = 4
    seed: Optional[int] = None
    fill_ratio: float = 0.7
    extra_edge_chance: float = 0.15
    max_backtracks: int = 2000
    max_generation_attempts: int = 5
    tileset_id: Optional[int] = None

    def __post_init__(self):
        if self.width_in_pieces < 2:
            raise ValueError(f"width_in_pieces must be at least 2 (got {self.width_in_pieces})")
        if self.height_in_pieces < 1:
            raise ValueError(f"height_in_pieces must be at least 1 (got {self.height_in_pieces})")
        if not 0.0 < self.fill_ratio <= 1.0:
            raise ValueError(f"fill_ratio must be in (0, 1] (got {self.fill_ratio})")
        if not 0.0 <= self.extra_edge_chance <= 1.0:
            raise ValueError(f"extra_edge_chance must be in [0, 1] (got {self.extra_edge_chance})")
        if self.max_backtracks < 0:
            raise ValueError("max_backtracks cannot be negative")
        if self.max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1")

    @property
    def piece_size(self) -> int:
        return PUZZLE_PIECE_SIZE

    @property
    def width(self) -> int:
        """Map width in tiles."""
        return self.width_in_pieces * PUZZLE_PIECE_SIZE

    @property
    def height(self) -> int:
        """Map height in tiles."""
        return self.height_in_pieces * PUZZLE_PIECE_SIZE

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def cell_count(self) -> int:
        return self.width_in_pieces * self.height_in_pieces

    @classmethod
    def for_difficulty(cls, difficulty: int, seed: Optional[int] = None, **overrides) -> 'MapConfig':
        """
        Build the config used when an overworld node of `difficulty` is selected.

        Harder nodes get wider and taller maps, a denser path network and
        more loops.
        """
        if difficulty < 1:
            raise ValueError(f"difficulty must be at least 1 (got {difficulty})")

        params = dict(
            width_in_pieces=min(4 + difficulty, 10),
            height_in_pieces=min(3 + difficulty // 2, 6),
            seed=seed,
            fill_ratio=min(0.55 + 0.05 * difficulty, 0.9),
            extra_edge_chance=min(0.1 + 0.03 * difficulty, 0.4),
        )
        params.update(overrides)
        return cls(**params)
