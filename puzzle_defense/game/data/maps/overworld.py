"""
Overworld selection map.

A static 50x21 background with a fixed list of named nodes. Each node
launches generation of a puzzle-piece gameplay map whose size grows with
the node's difficulty.

Instead of a process-wide "active overworld", initialize_overworld_map()
returns an OverworldContext that the caller owns and passes around.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from puzzle_defense.config import get_logger
from puzzle_defense.game.data.maps.config import (
    GRASS_TILE, MARSH_TILESET_ID, PATH_TILE, SPAWNER_TILE, MapConfig
)
from puzzle_defense.game.data.maps.errors import DuplicateNodeError, OutOfBoundsError
from puzzle_defense.game.data.maps.mapGen import GeneratedMap, MapGenerator
from puzzle_defense.game.data.maps.piece_library import PieceLibrary
from puzzle_defense.game.data.maps.tile_map import TileMap

logger = get_logger(__name__)


@dataclass(frozen=True)
class OverworldNode:
    """
    x, y: tile coordinates on the overworld
    description: shown verbatim over the node
    difficulty: difficulty of the map generated for this node
    """
    x: int
    y: int
    description: str
    difficulty: int

    def __post_init__(self):
        if self.difficulty < 1:
            raise ValueError(f"node {self.description!r} has difficulty {self.difficulty}, must be >= 1")


# ============================================================================
# STATIC DATA
# ============================================================================

OVERWORLD_MAP_WIDTH = 50
OVERWORLD_FOG_CLEAR_RADIUS = 1

_LEGEND: Dict[str, int] = {
    '.': GRASS_TILE,
    '#': PATH_TILE,
}

_PAD = '.' * 30

_OVERWORLD_ROWS: Tuple[str, ...] = (
    '....................' + _PAD,
    '.###.###.#.#.###.###' + _PAD,
    '.#.#.#.#.#.#.#.#.#..' + _PAD,
    '.#.###########.###.#' + _PAD,
    '.#.#.#...#.#.#.#.#.#' + _PAD,
    '.###.#...#.#.###.###' + _PAD,
) + ('.' * OVERWORLD_MAP_WIDTH,) * 15

# Graphic index of every overworld tile, row-major. Never mutated.
OVERWORLD_TILE_INDICES: Tuple[int, ...] = tuple(_LEGEND[ch] for row in _OVERWORLD_ROWS for ch in row)

OVERWORLD_NODES: Tuple[OverworldNode, ...] = (
    OverworldNode(x=1, y=3, description='Green Hill Zone', difficulty=1),
    OverworldNode(x=7, y=1, description='Pumpkin Hill', difficulty=2),
    OverworldNode(x=9, y=5, description='Bot Land', difficulty=3),
    OverworldNode(x=11, y=1, description='The Casino', difficulty=4),
    OverworldNode(x=14, y=5, description='The Future', difficulty=5),
    OverworldNode(x=19, y=3, description='Lazy Town', difficulty=6),
)


def overworld_map_height(tile_indices: Sequence[int] = OVERWORLD_TILE_INDICES,
                         width: int = OVERWORLD_MAP_WIDTH) -> int:
    return len(tile_indices) // width


# ============================================================================
# LOOKUP
# ============================================================================

def get_overworld_node(tile_x: int, tile_y: int,
                       nodes: Sequence[OverworldNode] = OVERWORLD_NODES) -> Optional[OverworldNode]:
    """First node at exactly (tile_x, tile_y), or None."""
    for node in nodes:
        if node.x == tile_x and node.y == tile_y:
            return node
    return None


def validate_overworld_nodes(nodes: Sequence[OverworldNode], width: int, height: int):
    """
    Raises:
        DuplicateNodeError: two nodes share coordinates
        OutOfBoundsError: a node lies outside the overworld grid
    """
    seen = {}
    for node in nodes:
        if not (0 <= node.x < width and 0 <= node.y < height):
            raise OutOfBoundsError(f"node {node.description!r} at ({node.x}, {node.y}) is off the overworld")
        key = (node.x, node.y)
        if key in seen:
            raise DuplicateNodeError(
                f"nodes {seen[key].description!r} and {node.description!r} both sit at {key}"
            )
        seen[key] = node


# ============================================================================
# CONTEXT
# ============================================================================

class OverworldContext:
    """
    The initialized overworld: its TileMap plus the node list.

    Node selection goes through here, so there is no global map state.
    """

    def __init__(self, overworld_map, nodes: Sequence[OverworldNode] = OVERWORLD_NODES,
                 library: Optional[PieceLibrary] = None):
        self.overworld_map = overworld_map
        self.nodes: Tuple[OverworldNode, ...] = tuple(nodes)
        self.library = library

    def get_node(self, tile_x: int, tile_y: int) -> Optional[OverworldNode]:
        return get_overworld_node(tile_x, tile_y, self.nodes)

    def select_node(self, tile_x: int, tile_y: int, seed: Optional[int] = None) -> Optional[GeneratedMap]:
        """
        Generate the gameplay map for the node at (tile_x, tile_y).

        Returns None when there is no node there.
        """
        node = self.get_node(tile_x, tile_y)
        if node is None:
            logger.debug(f"No overworld node at ({tile_x}, {tile_y})")
            return None

        logger.info(f"Selected '{node.description}' (difficulty {node.difficulty})")
        config = MapConfig.for_difficulty(node.difficulty, seed=seed)
        return MapGenerator(config, self.library).generate()

    def reveal_node(self, node: OverworldNode, radius: int = OVERWORLD_FOG_CLEAR_RADIUS):
        """Clear fog around a node that just became available."""
        self.overworld_map.set_fog(node.x, node.y, radius, False)


def initialize_overworld_map(map_factory: Callable = TileMap,
                             nodes: Sequence[OverworldNode] = OVERWORLD_NODES,
                             tile_indices: Sequence[int] = OVERWORLD_TILE_INDICES,
                             width: int = OVERWORLD_MAP_WIDTH,
                             tileset_id: int = MARSH_TILESET_ID,
                             library: Optional[PieceLibrary] = None) -> OverworldContext:
    """
    Build the overworld map and return the context that owns it.

    Every node cell is painted as a spawner, a matching empty doodad layer
    is created, both go to `map_factory` and the fog around the first node
    is cleared. `tile_indices` itself is left untouched.
    """
    if not nodes:
        raise ValueError("the overworld needs at least one node")
    validate_overworld_nodes(nodes, width, overworld_map_height(tile_indices, width))

    map_tile_indices = list(tile_indices)
    for node in nodes:
        map_tile_indices[node.y * width + node.x] = SPAWNER_TILE

    doodad_indices = [None] * len(map_tile_indices)
    overworld_map = map_factory(map_tile_indices, doodad_indices, tileset_id, width, 1, True)

    first = nodes[0]
    overworld_map.set_fog(first.x, first.y, OVERWORLD_FOG_CLEAR_RADIUS, False)

    logger.info(f"Overworld initialized with {len(nodes)} nodes; fog cleared around '{first.description}'")
    return OverworldContext(overworld_map, nodes, library)
