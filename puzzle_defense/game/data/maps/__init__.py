"""
Maps Package - Puzzle-Piece Map Generation System

This package builds gameplay maps by assembling 5x5 "puzzle pieces" whose
edges must interlock, and keeps the overworld map whose nodes launch that
generation. A tile value of 1 is an opening (walkable / connective); two
pieces may touch only where their opening tiles line up exactly.

MODULES:
--------
config.py
    Tile values, tileset ids and the MapConfig dataclass with every
    tunable generation parameter.

errors.py
    Exception hierarchy rooted at PuzzleMapError.

utils.py
    Math and random helpers (weighted selection, chasing, collisions),
    grid operations (BFS, components) and Kruskal's MST.

puzzle_piece.py
    DirectionFlags, PuzzlePieceType and PuzzlePiece: edge-opening tuples,
    the compatibility check and rasterization into a map array.

piece_library.py
    Built-in connector, handcrafted and blank pieces, and the lookup of
    placement candidates per column class and open sides.

skeleton_graph.py
    Piece-level graph: which cells carry the path and which neighbours
    connect.

mapGen.py
    MapGenerator orchestrating the pipeline:
    skeleton → assembly (backtracking) → rasterization → validation.

tile_map.py
    TileMap, the object a finished tile array is handed to (tile, doodad
    and fog layers).

overworld.py
    Overworld background, nodes, and the OverworldContext that turns a
    selected node into a generated map.

USAGE:
------
```python
from puzzle_defense.game.data.maps.config import MapConfig
from puzzle_defense.game.data.maps.mapGen import MapGenerator

config = MapConfig(width_in_pieces=6, height_in_pieces=4, seed=12345)

generator = MapGenerator(config)
generated = generator.generate()
tile_map = generated.to_tile_map()

stats = generator.get_statistics()
print(f"{stats['path_cells']} path cells, {stats['loops']} loops")
```

Or through the overworld:

```python
from puzzle_defense.game.data.maps.overworld import initialize_overworld_map

overworld = initialize_overworld_map()
generated = overworld.select_node(1, 3, seed=7)
```

ARCHITECTURE:
-------------
1. **Skeleton**: grow a random region of piece cells from the left column
   to the right one, connect it with a random spanning tree, add loops
2. **Assembly**: fill cells row by row; each cell's candidates must open
   exactly the sides the skeleton asks for and match the pieces already
   placed to its left and above. Dead ends backtrack
3. **Rasterization**: every piece is written into one flat tile array
4. **Validation**: sealed border except at entry/exit, every opening tile
   reachable from the entry
"""

from puzzle_defense.game.data.maps.config import MapConfig
from puzzle_defense.game.data.maps.errors import (
    DuplicateNodeError, EmptyInputError, GenerationError, InvalidPieceError,
    OutOfBoundsError, PuzzleMapError, WeightedSelectionError
)
from puzzle_defense.game.data.maps.mapGen import GeneratedMap, MapGenerator
from puzzle_defense.game.data.maps.overworld import (
    OverworldContext, OverworldNode, get_overworld_node, initialize_overworld_map
)
from puzzle_defense.game.data.maps.piece_library import PieceLibrary, default_piece_library
from puzzle_defense.game.data.maps.puzzle_piece import DirectionFlags, PuzzlePiece, PuzzlePieceType
from puzzle_defense.game.data.maps.tile_map import TileMap

__all__ = [
    'MapConfig',
    'PuzzleMapError', 'InvalidPieceError', 'OutOfBoundsError', 'WeightedSelectionError',
    'EmptyInputError', 'DuplicateNodeError', 'GenerationError',
    'GeneratedMap', 'MapGenerator',
    'OverworldContext', 'OverworldNode', 'get_overworld_node', 'initialize_overworld_map',
    'PieceLibrary', 'default_piece_library',
    'DirectionFlags', 'PuzzlePiece', 'PuzzlePieceType',
    'TileMap',
]
