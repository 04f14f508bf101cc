"""
Puzzle-piece map generator with backtracking assembly and automatic
validation.

This module implements MapGenerator which exposes:
    config = MapConfig(...)
    generator = MapGenerator(config)
    generated = generator.generate()
    stats = generator.get_statistics()
"""
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from puzzle_defense.config import PerformanceTimer, get_map_logger
from puzzle_defense.game.data.maps.config import EMPTY_TILE, OPENING_TILE, PUZZLE_PIECE_SIZE, TILESETS, MapConfig
from puzzle_defense.game.data.maps.errors import GenerationError, OutOfBoundsError
from puzzle_defense.game.data.maps.piece_library import PieceLibrary, default_piece_library
from puzzle_defense.game.data.maps.puzzle_piece import DirectionFlags, PuzzlePiece, PuzzlePieceType
from puzzle_defense.game.data.maps.skeleton_graph import Cell, SkeletonGraph, SkeletonGraphGenerator
from puzzle_defense.game.data.maps.tile_map import TileMap
from puzzle_defense.game.data.maps.utils import (
    bfs_reachable, find_components, push_all_to_array,
    random_from_weights, random_key_from_dict, shallow_copy_array
)


@dataclass
class GeneratedMap:
    """A finished gameplay map, ready to hand to a TileMap."""
    tiles: np.ndarray
    width: int
    height: int
    tileset_id: int
    pieces: List[List[PuzzlePiece]]  # [row][column]
    entry_cell: Cell
    exit_cell: Cell
    seed: Optional[int] = None
    statistics: Dict = field(default_factory=dict)
    doodads: Optional[List[Optional[int]]] = None

    def __post_init__(self):
        if self.doodads is None:
            self.doodads = [None] * len(self.tiles)

    @property
    def width_in_pieces(self) -> int:
        return self.width // PUZZLE_PIECE_SIZE

    @property
    def height_in_pieces(self) -> int:
        return self.height // PUZZLE_PIECE_SIZE

    def tile_at(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBoundsError(f"({x}, {y}) is outside the {self.width}x{self.height} map")
        return int(self.tiles[y * self.width + x])

    def piece_at(self, column: int, row: int) -> PuzzlePiece:
        return self.pieces[row][column]

    def format_rows(self) -> List[str]:
        grid = self.tiles.reshape(self.height, self.width)
        return [''.join(str(int(t)) for t in row) for row in grid]

    def to_tile_map(self, map_factory=TileMap):
        """Hand the tile and doodad layers to the Map collaborator."""
        return map_factory(self.tiles.tolist(), list(self.doodads), self.tileset_id, self.width, 1, False)


class MapGenerator:
    """
    Map generator class.

    - Uses MapConfig for all configurable parameters.
    - Uses deterministic RNG (config.seed) for reproducibility.
    - Public method `generate()` returns a validated GeneratedMap.
    """
    def __init__(self, config: MapConfig = None, library: PieceLibrary = None):
        self.config = config or MapConfig()
        self.library = library or default_piece_library()
        self.logger = get_map_logger()

        # Deterministic RNG
        if self.config.seed is not None:
            self.rng = random.Random(self.config.seed)
            self.logger.info(f"Generator initialized with seed: {self.config.seed}")
        else:
            self.rng = random.Random()
            self.logger.info("Generator initialized with random seed")

        # Map state
        self.skeleton: Optional[SkeletonGraph] = None
        self.placed: Dict[Cell, PuzzlePiece] = {}
        self.tiles: Optional[np.ndarray] = None
        self.tileset_id: Optional[int] = None

        self.counters = {
            'attempts': 0,
            'backtracks': 0,
            'failed_assemblies': 0,
            'failed_validations': 0,
        }

    # -------------------------
    # Entry point
    # -------------------------
    def generate(self) -> GeneratedMap:
        """
        Run the full generation pipeline and return the finished map.

        Each attempt:
          - builds a fresh skeleton (which cells connect to which)
          - assembles pieces cell by cell, backtracking on dead ends
          - rasterizes the pieces into one tile array
          - validates connectivity and the sealed border
        A failed attempt starts over with a new skeleton.

        Raises:
            GenerationError: every attempt failed
        """
        self.logger.info(
            f"Generating {self.config.width_in_pieces}×{self.config.height_in_pieces} piece map "
            f"({self.config.width}×{self.config.height} tiles)"
        )
        self.counters = {k: 0 for k in self.counters}

        with PerformanceTimer(self.logger, "Puzzle map generation"):
            self.tileset_id = self._choose_tileset()

            for attempt in range(1, self.config.max_generation_attempts + 1):
                self.counters['attempts'] = attempt

                # Phase 1: skeleton
                self.skeleton = SkeletonGraphGenerator(self.config, self.rng).generate()

                # Phase 2: assembly
                if not self._assemble():
                    self.counters['failed_assemblies'] += 1
                    self.logger.warning(f"Attempt {attempt}: assembly ran out of candidates")
                    continue

                # Phase 3: rasterization
                self.tiles = self._rasterize()

                # Phase 4: validation
                if not self._validate():
                    self.counters['failed_validations'] += 1
                    self.logger.warning(f"Attempt {attempt}: validation failed")
                    continue

                generated = self._build_result()
                stats = generated.statistics
                self.logger.info(
                    f"Map complete: {stats['path_cells']} path cells, {stats['loops']} loops, "
                    f"{stats['opening_tiles']} opening tiles, attempts={attempt}, "
                    f"backtracks={self.counters['backtracks']}"
                )
                return generated

        raise GenerationError(
            f"could not assemble a {self.config.width_in_pieces}x{self.config.height_in_pieces} map "
            f"in {self.config.max_generation_attempts} attempts"
        )

    def _choose_tileset(self) -> int:
        if self.config.tileset_id is not None:
            return self.config.tileset_id
        return TILESETS[random_key_from_dict(TILESETS, self.rng)]

    # -------------------------
    # Assembly
    # -------------------------
    def _column_class(self, column: int) -> PuzzlePieceType:
        if column == 0:
            return PuzzlePieceType.LEFT
        if column == self.config.width_in_pieces - 1:
            return PuzzlePieceType.RIGHT
        return PuzzlePieceType.MIDDLE

    def _assemble(self) -> bool:
        """
        Place a piece in every cell, row by row.

        Each cell keeps its ordered candidate list; when a cell has nothing
        left to try, the previous cell moves on to its next candidate.
        Returns False when the backtracking budget runs out or the first
        cell is exhausted.
        """
        cells = [(c, r) for r in range(self.config.height_in_pieces)
                 for c in range(self.config.width_in_pieces)]
        domains: List[Optional[List[PuzzlePiece]]] = [None] * len(cells)
        self.placed = {}
        backtracks = 0

        i = 0
        while i < len(cells):
            cell = cells[i]
            if domains[i] is None:
                domains[i] = self._ordered_candidates(cell)

            if not domains[i]:
                # dead end: forget this cell and revisit the previous one
                domains[i] = None
                self.placed.pop(cell, None)
                i -= 1
                backtracks += 1
                if i < 0 or backtracks > self.config.max_backtracks:
                    self.counters['backtracks'] += backtracks
                    return False
                continue

            self.placed[cell] = domains[i].pop(0)
            i += 1

        self.counters['backtracks'] += backtracks
        return True

    def _ordered_candidates(self, cell: Cell) -> List[PuzzlePiece]:
        """Pieces that may go in `cell`, in weighted-random order."""
        column, row = cell
        required = self.skeleton.required_sides(cell)
        candidates = self.library.candidates(self._column_class(column), required)

        # No neighbour (the map border) means anything fits
        left = self.placed.get((column - 1, row))
        up = self.placed.get((column, row - 1))
        fitting = [
            piece for piece in candidates
            if piece.can_fit_together(left) & DirectionFlags.RIGHT
            and piece.can_fit_together(up) & DirectionFlags.DOWN
        ]
        return self._weighted_order(fitting)

    def _weighted_order(self, pieces: List[PuzzlePiece]) -> List[PuzzlePiece]:
        """Repeated weighted draws without replacement; zero-weight pieces go last."""
        remaining = [piece for piece in pieces if piece.relative_weight > 0]
        zero_weight = [piece for piece in pieces if piece.relative_weight <= 0]
        ordered = []
        while remaining:
            choice = random_from_weights(remaining, self.rng)
            if choice is None:
                push_all_to_array(ordered, remaining)
                break
            ordered.append(choice)
            remaining.remove(choice)
        push_all_to_array(ordered, zero_weight)
        return ordered

    # -------------------------
    # Rasterization
    # -------------------------
    def _rasterize(self) -> np.ndarray:
        tiles = np.full(self.config.area, EMPTY_TILE, dtype=np.int32)
        for (column, row), piece in self.placed.items():
            piece.apply_to_map_array(tiles, self.config.width,
                                     column * PUZZLE_PIECE_SIZE, row * PUZZLE_PIECE_SIZE)
        return tiles

    # -------------------------
    # Validation
    # -------------------------
    def _piece_rows(self, cell: Cell) -> range:
        return range(cell[1] * PUZZLE_PIECE_SIZE, (cell[1] + 1) * PUZZLE_PIECE_SIZE)

    def _validate(self) -> bool:
        """
        Check the assembled map:
          - the outer border is sealed except at the entry (left) and exit (right)
          - every opening tile is connected to the entry
        """
        w, h = self.config.width, self.config.height
        openings = self.tiles.reshape(h, w) == OPENING_TILE

        entry_rows = self._piece_rows(self.skeleton.entry)
        exit_rows = self._piece_rows(self.skeleton.exit)
        leaks = (
            int(openings[0, :].sum()) + int(openings[-1, :].sum())
            + sum(1 for y in range(h) if openings[y, 0] and y not in entry_rows)
            + sum(1 for y in range(h) if openings[y, -1] and y not in exit_rows)
        )
        if leaks:
            self.logger.error(f"Border check: {leaks} opening tiles leak off the map")
            return False

        entry_gates = [(0, y) for y in entry_rows if openings[y, 0]]
        exit_gates = [(w - 1, y) for y in exit_rows if openings[y, -1]]
        if not entry_gates or not exit_gates:
            self.logger.error("Border check: entry or exit gate missing")
            return False

        def passable(x, y):
            return bool(openings[y, x])

        reachable = bfs_reachable(entry_gates[0], w, h, passable)
        total = int(openings.sum())
        if len(reachable) != total:
            islands = find_components(w, h, passable, exclude=reachable)
            self.logger.warning(
                f"Connectivity check: {total - len(reachable)} opening tiles in {len(islands)} "
                f"regions are unreachable from the entry"
            )
            return False

        if not any(gate in reachable for gate in exit_gates):
            self.logger.warning("Connectivity check: exit unreachable from entry")
            return False

        return True

    # -------------------------
    # Results & statistics
    # -------------------------
    def _build_result(self) -> GeneratedMap:
        pieces = [
            [self.placed[(c, r)] for c in range(self.config.width_in_pieces)]
            for r in range(self.config.height_in_pieces)
        ]
        return GeneratedMap(
            tiles=self.tiles.copy(),
            width=self.config.width,
            height=self.config.height,
            tileset_id=self.tileset_id,
            pieces=pieces,
            entry_cell=self.skeleton.entry,
            exit_cell=self.skeleton.exit,
            seed=self.config.seed,
            statistics=self.get_statistics(),
        )

    def get_statistics(self) -> Dict:
        """Return a dictionary of useful summary statistics about the generated map."""
        stats = {
            'width': self.config.width,
            'height': self.config.height,
            'width_in_pieces': self.config.width_in_pieces,
            'height_in_pieces': self.config.height_in_pieces,
            'area': self.config.area,
            'seed': self.config.seed,
            'tileset_id': self.tileset_id,
        }
        placed = shallow_copy_array(self.placed.values())
        stats['pieces'] = len(placed)
        stats['blank_pieces'] = sum(1 for piece in placed if piece.is_blank)

        if self.skeleton is not None:
            path_cells = len(self.skeleton)
            connections = len(self.skeleton.edges)
            stats['path_cells'] = path_cells
            stats['connections'] = connections
            stats['loops'] = max(0, connections - (path_cells - 1))
            stats['entry_cell'] = self.skeleton.entry
            stats['exit_cell'] = self.skeleton.exit
        else:
            stats.update({'path_cells': 0, 'connections': 0, 'loops': 0,
                          'entry_cell': None, 'exit_cell': None})

        stats['opening_tiles'] = int((self.tiles == OPENING_TILE).sum()) if self.tiles is not None else 0
        stats.update(self.counters)
        return stats
