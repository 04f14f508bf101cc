"""
Skeleton Graph for puzzle-piece maps.

Before any piece is chosen, the generator decides which piece cells carry
the path network and which neighbouring cells connect:
1. Grow a random region of cells from an entry cell in the first column
   until it is big enough and touches the last column
2. Connect the region with a random spanning tree (Kruskal)
3. Add a few extra connections to create loops

The skeleton then tells the assembler, for every cell, exactly which sides
of the piece placed there must be open.
"""

from typing import Dict, List, Optional, Set, Tuple

from puzzle_defense.config import get_map_logger
from puzzle_defense.game.data.maps.config import MapConfig
from puzzle_defense.game.data.maps.puzzle_piece import DirectionFlags
from puzzle_defense.game.data.maps.utils import (
    kruskal_mst, neighbors_4, push_all_to_array,
    random_array_element, random_integer
)

Cell = Tuple[int, int]  # (column, row) in pieces

_OFFSET_TO_SIDE = {
    (0, -1): DirectionFlags.UP,
    (1, 0): DirectionFlags.RIGHT,
    (0, 1): DirectionFlags.DOWN,
    (-1, 0): DirectionFlags.LEFT,
}


class SkeletonGraph:
    """
    Graph over piece cells.

    Nodes are cells in the path network, edges are open connections
    between orthogonally adjacent cells.
    """

    def __init__(self):
        self.nodes: List[Cell] = []  # Node positions (column, row)
        self.edges: List[Tuple[int, int]] = []  # Edge pairs (node_idx_a, node_idx_b)
        self.node_types: Dict[int, str] = {}  # node_idx -> "entry"/"exit"/"path"
        self.entry: Optional[Cell] = None
        self.exit: Optional[Cell] = None
        self._index: Dict[Cell, int] = {}

    def add_node(self, pos: Cell, node_type: str = "path") -> int:
        """
        Add node to graph.

        Args:
            pos: Cell position (column, row)
            node_type: Node type classification

        Returns:
            Index of the node
        """
        if pos in self._index:
            return self._index[pos]
        idx = len(self.nodes)
        self.nodes.append(pos)
        self.node_types[idx] = node_type
        self._index[pos] = idx
        return idx

    def add_edge(self, a: int, b: int):
        """
        Add edge between two adjacent nodes.

        Raises:
            ValueError: the nodes are not orthogonal neighbours
        """
        (ax, ay), (bx, by) = self.nodes[a], self.nodes[b]
        if abs(ax - bx) + abs(ay - by) != 1:
            raise ValueError(f"cells {self.nodes[a]} and {self.nodes[b]} are not adjacent")
        if (a, b) not in self.edges and (b, a) not in self.edges:
            self.edges.append((a, b))

    def index_of(self, pos: Cell) -> Optional[int]:
        return self._index.get(pos)

    def get_neighbors(self, node_idx: int) -> List[int]:
        """Get all nodes connected to given node."""
        neighbors = []
        for a, b in self.edges:
            if a == node_idx:
                neighbors.append(b)
            elif b == node_idx:
                neighbors.append(a)
        return neighbors

    def required_sides(self, pos: Cell) -> DirectionFlags:
        """
        Sides that must be open on the piece at `pos`.

        Cells outside the network need a piece with no openings at all.
        """
        idx = self._index.get(pos)
        if idx is None:
            return DirectionFlags.NONE

        sides = DirectionFlags.NONE
        for neighbor in self.get_neighbors(idx):
            nx, ny = self.nodes[neighbor]
            sides |= _OFFSET_TO_SIDE[(nx - pos[0], ny - pos[1])]
        if pos == self.entry:
            sides |= DirectionFlags.LEFT
        if pos == self.exit:
            sides |= DirectionFlags.RIGHT
        return sides

    def __contains__(self, pos):
        return pos in self._index

    def __len__(self):
        return len(self.nodes)


class SkeletonGraphGenerator:
    """
    Builds the skeleton for one map attempt.
    """

    def __init__(self, config: MapConfig, rng):
        self.config = config
        self.rng = rng
        self.logger = get_map_logger()
        self.graph: Optional[SkeletonGraph] = None

    def generate(self) -> SkeletonGraph:
        self.graph = SkeletonGraph()

        region = self._grow_region()
        for pos in region:
            self.graph.add_node(pos)

        entry, exit_cell = region[0], self._pick_exit(region)
        self.graph.entry = entry
        self.graph.exit = exit_cell
        self.graph.node_types[self.graph.index_of(entry)] = "entry"
        if exit_cell != entry:
            self.graph.node_types[self.graph.index_of(exit_cell)] = "exit"

        tree_edges, extra_edges = self._connect_region()
        self.logger.debug(
            f"Skeleton: {len(self.graph)} cells, entry={entry}, exit={exit_cell}, "
            f"{tree_edges} tree edges, {extra_edges} loop edges"
        )
        return self.graph

    # ========================================================================
    # PHASE 1: REGION GROWTH
    # ========================================================================

    def _grow_region(self) -> List[Cell]:
        """
        Random growth from an entry cell in the first column.

        Stops once the region reaches the target size and touches the last
        column. The first element of the result is the entry cell.
        """
        w, h = self.config.width_in_pieces, self.config.height_in_pieces
        last_column = w - 1
        target = max(w, round(self.config.fill_ratio * w * h))

        entry = (0, random_integer(0, h, self.rng))
        region = [entry]
        in_region: Set[Cell] = {entry}
        frontier: List[Cell] = []
        push_all_to_array(frontier, self._fresh_neighbors(entry, in_region, frontier))
        reached_last = last_column == 0

        while frontier and (len(region) < target or not reached_last):
            pos = random_array_element(frontier, self.rng)
            frontier.remove(pos)
            region.append(pos)
            in_region.add(pos)
            reached_last = reached_last or pos[0] == last_column
            push_all_to_array(frontier, self._fresh_neighbors(pos, in_region, frontier))

        return region

    def _fresh_neighbors(self, pos: Cell, in_region: Set[Cell], frontier: List[Cell]) -> List[Cell]:
        w, h = self.config.width_in_pieces, self.config.height_in_pieces
        return [
            (nx, ny) for nx, ny, _ in neighbors_4(pos[0], pos[1], w, h)
            if (nx, ny) not in in_region and (nx, ny) not in frontier
        ]

    def _pick_exit(self, region: List[Cell]) -> Cell:
        last_column = self.config.width_in_pieces - 1
        return random_array_element([pos for pos in region if pos[0] == last_column], self.rng)

    # ========================================================================
    # PHASE 2: CONNECTIONS
    # ========================================================================

    def _connect_region(self) -> Tuple[int, int]:
        """
        Spanning tree over the region's adjacencies, plus random loops.

        Returns:
            (tree edge count, extra edge count)
        """
        candidate_edges = []
        for idx, (x, y) in enumerate(self.graph.nodes):
            for other in ((x + 1, y), (x, y + 1)):
                other_idx = self.graph.index_of(other)
                if other_idx is not None:
                    candidate_edges.append((self.rng.random(), idx, other_idx))

        tree = kruskal_mst(self.graph.nodes, candidate_edges)
        for a, b in tree:
            self.graph.add_edge(a, b)

        in_tree = set(tree)
        extra = 0
        for _, a, b in candidate_edges:
            if (a, b) in in_tree or (b, a) in in_tree:
                continue
            if self.rng.random() < self.config.extra_edge_chance:
                self.graph.add_edge(a, b)
                extra += 1

        return len(tree), extra
