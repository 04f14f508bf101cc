"""
Utility functions for puzzle map generation.

Pure helpers with no state:
- distance metrics and circle collision
- seeded random selection (integers, weighted items, elements, dict keys)
- sequence helpers
- coordinate chasing for movement toward a target
- grid helpers over flat, row-major tile arrays (neighbors, BFS, components)
- Kruskal's MST, used to build the piece skeleton

Every random helper takes an optional `rng` (a random.Random); when omitted
the module-level `random` functions are used.
"""

import math
import numbers
import random
from collections import deque
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from puzzle_defense.config import get_logger
from puzzle_defense.game.data.maps.errors import EmptyInputError, WeightedSelectionError

logger = get_logger(__name__)


# ============================================================================
# DIRECTION DEFINITIONS
# ============================================================================

DIRECTIONS_4 = [
    ('north', 0, -1), ('south', 0, 1),
    ('east', 1, 0), ('west', -1, 0)
]


# ============================================================================
# DISTANCE CALCULATIONS
# ============================================================================

def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points. Units are up to the caller."""
    dx = x2 - x1
    dy = y2 - y1
    return math.sqrt(dx * dx + dy * dy)


def manhattan_distance(x1, y1, x2, y2):
    """
    Taxicab distance between two points.

    A diagonal step counts as 2, not sqrt(2) like distance() would give.
    """
    return abs(x1 - x2) + abs(y1 - y2)


def circles_collide(x1: float, y1: float, r1: float, x2: float, y2: float, r2: float) -> bool:
    """Two circles collide when their centers are no farther apart than r1 + r2."""
    return distance(x1, y1, x2, y2) <= (r1 + r2)


# ============================================================================
# RANDOM SELECTION
# ============================================================================

def random_integer(lower_bound: int, upper_bound: int, rng=None) -> int:
    """
    Random integer in [lower_bound, upper_bound).

    The bounds are swapped when given in the wrong order.
    """
    rng = rng or random
    if lower_bound > upper_bound:
        lower_bound, upper_bound = upper_bound, lower_bound
    return int(math.floor(rng.random() * (upper_bound - lower_bound))) + lower_bound


def _relative_weight(item) -> float:
    if isinstance(item, Mapping):
        weight = item.get('relative_weight')
    else:
        weight = getattr(item, 'relative_weight', None)
    if weight is None:
        raise WeightedSelectionError(f"{item!r} has no relative_weight")
    if not isinstance(weight, numbers.Real):
        raise WeightedSelectionError(f"{item!r} has a non-numeric relative_weight ({weight!r})")
    if weight < 0:
        raise WeightedSelectionError(f"{item!r} has a negative relative_weight ({weight})")
    return weight


def _cumulative_weights(items: Sequence) -> List[float]:
    """
    Cumulative normalized weights for `items`.

    For weights (5, 10, 15) this is [0.1666..., 0.5, 1.0].

    Raises:
        WeightedSelectionError: missing/negative weight or a zero total
    """
    weights = [_relative_weight(item) for item in items]
    total = sum(weights)
    if total == 0:
        raise WeightedSelectionError("total weight is zero")

    cumulative = []
    running = 0.0
    for weight in weights:
        running += weight / total
        cumulative.append(running)
    return cumulative


def random_from_weights(items: Sequence, rng=None):
    """
    Pick one item with probability proportional to its relative weight.

    Items are mappings with a 'relative_weight' key or objects with a
    `relative_weight` attribute. With weights (5, 10, 15) the items come up
    about 16.7%, 33.3% and 50% of the time.

    Args:
        items: Weighted items
        rng: Optional random.Random

    Returns:
        The chosen item, or None (with a logged warning) when an item has no
        usable weight or every weight is zero.
    """
    rng = rng or random
    try:
        cumulative = _cumulative_weights(items)
    except WeightedSelectionError as e:
        logger.warning(f"random_from_weights is returning None: {e}")
        return None

    draw = rng.random()
    last = len(items) - 1
    for i, percent in enumerate(cumulative):
        # The last item is returned unconditionally to absorb float rounding
        if draw < percent or i == last:
            return items[i]
    return None


def _require_items(items, what: str):
    if items is None or len(items) == 0:
        raise EmptyInputError(f"cannot pick from an empty {what}")


def random_array_element(array: Optional[Sequence], rng=None):
    """Random element of `array`, or None if it is empty or None."""
    try:
        _require_items(array, 'sequence')
    except EmptyInputError:
        return None
    rng = rng or random
    return array[int(math.floor(rng.random() * len(array)))]


def random_key_from_dict(dictionary: Optional[Dict], rng=None):
    """
    Uniformly chosen key of `dictionary`.

    Returns None (with a logged warning) for an empty or missing dict.
    """
    try:
        _require_items(dictionary, 'dict')
    except EmptyInputError as e:
        logger.warning(f"random_key_from_dict is returning None: {e}")
        return None
    return random_array_element(list(dictionary.keys()), rng)


# ============================================================================
# SEQUENCE HELPERS
# ============================================================================

def shallow_copy_array(array: Sequence) -> List:
    """New list holding the same elements; the input is untouched."""
    return list(array)


def push_all_to_array(array: Optional[List], push_this_entire_array: Optional[Sequence]) -> None:
    """Append every element of the second sequence to `array`, in place."""
    if array is None or push_this_entire_array is None:
        return
    array.extend(push_this_entire_array)


def copy_and_reverse_array(array: Sequence) -> List:
    """Reversed copy, e.g. [1, 2, 3] -> [3, 2, 1]. The input is untouched."""
    return list(reversed(array))


# ============================================================================
# MOVEMENT
# ============================================================================

class ChaseResult(NamedTuple):
    x: float
    y: float
    at_destination: bool


def _step_axis(current: float, desired: float, speed: float) -> float:
    if abs(current - desired) < speed:
        return desired
    if current < desired:
        return current + speed
    return current - speed


def chase_coordinates(current_x: float, current_y: float,
                      desired_x: float, desired_y: float,
                      speed: float, use_vector: bool) -> ChaseResult:
    """
    Move the current point one step toward the desired point.

    Args:
        current_x, current_y: Starting coordinates (any coordinate system)
        desired_x, desired_y: Target coordinates
        speed: Maximum distance covered on an axis this step
        use_vector: Travel along the line to the target. When False, each
            axis moves independently, so the shorter axis finishes first.

    Returns:
        ChaseResult(x, y, at_destination)
    """
    if use_vector:
        angle = math.atan2(desired_y - current_y, desired_x - current_x)

        if abs(current_x - desired_x) < speed:
            current_x = desired_x
        else:
            current_x += speed * math.cos(angle)

        if abs(current_y - desired_y) < speed:
            current_y = desired_y
        else:
            current_y += speed * math.sin(angle)
    else:
        current_x = _step_axis(current_x, desired_x, speed)
        current_y = _step_axis(current_y, desired_y, speed)

    at_destination = current_x == desired_x and current_y == desired_y
    return ChaseResult(current_x, current_y, at_destination)


# ============================================================================
# GRID OPERATIONS (flat, row-major arrays)
# ============================================================================

def valid_pos(x: int, y: int, width: int, height: int) -> bool:
    """Check if position is within grid bounds."""
    return 0 <= x < width and 0 <= y < height


def neighbors_4(x: int, y: int, width: int, height: int) -> Iterator[Tuple[int, int, str]]:
    """Yield cardinal neighbors (nx, ny, direction) within bounds."""
    for direction, dx, dy in DIRECTIONS_4:
        nx, ny = x + dx, y + dy
        if valid_pos(nx, ny, width, height):
            yield (nx, ny, direction)


def bfs_reachable(
    start: Tuple[int, int],
    width: int,
    height: int,
    passable_fn: Callable[[int, int], bool]
) -> Set[Tuple[int, int]]:
    """
    Breadth-First Search to find all passable cells reachable from start.
    """
    if not valid_pos(start[0], start[1], width, height) or not passable_fn(start[0], start[1]):
        return set()

    reachable = {start}
    queue = deque([start])

    while queue:
        x, y = queue.popleft()
        for nx, ny, _ in neighbors_4(x, y, width, height):
            if (nx, ny) in reachable:
                continue
            if passable_fn(nx, ny):
                reachable.add((nx, ny))
                queue.append((nx, ny))

    return reachable


def find_components(
    width: int,
    height: int,
    passable_fn: Callable[[int, int], bool],
    exclude: Optional[Set[Tuple[int, int]]] = None
) -> List[Set[Tuple[int, int]]]:
    """
    Find all 4-connected components of passable cells, minus `exclude`.
    """
    all_passable = {(x, y) for y in range(height) for x in range(width) if passable_fn(x, y)}

    remaining = all_passable - (exclude or set())
    components: List[Set[Tuple[int, int]]] = []

    while remaining:
        seed = min(remaining, key=lambda p: (p[1], p[0]))
        component = bfs_reachable(seed, width, height, passable_fn)
        components.append(component)
        remaining -= component

    return components


# ============================================================================
# GRAPH ALGORITHMS
# ============================================================================

def kruskal_mst(nodes: Sequence[Any], edges: List[Tuple[float, int, int]]) -> List[Tuple[int, int]]:
    """
    Kruskal's algorithm for Minimum Spanning Tree.

    Args:
        nodes: Node list (only its length matters)
        edges: List of (weight, node_idx_a, node_idx_b)

    Returns:
        List of edges in MST as (node_idx_a, node_idx_b)
    """
    n = len(nodes)
    parent = list(range(n))

    def find(x):
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(x, y):
        px, py = find(x), find(y)
        if px != py:
            parent[px] = py
            return True
        return False

    mst_edges = []
    for weight, i, j in sorted(edges):
        if union(i, j):
            mst_edges.append((i, j))
            if len(mst_edges) == n - 1:
                break

    return mst_edges
