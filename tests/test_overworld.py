import pytest

from puzzle_defense.game.data.maps.config import GRASS_TILE, MARSH_TILESET_ID, PATH_TILE, SPAWNER_TILE
from puzzle_defense.game.data.maps.errors import DuplicateNodeError, OutOfBoundsError
from puzzle_defense.game.data.maps.mapGen import GeneratedMap
from puzzle_defense.game.data.maps.overworld import (
    OVERWORLD_MAP_WIDTH, OVERWORLD_NODES, OVERWORLD_TILE_INDICES, OverworldNode,
    get_overworld_node, initialize_overworld_map, overworld_map_height, validate_overworld_nodes
)


class RecordingMap:
    """Stands in for the Map collaborator and records how it was used."""

    def __init__(self, tile_indices, doodad_indices, tileset_id, width, scale, is_overworld):
        self.args = (tile_indices, doodad_indices, tileset_id, width, scale, is_overworld)
        self.fog_calls = []

    def set_fog(self, center_x, center_y, radius, use_fog):
        self.fog_calls.append((center_x, center_y, radius, use_fog))


@pytest.fixture
def overworld():
    return initialize_overworld_map()


class TestOverworldData:
    def test_dimensions(self):
        assert OVERWORLD_MAP_WIDTH == 50
        assert len(OVERWORLD_TILE_INDICES) == 50 * 21
        assert overworld_map_height() == 21

    def test_background(self):
        assert set(OVERWORLD_TILE_INDICES) == {GRASS_TILE, PATH_TILE}
        assert all(t == GRASS_TILE for t in OVERWORLD_TILE_INDICES[:50])
        assert OVERWORLD_TILE_INDICES[1 * 50 + 1] == PATH_TILE
        assert OVERWORLD_TILE_INDICES[1 * 50 + 4] == GRASS_TILE
        assert all(t == GRASS_TILE for t in OVERWORLD_TILE_INDICES[6 * 50:])

    def test_nodes(self):
        assert [(n.x, n.y, n.difficulty) for n in OVERWORLD_NODES] == [
            (1, 3, 1), (7, 1, 2), (9, 5, 3), (11, 1, 4), (14, 5, 5), (19, 3, 6)
        ]
        # every node sits on the road
        for node in OVERWORLD_NODES:
            assert OVERWORLD_TILE_INDICES[node.y * 50 + node.x] == PATH_TILE

    def test_node_difficulty_must_be_positive(self):
        with pytest.raises(ValueError):
            OverworldNode(0, 0, "Nowhere", 0)


class TestNodeLookup:
    def test_found(self):
        node = get_overworld_node(7, 1)
        assert node.description == "Pumpkin Hill"
        assert node.difficulty == 2

    def test_first_node(self):
        node = get_overworld_node(1, 3)
        assert node.description == "Green Hill Zone"
        assert node.difficulty == 1

    def test_exact_match_only(self):
        assert get_overworld_node(0, 0) is None
        assert get_overworld_node(8, 1) is None

    def test_first_match_wins(self):
        first = OverworldNode(2, 2, "First", 1)
        second = OverworldNode(2, 2, "Second", 2)
        assert get_overworld_node(2, 2, [first, second]) is first

    def test_validate_rejects_duplicates(self):
        nodes = [OverworldNode(2, 2, "First", 1), OverworldNode(2, 2, "Second", 2)]
        with pytest.raises(DuplicateNodeError):
            validate_overworld_nodes(nodes, 50, 21)

    def test_validate_rejects_off_map_nodes(self):
        with pytest.raises(OutOfBoundsError):
            validate_overworld_nodes([OverworldNode(50, 0, "Edge", 1)], 50, 21)


class TestInitializeOverworld:
    def test_factory_arguments(self):
        context = initialize_overworld_map(map_factory=RecordingMap)
        tiles, doodads, tileset_id, width, scale, is_overworld = context.overworld_map.args
        assert (tileset_id, width, scale, is_overworld) == (MARSH_TILESET_ID, 50, 1, True)
        assert len(tiles) == len(doodads) == len(OVERWORLD_TILE_INDICES)
        assert all(d is None for d in doodads)
        assert context.overworld_map.fog_calls == [(1, 3, 1, False)]

    def test_nodes_are_marked(self, overworld):
        tile_map = overworld.overworld_map
        for node in OVERWORLD_NODES:
            assert tile_map.get_tile(node.x, node.y) == SPAWNER_TILE
        spawners = [i for i, t in enumerate(tile_map.tile_indices) if t == SPAWNER_TILE]
        assert len(spawners) == len(OVERWORLD_NODES)

    def test_other_tiles_untouched(self, overworld):
        node_cells = {n.y * 50 + n.x for n in OVERWORLD_NODES}
        for i, t in enumerate(overworld.overworld_map.tile_indices):
            if i not in node_cells:
                assert t == OVERWORLD_TILE_INDICES[i]
        assert SPAWNER_TILE not in OVERWORLD_TILE_INDICES

    def test_fog_cleared_around_first_node(self, overworld):
        tile_map = overworld.overworld_map
        for y in range(2, 5):
            for x in range(0, 3):
                assert not tile_map.is_fogged(x, y)
        assert tile_map.is_fogged(3, 3)
        assert tile_map.is_fogged(1, 5)
        assert tile_map.fogged_count() == 50 * 21 - 9

    def test_duplicate_nodes_rejected(self):
        nodes = [OverworldNode(1, 3, "A", 1), OverworldNode(1, 3, "B", 2)]
        with pytest.raises(DuplicateNodeError):
            initialize_overworld_map(nodes=nodes)

    def test_no_nodes_rejected(self):
        with pytest.raises(ValueError):
            initialize_overworld_map(nodes=[])


class TestOverworldContext:
    def test_get_node(self, overworld):
        assert overworld.get_node(19, 3).description == "Lazy Town"
        assert overworld.get_node(18, 3) is None

    def test_select_empty_cell(self, overworld):
        assert overworld.select_node(0, 0) is None

    def test_select_node_generates_map(self, overworld):
        generated = overworld.select_node(1, 3, seed=5)
        assert isinstance(generated, GeneratedMap)
        # difficulty 1: 5x3 pieces
        assert (generated.width, generated.height) == (25, 15)
        assert generated.seed == 5

    def test_select_is_reproducible(self, overworld):
        a = overworld.select_node(7, 1, seed=21)
        b = overworld.select_node(7, 1, seed=21)
        assert (a.tiles == b.tiles).all()

    def test_reveal_node(self, overworld):
        node = overworld.get_node(9, 5)
        assert overworld.overworld_map.is_fogged(9, 5)
        overworld.reveal_node(node)
        assert not overworld.overworld_map.is_fogged(9, 5)
        assert not overworld.overworld_map.is_fogged(10, 6)
