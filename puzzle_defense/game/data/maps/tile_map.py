"""
TileMap: the map object a finished tile array is handed to.

Holds the tile layer, a parallel doodad layer and a fog layer. Drawing is
someone else's job; this only keeps the data the renderer reads.
"""

from typing import List, Optional, Sequence

import numpy as np
import pygame

from puzzle_defense.config import get_logger
from puzzle_defense.game.data.maps.errors import OutOfBoundsError


class TileMap:
    def __init__(self, tile_indices: Sequence[int], doodad_indices: Sequence[Optional[int]],
                 tileset_id: int, width: int, scale: int = 1, is_overworld: bool = False):
        """
        Args:
            tile_indices: Flat, row-major tile values
            doodad_indices: Flat doodad layer, same length (None = no doodad)
            tileset_id: Opaque tileset identifier
            width: Map width in tiles
            scale: Render scale, kept for the renderer
            is_overworld: Overworld maps start fully fogged
        """
        if width <= 0 or len(tile_indices) % width != 0:
            raise ValueError(f"{len(tile_indices)} tiles do not form rows of width {width}")
        if len(doodad_indices) != len(tile_indices):
            raise ValueError(
                f"doodad layer has {len(doodad_indices)} entries, tile layer has {len(tile_indices)}"
            )

        self.logger = get_logger(__name__)
        self.tile_indices: List[int] = list(tile_indices)
        self.doodad_indices: List[Optional[int]] = list(doodad_indices)
        self.tileset_id = tileset_id
        self.width = width
        self.height = len(self.tile_indices) // width
        self.scale = scale
        self.is_overworld = is_overworld

        # True = fogged
        self.fog = np.full((self.height, self.width), is_overworld, dtype=bool)

        self.logger.debug(
            f"TileMap {self.width}x{self.height} created (tileset={tileset_id}, overworld={is_overworld})"
        )

    @property
    def bounds(self) -> pygame.Rect:
        return pygame.Rect(0, 0, self.width, self.height)

    def _check_pos(self, x: int, y: int):
        if not self.bounds.collidepoint(x, y):
            raise OutOfBoundsError(f"({x}, {y}) is outside the {self.width}x{self.height} map")

    def get_tile(self, x: int, y: int) -> int:
        self._check_pos(x, y)
        return self.tile_indices[y * self.width + x]

    def get_doodad(self, x: int, y: int) -> Optional[int]:
        self._check_pos(x, y)
        return self.doodad_indices[y * self.width + x]

    def is_fogged(self, x: int, y: int) -> bool:
        self._check_pos(x, y)
        return bool(self.fog[y, x])

    def set_fog(self, center_x: int, center_y: int, radius: int, use_fog: bool) -> int:
        """
        Fog or clear the square of side 2*radius+1 around a tile.

        The square is clipped to the map, so centers near an edge are fine.

        Returns:
            Number of tiles whose fog state was set
        """
        area = pygame.Rect(center_x - radius, center_y - radius, 2 * radius + 1, 2 * radius + 1)
        clipped = area.clip(self.bounds)
        self.fog[clipped.top:clipped.bottom, clipped.left:clipped.right] = use_fog
        return clipped.width * clipped.height

    def fogged_count(self) -> int:
        return int(self.fog.sum())
