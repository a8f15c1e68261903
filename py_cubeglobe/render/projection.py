"""
Fixed 2:1 isometric projection.

Tiles are ``tile_width`` pixels wide. The top face of a block is a diamond
``tile_width / 2`` pixels tall that adjoins the top of the tile; the rest of
the tile (``side_height`` pixels) holds the two visible sides. Moving one
block along +x shifts a tile right and down by (w/2, w/4), along +y left and
down by (-w/2, w/4), and along +z straight up by ``side_height``.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..errors import ConfigurationError


def validate_tile_size(tile_width: int, tile_height: int) -> None:
    """Tiles must be a positive multiple of 4 wide and at least w/2 tall."""
    if isinstance(tile_width, bool) or not isinstance(tile_width, (int, np.integer)):
        raise ConfigurationError(f"must be an integer, got {tile_width!r}", field="tile_width")
    if isinstance(tile_height, bool) or not isinstance(tile_height, (int, np.integer)):
        raise ConfigurationError(f"must be an integer, got {tile_height!r}", field="tile_height")
    if tile_width <= 0 or tile_width % 4:
        raise ConfigurationError(f"must be a positive multiple of 4, got {tile_width}", field="tile_width")
    if tile_height < tile_width // 2:
        raise ConfigurationError(
            f"must be at least half the tile width ({tile_width // 2}), got {tile_height}",
            field="tile_height",
        )


@dataclass(frozen=True)
class IsoProjection:
    """Maps grid coordinates to the top-left pixel of their tile."""

    tile_width: int
    tile_height: int
    length: int
    depth: int
    margin: int = 0

    def __post_init__(self):
        validate_tile_size(self.tile_width, self.tile_height)
        if self.length < 1 or self.depth < 1:
            raise ConfigurationError("grid dimensions must be positive", field="length")
        if self.margin < 0:
            raise ConfigurationError(f"must be >= 0, got {self.margin}", field="margin")

    @property
    def half_width(self) -> int:
        return self.tile_width // 2

    @property
    def quarter_width(self) -> int:
        return self.tile_width // 4

    @property
    def side_height(self) -> int:
        """Pixel height of the side faces, i.e. the vertical step of one z level."""
        return self.tile_height - self.half_width

    @property
    def canvas_width(self) -> int:
        return self.length * self.tile_width + 2 * self.margin

    @property
    def canvas_height(self) -> int:
        return (
            (self.length - 1) * 2 * self.quarter_width
            + (self.depth - 1) * self.side_height
            + self.tile_height
            + 2 * self.margin
        )

    @property
    def origin(self) -> Tuple[int, int]:
        """Top-left pixel of the tile at (0, 0, 0)."""
        return (
            self.margin + (self.length - 1) * self.half_width,
            self.margin + (self.depth - 1) * self.side_height,
        )

    def tile_origin(self, x, y, z):
        """Top-left pixel of the tile at (x, y, z); works element-wise on arrays."""
        ox, oy = self.origin
        sx = ox + (x - y) * self.half_width
        sy = oy + (x + y) * self.quarter_width - z * self.side_height
        return sx, sy

    @staticmethod
    def depth_key(x: int, y: int, z: int) -> Tuple[int, int, int]:
        """
        Painter's order key: nearness grows with x + y, then with z.

        Blocks are painted in ascending key order. The trailing x only makes
        the order total; blocks tied on (x + y, z) never overlap on screen.
        """
        return (x + y, z, x)

    @staticmethod
    def draw_order(xs: np.ndarray, ys: np.ndarray, zs: np.ndarray) -> np.ndarray:
        """Indices that sort the given blocks by ``depth_key``."""
        xs = np.asarray(xs)
        return np.lexsort((xs, np.asarray(zs), xs + np.asarray(ys)))
