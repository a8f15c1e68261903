"""Summary statistics for generated grids."""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from .block_grid import BlockCategory, BlockGrid


@dataclass
class GridStatistics:
    """Aggregate numbers describing a BlockGrid."""

    length: int
    height: int
    min_height: int
    max_height: int
    mean_height: float
    water_columns: int  # columns whose top block is water
    rock_columns: int  # columns whose top block is rock
    counts: Dict[BlockCategory, int] = field(default_factory=dict)

    @property
    def columns(self) -> int:
        return self.length * self.length

    @property
    def water_fraction(self) -> float:
        return self.water_columns / self.columns

    @property
    def rock_fraction(self) -> float:
        return self.rock_columns / self.columns


def analyze_grid(grid: BlockGrid) -> GridStatistics:
    """Compute column height and surface statistics for a grid."""
    heights = grid.heightmap()
    top_z = heights - 1

    xs, ys = np.nonzero(top_z >= 0)
    tops = grid.blocks[xs, ys, top_z[xs, ys]]

    return GridStatistics(
        length=grid.length,
        height=grid.height,
        min_height=int(heights.min()),
        max_height=int(heights.max()),
        mean_height=float(heights.mean()),
        water_columns=int(np.sum(tops == BlockCategory.WATER)),
        rock_columns=int(np.sum(tops == BlockCategory.ROCK)),
        counts=grid.counts(),
    )
