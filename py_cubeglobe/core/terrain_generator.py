"""
Terrain generation module.

Turns a seeded noise field and a handful of thresholds into a BlockGrid:

1. Noise is sampled at the centre of every (x, y) cell of the footprint,
   with the coordinates scaled by ``frequency``.
2. Each sample is remapped linearly to a column height in
   ``[0, length * layer_height]``.
3. Columns are filled bottom-up: soil up to ``min_soil_cutoff``, rock above
   it, water from the column top up to ``max_water_level``, and EMPTY above.

Identical configurations always produce identical grids.
"""

import math
from dataclasses import dataclass, fields, replace
from typing import Iterator, Optional

import numpy as np
import structlog

from ..errors import ConfigurationError
from .block_grid import BlockCategory, BlockGrid
from .noise_field import NoiseField

logger = structlog.get_logger()


def _require_int(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(f"must be an integer, got {value!r}", field=name)
    if value < minimum:
        comparison = "> 0" if minimum == 1 else f">= {minimum}"
        raise ConfigurationError(f"must be {comparison}, got {value}", field=name)


@dataclass(frozen=True)
class TerrainConfig:
    """
    Configuration for terrain generation, validated on construction.

    The two thresholds are independent of each other and of ``max_height``,
    so any pair of non-negative values is consistent. A water level above
    ``max_height`` floods every column and deepens the grid to match; a soil
    cutoff of 0 leaves no soil, and one above ``max_height``
    leaves no rock at all.
    """

    length: int = 64
    frequency: float = 0.05
    layer_height: int = 15
    max_water_level: int = 40
    min_soil_cutoff: int = 45
    seed: int = 0
    # Cap dry soil columns with grass, or sand on the shoreline
    surface_cover: bool = False

    def __post_init__(self):
        _require_int("length", self.length, 1)
        _require_int("layer_height", self.layer_height, 1)
        _require_int("max_water_level", self.max_water_level, 0)
        _require_int("min_soil_cutoff", self.min_soil_cutoff, 0)

        if isinstance(self.frequency, bool) or not isinstance(self.frequency, (int, float, np.floating)):
            raise ConfigurationError(f"must be a number, got {self.frequency!r}", field="frequency")
        if not math.isfinite(self.frequency) or self.frequency <= 0:
            raise ConfigurationError(f"must be a finite number > 0, got {self.frequency}", field="frequency")

        if isinstance(self.seed, bool) or not isinstance(self.seed, (int, np.integer)):
            raise ConfigurationError(f"must be an integer, got {self.seed!r}", field="seed")
        if not isinstance(self.surface_cover, bool):
            raise ConfigurationError(f"must be a boolean, got {self.surface_cover!r}", field="surface_cover")

    @property
    def max_height(self) -> int:
        """Tallest column the height remap can produce."""
        return self.length * self.layer_height

    @property
    def depth(self) -> int:
        """Number of z layers in generated grids."""
        return max(self.max_height, self.max_water_level, 1)

    @classmethod
    def from_settings(cls, settings, **overrides) -> "TerrainConfig":
        """Build a config from ``Settings`` defaults, with keyword overrides."""
        values = {
            "length": settings.default_length,
            "frequency": settings.default_frequency,
            "layer_height": settings.default_layer_height,
            "max_water_level": settings.default_max_water_level,
            "min_soil_cutoff": settings.default_min_soil_cutoff,
            "seed": settings.default_seed,
        }
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"unknown terrain options {sorted(unknown)}", field=sorted(unknown)[0])
        values.update(overrides)
        return cls(**values)

    def with_seed(self, seed: int) -> "TerrainConfig":
        """Same parameters, different seed."""
        return replace(self, seed=seed)


class TerrainGenerator:
    """
    Generates layered block terrain from gradient noise.

    Soil fills each column up to ``min_soil_cutoff``; anything taller is
    rock above that line, so bare rock only shows on high terrain. Columns
    that end below ``max_water_level`` are flooded up to it.
    """

    def __init__(self, config: TerrainConfig, noise: Optional[NoiseField] = None):
        """
        Initialize the terrain generator.

        Args:
            config: Validated terrain configuration
            noise: Noise field to sample; defaults to ``NoiseField(config.seed)``
        """
        self.config = config
        self.noise = noise if noise is not None else NoiseField(config.seed)

    def sample_noise(self) -> np.ndarray:
        """Noise at the centre of every footprint cell, shape (L, L)."""
        cells = np.arange(self.config.length, dtype=np.float64) + 0.5
        xs, ys = np.meshgrid(cells, cells, indexing="ij")
        freq = self.config.frequency
        return self.noise.sample_grid(xs * freq, ys * freq)

    def height_from_noise(self, values) -> np.ndarray:
        """
        Map noise values in [-1, 1] to integer column heights.

        The remap is linear, ``floor((v + 1) / 2 * max_height)``, clipped to
        ``[0, max_height]``, so it never decreases as the noise increases.
        """
        max_height = self.config.max_height
        values = np.clip(np.asarray(values, dtype=np.float64), -1.0, 1.0)
        heights = np.floor((values + 1.0) * 0.5 * max_height)
        return np.clip(heights, 0, max_height).astype(np.int64)

    def heightmap(self) -> np.ndarray:
        """Natural terrain height of every column, shape (L, L)."""
        return self.height_from_noise(self.sample_noise())

    def fill_column(self, height: int) -> np.ndarray:
        """Categories of a single column of the given natural height."""
        return self._fill(np.asarray([[height]], dtype=np.int64))[0, 0]

    def _fill(self, heights: np.ndarray) -> np.ndarray:
        """Vectorised column fill for a (X, Y) array of heights."""
        cfg = self.config
        z = np.arange(cfg.depth, dtype=np.int64)[None, None, :]
        h = heights[:, :, None]

        blocks = np.full(heights.shape + (cfg.depth,), BlockCategory.EMPTY, dtype=np.uint8)

        terrain = z < h
        blocks[terrain & (z < cfg.min_soil_cutoff)] = BlockCategory.SOIL
        blocks[terrain & (z >= cfg.min_soil_cutoff)] = BlockCategory.ROCK
        blocks[(z >= h) & (z < cfg.max_water_level)] = BlockCategory.WATER

        if cfg.surface_cover:
            xs, ys = np.nonzero(
                (heights > 0)
                & (heights <= cfg.min_soil_cutoff)
                & (heights >= cfg.max_water_level)
            )
            tops = heights[xs, ys] - 1
            shoreline = (cfg.max_water_level > 0) & (heights[xs, ys] == cfg.max_water_level)
            blocks[xs, ys, tops] = np.where(shoreline, BlockCategory.SAND, BlockCategory.GRASS)

        return blocks

    def generate(self) -> BlockGrid:
        """Generate the full grid."""
        cfg = self.config
        logger.info(
            "Generating terrain",
            length=cfg.length,
            frequency=cfg.frequency,
            layer_height=cfg.layer_height,
            max_water_level=cfg.max_water_level,
            min_soil_cutoff=cfg.min_soil_cutoff,
            seed=cfg.seed,
        )

        heights = self.heightmap()
        grid = BlockGrid(self._fill(heights))

        logger.info(
            "Terrain generated",
            shape=grid.shape,
            min_height=int(heights.min()),
            max_height=int(heights.max()),
            flooded_columns=int(np.sum(heights < cfg.max_water_level)),
        )
        return grid

    def generate_slices(self) -> Iterator[BlockGrid]:
        """
        Generate the grid one x-slice at a time.

        Yields a snapshot after each slice is filled; rendering the sequence
        shows blocks that end up hidden in the final image, which is handy
        for diagnostics. The last snapshot equals ``generate()``.
        """
        cfg = self.config
        filled = self._fill(self.heightmap())
        blocks = np.zeros_like(filled)
        for x in range(cfg.length):
            blocks[x] = filled[x]
            logger.debug("Terrain slice filled", x=x)
            yield BlockGrid(blocks)


def generate_terrain(config: TerrainConfig) -> BlockGrid:
    """Convenience wrapper: ``TerrainGenerator(config).generate()``."""
    return TerrainGenerator(config).generate()
