"""
py-cubeglobe: procedural block landscapes rendered as isometric bitmaps.
"""

from .errors import CubeglobeError, ConfigurationError, OutOfBoundsError, RenderError
from .core import (
    BlockCategory, BlockGrid, Face, NoiseField, TerrainConfig, TerrainGenerator,
    FlatTerrainGenerator, generate_terrain,
)
from .render import Canvas, IsoCompositor, IsoProjection, Sprite, TileCatalog, render_map

__version__ = "0.1.0"

__all__ = ['CubeglobeError', 'ConfigurationError', 'OutOfBoundsError', 'RenderError',
           'BlockCategory', 'BlockGrid', 'Face', 'NoiseField', 'TerrainConfig', 'TerrainGenerator',
           'FlatTerrainGenerator', 'generate_terrain',
           'Canvas', 'IsoCompositor', 'IsoProjection', 'Sprite', 'TileCatalog', 'render_map']
