"""
Core terrain generation functionality.
"""

from .block_grid import BlockCategory, BlockGrid, ColumnSurface, Face, SIDE_FACES, SOLID_CATEGORIES
from .noise_field import NoiseField
from .terrain_generator import TerrainConfig, TerrainGenerator, generate_terrain
from .flat_generator import FlatTerrainGenerator
from .grid_analysis import GridStatistics, analyze_grid

__all__ = ['BlockCategory', 'BlockGrid', 'ColumnSurface', 'Face', 'SIDE_FACES', 'SOLID_CATEGORIES',
           'NoiseField', 'TerrainConfig', 'TerrainGenerator', 'generate_terrain',
           'FlatTerrainGenerator', 'GridStatistics', 'analyze_grid']
