"""
Isometric rendering of block grids.
"""

from .projection import IsoProjection
from .sprites import Sprite, face_masks, split_cube_tile, solid_face_sprites
from .tile_catalog import TileCatalog
from .compositor import Canvas, IsoCompositor, render_map

__all__ = ['IsoProjection', 'Sprite', 'face_masks', 'split_cube_tile', 'solid_face_sprites',
           'TileCatalog', 'Canvas', 'IsoCompositor', 'render_map']
