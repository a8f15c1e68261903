"""
Shared fixtures: a flat-colour tile catalog covering every solid category.
"""

import pytest

from py_cubeglobe.core.block_grid import BlockCategory, Face
from py_cubeglobe.render.sprites import DEFAULT_SHADING, solid_face_sprites
from py_cubeglobe.render.tile_catalog import TileCatalog

TILE_WIDTH = 24
TILE_HEIGHT = 24

PALETTE = {
    BlockCategory.SOIL: (130, 90, 50, 255),
    BlockCategory.ROCK: (120, 120, 120, 255),
    BlockCategory.WATER: (40, 90, 200, 128),
    BlockCategory.GRASS: (60, 170, 60, 255),
    BlockCategory.SAND: (220, 200, 140, 255),
}


@pytest.fixture
def palette():
    return dict(PALETTE)


@pytest.fixture
def make_catalog():
    """Factory for catalogs of solid-colour face sprites."""

    def _make(categories=None, top_only=(), shading=DEFAULT_SHADING, required=()):
        if categories is None:
            categories = list(PALETTE)
        entries = {}
        for category in categories:
            faces = (Face.TOP,) if category in top_only else tuple(Face)
            sprites = solid_face_sprites(PALETTE[category], TILE_WIDTH, TILE_HEIGHT, shading=shading, faces=faces)
            for face, sprite in sprites.items():
                entries[(category, face)] = sprite
        return TileCatalog(TILE_WIDTH, TILE_HEIGHT, entries, required=required)

    return _make


@pytest.fixture
def catalog(make_catalog):
    return make_catalog()
