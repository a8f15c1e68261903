"""
Tile catalog: which sprite draws which face of which block category.

The catalog is built once from already-resolved sprites (see ``assets`` for
loading them from sprite sheets) and is read-only afterwards, so one
instance can serve any number of renders.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import structlog

from ..core.block_grid import SIDE_FACES, BlockCategory, BlockGrid, Face
from ..errors import ConfigurationError
from .projection import validate_tile_size
from .sprites import Sprite, split_cube_tile

logger = structlog.get_logger()

SpriteSource = Union[Sprite, np.ndarray]
EntryValue = Union[SpriteSource, Sequence[SpriteSource]]


def _as_sprites(category: BlockCategory, face: Face, value: EntryValue) -> Tuple[Sprite, ...]:
    if isinstance(value, (Sprite, np.ndarray)):
        value = [value]
    elif isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ConfigurationError(
            f"{category.name}/{face.value}: sprite reference {value!r} is not resolved pixel data",
            field="tiles",
        )

    sprites: List[Sprite] = []
    for item in value:
        if isinstance(item, Sprite):
            sprites.append(item)
        elif isinstance(item, np.ndarray):
            sprites.append(Sprite(item))
        else:
            raise ConfigurationError(
                f"{category.name}/{face.value}: sprite reference {item!r} is not resolved pixel data",
                field="tiles",
            )
    if not sprites:
        raise ConfigurationError(f"{category.name}/{face.value}: no sprites given", field="tiles")
    return tuple(sprites)


class TileCatalog:
    """
    Immutable mapping from (BlockCategory, Face) to sprite variants.

    Rules enforced at construction:

    - EMPTY never has tiles.
    - Every category with tiles has a TOP tile.
    - A category defines both side faces or neither; a category with only
      a TOP tile is "top-only" and its sides are never drawn.
    - Every category in ``required`` has a TOP tile.
    """

    def __init__(
        self,
        tile_width: int,
        tile_height: int,
        entries: Mapping[Tuple[BlockCategory, Face], EntryValue],
        required: Iterable[BlockCategory] = (),
    ):
        """
        Build and validate a catalog.

        Args:
            tile_width: Pixel width of a tile, a positive multiple of 4
            tile_height: Pixel height of a tile, at least ``tile_width / 2``
            entries: Sprites per (category, face); a sequence of sprites
                registers variants of the same face
            required: Categories that must be drawable
        """
        validate_tile_size(tile_width, tile_height)
        self._tile_width = int(tile_width)
        self._tile_height = int(tile_height)

        tiles: Dict[Tuple[BlockCategory, Face], Tuple[Sprite, ...]] = {}
        for key, value in entries.items():
            category, face = key
            category = BlockCategory.parse(category)
            face = Face.parse(face)
            if not category.is_solid:
                raise ConfigurationError("EMPTY blocks are never drawn and take no tiles", field="tiles")
            tiles[(category, face)] = tiles.get((category, face), ()) + _as_sprites(category, face, value)

        for category in sorted({category for category, _ in tiles}):
            if (category, Face.TOP) not in tiles:
                raise ConfigurationError(f"{category.name} has side tiles but no top tile", field="tiles")
            sides = [face for face in SIDE_FACES if (category, face) in tiles]
            if len(sides) == 1:
                raise ConfigurationError(
                    f"{category.name} defines only the {sides[0].value} face; give both sides or neither",
                    field="tiles",
                )

        for category in required:
            category = BlockCategory.parse(category)
            if category.is_solid and (category, Face.TOP) not in tiles:
                raise ConfigurationError(f"{category.name} has no top tile", field="tiles")

        self._tiles = MappingProxyType(tiles)
        logger.debug(
            "Tile catalog built",
            tile_width=self._tile_width,
            tile_height=self._tile_height,
            entries=len(tiles),
        )

    @classmethod
    def from_cube_tiles(
        cls,
        tile_width: int,
        tile_height: int,
        tiles: Mapping[BlockCategory, Union[SpriteSource, Sequence[SpriteSource]]],
        required: Iterable[BlockCategory] = (),
    ) -> "TileCatalog":
        """
        Build a catalog from whole-cube tiles, one or more per category.

        Each tile is split into TOP / SIDE_A / SIDE_B face sprites.
        """
        entries: Dict[Tuple[BlockCategory, Face], List[Sprite]] = {}
        for category, value in tiles.items():
            category = BlockCategory.parse(category)
            for sprite in _as_sprites(category, Face.TOP, value):
                faces = split_cube_tile(sprite.pixels, tile_width, tile_height, sprite.offset)
                for face, face_sprite in faces.items():
                    entries.setdefault((category, face), []).append(face_sprite)
        return cls(tile_width, tile_height, entries, required)

    @property
    def tile_width(self) -> int:
        return self._tile_width

    @property
    def tile_height(self) -> int:
        return self._tile_height

    @property
    def categories(self) -> Tuple[BlockCategory, ...]:
        """Categories with at least a TOP tile."""
        return tuple(sorted({category for category, _ in self._tiles}))

    def entries(self) -> Mapping[Tuple[BlockCategory, Face], Tuple[Sprite, ...]]:
        return self._tiles

    def variants(self, category: BlockCategory, face: Face) -> Tuple[Sprite, ...]:
        return self._tiles.get((BlockCategory.parse(category), Face.parse(face)), ())

    def lookup(self, category: BlockCategory, face: Face, variant_key: int = 0) -> Optional[Sprite]:
        """
        Sprite drawing ``face`` of ``category``, or None if that face is never drawn.

        ``variant_key`` selects among variants (modulo their count).
        """
        sprites = self.variants(category, face)
        if not sprites:
            return None
        return sprites[variant_key % len(sprites)]

    def has_tile(self, category: BlockCategory, face: Face) -> bool:
        return bool(self.variants(category, face))

    def top_only(self, category: BlockCategory) -> bool:
        """True if the category draws a TOP face and no sides."""
        category = BlockCategory.parse(category)
        return self.has_tile(category, Face.TOP) and not any(
            self.has_tile(category, face) for face in SIDE_FACES
        )

    def validate_for(self, grid: BlockGrid) -> None:
        """Raise ConfigurationError if a category present in ``grid`` has no TOP tile."""
        for category, count in grid.counts().items():
            if count and category.is_solid and not self.has_tile(category, Face.TOP):
                raise ConfigurationError(f"{category.name} has no top tile", field="tiles")

    def __contains__(self, key) -> bool:
        category, face = key
        return self.has_tile(category, face)

    def __repr__(self) -> str:
        names = ", ".join(category.name for category in self.categories)
        return f"TileCatalog({self._tile_width}x{self._tile_height}, [{names}])"
