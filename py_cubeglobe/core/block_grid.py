"""
Voxel grid data structures.

This module holds the closed set of block categories, the faces a block can
show under the isometric projection, and the BlockGrid container produced
by the terrain generators and consumed by the compositor.

Axis order is (x, y, z) with z pointing up; z=0 is the lowest layer.
"""

import hashlib
from enum import Enum, IntEnum
from typing import Dict, Iterator, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError, OutOfBoundsError


class BlockCategory(IntEnum):
    """The kind of block occupying one grid cell."""

    EMPTY = 0
    WATER = 1
    SOIL = 2
    ROCK = 3
    GRASS = 4  # surface cover
    SAND = 5  # surface cover on shorelines

    @property
    def is_solid(self) -> bool:
        """True for every category that is drawn, i.e. everything but EMPTY."""
        return self is not BlockCategory.EMPTY

    @property
    def is_translucent(self) -> bool:
        """True for categories whose surface shows the blocks beneath it."""
        return self is BlockCategory.WATER

    @classmethod
    def parse(cls, value) -> "BlockCategory":
        """Look up a category by member, code or case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            name = _CATEGORY_ALIASES.get(name, name)
            try:
                return cls[name.upper()]
            except KeyError:
                raise ConfigurationError(f"unknown block category {value!r}", field="kind") from None
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"unknown block category {value!r}", field="kind") from None


_CATEGORY_ALIASES = {"air": "empty", "surface_cover": "grass"}

SOLID_CATEGORIES: Tuple[BlockCategory, ...] = tuple(c for c in BlockCategory if c.is_solid)
TRANSLUCENT_CATEGORIES: Tuple[BlockCategory, ...] = tuple(c for c in BlockCategory if c.is_translucent)

_MAX_CODE = max(BlockCategory)


class Face(Enum):
    """
    Block faces visible under the fixed isometric projection.

    SIDE_A faces +x (lower right of a tile), SIDE_B faces +y (lower left).
    The -x, -y and bottom faces always point away from the viewer.
    """

    TOP = "top"
    SIDE_A = "side_a"
    SIDE_B = "side_b"

    @classmethod
    def parse(cls, value) -> "Face":
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        name = _FACE_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ConfigurationError(f"unknown face {value!r}", field="face") from None


_FACE_ALIASES = {"right": "side_a", "left": "side_b", "a": "side_a", "b": "side_b"}

SIDE_FACES: Tuple[Face, Face] = (Face.SIDE_A, Face.SIDE_B)


class ColumnSurface(NamedTuple):
    """Top of one column: its highest block and what its visible faces show."""

    x: int
    y: int
    z: int
    top: BlockCategory
    side_a: Optional[BlockCategory]
    side_b: Optional[BlockCategory]


class BlockGrid:
    """
    Dense, immutable L x L x H grid of block categories.

    The backing array is a uint8 copy of whatever was passed in and is
    marked read-only, so a grid can be handed to any number of renderers.
    """

    def __init__(self, blocks):
        arr = np.asarray(blocks)
        if arr.dtype == object:
            arr = arr.astype(np.int64)

        if arr.ndim != 3:
            raise ConfigurationError(f"expected a 3-D array, got {arr.ndim}-D", field="blocks")
        length, width, height = arr.shape
        if length == 0 or height == 0:
            raise ConfigurationError(f"grid dimensions must be non-zero, got {arr.shape}", field="blocks")
        if length != width:
            raise ConfigurationError(f"grid footprint must be square, got {arr.shape}", field="blocks")
        if arr.size and (arr.min() < 0 or arr.max() > _MAX_CODE):
            raise ConfigurationError("grid contains unknown block category codes", field="blocks")

        self._blocks = np.array(arr, dtype=np.uint8, copy=True)
        self._blocks.flags.writeable = False
        self._exposure = None

    @classmethod
    def empty(cls, length: int, height: int) -> "BlockGrid":
        """A grid filled with EMPTY."""
        return cls(np.zeros((length, length, height), dtype=np.uint8))

    @classmethod
    def from_columns(cls, columns: Sequence[Sequence[Sequence]]) -> "BlockGrid":
        """
        Build a grid from explicit columns.

        Args:
            columns: ``columns[x][y]`` is a bottom-up sequence of categories;
                shorter columns are padded with EMPTY.
        """
        length = len(columns)
        height = max([len(col) for row in columns for col in row] + [1])
        blocks = np.zeros((length, length, height), dtype=np.uint8)
        for x, row in enumerate(columns):
            if len(row) != length:
                raise ConfigurationError("grid footprint must be square", field="columns")
            for y, col in enumerate(row):
                for z, value in enumerate(col):
                    blocks[x, y, z] = BlockCategory.parse(value)
        return cls(blocks)

    # Dimensions

    @property
    def length(self) -> int:
        """Edge length of the square footprint."""
        return self._blocks.shape[0]

    @property
    def height(self) -> int:
        """Number of z layers."""
        return self._blocks.shape[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._blocks.shape

    @property
    def blocks(self) -> np.ndarray:
        """Read-only view of the category codes."""
        return self._blocks

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.length and 0 <= y < self.length and 0 <= z < self.height

    # Cell access

    def get(self, coord: Tuple[int, int, int]) -> BlockCategory:
        """Category at (x, y, z); raises OutOfBoundsError outside the grid."""
        x, y, z = coord
        if not self.in_bounds(x, y, z):
            raise OutOfBoundsError((x, y, z), self.shape)
        return BlockCategory(int(self._blocks[x, y, z]))

    def __getitem__(self, coord: Tuple[int, int, int]) -> BlockCategory:
        return self.get(coord)

    def column(self, x: int, y: int) -> Tuple[BlockCategory, ...]:
        """Categories at (x, y) from z=0 upward."""
        if not (0 <= x < self.length and 0 <= y < self.length):
            raise OutOfBoundsError((x, y), self.shape[:2])
        return tuple(BlockCategory(int(v)) for v in self._blocks[x, y])

    def top_z(self, x: int, y: int) -> Optional[int]:
        """Highest non-EMPTY z of a column, or None if the column is empty."""
        if not (0 <= x < self.length and 0 <= y < self.length):
            raise OutOfBoundsError((x, y), self.shape[:2])
        z = int(self._top_z()[x, y])
        return z if z >= 0 else None

    def heightmap(self) -> np.ndarray:
        """Per-column height (top z + 1), 0 for empty columns."""
        return self._top_z() + 1

    def counts(self) -> Dict[BlockCategory, int]:
        """Number of cells of every category."""
        totals = np.bincount(self._blocks.ravel(), minlength=len(BlockCategory))
        return {category: int(totals[category]) for category in BlockCategory}

    # Visibility

    def _top_z(self) -> np.ndarray:
        solid = self._blocks != BlockCategory.EMPTY
        top = self.height - 1 - np.argmax(solid[:, :, ::-1], axis=2)
        return np.where(solid.any(axis=2), top, -1).astype(np.int64)

    def exposure(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Boolean masks of exposed faces, each shaped like the grid.

        TOP is set on the highest non-EMPTY block of each column, and on any
        block covered by a translucent block of another category (the seabed
        under water). A side face is exposed when the neighbouring cell in its direction (x+1 for
        SIDE_A, y+1 for SIDE_B) is outside the grid, EMPTY, or of a different
        category.
        """
        if self._exposure is None:
            b = self._blocks
            solid = b != BlockCategory.EMPTY

            above = np.zeros_like(b)
            above[:, :, :-1] = b[:, :, 1:]
            see_through = (above == BlockCategory.EMPTY) | np.isin(above, TRANSLUCENT_CATEGORIES)
            top = solid & see_through & (above != b)

            ahead_a = np.zeros_like(b)
            ahead_a[:-1] = b[1:]
            ahead_b = np.zeros_like(b)
            ahead_b[:, :-1] = b[:, 1:]

            masks = (top, solid & (ahead_a != b), solid & (ahead_b != b))
            for mask in masks:
                mask.flags.writeable = False
            self._exposure = masks
        return self._exposure

    def exposed_faces(self, x: int, y: int, z: int) -> Tuple[Face, ...]:
        """Faces of the block at (x, y, z) that face open space or another category."""
        if not self.in_bounds(x, y, z):
            raise OutOfBoundsError((x, y, z), self.shape)
        top, side_a, side_b = self.exposure()
        faces = []
        if top[x, y, z]:
            faces.append(Face.TOP)
        if side_a[x, y, z]:
            faces.append(Face.SIDE_A)
        if side_b[x, y, z]:
            faces.append(Face.SIDE_B)
        return tuple(faces)

    def visible_faces(self) -> Iterator[Tuple[int, int, int, BlockCategory, Face]]:
        """Every exposed face as (x, y, z, category, face), in x, y, z order."""
        masks = self.exposure()
        any_face = masks[0] | masks[1] | masks[2]
        for x, y, z in zip(*np.nonzero(any_face)):
            category = BlockCategory(int(self._blocks[x, y, z]))
            for face, mask in zip(Face, masks):
                if mask[x, y, z]:
                    yield int(x), int(y), int(z), category, face

    def surfaces(self) -> Iterator[ColumnSurface]:
        """Topmost block of every non-empty column, in row-major (x, y) order."""
        _, side_a, side_b = self.exposure()
        top_z = self._top_z()
        for x in range(self.length):
            for y in range(self.length):
                z = int(top_z[x, y])
                if z < 0:
                    continue
                category = BlockCategory(int(self._blocks[x, y, z]))
                yield ColumnSurface(
                    x=x,
                    y=y,
                    z=z,
                    top=category,
                    side_a=category if side_a[x, y, z] else None,
                    side_b=category if side_b[x, y, z] else None,
                )

    # Identity

    def digest(self) -> str:
        """SHA-256 of shape and contents, for regression fixtures."""
        h = hashlib.sha256()
        h.update(np.asarray(self.shape, dtype=np.int64).tobytes())
        h.update(np.ascontiguousarray(self._blocks).tobytes())
        return h.hexdigest()

    def __eq__(self, other) -> bool:
        if not isinstance(other, BlockGrid):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._blocks, other._blocks)

    def __hash__(self) -> int:
        return hash(self.digest())

    def __repr__(self) -> str:
        return f"BlockGrid(length={self.length}, height={self.height})"
