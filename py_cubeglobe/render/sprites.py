"""
Sprite data and face geometry.

A Sprite is resolved RGBA pixel data plus a rendering offset. Face sprites
are tile-sized images where only the pixels of one face are opaque; they
can be cut out of whole-cube tiles with ``split_cube_tile`` or painted in
flat colours with ``solid_face_sprites``.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from ..core.block_grid import Face
from ..errors import ConfigurationError
from .projection import validate_tile_size

# Relative brightness of TOP, SIDE_A and SIDE_B in generated sprites
DEFAULT_SHADING = (1.0, 0.8, 0.65)


@dataclass(frozen=True, eq=False)
class Sprite:
    """RGBA pixels (height, width, 4) drawn at the tile origin plus ``offset``."""

    pixels: np.ndarray
    offset: Tuple[int, int] = (0, 0)
    _premultiplied: np.ndarray = field(init=False, repr=False)
    _alpha: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.pixels, np.ndarray):
            raise ConfigurationError(
                f"sprite reference {self.pixels!r} is not resolved pixel data", field="pixels"
            )
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ConfigurationError(f"expected RGBA pixels, got shape {self.pixels.shape}", field="pixels")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ConfigurationError("sprite has no pixels", field="pixels")
        if self.pixels.dtype != np.uint8:
            raise ConfigurationError(f"expected uint8 pixels, got {self.pixels.dtype}", field="pixels")

        pixels = np.array(self.pixels, copy=True)
        pixels.flags.writeable = False
        dx, dy = self.offset
        object.__setattr__(self, "pixels", pixels)
        object.__setattr__(self, "offset", (int(dx), int(dy)))

        # Cached blending operands: straight alpha in [0, 1], colour premultiplied by it
        alpha = pixels[:, :, 3:4].astype(np.float32) / np.float32(255.0)
        premultiplied = pixels[:, :, :3].astype(np.float32) * alpha
        alpha.flags.writeable = False
        premultiplied.flags.writeable = False
        object.__setattr__(self, "_alpha", alpha)
        object.__setattr__(self, "_premultiplied", premultiplied)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def alpha(self) -> np.ndarray:
        return self._alpha

    @property
    def premultiplied(self) -> np.ndarray:
        return self._premultiplied

    def opaque_mask(self) -> np.ndarray:
        return self.pixels[:, :, 3] == 255


def face_masks(tile_width: int, tile_height: int) -> Dict[Face, np.ndarray]:
    """
    Partition a cube tile into its three visible faces.

    Pixels are classified by their centres. The top diamond spans the full
    tile width and ``tile_width / 2`` rows; SIDE_B (left) and SIDE_A (right)
    hang below its two lower edges for ``tile_height - tile_width / 2`` rows.

    Returns:
        Boolean (tile_height, tile_width) masks; they never overlap
    """
    validate_tile_size(tile_width, tile_height)
    half = tile_width / 2.0
    quarter = tile_width / 4.0
    side = tile_height - half

    cy, cx = np.mgrid[0:tile_height, 0:tile_width].astype(np.float64) + 0.5
    d = np.abs(cx - half)
    lower_edge = 2.0 * quarter - d / 2.0

    top = (cy >= d / 2.0) & (cy <= lower_edge)
    sides = (cy > lower_edge) & (cy <= lower_edge + side)
    return {
        Face.TOP: top,
        Face.SIDE_A: sides & (cx >= half),
        Face.SIDE_B: sides & (cx < half),
    }


def split_cube_tile(
    pixels: np.ndarray,
    tile_width: int,
    tile_height: int,
    offset: Tuple[int, int] = (0, 0),
) -> Dict[Face, Sprite]:
    """
    Cut a whole-cube tile into one sprite per visible face.

    Pixels outside a face's region are made fully transparent, so the three
    sprites drawn at the same origin reproduce the original tile.
    """
    if not isinstance(pixels, np.ndarray) or pixels.shape[:2] != (tile_height, tile_width):
        shape = getattr(pixels, "shape", None)
        raise ConfigurationError(
            f"cube tile must be {tile_width}x{tile_height} RGBA, got shape {shape}", field="pixels"
        )
    sprites = {}
    for face, mask in face_masks(tile_width, tile_height).items():
        face_pixels = np.where(mask[:, :, None], pixels, 0).astype(np.uint8)
        sprites[face] = Sprite(face_pixels, offset)
    return sprites


def _shade(color: Sequence[int], factor: float) -> Tuple[int, int, int, int]:
    r, g, b = (int(round(c * factor)) for c in color[:3])
    alpha = int(color[3]) if len(color) > 3 else 255
    return (min(r, 255), min(g, 255), min(b, 255), alpha)


def solid_face_sprites(
    color: Sequence[int],
    tile_width: int,
    tile_height: int,
    shading: Optional[Sequence[float]] = DEFAULT_SHADING,
    faces: Sequence[Face] = tuple(Face),
) -> Dict[Face, Sprite]:
    """
    Flat-coloured face sprites for a cube of the given RGB(A) colour.

    Args:
        color: RGB or RGBA colour of the top face
        shading: Brightness factors for TOP, SIDE_A and SIDE_B; None keeps
            every face the same colour
        faces: Which faces to produce
    """
    factors = dict(zip(Face, shading or (1.0, 1.0, 1.0)))
    masks = face_masks(tile_width, tile_height)
    sprites = {}
    for face in faces:
        pixels = np.zeros((tile_height, tile_width, 4), dtype=np.uint8)
        pixels[masks[face]] = _shade(color, factors[face])
        sprites[face] = Sprite(pixels)
    return sprites
