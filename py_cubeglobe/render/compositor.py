"""
Isometric compositor.

Projects a BlockGrid through a TileCatalog onto an RGBA canvas. There is no
depth buffer: every visible face is painted in ascending depth key order
``(x + y, z, x)``, so nearer blocks (larger x + y) and higher blocks in the
same diagonal always land on top of what they occlude. Faces are
alpha-blended with the Porter-Duff "over" operator, which lets translucent
tiles such as water show the terrain painted behind them.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..config import settings
from ..core.block_grid import BlockCategory, BlockGrid, Face
from ..errors import RenderError
from ..utils.random import choose_index
from .projection import IsoProjection
from .sprites import Sprite
from .tile_catalog import TileCatalog

logger = structlog.get_logger()

_DEFAULT = object()

# Face order used for face codes in the collected arrays
_FACES: Tuple[Face, ...] = tuple(Face)


@dataclass
class Canvas:
    """RGBA pixel buffer produced by a render."""

    width: int
    height: int
    pixels: np.ndarray  # (height, width, 4) uint8

    @classmethod
    def blank(cls, width: int, height: int, background: Optional[Sequence[int]] = None) -> "Canvas":
        pixels = np.zeros((height, width, 4), dtype=np.uint8)
        if background is not None:
            pixels[:, :] = _rgba(background)
        return cls(width=width, height=height, pixels=pixels)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA value at column x, row y."""
        return tuple(int(v) for v in self.pixels[y, x])


def _rgba(color: Sequence[int]) -> Tuple[int, int, int, int]:
    if len(color) == 3:
        return (int(color[0]), int(color[1]), int(color[2]), 255)
    return tuple(int(c) for c in color[:4])


@dataclass
class _Faces:
    """Visible faces of a grid as parallel arrays."""

    xs: np.ndarray
    ys: np.ndarray
    zs: np.ndarray
    categories: np.ndarray
    faces: np.ndarray  # index into _FACES

    def __len__(self) -> int:
        return len(self.xs)

    def select(self, keep: np.ndarray) -> "_Faces":
        return _Faces(self.xs[keep], self.ys[keep], self.zs[keep], self.categories[keep], self.faces[keep])


class IsoCompositor:
    """Renders BlockGrids with a fixed tile catalog."""

    def __init__(self, catalog: TileCatalog, background=_DEFAULT, margin: int = 0, variant_seed: int = 0):
        """
        Args:
            catalog: Tiles to draw with
            background: RGB(A) fill colour, None for a transparent canvas;
                defaults to ``settings.background_color``
            margin: Extra pixels around the projected grid
            variant_seed: Seed for picking among sprite variants
        """
        self.catalog = catalog
        self.background = settings.background_color if background is _DEFAULT else background
        self.margin = margin
        self.variant_seed = variant_seed

    def projection_for(self, grid: BlockGrid) -> IsoProjection:
        return IsoProjection(
            self.catalog.tile_width, self.catalog.tile_height, grid.length, grid.height, self.margin
        )

    def _collect(self, grid: BlockGrid) -> _Faces:
        masks = grid.exposure()
        parts = []
        for code, mask in enumerate(masks):
            xs, ys, zs = np.nonzero(mask)
            parts.append((xs, ys, zs, np.full(len(xs), code, dtype=np.int64)))

        xs = np.concatenate([p[0] for p in parts])
        ys = np.concatenate([p[1] for p in parts])
        zs = np.concatenate([p[2] for p in parts])
        faces = np.concatenate([p[3] for p in parts])
        categories = grid.blocks[xs, ys, zs].astype(np.int64)
        return _Faces(xs, ys, zs, categories, faces)

    def _check_tiles(self, collected: _Faces) -> _Faces:
        """
        Fail before painting if any visible face has no tile.

        Side faces of top-only categories are dropped rather than reported.
        """
        keep = np.ones(len(collected), dtype=bool)
        pairs = set(zip(collected.categories.tolist(), collected.faces.tolist()))
        for code, face_code in sorted(pairs):
            category = BlockCategory(code)
            face = _FACES[face_code]
            if self.catalog.has_tile(category, face):
                continue
            if face is not Face.TOP and self.catalog.top_only(category):
                keep &= ~((collected.categories == code) & (collected.faces == face_code))
                continue
            raise RenderError(category, face)
        return collected.select(keep)

    def visible_faces(self, grid: BlockGrid) -> List[Tuple[int, int, int, BlockCategory, Face]]:
        """Faces that ``render`` would paint, in painting order."""
        collected = self._check_tiles(self._collect(grid))
        order = IsoProjection.draw_order(collected.xs, collected.ys, collected.zs)
        return [
            (
                int(collected.xs[i]),
                int(collected.ys[i]),
                int(collected.zs[i]),
                BlockCategory(int(collected.categories[i])),
                _FACES[int(collected.faces[i])],
            )
            for i in order
        ]

    def render(self, grid: BlockGrid) -> Canvas:
        """
        Render ``grid`` to a new canvas.

        Raises:
            RenderError: a visible face has no tile in the catalog
        """
        projection = self.projection_for(grid)
        collected = self._check_tiles(self._collect(grid))
        order = IsoProjection.draw_order(collected.xs, collected.ys, collected.zs)

        logger.info(
            "Rendering map",
            length=grid.length,
            height=grid.height,
            faces=len(collected),
            canvas_width=projection.canvas_width,
            canvas_height=projection.canvas_height,
        )

        canvas = Canvas.blank(projection.canvas_width, projection.canvas_height, self.background)
        premultiplied, alpha = _to_float(canvas.pixels)
        lefts, tops = projection.tile_origin(collected.xs, collected.ys, collected.zs)

        for i in order:
            x, y, z = int(collected.xs[i]), int(collected.ys[i]), int(collected.zs[i])
            category = BlockCategory(int(collected.categories[i]))
            face = _FACES[int(collected.faces[i])]
            variants = self.catalog.variants(category, face)
            sprite = variants[choose_index(self.variant_seed, len(variants), x, y, z)]
            dx, dy = sprite.offset
            _blend(premultiplied, alpha, sprite, int(lefts[i]) + dx, int(tops[i]) + dy)

        canvas.pixels = _to_uint8(premultiplied, alpha)
        logger.info("Map rendered", width=canvas.width, height=canvas.height)
        return canvas


def _to_float(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    alpha = pixels[:, :, 3:4].astype(np.float32) / np.float32(255.0)
    return pixels[:, :, :3].astype(np.float32) * alpha, alpha


def _to_uint8(premultiplied: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    out = np.zeros(premultiplied.shape[:2] + (4,), dtype=np.uint8)
    covered = alpha[:, :, 0] > 0
    rgb = np.zeros_like(premultiplied)
    np.divide(premultiplied, alpha, out=rgb, where=alpha > 0)
    out[:, :, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    out[:, :, 3] = np.clip(np.rint(alpha[:, :, 0] * 255.0), 0, 255).astype(np.uint8)
    out[~covered, :3] = 0
    return out


def _blend(premultiplied: np.ndarray, alpha: np.ndarray, sprite: Sprite, left: int, top: int) -> None:
    """Composite ``sprite`` over the buffers with its top-left corner at (left, top)."""
    height, width = alpha.shape[:2]
    x0, y0 = max(left, 0), max(top, 0)
    x1, y1 = min(left + sprite.width, width), min(top + sprite.height, height)
    if x0 >= x1 or y0 >= y1:
        return

    src_alpha = sprite.alpha[y0 - top : y1 - top, x0 - left : x1 - left]
    src_color = sprite.premultiplied[y0 - top : y1 - top, x0 - left : x1 - left]
    keep = 1.0 - src_alpha

    dst_color = premultiplied[y0:y1, x0:x1]
    dst_alpha = alpha[y0:y1, x0:x1]
    dst_color *= keep
    dst_color += src_color
    dst_alpha *= keep
    dst_alpha += src_alpha


def render_map(grid: BlockGrid, catalog: TileCatalog, **options) -> Canvas:
    """Convenience wrapper: ``IsoCompositor(catalog, **options).render(grid)``."""
    return IsoCompositor(catalog, **options).render(grid)
