"""
Sprite sheet loading and image output.

Tile sheet configuration files (TOML or JSON) name one or more sprite
sheets and the tiles cut from them::

    # Width and height of an individual tile in pixels
    width = 24
    height = 24
    base_path = "assets"

    [[files]]
    filename = "cubes.png"

        # Offsets are optional and default to 0, 0 (upper left)
        [[files.tiles]]
        kind = "Rock"

        [[files.tiles]]
        kind = "Water"
        x = 25

        # A tile with a face is used for that face only; without one the
        # tile is a whole cube and gets split into its three faces
        [[files.tiles]]
        kind = "Grass"
        face = "top"
        y = 25

``dx`` / ``dy`` shift a tile when it is drawn.
"""

import json
import tomllib
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import structlog
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, Field, ValidationError

from ..config import settings
from ..core.block_grid import SOLID_CATEGORIES, BlockCategory, Face
from ..errors import ConfigurationError
from .compositor import Canvas
from .sprites import Sprite, split_cube_tile
from .tile_catalog import TileCatalog

logger = structlog.get_logger()

PathLike = Union[str, Path]


class TileDef(BaseModel):
    """One tile cut out of a sprite sheet."""

    kind: str = Field(description="Block category the tile draws")
    face: Optional[str] = Field(default=None, description="Face drawn; omit for a whole-cube tile")
    x: int = Field(default=0, ge=0, description="Left edge of the tile in the sheet")
    y: int = Field(default=0, ge=0, description="Top edge of the tile in the sheet")
    dx: int = Field(default=0, description="Horizontal render offset")
    dy: int = Field(default=0, description="Vertical render offset")


class SheetFile(BaseModel):
    """A sprite sheet and the tiles it holds."""

    filename: str
    tiles: List[TileDef] = Field(default_factory=list)


class TilesConfig(BaseModel):
    """Deserialized tile sheet configuration."""

    width: int = Field(gt=0, description="Tile width in pixels")
    height: int = Field(gt=0, description="Tile height in pixels")
    base_path: str = Field(default=".", description="Directory sheets are resolved against")
    files: List[SheetFile] = Field(default_factory=list)


def parse_tile_config(data: dict) -> TilesConfig:
    """Validate a decoded configuration mapping."""
    try:
        return TilesConfig.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "config"
        raise ConfigurationError(first["msg"], field=location) from exc


def load_tile_config(path: PathLike) -> TilesConfig:
    """Read a ``.toml`` or ``.json`` tile sheet configuration."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"cannot read {path}: {exc}", field="tiles_config") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw.decode("utf-8"))
        else:
            data = tomllib.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"cannot parse {path}: {exc}", field="tiles_config") from exc

    return parse_tile_config(data)


def load_sheet(path: PathLike) -> np.ndarray:
    """Decode an image file to an RGBA uint8 array."""
    path = Path(path)
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as exc:
        raise ConfigurationError(f"cannot load sprite sheet {path}: {exc}", field="filename") from exc


def _cut(sheet: np.ndarray, tile: TileDef, width: int, height: int, filename: str) -> np.ndarray:
    rows, cols = sheet.shape[:2]
    if tile.x + width > cols or tile.y + height > rows:
        raise ConfigurationError(
            f"tile at ({tile.x}, {tile.y}) does not fit in {filename} ({cols}x{rows})",
            field="tiles",
        )
    return sheet[tile.y : tile.y + height, tile.x : tile.x + width]


def build_catalog(
    config: TilesConfig,
    base_dir: Optional[PathLike] = None,
    required: Optional[Iterable[BlockCategory]] = None,
) -> TileCatalog:
    """
    Load every sheet named in ``config`` and build a TileCatalog.

    Args:
        config: Parsed tile sheet configuration
        base_dir: Directory ``config.base_path`` is relative to
        required: Categories that must have tiles; defaults to every solid
            category
    """
    root = Path(base_dir or ".") / config.base_path
    entries: Dict[Tuple[BlockCategory, Face], List[Sprite]] = {}

    for sheet_file in config.files:
        sheet = load_sheet(root / sheet_file.filename)
        for tile in sheet_file.tiles:
            category = BlockCategory.parse(tile.kind)
            pixels = _cut(sheet, tile, config.width, config.height, sheet_file.filename)
            offset = (tile.dx, tile.dy)
            if tile.face is None:
                faces = split_cube_tile(pixels, config.width, config.height, offset)
            else:
                faces = {Face.parse(tile.face): Sprite(np.ascontiguousarray(pixels), offset)}
            for face, sprite in faces.items():
                entries.setdefault((category, face), []).append(sprite)

        logger.debug("Sprite sheet loaded", filename=sheet_file.filename, tiles=len(sheet_file.tiles))

    if required is None:
        required = SOLID_CATEGORIES
    return TileCatalog(config.width, config.height, entries, required=required)


def load_catalog(path: PathLike, required: Optional[Iterable[BlockCategory]] = None) -> TileCatalog:
    """Build a TileCatalog from a configuration file; sheets resolve next to it."""
    path = Path(path)
    config = load_tile_config(path)
    catalog = build_catalog(config, base_dir=path.parent, required=required)
    logger.info("Tile catalog loaded", path=str(path), categories=[c.name for c in catalog.categories])
    return catalog


def canvas_to_image(canvas: Canvas) -> Image.Image:
    """Wrap a canvas in a Pillow RGBA image."""
    return Image.fromarray(np.ascontiguousarray(canvas.pixels))


def save_canvas(canvas: Canvas, path: PathLike, background=None) -> Path:
    """
    Encode a canvas to an image file, format chosen by extension.

    Formats without alpha (BMP, JPEG) get the canvas flattened onto
    ``background`` (default ``settings.background_color``).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image = canvas_to_image(canvas)

    if path.suffix.lower() in (".bmp", ".jpg", ".jpeg"):
        color = tuple(background or settings.background_color)
        if len(color) == 3:
            color = color + (255,)
        flat = Image.new("RGBA", image.size, color)
        flat.alpha_composite(image)
        image = flat.convert("RGB")

    image.save(path)
    logger.info("Canvas saved", path=str(path), width=canvas.width, height=canvas.height)
    return path
