"""
Tests for sprite sheet loading and image output.
"""

import json

import numpy as np
import pytest
from PIL import Image

from py_cubeglobe.core.block_grid import BlockCategory, BlockGrid, Face
from py_cubeglobe.errors import ConfigurationError
from py_cubeglobe.render.assets import (
    build_catalog,
    canvas_to_image,
    load_catalog,
    load_sheet,
    load_tile_config,
    parse_tile_config,
    save_canvas,
)
from py_cubeglobe.render.compositor import Canvas, IsoCompositor
from py_cubeglobe.render.sprites import face_masks

ROCK_COLOR = (120, 120, 120, 255)
WATER_COLOR = (40, 90, 200, 128)
GRASS_COLOR = (60, 170, 60, 255)

TOML_CONFIG = """
width = 24
height = 24

[[files]]
filename = "cubes.png"

[[files.tiles]]
kind = "Rock"

[[files.tiles]]
kind = "Water"
x = 24

[[files.tiles]]
kind = "Grass"
face = "top"
y = 24
dx = 2
"""


def cube_tile(color):
    pixels = np.zeros((24, 24, 4), dtype=np.uint8)
    for mask in face_masks(24, 24).values():
        pixels[mask] = color
    return pixels


def write_sheet(path):
    sheet = np.zeros((48, 48, 4), dtype=np.uint8)
    sheet[0:24, 0:24] = cube_tile(ROCK_COLOR)
    sheet[0:24, 24:48] = cube_tile(WATER_COLOR)
    sheet[24:48, 0:24] = cube_tile(GRASS_COLOR)
    Image.fromarray(sheet).save(path)


class TestTileConfig:
    """Test configuration parsing."""

    def test_parse(self):
        """Test parsing a tile configuration mapping."""
        config = parse_tile_config({"width": 32, "height": 40, "files": [{"filename": "a.png", "tiles": [{"kind": "Soil"}]}]})
        assert config.width == 32
        assert config.base_path == "."
        assert config.files[0].tiles[0].x == 0
        assert config.files[0].tiles[0].face is None

    def test_missing_width(self):
        """Test that a configuration without a width is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_tile_config({"height": 24})
        assert exc_info.value.field == "width"

    def test_negative_offset(self):
        """Test that negative tile offsets are rejected."""
        with pytest.raises(ConfigurationError):
            parse_tile_config({"width": 24, "height": 24, "files": [{"filename": "a.png", "tiles": [{"kind": "Soil", "x": -1}]}]})

    def test_load_toml(self, tmp_path):
        """Test loading a TOML tile configuration."""
        path = tmp_path / "tiles.toml"
        path.write_text(TOML_CONFIG)
        config = load_tile_config(path)
        assert [tile.kind for tile in config.files[0].tiles] == ["Rock", "Water", "Grass"]

    def test_bad_toml(self, tmp_path):
        """Test that malformed TOML raises ConfigurationError."""
        path = tmp_path / "tiles.toml"
        path.write_text("width = = 24")
        with pytest.raises(ConfigurationError) as exc_info:
            load_tile_config(path)
        assert exc_info.value.field == "tiles_config"

    def test_missing_file(self, tmp_path):
        """Test that a missing configuration file is reported."""
        with pytest.raises(ConfigurationError):
            load_tile_config(tmp_path / "nope.toml")


class TestLoadCatalog:
    """Test building catalogs from sprite sheets."""

    @pytest.fixture
    def config_path(self, tmp_path):
        write_sheet(tmp_path / "cubes.png")
        path = tmp_path / "tiles.toml"
        path.write_text(TOML_CONFIG)
        return path

    def test_load(self, config_path):
        """Test loading a catalog from a sprite sheet."""
        catalog = load_catalog(config_path, required=[BlockCategory.ROCK, BlockCategory.WATER])

        assert catalog.categories == (BlockCategory.WATER, BlockCategory.ROCK, BlockCategory.GRASS)
        assert catalog.lookup(BlockCategory.ROCK, Face.TOP).pixels[6, 12].tolist() == list(ROCK_COLOR)
        assert catalog.lookup(BlockCategory.WATER, Face.SIDE_A).pixels[18, 18].tolist() == list(WATER_COLOR)
        assert catalog.lookup(BlockCategory.WATER, Face.TOP).pixels[18, 18, 3] == 0

    def test_face_tile(self, config_path):
        """Test single-face tiles from a sheet."""
        catalog = load_catalog(config_path, required=())
        grass = catalog.lookup(BlockCategory.GRASS, Face.TOP)

        assert catalog.top_only(BlockCategory.GRASS)
        assert grass.offset == (2, 0)
        # Face tiles are used as-is, not masked to the top diamond
        assert grass.pixels[18, 18].tolist() == list(GRASS_COLOR)

    def test_default_requires_every_category(self, config_path):
        """Test that every solid category is required by default."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_catalog(config_path)
        assert "SOIL" in str(exc_info.value)

    def test_json_with_base_path(self, tmp_path):
        """Test a JSON configuration with sheets under a base path."""
        (tmp_path / "sheets").mkdir()
        write_sheet(tmp_path / "sheets" / "cubes.png")
        path = tmp_path / "tiles.json"
        path.write_text(
            json.dumps(
                {
                    "width": 24,
                    "height": 24,
                    "base_path": "sheets",
                    "files": [{"filename": "cubes.png", "tiles": [{"kind": "Rock"}, {"kind": "Soil", "x": 24}]}],
                }
            )
        )
        catalog = load_catalog(path, required=[BlockCategory.ROCK, BlockCategory.SOIL])
        assert catalog.lookup(BlockCategory.SOIL, Face.TOP).pixels[6, 12].tolist() == list(WATER_COLOR)

    def test_missing_sheet(self, tmp_path):
        """Test that a missing sprite sheet is reported."""
        config = parse_tile_config({"width": 24, "height": 24, "files": [{"filename": "missing.png"}]})
        with pytest.raises(ConfigurationError) as exc_info:
            build_catalog(config, base_dir=tmp_path, required=())
        assert exc_info.value.field == "filename"

    def test_tile_outside_sheet(self, tmp_path):
        """Test that a tile beyond the sheet bounds is rejected."""
        write_sheet(tmp_path / "cubes.png")
        config = parse_tile_config(
            {"width": 24, "height": 24, "files": [{"filename": "cubes.png", "tiles": [{"kind": "Rock", "x": 40}]}]}
        )
        with pytest.raises(ConfigurationError):
            build_catalog(config, base_dir=tmp_path, required=())

    def test_unknown_kind(self, tmp_path):
        """Test that an unknown block kind is rejected."""
        write_sheet(tmp_path / "cubes.png")
        config = parse_tile_config(
            {"width": 24, "height": 24, "files": [{"filename": "cubes.png", "tiles": [{"kind": "Lava"}]}]}
        )
        with pytest.raises(ConfigurationError) as exc_info:
            build_catalog(config, base_dir=tmp_path, required=())
        assert exc_info.value.field == "kind"

    def test_load_sheet_rgba(self, tmp_path):
        """Test that RGB sheets are converted to RGBA."""
        path = tmp_path / "rgb.png"
        Image.new("RGB", (5, 3), (1, 2, 3)).save(path)
        sheet = load_sheet(path)
        assert sheet.shape == (3, 5, 4)
        assert sheet[0, 0].tolist() == [1, 2, 3, 255]

    def test_load_sheet_not_an_image(self, tmp_path):
        """Test that a corrupt sheet raises ConfigurationError."""
        path = tmp_path / "broken.png"
        path.write_bytes(b"not a png")
        with pytest.raises(ConfigurationError):
            load_sheet(path)


class TestSaveCanvas:
    """Test encoding rendered canvases."""

    def test_png_round_trip(self, tmp_path, catalog):
        """Test saving a canvas as PNG and reading it back."""
        canvas = IsoCompositor(catalog, background=None).render(BlockGrid.from_columns([[[BlockCategory.ROCK]]]))
        path = save_canvas(canvas, tmp_path / "out" / "map.png")

        assert path.exists()
        with Image.open(path) as img:
            assert img.mode == "RGBA"
            assert np.array_equal(np.array(img), canvas.pixels)

    def test_bmp_flattened(self, tmp_path):
        """Test that BMP output drops the alpha channel."""
        canvas = Canvas.blank(4, 4)
        path = save_canvas(canvas, tmp_path / "map.bmp", background=(10, 20, 30))

        with Image.open(path) as img:
            assert img.mode == "RGB"
            assert img.getpixel((0, 0)) == (10, 20, 30)

    def test_canvas_to_image(self):
        """Test converting a canvas to a Pillow image."""
        image = canvas_to_image(Canvas.blank(5, 3, (1, 2, 3, 4)))
        assert image.size == (5, 3)
        assert image.mode == "RGBA"
        assert image.getpixel((4, 2)) == (1, 2, 3, 4)
