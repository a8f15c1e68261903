"""
Tests for the isometric projection.
"""

import numpy as np
import pytest

from py_cubeglobe.errors import ConfigurationError
from py_cubeglobe.render.projection import IsoProjection


class TestIsoProjection:
    """Test canvas sizing, tile placement and draw order."""

    @pytest.fixture
    def projection(self):
        return IsoProjection(tile_width=24, tile_height=24, length=2, depth=3)

    def test_dimensions(self, projection):
        """Test derived tile and canvas dimensions."""
        assert projection.half_width == 12
        assert projection.quarter_width == 6
        assert projection.side_height == 12
        assert projection.canvas_width == 48
        assert projection.canvas_height == 60
        assert projection.origin == (12, 24)

    def test_axis_steps(self, projection):
        """Test the screen step along each grid axis."""
        assert projection.tile_origin(0, 0, 0) == (12, 24)
        assert projection.tile_origin(1, 0, 0) == (24, 30)
        assert projection.tile_origin(0, 1, 0) == (0, 30)
        assert projection.tile_origin(0, 0, 1) == (12, 12)

    def test_tiles_fit_canvas(self, projection):
        """Test that every tile lies inside the canvas."""
        xs, ys, zs = np.meshgrid(np.arange(2), np.arange(2), np.arange(3), indexing="ij")
        lefts, tops = projection.tile_origin(xs, ys, zs)

        assert lefts.min() == 0
        assert tops.min() == 0
        assert lefts.max() + projection.tile_width == projection.canvas_width
        assert tops.max() + projection.tile_height == projection.canvas_height

    def test_margin(self):
        """Test that the margin shifts and grows the canvas."""
        projection = IsoProjection(24, 24, 2, 3, margin=5)
        assert projection.canvas_width == 58
        assert projection.canvas_height == 70
        assert projection.origin == (17, 29)

    def test_single_block(self):
        """Test the canvas for a single block."""
        projection = IsoProjection(32, 40, 1, 1)
        assert (projection.canvas_width, projection.canvas_height) == (32, 40)
        assert projection.origin == (0, 0)

    def test_depth_key(self):
        """Test the painter's order key."""
        assert IsoProjection.depth_key(1, 2, 3) == (3, 3, 1)
        assert IsoProjection.depth_key(0, 0, 5) < IsoProjection.depth_key(1, 0, 0)
        assert IsoProjection.depth_key(1, 0, 0) < IsoProjection.depth_key(0, 1, 1)

    def test_draw_order(self):
        """Test sorting blocks into draw order."""
        xs = np.array([1, 0, 0, 0])
        ys = np.array([0, 0, 1, 0])
        zs = np.array([0, 1, 0, 0])
        assert IsoProjection.draw_order(xs, ys, zs).tolist() == [3, 1, 2, 0]

    def test_draw_order_matches_depth_key(self):
        """Test that draw order agrees with depth keys."""
        rng = np.random.default_rng(1)
        xs, ys, zs = (rng.integers(0, 6, 50) for _ in range(3))
        order = IsoProjection.draw_order(xs, ys, zs)
        keys = [IsoProjection.depth_key(int(xs[i]), int(ys[i]), int(zs[i])) for i in order]
        assert keys == sorted(keys)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tile_width": 22},
            {"tile_height": 8},
            {"length": 0},
            {"depth": 0},
            {"margin": -1},
        ],
    )
    def test_invalid(self, kwargs):
        """Test rejection of invalid projection parameters."""
        values = dict(tile_width=24, tile_height=24, length=2, depth=2)
        values.update(kwargs)
        with pytest.raises(ConfigurationError):
            IsoProjection(**values)
