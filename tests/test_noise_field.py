"""
Tests for the gradient noise field.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from py_cubeglobe.core.noise_field import NoiseField, perlin_2d
from py_cubeglobe.errors import ConfigurationError


class TestNoiseField:
    """Test determinism, range and continuity of the noise field."""

    @pytest.fixture
    def coords(self):
        xs, ys = np.meshgrid(np.linspace(-20.0, 20.0, 80), np.linspace(-13.3, 27.1, 80), indexing="ij")
        return xs, ys

    def test_same_seed_same_values(self, coords):
        """Test that equal seeds give equal noise."""
        xs, ys = coords
        first = NoiseField(42).sample_grid(xs, ys)
        second = NoiseField(42).sample_grid(xs, ys)

        assert np.array_equal(first, second)
        assert NoiseField(42).sample(1.3, 2.7) == NoiseField(42).sample(1.3, 2.7)

    def test_different_seeds_differ(self, coords):
        """Test that different seeds give different noise."""
        xs, ys = coords
        assert not np.array_equal(NoiseField(1).sample_grid(xs, ys), NoiseField(2).sample_grid(xs, ys))

    def test_values_in_range(self, coords):
        """Test that noise stays within [-1, 1]."""
        xs, ys = coords
        for seed in (0, 7, -3, 2**40):
            values = NoiseField(seed).sample_grid(xs, ys)
            assert values.shape == xs.shape
            assert np.all(values >= -1.0)
            assert np.all(values <= 1.0)

    def test_not_constant(self, coords):
        """Test that noise varies across the plane."""
        xs, ys = coords
        values = NoiseField(5).sample_grid(xs, ys)
        assert values.std() > 0.01

    def test_sample_matches_grid(self, coords):
        """Test that point samples match the grid sampler."""
        field = NoiseField(99)
        xs, ys = coords
        grid = field.sample_grid(xs, ys)

        for i, j in [(0, 0), (10, 33), (79, 5), (40, 40)]:
            assert field.sample(xs[i, j], ys[i, j]) == pytest.approx(grid[i, j], abs=1e-12)

    def test_single_octave_zero_on_lattice(self):
        """Test that one octave is zero on lattice points."""
        field = NoiseField(123, octaves=1)
        for x, y in [(0.0, 0.0), (3.0, 5.0), (-7.0, 2.0)]:
            assert field.sample(x, y) == 0.0

    def test_continuity(self):
        """Test that nearby points have nearby values."""
        field = NoiseField(11)
        for x, y in [(0.25, 0.75), (4.9, -1.2), (10.5, 10.5)]:
            assert abs(field.sample(x, y) - field.sample(x + 1e-6, y)) < 1e-3
            assert abs(field.sample(x, y) - field.sample(x, y + 1e-6)) < 1e-3

    def test_broadcasting(self):
        """Test sampling with broadcast coordinate arrays."""
        field = NoiseField(3)
        xs = np.linspace(0.0, 4.0, 5)[:, None]
        ys = np.linspace(0.0, 2.0, 3)[None, :]
        assert field.sample_grid(xs, ys).shape == (5, 3)

    def test_concurrent_sampling(self, coords):
        """Test sampling one field from several threads."""
        field = NoiseField(8)
        xs, ys = coords
        expected = field.sample_grid(xs, ys)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: field.sample_grid(xs, ys), range(8)))

        for result in results:
            assert np.array_equal(result, expected)

    @pytest.mark.parametrize(
        "kwargs, field_name",
        [
            ({"octaves": 0}, "octaves"),
            ({"octaves": 2.5}, "octaves"),
            ({"persistence": 0.0}, "persistence"),
            ({"lacunarity": -1.0}, "lacunarity"),
        ],
    )
    def test_invalid_parameters(self, kwargs, field_name):
        """Test rejection of invalid noise parameters."""
        with pytest.raises(ConfigurationError) as exc_info:
            NoiseField(0, **kwargs)
        assert exc_info.value.field == field_name


class TestPerlin:
    """Test the single-octave primitive."""

    def test_bounded(self):
        """Test that single-octave noise is bounded."""
        rng = np.random.default_rng(0)
        xs = rng.uniform(-100, 100, 5000)
        ys = rng.uniform(-100, 100, 5000)
        values = perlin_2d(17, xs, ys)

        limit = np.sqrt(2.0) / 2.0 + 1e-9
        assert np.all(np.abs(values) <= limit)

    def test_depends_on_seed(self):
        """Test that single-octave noise depends on the seed."""
        xs = np.array([0.5, 1.5, 2.5])
        ys = np.array([0.5, 0.5, 0.5])
        assert not np.array_equal(perlin_2d(1, xs, ys), perlin_2d(2, xs, ys))
