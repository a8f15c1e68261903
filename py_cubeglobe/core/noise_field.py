"""
Seeded lattice gradient noise.

This module provides a stateless 2D Perlin-style noise sampler. Gradients
are not stored in a permutation table: each lattice point's gradient is
picked from a fixed set of unit vectors by hashing the lattice coordinates
together with the seed, so the field is a pure function of (seed, x, y)
and can be shared between threads freely.
"""

import math
from dataclasses import dataclass

import numpy as np

from ..errors import ConfigurationError
from ..utils.random import hash_coords

# 16 unit gradient directions, evenly spaced around the circle
_GRADIENT_COUNT = 16
_GRADIENT_X = np.array(
    [math.cos(2.0 * math.pi * i / _GRADIENT_COUNT) for i in range(_GRADIENT_COUNT)]
)
_GRADIENT_Y = np.array(
    [math.sin(2.0 * math.pi * i / _GRADIENT_COUNT) for i in range(_GRADIENT_COUNT)]
)

# Extremum of single-octave noise with unit gradients is sqrt(2) / 2
_RESCALE = math.sqrt(2.0)


def _fade(t: np.ndarray) -> np.ndarray:
    """Quintic smoothstep 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _gradient_dot(seed: int, ix: np.ndarray, iy: np.ndarray, dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
    """Dot product of the lattice gradient at (ix, iy) with the offset (dx, dy)."""
    index = (hash_coords(seed, ix, iy) % np.uint64(_GRADIENT_COUNT)).astype(np.intp)
    return _GRADIENT_X[index] * dx + _GRADIENT_Y[index] * dy


def perlin_2d(seed: int, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Single octave of 2D gradient noise.

    Args:
        seed: Octave seed
        x, y: Coordinate arrays of identical shape

    Returns:
        Noise values in [-sqrt(2)/2, sqrt(2)/2]; exactly 0 on lattice points
    """
    x0 = np.floor(x)
    y0 = np.floor(y)
    fx = x - x0
    fy = y - y0
    ix = x0.astype(np.int64)
    iy = y0.astype(np.int64)

    n00 = _gradient_dot(seed, ix, iy, fx, fy)
    n10 = _gradient_dot(seed, ix + 1, iy, fx - 1.0, fy)
    n01 = _gradient_dot(seed, ix, iy + 1, fx, fy - 1.0)
    n11 = _gradient_dot(seed, ix + 1, iy + 1, fx - 1.0, fy - 1.0)

    u = _fade(fx)
    v = _fade(fy)
    return _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v)


@dataclass(frozen=True)
class NoiseField:
    """
    Deterministic fractal gradient noise sampler.

    Octave ``i`` is sampled at ``lacunarity ** i`` times the input frequency
    with weight ``persistence ** i`` and seed ``seed + i``. Frequency of the
    base octave is applied by the caller, which scales coordinates before
    sampling.
    """

    seed: int
    octaves: int = 6
    persistence: float = 0.5
    lacunarity: float = 2.0

    def __post_init__(self):
        if isinstance(self.octaves, bool) or not isinstance(self.octaves, int) or self.octaves < 1:
            raise ConfigurationError("must be an integer >= 1", field="octaves")
        if not self.persistence > 0:
            raise ConfigurationError("must be > 0", field="persistence")
        if not self.lacunarity > 0:
            raise ConfigurationError("must be > 0", field="lacunarity")

    def sample(self, x: float, y: float) -> float:
        """Sample the field at a single point; result is in [-1, 1]."""
        return float(self.sample_grid(x, y))

    def sample_grid(self, xs, ys) -> np.ndarray:
        """
        Sample the field at many points at once.

        Args:
            xs, ys: Coordinates, any shapes that broadcast together

        Returns:
            Array of noise values in [-1, 1] with the broadcast shape
        """
        xs, ys = np.broadcast_arrays(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )

        total = np.zeros(xs.shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        weight = 0.0
        for octave in range(self.octaves):
            total += amplitude * perlin_2d(self.seed + octave, xs * frequency, ys * frequency)
            weight += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        return np.clip(total / weight * _RESCALE, -1.0, 1.0)
