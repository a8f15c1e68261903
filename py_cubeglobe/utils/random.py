"""
Stateless coordinate hashing.

Everything random in py-cubeglobe is derived from a seed and integer
coordinates through these functions, so results never depend on call order
or on a global generator. Python's random and NumPy's random are not used.
"""

import numpy as np

_MASK64 = 0xFFFFFFFFFFFFFFFF

# Odd 64-bit multipliers used to spread each coordinate before mixing
_PRIME_X = np.uint64(0x9E3779B97F4A7C15)
_PRIME_Y = np.uint64(0xC2B2AE3D27D4EB4F)
_PRIME_Z = np.uint64(0x27D4EB2F165667C5)
_PRIME_SEED = np.uint64(0x165667B19E3779F9)

# splitmix64 finalizer constants
_MIX_1 = np.uint64(0xBF58476D1CE4E5B9)
_MIX_2 = np.uint64(0x94D049BB133111EB)


def _as_uint64(values) -> np.ndarray:
    """Convert (possibly negative) integers to uint64 with two's complement wrap."""
    arr = np.asarray(values)
    if arr.dtype == np.uint64:
        return arr
    return arr.astype(np.int64).astype(np.uint64)


def seed_to_uint64(seed: int) -> np.uint64:
    """Fold an arbitrary Python integer seed into 64 bits."""
    return np.uint64(int(seed) & _MASK64)


def mix64(h: np.ndarray) -> np.ndarray:
    """splitmix64 avalanche step, element-wise on a uint64 array."""
    h = np.asarray(h, dtype=np.uint64)
    with np.errstate(over="ignore"):
        h = h ^ (h >> np.uint64(30))
        h = h * _MIX_1
        h = h ^ (h >> np.uint64(27))
        h = h * _MIX_2
        h = h ^ (h >> np.uint64(31))
    return h


def hash_coords(seed: int, x, y, z=0) -> np.ndarray:
    """
    Hash integer lattice coordinates together with a seed.

    Args:
        seed: Any Python integer
        x, y, z: Integers or integer arrays (broadcast together)

    Returns:
        uint64 array of hashes with the broadcast shape of the inputs
    """
    ux = _as_uint64(x)
    uy = _as_uint64(y)
    uz = _as_uint64(z)
    with np.errstate(over="ignore"):
        h = (ux * _PRIME_X) ^ (uy * _PRIME_Y) ^ (uz * _PRIME_Z)
        h = h ^ (seed_to_uint64(seed) * _PRIME_SEED)
    return mix64(h)


def hash_to_unit(h: np.ndarray) -> np.ndarray:
    """Map uint64 hashes to floats in [0, 1) using the top 53 bits."""
    h = np.asarray(h, dtype=np.uint64)
    return (h >> np.uint64(11)).astype(np.float64) * (1.0 / 9007199254740992.0)


def choose_index(seed: int, count: int, x: int, y: int, z: int) -> int:
    """Deterministically pick an index in [0, count) for a block position."""
    if count <= 1:
        return 0
    return int(hash_coords(seed, x, y, z) % np.uint64(count))
