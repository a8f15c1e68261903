"""Error types raised by generation and rendering."""

from typing import Optional, Tuple


class CubeglobeError(Exception):
    """Base class for all py-cubeglobe errors."""


class ConfigurationError(CubeglobeError, ValueError):
    """
    Invalid generator parameters or an unusable tile catalog.

    Raised eagerly, before any generation or rendering work starts.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)


class OutOfBoundsError(CubeglobeError, IndexError):
    """A coordinate outside the dimensions of a BlockGrid."""

    def __init__(self, coord: Tuple[int, ...], shape: Tuple[int, ...]):
        self.coord = tuple(coord)
        self.shape = tuple(shape)
        super().__init__(f"Coordinate {self.coord} is outside grid of shape {self.shape}")


class RenderError(CubeglobeError):
    """A visible block face has no tile in the catalog."""

    def __init__(self, category, face, message: Optional[str] = None):
        self.category = category
        self.face = face
        name = getattr(category, "name", str(category))
        face_name = getattr(face, "value", str(face))
        super().__init__(message or f"No tile for {name} block, {face_name} face")
