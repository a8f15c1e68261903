"""Flat test terrain: a predictable grid for exercising the renderer."""

import numpy as np
import structlog

from .block_grid import BlockCategory, BlockGrid

logger = structlog.get_logger()


class FlatTerrainGenerator:
    """
    Produces a mostly flat cube of rock.

    The lower half of the cube is solid; the layer right above it has a
    smaller square plateau inset two blocks from every edge. The minimum
    size is 6, smaller lengths are pegged to 6.
    """

    MIN_LENGTH = 6

    def __init__(self, length: int = MIN_LENGTH, category: BlockCategory = BlockCategory.ROCK):
        self.length = max(int(length), self.MIN_LENGTH)
        self.category = BlockCategory.parse(category)

    def generate(self) -> BlockGrid:
        dim = self.length
        halfway = dim // 2

        blocks = np.zeros((dim, dim, dim), dtype=np.uint8)
        blocks[:, :, :halfway] = self.category
        blocks[2 : dim - 2, 2 : dim - 2, halfway] = self.category

        logger.debug("Flat terrain generated", length=dim, halfway=halfway)
        return BlockGrid(blocks)
