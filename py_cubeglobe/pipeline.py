"""Generate-then-render facade used by the examples and integration tests."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

import structlog

from .core.block_grid import BlockGrid
from .core.terrain_generator import TerrainConfig, TerrainGenerator
from .render.assets import save_canvas
from .render.compositor import Canvas, IsoCompositor
from .render.tile_catalog import TileCatalog

logger = structlog.get_logger()


@dataclass
class RenderResult:
    """Outputs of one generate-and-render run."""

    grid: BlockGrid
    canvas: Canvas


def generate_and_render(config: TerrainConfig, catalog: TileCatalog, **options) -> RenderResult:
    """
    Generate terrain for ``config`` and render it with ``catalog``.

    The catalog is checked against the generated grid before rendering, so a
    missing tile surfaces as a ConfigurationError naming the category.
    Keyword options are passed to IsoCompositor.
    """
    grid = TerrainGenerator(config).generate()
    catalog.validate_for(grid)
    canvas = IsoCompositor(catalog, **options).render(grid)
    logger.info("Pipeline complete", seed=config.seed, width=canvas.width, height=canvas.height)
    return RenderResult(grid=grid, canvas=canvas)


def render_to_file(
    config: TerrainConfig, catalog: TileCatalog, path: Union[str, Path], **options
) -> Path:
    """Generate, render and encode to ``path``; returns the written path."""
    result = generate_and_render(config, catalog, **options)
    return save_canvas(result.canvas, path)
