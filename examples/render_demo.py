#!/usr/bin/env python3
"""
Demo script: generate a few landscapes and render them to PNG.

Tiles come from ``CUBEGLOBE_TILES_CONFIG`` when it is set; otherwise a
flat-coloured catalog is built in code.
"""

from pathlib import Path

from py_cubeglobe.config import settings
from py_cubeglobe.core import BlockCategory, Face, TerrainConfig, TerrainGenerator, analyze_grid
from py_cubeglobe.log_config import configure_logging
from py_cubeglobe.pipeline import generate_and_render
from py_cubeglobe.render import IsoCompositor, TileCatalog, solid_face_sprites
from py_cubeglobe.render.assets import load_catalog, save_canvas

TILE_WIDTH = 24
TILE_HEIGHT = 24

COLORS = {
    BlockCategory.SOIL: (134, 96, 67),
    BlockCategory.ROCK: (125, 125, 125),
    BlockCategory.WATER: (50, 100, 220, 150),
    BlockCategory.GRASS: (95, 160, 60),
    BlockCategory.SAND: (219, 207, 163),
}


def flat_catalog():
    """Catalog of shaded single-colour cubes; water only draws its surface."""
    entries = {}
    for category, color in COLORS.items():
        faces = (Face.TOP,) if category is BlockCategory.WATER else tuple(Face)
        for face, sprite in solid_face_sprites(color, TILE_WIDTH, TILE_HEIGHT, faces=faces).items():
            entries[(category, face)] = sprite
    return TileCatalog(TILE_WIDTH, TILE_HEIGHT, entries, required=COLORS)


def main():
    """Render one map per seed, then the build-up of the first one."""
    configure_logging()
    print("py-cubeglobe Render Demo")
    print("=" * 40)

    catalog = load_catalog(settings.tiles_config) if settings.tiles_config else flat_catalog()
    output_dir = Path(settings.output_dir)

    base = TerrainConfig(
        length=32, frequency=0.06, layer_height=1, max_water_level=12, min_soil_cutoff=20, surface_cover=True
    )

    for seed in (1, 7, 42):
        config = base.with_seed(seed)
        result = generate_and_render(config, catalog)
        stats = analyze_grid(result.grid)

        path = save_canvas(result.canvas, output_dir / f"map_{seed}.png")
        print(f"\nSeed {seed}:")
        print(f"  Grid: {stats.length}x{stats.length}x{stats.height}")
        print(f"  Height range: {stats.min_height}-{stats.max_height} (mean {stats.mean_height:.1f})")
        print(f"  Flooded columns: {stats.water_columns} ({stats.water_fraction:.0%})")
        print(f"  Image: {result.canvas.width}x{result.canvas.height} -> {path}")

    # Rendering each partial grid shows blocks that end up hidden
    print("\nRendering build-up of seed 1...")
    small = base.with_seed(1)
    compositor = IsoCompositor(catalog)
    for x, grid in enumerate(TerrainGenerator(small).generate_slices()):
        if x % 8 == 7:
            save_canvas(compositor.render(grid), output_dir / f"slices_1_{x:02d}.png")
    print(f"  Written to {output_dir}")


if __name__ == "__main__":
    main()
