#!/usr/bin/env python3
"""
Visualize generated terrain from above.

Plots the column heights and the category of every column's top block
side by side, which makes threshold tuning (water level, soil cutoff)
much quicker than looking at isometric renders.
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import ListedColormap

from py_cubeglobe.config import settings
from py_cubeglobe.core import BlockCategory, TerrainConfig, TerrainGenerator, analyze_grid

# Indexed by BlockCategory code
CATEGORY_COLORS = ["#ffffff", "#3264dc", "#86603f", "#7d7d7d", "#5fa03c", "#dbcfa3"]


def visualize_heightmap(config: TerrainConfig, output: Path):
    """Save a two-panel overview of the terrain for ``config``."""
    print(f"Generating {config.length}x{config.length} terrain with seed {config.seed}...")
    grid = TerrainGenerator(config).generate()
    stats = analyze_grid(grid)

    heights = grid.heightmap()
    top_z = np.maximum(heights - 1, 0)
    xs, ys = np.indices(heights.shape)
    tops = np.where(heights > 0, grid.blocks[xs, ys, top_z], BlockCategory.EMPTY)

    fig, (ax_height, ax_top) = plt.subplots(1, 2, figsize=(12, 6))

    image = ax_height.imshow(heights.T, origin="lower", cmap="terrain")
    ax_height.set_title("Column height")
    fig.colorbar(image, ax=ax_height, fraction=0.046)

    ax_top.imshow(
        tops.T,
        origin="lower",
        cmap=ListedColormap(CATEGORY_COLORS),
        vmin=0,
        vmax=len(CATEGORY_COLORS) - 1,
        interpolation="nearest",
    )
    ax_top.set_title(f"Surface ({stats.water_fraction:.0%} water, {stats.rock_fraction:.0%} rock)")

    for ax in (ax_height, ax_top):
        ax.set_xlabel("x")
        ax.set_ylabel("y")

    fig.suptitle(
        f"seed={config.seed} frequency={config.frequency} "
        f"water={config.max_water_level} soil cutoff={config.min_soil_cutoff}"
    )
    fig.tight_layout()
    output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output, dpi=100)
    plt.close(fig)
    print(f"Saved to {output}")


def main():
    # Map size and seed follow CUBEGLOBE_* settings; thresholds suit a layer height of 1
    config = TerrainConfig.from_settings(settings, layer_height=1, max_water_level=24, min_soil_cutoff=40)
    visualize_heightmap(config, Path(settings.output_dir) / f"heightmap_{config.seed}.png")


if __name__ == "__main__":
    main()
