"""
Matplotlib rendering of grids and sample points.

These helpers only draw; they never modify their inputs.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from src.raster.data_loading import SamplePoints
from src.raster.grid import RasterGrid

logger = logging.getLogger(__name__)


def plot_grid(
    grid: RasterGrid,
    ax=None,
    title: Optional[str] = None,
    cmap: str = "viridis",
    label: Optional[str] = None,
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
):
    """
    Draw a grid in map coordinates with a colorbar.

    No-data cells are left transparent.

    Returns:
        The matplotlib Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    xmin, ymin, xmax, ymax = grid.extent
    image = ax.imshow(
        np.ma.masked_invalid(grid.data),
        extent=(xmin, xmax, ymin, ymax),
        origin="upper",
        cmap=cmap,
        vmin=vmin,
        vmax=vmax,
        interpolation="nearest",
    )
    plt.colorbar(image, ax=ax, label=label or grid.name)
    ax.set_title(title or grid.name)
    ax.set_aspect("equal")
    return ax


def plot_points(
    samples: SamplePoints,
    attribute: Optional[str] = None,
    values: Optional[np.ndarray] = None,
    ax=None,
    title: Optional[str] = None,
    cmap: str = "viridis",
    size: float = 20.0,
):
    """
    Scatter sample points coloured by an attribute or by explicit values.

    Categorical attributes are coloured by category with a legend.

    Returns:
        The matplotlib Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    if values is None and attribute is not None:
        values = samples[attribute]

    if values is None:
        ax.scatter(samples.x, samples.y, s=size, c="black")
    elif np.asarray(values).dtype == object:
        categories = sorted({str(v) for v in values})
        colors = plt.get_cmap("tab20", max(len(categories), 1))
        for i, category in enumerate(categories):
            selected = np.array([str(v) == category for v in values])
            ax.scatter(samples.x[selected], samples.y[selected], s=size, color=colors(i), label=category)
        ax.legend(title=attribute, fontsize="small", loc="best")
    else:
        points = ax.scatter(samples.x, samples.y, s=size, c=np.asarray(values, dtype=float), cmap=cmap)
        plt.colorbar(points, ax=ax, label=attribute or "value")

    ax.set_title(title or attribute or "samples")
    ax.set_aspect("equal")
    return ax


def save_suitability_figure(
    grid: RasterGrid,
    samples: SamplePoints,
    scores: np.ndarray,
    output_path: Union[str, Path],
    dpi: int = 150,
) -> Path:
    """
    Save a two-panel figure: point scores and the interpolated surface.

    Args:
        grid: Interpolated (and masked) suitability grid
        samples: Sample points
        scores: Suitability score per sample
        output_path: PNG file to write
        dpi: Output resolution

    Returns:
        The output path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(1, 2, figsize=(14, 7))
    plot_points(samples, attribute="suitability", values=scores, ax=axes[0], title="Sample suitability")
    plot_grid(grid, ax=axes[1], title="Interpolated suitability", label="suitability", vmin=0.0, vmax=1.0)

    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"✓ Suitability figure: {output_path}")
    return output_path
