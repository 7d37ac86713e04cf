"""
Masking of grids by a reference raster's valid-cell footprint.
"""

import logging
from typing import Optional

import numpy as np

from src.raster.grid import RasterGrid, check_aligned

logger = logging.getLogger(__name__)


def mask_grid(grid: RasterGrid, reference: RasterGrid, name: Optional[str] = None) -> RasterGrid:
    """
    Set cells outside a reference raster's valid footprint to no data.

    Cells where the reference holds a value are left unchanged. Masking an
    already-masked grid with the same reference returns an identical grid.

    Args:
        grid: Grid to mask
        reference: Grid whose finite cells define the footprint
        name: Name of the output layer (default: grid's name)

    Returns:
        New masked RasterGrid

    Raises:
        GridAlignmentError: If the grids differ in shape or transform
    """
    check_aligned(reference, grid)

    masked = np.where(reference.valid_mask, grid.data, np.nan)

    removed = int(np.count_nonzero(grid.valid_mask & ~reference.valid_mask))
    logger.info(
        f"Masked '{grid.name or 'grid'}' by '{reference.name or 'reference'}': "
        f"{removed} cell(s) set to no data, {int(np.count_nonzero(np.isfinite(masked)))} kept"
    )

    return grid.with_data(masked, name=name)


def footprint(grid: RasterGrid) -> RasterGrid:
    """
    Valid-cell footprint of a grid as a 1.0 / no-data raster.

    Useful for storing a reference mask without its values.
    """
    return grid.with_data(np.where(grid.valid_mask, 1.0, np.nan), name=f"{grid.name}_footprint")
