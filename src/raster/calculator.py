"""
Raster calculator operations on aligned grids.

Cell-wise arithmetic, comparison, boolean logic and reclassification.
All operations require grids with identical shape and transform and
propagate no data: a cell that is no data in any input is no data in the
output.

Boolean rasters use 1.0 for True and 0.0 for False.
"""

import logging
import operator
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from src.raster.grid import RasterGrid, check_aligned
from src.scoring.transforms import normalize_by_max

logger = logging.getLogger(__name__)

COMPARISONS = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}


def _nodata_union(*grids: RasterGrid) -> np.ndarray:
    """Boolean array: True where any grid has no data."""
    missing = np.zeros(grids[0].shape, dtype=bool)
    for grid in grids:
        missing |= ~grid.valid_mask
    return missing


def raster_calc(func: Callable[..., np.ndarray], *grids: RasterGrid, name: str = "calc") -> RasterGrid:
    """
    Apply a function cell-wise to one or more aligned grids.

    Args:
        func: Function taking one array per grid and returning an array of
              the same shape (e.g. lambda a, b: a * b)
        *grids: Input grids
        name: Name of the output layer

    Returns:
        RasterGrid of func's result, no data wherever any input is no data

    Example:
        >>> total = raster_calc(lambda a, b: a + b, lead, zinc)
    """
    if not grids:
        raise ValueError("raster_calc needs at least one grid")
    check_aligned(*grids)

    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.asarray(func(*(g.data for g in grids)), dtype=float)

    if result.shape != grids[0].shape:
        raise ValueError(f"Function returned shape {result.shape}, expected {grids[0].shape}")

    result = np.where(_nodata_union(*grids), np.nan, result)
    # Division by zero and similar leave non-finite cells; treat them as no data
    result[~np.isfinite(result)] = np.nan
    return grids[0].with_data(result, name=name)


def compare(grid: RasterGrid, op: str, value: float, name: Optional[str] = None) -> RasterGrid:
    """
    Boolean raster of a comparison against a constant.

    Args:
        grid: Input grid
        op: One of "<", "<=", ">", ">=", "==", "!="
        value: Constant to compare against

    Returns:
        1.0 where the comparison holds, 0.0 elsewhere, no data preserved
    """
    if op not in COMPARISONS:
        raise ValueError(f"Unknown comparison '{op}'. Available: {list(COMPARISONS)}")

    with np.errstate(invalid="ignore"):
        result = COMPARISONS[op](grid.data, value).astype(float)
    result[~grid.valid_mask] = np.nan
    return grid.with_data(result, name=name or f"{grid.name}{op}{value}")


def logical_and(*grids: RasterGrid, name: str = "and") -> RasterGrid:
    """Cell-wise AND of boolean rasters."""
    return raster_calc(lambda *arrays: np.logical_and.reduce([a != 0 for a in arrays]), *grids, name=name)


def logical_or(*grids: RasterGrid, name: str = "or") -> RasterGrid:
    """Cell-wise OR of boolean rasters."""
    return raster_calc(lambda *arrays: np.logical_or.reduce([a != 0 for a in arrays]), *grids, name=name)


def logical_not(grid: RasterGrid, name: str = "not") -> RasterGrid:
    """Cell-wise NOT of a boolean raster."""
    return raster_calc(lambda a: a == 0, grid, name=name)


def reclassify(
    grid: RasterGrid,
    rules: Sequence[Tuple[float, float, float]],
    default: float = np.nan,
    include_lowest: bool = False,
    name: Optional[str] = None,
) -> RasterGrid:
    """
    Reclassify cell values by value ranges.

    Each rule (low, high, new) assigns new to values in the interval
    (low, high]. The first matching rule wins.

    Args:
        grid: Input grid
        rules: Sequence of (low, high, new) rows
        default: Value for valid cells no rule matches (default: no data)
        include_lowest: If True, the first rule's interval is [low, high]
        name: Name of the output layer

    Returns:
        Reclassified RasterGrid

    Example:
        >>> # elevation classes: <=6 m -> 1, 6-8 m -> 2, >8 m -> 3
        >>> reclassify(elev, [(-np.inf, 6, 1), (6, 8, 2), (8, np.inf, 3)])
    """
    data = grid.data
    result = np.full(grid.shape, default, dtype=float)
    assigned = ~grid.valid_mask

    for i, (low, high, new) in enumerate(rules):
        if low > high:
            raise ValueError(f"Rule {i} has low > high: {(low, high, new)}")
        with np.errstate(invalid="ignore"):
            lower_ok = data >= low if (include_lowest and i == 0) else data > low
            hit = lower_ok & (data <= high) & ~assigned
        result[hit] = new
        assigned |= hit

    result[~grid.valid_mask] = np.nan
    return grid.with_data(result, name=name or f"{grid.name}_reclass")


def normalize_grid(grid: RasterGrid, invert: bool = False, name: Optional[str] = None) -> RasterGrid:
    """
    Rescale a grid by its maximum valid value.

    Raises:
        NormalizationError: If the grid's maximum is 0 or it has no data
    """
    result = normalize_by_max(grid.data, invert=invert, label=grid.name or "grid")
    return grid.with_data(result, name=name or f"{grid.name}_norm")
