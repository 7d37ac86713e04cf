"""
Regular grid model for raster analysis.

A RasterGrid is a 2-D float array paired with a north-up affine transform.
NaN marks "no data" cells. Grids are immutable: every operation returns a
new grid.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

import numpy as np
from rasterio import Affine

logger = logging.getLogger(__name__)

Extent = Tuple[float, float, float, float]


class GridAlignmentError(ValueError):
    """Raised when two grids do not share the same shape and transform."""

    pass


@dataclass(frozen=True, eq=False)
class RasterGrid:
    """
    Regular grid of cell values with an affine transform.

    Attributes:
        data: 2-D float64 array (rows, cols); NaN = no data
        transform: Affine transform mapping (col, row) to (x, y) of the
                   upper-left cell corner
        name: Optional layer name used in logs and plots
    """

    data: np.ndarray
    transform: Affine
    name: str = ""

    def __post_init__(self):
        data = np.array(self.data, dtype=np.float64)
        if data.ndim != 2:
            raise ValueError(f"RasterGrid data must be 2-D, got shape {data.shape}")
        if self.transform.b != 0 or self.transform.d != 0:
            raise ValueError("Rotated transforms are not supported")
        if self.transform.a <= 0 or self.transform.e >= 0:
            raise ValueError(
                f"Transform must be north-up with positive cell size, got {tuple(self.transform)[:6]}"
            )
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_extent(
        cls,
        extent: Extent,
        resolution: Union[float, Tuple[float, float]],
        fill_value: float = np.nan,
        name: str = "",
    ) -> "RasterGrid":
        """
        Create an empty grid covering an extent.

        Args:
            extent: (xmin, ymin, xmax, ymax)
            resolution: Cell size, or (x_size, y_size)
            fill_value: Initial cell value (default: no data)
            name: Layer name

        Returns:
            RasterGrid whose upper-left corner is (xmin, ymax). The last
            row/column is extended to cover the extent when it is not a
            whole number of cells.
        """
        xmin, ymin, xmax, ymax = extent
        if xmax <= xmin or ymax <= ymin:
            raise ValueError(f"Invalid extent {extent}")

        if np.isscalar(resolution):
            xres = yres = float(resolution)
        else:
            xres, yres = (float(r) for r in resolution)
        if xres <= 0 or yres <= 0:
            raise ValueError(f"Resolution must be positive, got {resolution}")

        # Tolerance keeps exact multiples from gaining an extra cell
        ncols = max(1, int(np.ceil((xmax - xmin) / xres - 1e-9)))
        nrows = max(1, int(np.ceil((ymax - ymin) / yres - 1e-9)))

        transform = Affine(xres, 0.0, xmin, 0.0, -yres, ymax)
        data = np.full((nrows, ncols), fill_value, dtype=np.float64)
        return cls(data, transform, name=name)

    def with_data(self, data: np.ndarray, name: Optional[str] = None) -> "RasterGrid":
        """Return a grid with the same geometry and new cell values."""
        data = np.asarray(data)
        if data.shape != self.shape:
            raise ValueError(f"Data shape {data.shape} does not match grid shape {self.shape}")
        return RasterGrid(data, self.transform, name=self.name if name is None else name)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    @property
    def resolution(self) -> Tuple[float, float]:
        """Cell size as (x_size, y_size), both positive."""
        return (self.transform.a, -self.transform.e)

    @property
    def extent(self) -> Extent:
        """Grid bounds as (xmin, ymin, xmax, ymax)."""
        rows, cols = self.shape
        xmin, ymax = self.transform.c, self.transform.f
        xmax = xmin + cols * self.transform.a
        ymin = ymax + rows * self.transform.e
        return (xmin, ymin, xmax, ymax)

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Coordinates of every cell centre.

        Returns:
            (xs, ys) arrays with the grid's shape
        """
        rows, cols = np.indices(self.shape)
        xs = self.transform.c + (cols + 0.5) * self.transform.a
        ys = self.transform.f + (rows + 0.5) * self.transform.e
        return xs, ys

    def index(self, x, y) -> Tuple[np.ndarray, np.ndarray]:
        """
        Row/column indices of the cells containing points.

        Points outside the grid get indices outside [0, rows) / [0, cols).

        Args:
            x: X coordinate(s)
            y: Y coordinate(s)

        Returns:
            (rows, cols) integer arrays
        """
        x = np.atleast_1d(np.asarray(x, dtype=float))
        y = np.atleast_1d(np.asarray(y, dtype=float))
        cols = np.floor((x - self.transform.c) / self.transform.a).astype(int)
        rows = np.floor((y - self.transform.f) / self.transform.e).astype(int)
        return rows, cols

    def contains(self, x, y) -> np.ndarray:
        """Boolean array: True where a point falls inside the grid."""
        rows, cols = self.index(x, y)
        nrows, ncols = self.shape
        return (rows >= 0) & (rows < nrows) & (cols >= 0) & (cols < ncols)

    def is_aligned_with(self, other: "RasterGrid") -> bool:
        """True when both grids have the same shape and transform."""
        return self.shape == other.shape and np.allclose(
            tuple(self.transform)[:6], tuple(other.transform)[:6], rtol=0.0, atol=1e-9
        )

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    @property
    def valid_mask(self) -> np.ndarray:
        """Boolean array: True where the cell holds a value."""
        return np.isfinite(self.data)

    @property
    def n_valid(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    def iter_cells(self, skip_nodata: bool = False) -> Iterator[Tuple[Tuple[float, float], Optional[float]]]:
        """
        Iterate over ((x, y), value) pairs in row-major order.

        No-data cells yield None as their value unless skip_nodata is True.
        """
        xs, ys = self.cell_centers()
        valid = self.valid_mask
        for (row, col), value in np.ndenumerate(self.data):
            if valid[row, col]:
                yield (float(xs[row, col]), float(ys[row, col])), float(value)
            elif not skip_nodata:
                yield (float(xs[row, col]), float(ys[row, col])), None

    def describe(self) -> dict:
        """Summary statistics over valid cells."""
        valid = self.data[self.valid_mask]
        summary = {
            "shape": self.shape,
            "resolution": self.resolution,
            "extent": self.extent,
            "valid_cells": int(valid.size),
        }
        if valid.size:
            summary.update(
                min=float(valid.min()), max=float(valid.max()), mean=float(valid.mean())
            )
        return summary


def check_aligned(*grids: RasterGrid) -> None:
    """
    Ensure all grids share the first grid's shape and transform.

    Raises:
        GridAlignmentError: If any grid differs
    """
    if not grids:
        return
    first = grids[0]
    for other in grids[1:]:
        if not first.is_aligned_with(other):
            raise GridAlignmentError(
                f"Grid '{other.name or '?'}' (shape {other.shape}, extent {other.extent}, "
                f"resolution {other.resolution}) is not aligned with grid "
                f"'{first.name or '?'}' (shape {first.shape}, extent {first.extent}, "
                f"resolution {first.resolution})"
            )
