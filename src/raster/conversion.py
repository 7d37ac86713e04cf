"""
Conversion between raster and vector representations.

- rasterize_points: burn point values into a template grid
- raster_to_points: valid cells as points at their centres
- raster_to_polygons: regions of equal value as polygons
- sample_raster: read cell values under points

Coordinates are used as-is; no coordinate reference system is attached.
"""

import logging
from typing import Literal

import geopandas as gpd
import numpy as np
from rasterio import features
from shapely.geometry import shape

from src.raster.grid import RasterGrid

logger = logging.getLogger(__name__)

AGGREGATIONS = ("last", "first", "mean", "max", "min", "sum", "count")


def rasterize_points(
    x,
    y,
    values,
    template: RasterGrid,
    fun: Literal["last", "first", "mean", "max", "min", "sum", "count"] = "last",
    name: str = "rasterized",
) -> RasterGrid:
    """
    Burn point values into the cells of a template grid.

    Args:
        x: Point x coordinates
        y: Point y coordinates
        values: Point values (ignored for fun="count")
        template: Grid defining the output geometry
        fun: How to combine several points falling in one cell
        name: Name of the output layer

    Returns:
        RasterGrid aligned with template; cells without points are no data
        (0 for fun="count"). Points outside the template are dropped.
    """
    if fun not in AGGREGATIONS:
        raise ValueError(f"Unknown aggregation '{fun}'. Available: {list(AGGREGATIONS)}")

    x = np.atleast_1d(np.asarray(x, dtype=float))
    y = np.atleast_1d(np.asarray(y, dtype=float))
    values = np.ones_like(x) if fun == "count" else np.atleast_1d(np.asarray(values, dtype=float))
    if not (len(x) == len(y) == len(values)):
        raise ValueError(f"x, y and values differ in length: {len(x)}, {len(y)}, {len(values)}")

    inside = template.contains(x, y) & np.isfinite(values)
    dropped = int(np.sum(~inside))
    if dropped:
        logger.info(f"Rasterize: dropping {dropped} point(s) outside grid or without value")

    rows, cols = template.index(x[inside], y[inside])
    values = values[inside]
    flat = np.ravel_multi_index((rows, cols), template.shape)
    size = template.data.size

    counts = np.bincount(flat, minlength=size).astype(float)
    if fun == "count":
        result = counts
    elif fun in ("sum", "mean"):
        result = np.bincount(flat, weights=values, minlength=size)
        if fun == "mean":
            with np.errstate(invalid="ignore"):
                result = result / counts
    elif fun in ("max", "min"):
        result = np.full(size, -np.inf if fun == "max" else np.inf)
        ufunc = np.maximum if fun == "max" else np.minimum
        ufunc.at(result, flat, values)
    else:
        result = np.full(size, np.nan)
        if fun == "last":
            flat, values = flat[::-1], values[::-1]
        cells, first_index = np.unique(flat, return_index=True)
        result[cells] = values[first_index]

    if fun != "count":
        result = np.where(counts > 0, result, np.nan)

    return template.with_data(result.reshape(template.shape), name=name)


def raster_to_points(grid: RasterGrid, value_column: str = "value") -> gpd.GeoDataFrame:
    """
    Convert valid cells to points at their centres.

    Returns:
        GeoDataFrame with row, col and value columns
    """
    xs, ys = grid.cell_centers()
    valid = grid.valid_mask
    rows, cols = np.nonzero(valid)

    return gpd.GeoDataFrame(
        {
            "row": rows,
            "col": cols,
            value_column: grid.data[valid],
        },
        geometry=gpd.points_from_xy(xs[valid], ys[valid]),
    )


def raster_to_polygons(
    grid: RasterGrid,
    value_column: str = "value",
    dissolve: bool = True,
    connectivity: int = 4,
) -> gpd.GeoDataFrame:
    """
    Convert regions of equal-valued cells to polygons.

    Intended for classified rasters (e.g. the output of reclassify or
    compare); continuous rasters produce one polygon per cell.

    Args:
        grid: Input grid
        value_column: Name of the value column
        dissolve: Merge all polygons with the same value into one
        connectivity: 4 or 8 neighbour connectivity

    Returns:
        GeoDataFrame with one row per region (or per value if dissolve)
    """
    valid = grid.valid_mask
    # Polygonize integer labels so region values keep full float64 precision
    unique_values, inverse = np.unique(grid.data[valid], return_inverse=True)
    labels = np.zeros(grid.shape, dtype=np.int32)
    labels[valid] = inverse.ravel() + 1

    geometries = []
    values = []
    for geom, label in features.shapes(labels, mask=valid, connectivity=connectivity, transform=grid.transform):
        geometries.append(shape(geom))
        values.append(float(unique_values[int(label) - 1]))

    gdf = gpd.GeoDataFrame({value_column: values}, geometry=geometries)
    if dissolve and len(gdf):
        gdf = gdf.dissolve(by=value_column, as_index=False)

    logger.info(f"Polygonized '{grid.name or 'grid'}' into {len(gdf)} feature(s)")
    return gdf


def points_to_geodataframe(x, y, **columns) -> gpd.GeoDataFrame:
    """Build a point GeoDataFrame from coordinate arrays and attribute columns."""
    return gpd.GeoDataFrame(dict(columns), geometry=gpd.points_from_xy(np.ravel(x), np.ravel(y)))


def sample_raster(grid: RasterGrid, x, y) -> np.ndarray:
    """
    Values of the cells under points.

    Returns:
        Array of cell values; NaN for points outside the grid or on no data
    """
    x = np.atleast_1d(np.asarray(x, dtype=float))
    y = np.atleast_1d(np.asarray(y, dtype=float))
    result = np.full(len(x), np.nan)

    inside = grid.contains(x, y)
    rows, cols = grid.index(x[inside], y[inside])
    result[inside] = grid.data[rows, cols]
    return result
