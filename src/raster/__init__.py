"""
Raster analysis package.

Core functionality:
- RasterGrid regular grid model and alignment checks
- Inverse-distance weighted interpolation of point samples
- Masking by a reference raster footprint
- Raster calculator and raster/vector conversion
- Sample point and raster loading, GeoTIFF writing, mock data
- Matplotlib plotting helpers
"""

from .grid import RasterGrid, GridAlignmentError, check_aligned
from .interpolation import EmptyInputError, idw_interpolate, idw_to_grid
from .masking import mask_grid, footprint
from .calculator import (
    raster_calc,
    compare,
    logical_and,
    logical_or,
    logical_not,
    reclassify,
    normalize_grid,
)
from .conversion import (
    rasterize_points,
    raster_to_points,
    raster_to_polygons,
    sample_raster,
)
from .data_loading import (
    SamplePoints,
    load_sample_points,
    read_raster,
    write_raster,
    create_mock_meuse_data,
)

__all__ = [
    "RasterGrid",
    "GridAlignmentError",
    "check_aligned",
    "EmptyInputError",
    "idw_interpolate",
    "idw_to_grid",
    "mask_grid",
    "footprint",
    "raster_calc",
    "compare",
    "logical_and",
    "logical_or",
    "logical_not",
    "reclassify",
    "normalize_grid",
    "rasterize_points",
    "raster_to_points",
    "raster_to_polygons",
    "sample_raster",
    "SamplePoints",
    "load_sample_points",
    "read_raster",
    "write_raster",
    "create_mock_meuse_data",
]
