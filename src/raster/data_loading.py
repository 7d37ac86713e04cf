"""
Data loading operations for suitability analysis.

This module contains the sample point container, loaders for sample points
and reference rasters, a GeoTIFF writer, and a generator of synthetic
floodplain data for demos and tests.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio

from src.config import DEFAULT_X_COLUMN, DEFAULT_Y_COLUMN
from src.raster.conversion import points_to_geodataframe
from src.raster.grid import RasterGrid

logger = logging.getLogger(__name__)

TABULAR_SUFFIXES = {".csv", ".txt", ".tsv"}


def _freeze(values: Any) -> np.ndarray:
    """Copy values into a read-only array (float when numeric)."""
    array = np.asarray(values)
    if array.dtype.kind in "biuf":
        array = array.astype(float)
    else:
        array = array.astype(object)
    array = array.copy()
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class SamplePoints:
    """
    Immutable set of sample locations with named attributes.

    Attributes:
        x: X coordinates
        y: Y coordinates
        attributes: Attribute name -> array with one value per point
    """

    x: np.ndarray
    y: np.ndarray
    attributes: Mapping[str, np.ndarray]

    def __post_init__(self):
        x = _freeze(np.ravel(self.x)).astype(float)
        y = _freeze(np.ravel(self.y)).astype(float)
        if len(x) != len(y):
            raise ValueError(f"x and y differ in length: {len(x)} vs {len(y)}")

        attributes = {}
        for name, values in dict(self.attributes).items():
            frozen = _freeze(np.ravel(values))
            if len(frozen) != len(x):
                raise ValueError(
                    f"Attribute '{name}' has {len(frozen)} values, expected {len(x)}"
                )
            attributes[name] = frozen

        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "attributes", MappingProxyType(attributes))

    def __len__(self) -> int:
        return len(self.x)

    def __getitem__(self, name: str) -> np.ndarray:
        if name not in self.attributes:
            raise KeyError(
                f"Unknown attribute '{name}'. Available: {list(self.attributes)}"
            )
        return self.attributes[name]

    @property
    def xy(self) -> np.ndarray:
        """(n, 2) coordinate array."""
        return np.column_stack([self.x, self.y])

    @property
    def attribute_names(self) -> list[str]:
        return list(self.attributes)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        return (float(self.x.min()), float(self.y.min()), float(self.x.max()), float(self.y.max()))

    def subset(self, keep: np.ndarray) -> "SamplePoints":
        """Return the points where keep is True."""
        keep = np.asarray(keep, dtype=bool)
        return SamplePoints(
            self.x[keep],
            self.y[keep],
            {name: values[keep] for name, values in self.attributes.items()},
        )

    def to_geodataframe(self, **extra_columns) -> gpd.GeoDataFrame:
        """Point GeoDataFrame of all attributes plus any extra columns."""
        columns = {name: np.asarray(values) for name, values in self.attributes.items()}
        columns.update(extra_columns)
        return points_to_geodataframe(self.x, self.y, **columns)

    @classmethod
    def from_dataframe(
        cls,
        frame: pd.DataFrame,
        x_column: str = DEFAULT_X_COLUMN,
        y_column: str = DEFAULT_Y_COLUMN,
    ) -> "SamplePoints":
        """
        Build from a table with coordinate columns, or a GeoDataFrame with
        point geometry.
        """
        if isinstance(frame, gpd.GeoDataFrame) and x_column not in frame.columns:
            geom_types = set(frame.geometry.geom_type.dropna())
            if geom_types != {"Point"}:
                raise ValueError(f"Sample geometry must be points, got {sorted(geom_types)}")
            x = frame.geometry.x.to_numpy()
            y = frame.geometry.y.to_numpy()
            skip = {frame.geometry.name}
        else:
            missing = [c for c in (x_column, y_column) if c not in frame.columns]
            if missing:
                raise KeyError(
                    f"Missing coordinate column(s) {missing}. Available: {list(frame.columns)}"
                )
            x = frame[x_column].to_numpy()
            y = frame[y_column].to_numpy()
            skip = {x_column, y_column}

        attributes = {
            str(column): frame[column].to_numpy() for column in frame.columns if column not in skip
        }
        return cls(x, y, attributes)


def load_sample_points(
    path: Union[str, Path],
    x_column: str = DEFAULT_X_COLUMN,
    y_column: str = DEFAULT_Y_COLUMN,
) -> SamplePoints:
    """
    Load sample points from a CSV table or a point vector file.

    CSV/TSV/TXT files need x and y coordinate columns; any other format is
    read with geopandas and must contain point geometry.

    Args:
        path: File to read
        x_column: Name of the x column for tabular files
        y_column: Name of the y column for tabular files

    Returns:
        SamplePoints

    Raises:
        FileNotFoundError: If path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    logger.info(f"Loading sample points from {path}")
    suffix = path.suffix.lower()
    if suffix in TABULAR_SUFFIXES:
        # .txt files may use any delimiter; let the python engine sniff it
        sep = {".csv": ",", ".tsv": "\t"}.get(suffix)
        frame = pd.read_csv(path, sep=sep, engine="python")
    else:
        frame = gpd.read_file(path)

    samples = SamplePoints.from_dataframe(frame, x_column=x_column, y_column=y_column)
    logger.info(f"  Loaded {len(samples)} points with attributes {samples.attribute_names}")
    return samples


def read_raster(path: Union[str, Path], band: int = 1, name: Optional[str] = None) -> RasterGrid:
    """
    Read one band of a raster file into a RasterGrid.

    Cells equal to the file's nodata value become NaN.

    Args:
        path: Raster file readable by rasterio
        band: 1-based band index (default: 1)
        name: Layer name (default: file stem)

    Returns:
        RasterGrid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    logger.info(f"Reading raster {path} (band {band})")
    with rasterio.open(path) as src:
        data = src.read(band, masked=True).astype(np.float64).filled(np.nan)
        transform = src.transform

    grid = RasterGrid(data, transform, name=name or path.stem)
    logger.info(f"  Shape: {grid.shape}, resolution: {grid.resolution}, valid cells: {grid.n_valid}")
    return grid


def write_raster(grid: RasterGrid, path: Union[str, Path]) -> Path:
    """
    Write a RasterGrid to a single-band GeoTIFF.

    No data is stored as NaN; no coordinate reference system is written.

    Args:
        grid: Grid to write
        path: Output file path

    Returns:
        The output path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    height, width = grid.shape

    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype="float32",
        transform=grid.transform,
        nodata=np.nan,
        compress="lzw",
    ) as dst:
        dst.write(grid.data.astype(np.float32), 1)

    logger.info(f"Wrote {path}")
    return path


# Land-use classes and their rough frequency in the floodplain sample data
MOCK_LANDUSE_CLASSES = ["W", "Am", "Ah", "Aa", "Fw", "Ab", "B", "Bw", "Ag", "DEN", "Fh", "SPO", "STA"]
MOCK_LANDUSE_WEIGHTS = [50, 20, 20, 10, 8, 8, 6, 5, 5, 4, 3, 1, 1]


def create_mock_meuse_data(
    n_samples: int = 155,
    resolution: float = 40.0,
    seed: Optional[int] = 0,
) -> Tuple[SamplePoints, RasterGrid]:
    """
    Generate synthetic floodplain sample points and a reference grid.

    The layout mimics a river floodplain: a river runs along the west side
    of the area, and the reference grid covers the floodplain strip on its
    east bank. Heavy-metal concentrations fall off with distance from the
    river, elevation and flood return period rise with it.

    Args:
        n_samples: Number of sample points
        resolution: Reference grid cell size in metres
        seed: Random seed (None for non-deterministic)

    Returns:
        (samples, reference) where samples has attributes ffreq, landuse,
        lead, cadmium, elev and dist, and reference holds the normalized
        distance to the river inside the floodplain and no data outside it.
    """
    rng = np.random.default_rng(seed)
    extent = (178440.0, 329600.0, 181560.0, 333760.0)
    floodplain_width = 1500.0

    def river_distance(x, y):
        # River bank runs from the north-west corner towards the south-east
        river_x = 178600.0 + 0.25 * (extent[3] - y)
        return (x - river_x) / floodplain_width

    reference = RasterGrid.from_extent(extent, resolution, name="floodplain")
    xs, ys = reference.cell_centers()
    distance = river_distance(xs, ys)
    inside = (distance >= 0.0) & (distance <= 1.0)
    reference = reference.with_data(np.where(inside, distance, np.nan))

    # Rejection-sample points inside the floodplain
    x = np.empty(0)
    y = np.empty(0)
    while len(x) < n_samples:
        cx = rng.uniform(extent[0], extent[2], size=n_samples * 2)
        cy = rng.uniform(extent[1], extent[3], size=n_samples * 2)
        d = river_distance(cx, cy)
        keep = (d >= 0.0) & (d <= 1.0)
        x = np.concatenate([x, cx[keep]])
        y = np.concatenate([y, cy[keep]])
    x, y = x[:n_samples], y[:n_samples]
    dist = np.clip(river_distance(x, y), 0.0, 1.0)

    ffreq = np.where(dist < 0.25, 1, np.where(dist < 0.6, 2, 3))
    swap = rng.random(n_samples) < 0.1
    ffreq[swap] = rng.integers(1, 4, size=int(swap.sum()))

    weights = np.asarray(MOCK_LANDUSE_WEIGHTS, dtype=float)
    landuse = rng.choice(MOCK_LANDUSE_CLASSES, size=n_samples, p=weights / weights.sum())

    lead = np.round(35.0 + 550.0 * np.exp(-4.0 * dist) * rng.lognormal(0.0, 0.3, n_samples))
    cadmium = np.round(0.2 + 15.0 * np.exp(-5.0 * dist) * rng.lognormal(0.0, 0.35, n_samples), 1)
    elev = np.round(5.2 + 4.5 * dist + rng.normal(0.0, 0.4, n_samples), 3)

    samples = SamplePoints(
        x,
        y,
        {
            "ffreq": ffreq,
            "landuse": landuse.astype(object),
            "lead": lead,
            "cadmium": cadmium,
            "elev": elev,
            "dist": np.round(dist, 4),
        },
    )
    logger.info(f"Generated {n_samples} mock samples and reference grid {reference.shape}")
    return samples, reference
