"""Pytest configuration and fixtures for raster-suitability tests."""
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import matplotlib

matplotlib.use("Agg")

import pytest
import numpy as np
from rasterio import Affine


@pytest.fixture
def unit_grid():
    """A 4x5 grid of 10 m cells with its upper-left corner at (0, 40)."""
    from src.raster.grid import RasterGrid

    data = np.arange(20, dtype=float).reshape(4, 5)
    return RasterGrid(data, Affine(10.0, 0.0, 0.0, 0.0, -10.0, 40.0), name="unit")


@pytest.fixture
def small_samples():
    """Five floodplain samples covering every factor attribute."""
    from src.raster.data_loading import SamplePoints

    return SamplePoints(
        x=[5.0, 15.0, 25.0, 35.0, 45.0],
        y=[35.0, 25.0, 15.0, 5.0, 35.0],
        attributes={
            "ffreq": [1, 2, 3, 3, 2],
            "landuse": ["W", "Am", "DEN", "W", "Fh"],
            "lead": [300.0, 150.0, 60.0, 50.0, 100.0],
            "cadmium": [12.0, 4.0, 1.0, 0.8, 2.0],
            "elev": [6.0, 7.5, 9.0, 9.5, 8.0],
        },
    )


@pytest.fixture
def mock_meuse():
    """Deterministic synthetic floodplain samples and reference grid."""
    from src.raster.data_loading import create_mock_meuse_data

    return create_mock_meuse_data(n_samples=60, resolution=160.0, seed=42)


@pytest.fixture
def project_root():
    """Get the project root directory."""
    return Path(__file__).parent.parent
