"""Tests for masking grids by a reference footprint."""

import numpy as np
import pytest
from rasterio import Affine


@pytest.fixture
def reference():
    from src.raster.grid import RasterGrid

    data = np.array([[1.0, np.nan, 3.0], [np.nan, 5.0, 6.0]])
    return RasterGrid(data, Affine(10, 0, 0, 0, -10, 20), name="reference")


@pytest.fixture
def surface(reference):
    return reference.with_data(np.full(reference.shape, 0.5), name="surface")


class TestMaskGrid:
    """Test mask_grid."""

    def test_cells_outside_footprint_become_nodata(self, surface, reference):
        from src.raster.masking import mask_grid

        masked = mask_grid(surface, reference)

        np.testing.assert_array_equal(np.isnan(masked.data), ~reference.valid_mask)

    def test_cells_inside_footprint_unchanged(self, surface, reference):
        from src.raster.masking import mask_grid

        masked = mask_grid(surface, reference)
        assert np.all(masked.data[reference.valid_mask] == 0.5)

    def test_idempotent(self, surface, reference):
        from src.raster.masking import mask_grid

        once = mask_grid(surface, reference)
        twice = mask_grid(once, reference)
        np.testing.assert_array_equal(once.data, twice.data)

    def test_input_not_modified(self, surface, reference):
        from src.raster.masking import mask_grid

        mask_grid(surface, reference)
        assert surface.n_valid == surface.data.size

    def test_existing_nodata_kept(self, reference):
        from src.raster.masking import mask_grid

        grid = reference.with_data(np.array([[np.nan, 1.0, 1.0], [1.0, 1.0, 1.0]]))
        masked = mask_grid(grid, reference)
        assert np.isnan(masked.data[0, 0])

    def test_misaligned_grids_raise(self, surface):
        from src.raster.grid import GridAlignmentError, RasterGrid
        from src.raster.masking import mask_grid

        other = RasterGrid(np.ones((2, 3)), Affine(10, 0, 5, 0, -10, 20))
        with pytest.raises(GridAlignmentError):
            mask_grid(surface, other)

    def test_shape_mismatch_raises(self, surface):
        from src.raster.grid import GridAlignmentError, RasterGrid
        from src.raster.masking import mask_grid

        other = RasterGrid(np.ones((3, 3)), surface.transform)
        with pytest.raises(GridAlignmentError):
            mask_grid(surface, other)

    def test_output_name(self, surface, reference):
        from src.raster.masking import mask_grid

        assert mask_grid(surface, reference).name == "surface"
        assert mask_grid(surface, reference, name="masked").name == "masked"


class TestFootprint:
    """Test footprint extraction."""

    def test_footprint_values(self, reference):
        from src.raster.masking import footprint

        result = footprint(reference)

        np.testing.assert_array_equal(result.valid_mask, reference.valid_mask)
        assert np.all(result.data[result.valid_mask] == 1.0)
