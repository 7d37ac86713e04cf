"""
Tests for the raster calculator.

Operations run cell-wise on aligned grids; a cell that is no data in any
input is no data in the output.
"""

import numpy as np
import pytest
from rasterio import Affine


def _with_hole(grid, row=0, col=0):
    data = grid.data.copy()
    data[row, col] = np.nan
    return grid.with_data(data, name=f"{grid.name}_hole")


# =============================================================================
# RASTER_CALC TESTS
# =============================================================================


class TestRasterCalc:
    """Test cell-wise arithmetic."""

    def test_binary_operation(self, unit_grid):
        from src.raster.calculator import raster_calc

        result = raster_calc(lambda a, b: a + b, unit_grid, unit_grid, name="double")

        np.testing.assert_array_equal(result.data, unit_grid.data * 2)
        assert result.name == "double"
        assert result.is_aligned_with(unit_grid)

    def test_nodata_propagates(self, unit_grid):
        from src.raster.calculator import raster_calc

        result = raster_calc(lambda a, b: a * b, unit_grid, _with_hole(unit_grid, 1, 2))

        assert np.isnan(result.data[1, 2])
        assert result.n_valid == unit_grid.data.size - 1

    def test_division_by_zero_is_nodata(self, unit_grid):
        from src.raster.calculator import raster_calc

        result = raster_calc(lambda a: 1.0 / a, unit_grid)

        assert np.isnan(result.data[0, 0])  # cell value 0
        assert result.data[0, 1] == 1.0

    def test_misaligned_grids_raise(self, unit_grid):
        from src.raster.calculator import raster_calc
        from src.raster.grid import GridAlignmentError, RasterGrid

        other = RasterGrid(unit_grid.data, Affine(20.0, 0.0, 0.0, 0.0, -20.0, 40.0))
        with pytest.raises(GridAlignmentError):
            raster_calc(lambda a, b: a + b, unit_grid, other)

    def test_requires_a_grid(self):
        from src.raster.calculator import raster_calc

        with pytest.raises(ValueError, match="at least one grid"):
            raster_calc(lambda: np.zeros((1, 1)))

    def test_function_must_keep_shape(self, unit_grid):
        from src.raster.calculator import raster_calc

        with pytest.raises(ValueError, match="Function returned shape"):
            raster_calc(lambda a: a.sum(), unit_grid)


# =============================================================================
# COMPARISON AND LOGIC TESTS
# =============================================================================


class TestCompare:
    """Test boolean comparison rasters."""

    def test_greater_equal(self, unit_grid):
        from src.raster.calculator import compare

        result = compare(unit_grid, ">=", 10)

        assert result.name == "unit>=10"
        np.testing.assert_array_equal(result.data, (unit_grid.data >= 10).astype(float))

    def test_nodata_preserved(self, unit_grid):
        from src.raster.calculator import compare

        result = compare(_with_hole(unit_grid), "<", 100)

        assert np.isnan(result.data[0, 0])
        assert np.all(result.data[result.valid_mask] == 1.0)

    def test_unknown_operator(self, unit_grid):
        from src.raster.calculator import compare

        with pytest.raises(ValueError, match="Unknown comparison"):
            compare(unit_grid, "=>", 1)


class TestLogic:
    """Test boolean raster logic."""

    def test_and_or_not(self, unit_grid):
        from src.raster.calculator import compare, logical_and, logical_not, logical_or

        low = compare(unit_grid, "<", 5)
        even = unit_grid.with_data((unit_grid.data % 2 == 0).astype(float), name="even")

        both = logical_and(low, even)
        either = logical_or(low, even)
        neither = logical_not(either)

        assert both.data[0].tolist() == [1.0, 0.0, 1.0, 0.0, 1.0]
        assert either.data[1].tolist() == [0.0, 1.0, 0.0, 1.0, 0.0]
        np.testing.assert_array_equal(neither.data, 1.0 - either.data)

    def test_logic_propagates_nodata(self, unit_grid):
        from src.raster.calculator import compare, logical_or

        result = logical_or(compare(unit_grid, ">", 0), compare(_with_hole(unit_grid, 3, 4), ">", 0))
        assert np.isnan(result.data[3, 4])


# =============================================================================
# RECLASSIFY AND NORMALIZE TESTS
# =============================================================================


class TestReclassify:
    """Test value-range reclassification."""

    def test_ranges_are_left_open(self, unit_grid):
        from src.raster.calculator import reclassify

        result = reclassify(unit_grid, [(-np.inf, 5, 1), (5, 10, 2), (10, np.inf, 3)])

        flat = result.data.ravel()
        assert flat[:6].tolist() == [1.0] * 6  # 0..5
        assert flat[6:11].tolist() == [2.0] * 5  # 6..10
        assert flat[11:].tolist() == [3.0] * 9
        assert result.name == "unit_reclass"

    def test_include_lowest(self, unit_grid):
        from src.raster.calculator import reclassify

        open_low = reclassify(unit_grid, [(0, 5, 1)], default=0)
        closed_low = reclassify(unit_grid, [(0, 5, 1)], default=0, include_lowest=True)

        assert open_low.data[0, 0] == 0.0
        assert closed_low.data[0, 0] == 1.0

    def test_first_matching_rule_wins(self, unit_grid):
        from src.raster.calculator import reclassify

        result = reclassify(unit_grid, [(0, 10, 1), (5, 15, 2)])
        assert result.data.ravel()[7] == 1.0
        assert result.data.ravel()[12] == 2.0

    def test_unmatched_cells_get_default(self, unit_grid):
        from src.raster.calculator import reclassify

        result = reclassify(unit_grid, [(10, 20, 1)])
        assert np.isnan(result.data[0, 0])

    def test_nodata_stays_nodata(self, unit_grid):
        from src.raster.calculator import reclassify

        result = reclassify(_with_hole(unit_grid), [(-np.inf, np.inf, 1)], default=0)
        assert np.isnan(result.data[0, 0])

    def test_invalid_rule(self, unit_grid):
        from src.raster.calculator import reclassify

        with pytest.raises(ValueError, match="low > high"):
            reclassify(unit_grid, [(10, 5, 1)])


class TestNormalizeGrid:
    """Test grid rescaling by maximum."""

    def test_normalize(self, unit_grid):
        from src.raster.calculator import normalize_grid

        result = normalize_grid(unit_grid)

        assert result.name == "unit_norm"
        assert np.nanmax(result.data) == 1.0
        np.testing.assert_allclose(result.data, unit_grid.data / 19.0)

    def test_invert(self, unit_grid):
        from src.raster.calculator import normalize_grid

        result = normalize_grid(unit_grid, invert=True)
        np.testing.assert_allclose(result.data, 1.0 - unit_grid.data / 19.0)

    def test_all_zero_grid_raises(self, unit_grid):
        from src.raster.calculator import normalize_grid
        from src.scoring.transforms import NormalizationError

        with pytest.raises(NormalizationError):
            normalize_grid(unit_grid.with_data(np.zeros(unit_grid.shape)))
