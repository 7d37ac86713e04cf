"""Tests for categorical recoding via lookup tables."""

import numpy as np
import pytest


class TestLookupTable:
    """Test the immutable lookup table."""

    def test_get_known_code(self):
        from src.scoring.recode import LookupTable

        table = LookupTable("landuse", {"W": 3, "DEN": 0})
        assert table.get("W") == 3.0
        assert table.get("DEN") == 0.0

    def test_unknown_code_returns_default(self):
        from src.scoring.recode import LookupTable

        table = LookupTable("landuse", {"W": 3}, default=0)
        assert table.get("XYZ") == 0.0

    def test_numeric_codes_match_string_keys(self):
        """Integer, float and string forms of a class resolve identically."""
        from src.scoring.recode import LookupTable

        table = LookupTable("ffreq", {"1": 2, "2": 10, "3": 50})
        assert table.get(1) == 2.0
        assert table.get(2.0) == 10.0
        assert table.get(np.int64(3)) == 50.0
        assert table.get(" 3 ") == 50.0

    def test_mapping_is_read_only(self):
        """Tables cannot be modified after creation."""
        from src.scoring.recode import LookupTable

        table = LookupTable("ffreq", {"1": 2})
        with pytest.raises(TypeError):
            table.mapping["1"] = 99

    def test_source_dict_changes_do_not_leak(self):
        """Mutating the dict used to build a table leaves the table unchanged."""
        from src.scoring.recode import LookupTable

        source = {"W": 3}
        table = LookupTable("landuse", source)
        source["W"] = 0
        assert table.get("W") == 3.0

    def test_fields_are_frozen(self):
        from dataclasses import FrozenInstanceError

        from src.scoring.recode import LookupTable

        table = LookupTable("ffreq", {"1": 2})
        with pytest.raises(FrozenInstanceError):
            table.default = 5

    def test_duplicate_codes_rejected(self):
        """1 and "1" are the same code."""
        from src.scoring.recode import LookupTable

        with pytest.raises(ValueError, match="duplicate"):
            LookupTable("ffreq", {1: 2, "1": 3})

    def test_preserves_order(self):
        from src.scoring.recode import LookupTable

        table = LookupTable("t", {"c": 1, "a": 2, "b": 3})
        assert list(table.mapping) == ["c", "a", "b"]

    def test_max_value(self):
        from src.scoring.recode import LookupTable

        assert LookupTable("t", {"a": 1, "b": 3}).max_value == 3.0

    def test_serialization(self):
        from src.scoring.recode import LookupTable

        table = LookupTable("ffreq", {"1": 2, "2": 10}, default=0)
        restored = LookupTable.from_dict(table.to_dict())
        assert restored.name == "ffreq"
        assert dict(restored.mapping) == {"1": 2.0, "2": 10.0}
        assert restored.default == 0.0


class TestRecode:
    """Test recoding sequences of categories."""

    def test_recodes_each_value(self):
        from src.scoring.recode import LookupTable, recode

        table = LookupTable("ffreq", {"1": 2, "2": 10, "3": 50})
        result = recode([1, 2, 3, 1], table)
        np.testing.assert_array_equal(result, [2.0, 10.0, 50.0, 2.0])

    def test_recode_is_total(self):
        """Every input yields a number, whether in the table or not."""
        from src.scoring.recode import LookupTable, recode

        table = LookupTable("landuse", {"W": 3, "Am": 2})
        values = ["W", "Am", "??", None, 7, "DEN"]
        result = recode(values, table)

        assert len(result) == len(values)
        assert result.dtype == float
        assert np.all(np.isfinite(result))

    def test_unmatched_falls_back_to_default(self):
        from src.scoring.recode import LookupTable, recode

        table = LookupTable("landuse", {"W": 3}, default=0)
        np.testing.assert_array_equal(recode(["W", "XX"], table), [3.0, 0.0])

    def test_custom_default(self):
        from src.scoring.recode import LookupTable, recode

        table = LookupTable("landuse", {"W": 3}, default=1.5)
        np.testing.assert_array_equal(recode(["XX"], table), [1.5])

    def test_unmatched_logs_warning(self, caplog):
        """Fallbacks are reported once, with codes and counts."""
        from src.scoring.recode import LookupTable, recode

        table = LookupTable("landuse", {"W": 3})
        with caplog.at_level("WARNING", logger="src.scoring.recode"):
            recode(["W", "XX", "XX", "YY"], table)

        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert "'XX' x2" in warnings[0].getMessage()
        assert "'YY' x1" in warnings[0].getMessage()

    def test_no_warning_when_all_matched(self, caplog):
        from src.scoring.recode import LookupTable, recode

        table = LookupTable("landuse", {"W": 3})
        with caplog.at_level("WARNING", logger="src.scoring.recode"):
            recode(["W", "W"], table)
        assert not caplog.records

    def test_find_unmatched(self):
        from src.scoring.recode import LookupTable, find_unmatched

        table = LookupTable("landuse", {"W": 3})
        assert find_unmatched(["W", "B", "B", "STA"], table) == {"B": 2, "STA": 1}

    def test_tables_coexist(self):
        """Two tables for the same attribute give independent results."""
        from src.scoring.recode import LookupTable, recode

        strict = LookupTable("landuse", {"W": 3, "Am": 0})
        lenient = LookupTable("landuse", {"W": 3, "Am": 3})
        values = ["W", "Am"]

        np.testing.assert_array_equal(recode(values, strict), [3.0, 0.0])
        np.testing.assert_array_equal(recode(values, lenient), [3.0, 3.0])
