"""Tests for configuration module."""
from pathlib import Path

from src import config


def test_project_root_exists():
    """Test that PROJECT_ROOT is set correctly."""
    assert config.PROJECT_ROOT.exists()
    assert config.PROJECT_ROOT.is_dir()
    assert (config.PROJECT_ROOT / "src").is_dir()


def test_data_directories_under_project_root():
    """Data paths are derived from the project root, not created on import."""
    for path in (config.SAMPLES_DIR, config.REFERENCE_DIR, config.OUTPUT_DIR):
        assert isinstance(path, Path)
        assert config.DATA_DIR in path.parents


def test_interpolation_defaults():
    assert config.DEFAULT_IDW_NEIGHBOURS == 7
    assert config.DEFAULT_IDW_POWER == 0.5


def test_config_constants():
    """Test that configuration constants are properly set."""
    assert config.DEFAULT_RECODE_FALLBACK == 0.0
    assert config.DEFAULT_COMBINE_METHOD == "product"
    assert (config.DEFAULT_X_COLUMN, config.DEFAULT_Y_COLUMN) == ("x", "y")
    assert isinstance(config.DEFAULT_LOG_LEVEL, str)
