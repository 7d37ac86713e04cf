"""Configuration module for raster-suitability project.

Centralizes data paths and pipeline defaults.
"""
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
SAMPLES_DIR = DATA_DIR / "samples"
REFERENCE_DIR = DATA_DIR / "reference"
OUTPUT_DIR = DATA_DIR / "outputs"

# Default sample file column names
DEFAULT_X_COLUMN = "x"
DEFAULT_Y_COLUMN = "y"

# Inverse-distance weighting defaults
DEFAULT_IDW_NEIGHBOURS = 7
DEFAULT_IDW_POWER = 0.5

# Value substituted for categories missing from a lookup table
DEFAULT_RECODE_FALLBACK = 0.0

# Default settings
DEFAULT_COMBINE_METHOD = "product"
DEFAULT_LOG_LEVEL = "INFO"
