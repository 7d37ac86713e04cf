"""
Scoring configurations for different use cases.

Available configs:
- meuse: Floodplain suitability from flood frequency, land use,
  heavy-metal contamination and elevation
"""

from src.scoring.configs.meuse import (
    DEFAULT_MEUSE_SCORER,
    DEFAULT_MEUSE_CONFIG,
    FLOOD_RETURN_PERIODS,
    LANDUSE_TIERS,
    create_meuse_scorer,
    get_required_inputs as meuse_get_required_inputs,
)

__all__ = [
    "DEFAULT_MEUSE_SCORER",
    "DEFAULT_MEUSE_CONFIG",
    "FLOOD_RETURN_PERIODS",
    "LANDUSE_TIERS",
    "create_meuse_scorer",
    "meuse_get_required_inputs",
]
