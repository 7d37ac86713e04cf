"""
Scoring module for multi-criteria suitability analysis.

Provides rescaling functions, categorical recoding and combination logic
for computing suitability scores from sample attributes.

Rescaling types:
- normalize_by_max: value / max (higher is better)
- invert: 1 - normalized value (lower is better)
- recode: categorical lookup via an immutable LookupTable

Combination:
- SuitabilityFactor: Defines a single factor
- SuitabilityCombiner: Combines factors into a final score using:
  - Weighted product (any zero factor vetoes the location)
  - Weighted sum
"""

from src.scoring.transforms import (
    NormalizationError,
    normalize_by_max,
    invert,
    rescale_factor,
)
from src.scoring.recode import LookupTable, recode, find_unmatched
from src.scoring.combiner import SuitabilityFactor, SuitabilityCombiner

__all__ = [
    # Transforms
    "NormalizationError",
    "normalize_by_max",
    "invert",
    "rescale_factor",
    # Recode
    "LookupTable",
    "recode",
    "find_unmatched",
    # Combiner
    "SuitabilityFactor",
    "SuitabilityCombiner",
]
