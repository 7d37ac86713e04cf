"""
Default floodplain suitability scoring configuration.

This config scores river-floodplain soil samples (the classic Meuse sample
set) for a land use that needs dry, uncontaminated ground. Users can
modify this config or create their own based on local conditions.

Score formula:
    final = product of all normalized factors, divided by its maximum

Factors:
- ffreq: Flood frequency class recoded to return period in years
  (1 -> every 2 years, 2 -> every 10 years, 3 -> every 50 years).
  Rare flooding is better.
- landuse: Land-use class recoded to a suitability tier 0-3.
  Unlisted classes fall back to 0 and veto the location.
- lead: Lead concentration (ppm), lower is better
- cadmium: Cadmium concentration (ppm), lower is better
- elev: Relative elevation above the river (m), higher is better
"""

from src.scoring.combiner import SuitabilityCombiner, SuitabilityFactor
from src.scoring.recode import LookupTable

# Flood frequency class -> return period (years)
FLOOD_RETURN_PERIODS = LookupTable(
    name="ffreq",
    mapping={"1": 2, "2": 10, "3": 50},
    default=0,
)

# Land-use class -> suitability tier (3 = best)
LANDUSE_TIERS = LookupTable(
    name="landuse",
    mapping={
        "W": 3,     # pasture
        "Aa": 2,    # agriculture, unspecified
        "Ab": 2,    # agriculture, sugar beet
        "Ag": 2,    # agriculture, small grains
        "Ah": 2,    # agriculture, other
        "Am": 2,    # agriculture, maize
        "Fw": 2,    # grassland with trees
        "Bw": 1,    # trees in pasture
        "Fh": 1,    # orchard, high stem
        "Fl": 1,    # orchard, low stem
        "Ga": 1,    # home gardens
        "Tv": 1,    # other
        "B": 0,     # woods
        "DEN": 0,   # built-up
        "SPO": 0,   # sport field
        "STA": 0,   # stable yard
    },
    default=0,
)

# Attribute names in the sample data
REQUIRED_INPUTS = ("ffreq", "landuse", "lead", "cadmium", "elev")


def create_meuse_scorer(
    flood_table: LookupTable = FLOOD_RETURN_PERIODS,
    landuse_table: LookupTable = LANDUSE_TIERS,
    method: str = "product",
) -> SuitabilityCombiner:
    """
    Create the default floodplain suitability scorer.

    Args:
        flood_table: Lookup for flood frequency class -> return period
        landuse_table: Lookup for land-use class -> suitability tier
        method: Combination method ("product" or "weighted_sum")

    Returns:
        SuitabilityCombiner with uniform weights.

    Example:
        >>> scorer = create_meuse_scorer()
        >>> scores = scorer.score({
        ...     "ffreq": [1, 2, 3],
        ...     "landuse": ["W", "Am", "DEN"],
        ...     "lead": [299.0, 100.0, 50.0],
        ...     "cadmium": [11.7, 3.2, 0.8],
        ...     "elev": [7.9, 8.5, 9.4],
        ... })
    """
    return SuitabilityCombiner(
        name="meuse_suitability",
        method=method,
        factors=[
            SuitabilityFactor(name="ffreq", transform="recode", table=flood_table),
            SuitabilityFactor(name="landuse", transform="recode", table=landuse_table),
            SuitabilityFactor(name="lead", transform="invert"),
            SuitabilityFactor(name="cadmium", transform="invert"),
            SuitabilityFactor(name="elev", transform="normalize"),
        ],
    )


def get_required_inputs() -> tuple[str, ...]:
    """Return the sample attribute names the default scorer reads."""
    return REQUIRED_INPUTS


DEFAULT_MEUSE_SCORER = create_meuse_scorer()
DEFAULT_MEUSE_CONFIG = DEFAULT_MEUSE_SCORER.to_dict()
