"""
Suitability surface pipeline.

Runs the stages in order, with no state kept between runs:

1. read factor attributes from the sample points
2. rescale/recode each attribute into a normalized factor
3. combine factors into one score per point and renormalize
4. interpolate point scores onto the reference grid (IDW)
5. mask the surface to the reference raster's valid footprint

Example:
    from src.pipeline import SuitabilityPipeline, PipelineConfig
    from src.raster import create_mock_meuse_data

    samples, reference = create_mock_meuse_data(seed=1)
    pipeline = SuitabilityPipeline(config=PipelineConfig(k=7, power=0.5))
    result = pipeline.run(samples, reference)
    result.suitability.describe()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import geopandas as gpd
import numpy as np

from src.config import DEFAULT_IDW_NEIGHBOURS, DEFAULT_IDW_POWER
from src.raster.data_loading import SamplePoints
from src.raster.grid import RasterGrid
from src.raster.interpolation import EmptyInputError, idw_to_grid
from src.raster.masking import mask_grid
from src.scoring.combiner import SuitabilityCombiner
from src.scoring.configs.meuse import create_meuse_scorer
from src.scoring.transforms import normalize_by_max

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Interpolation and weighting settings for one pipeline run."""

    k: int = DEFAULT_IDW_NEIGHBOURS
    """Number of nearest samples used per cell (default: 7)."""

    power: float = DEFAULT_IDW_POWER
    """Inverse-distance exponent (default: 0.5)."""

    max_distance: Optional[float] = None
    """Ignore samples farther than this from a cell (default: no limit)."""

    weights: Dict[str, float] = field(default_factory=dict)
    """Per-factor weight overrides; unlisted factors keep their weight."""

    method: Optional[str] = None
    """Override the scorer's combination method ("product" or "weighted_sum")."""

    def __post_init__(self):
        if self.k < 1:
            raise ValueError(f"k must be at least 1, got {self.k}")
        if self.power < 0:
            raise ValueError(f"power must be non-negative, got {self.power}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "k": self.k,
            "power": self.power,
            "max_distance": self.max_distance,
            "weights": dict(self.weights),
            "method": self.method,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineConfig":
        """Deserialize from dictionary."""
        return cls(
            k=data.get("k", DEFAULT_IDW_NEIGHBOURS),
            power=data.get("power", DEFAULT_IDW_POWER),
            max_distance=data.get("max_distance"),
            weights=dict(data.get("weights", {})),
            method=data.get("method"),
        )


@dataclass
class SuitabilityResult:
    """Everything one pipeline run produced."""

    factors: Dict[str, np.ndarray]
    raw_scores: np.ndarray
    scores: np.ndarray
    interpolated: RasterGrid
    suitability: RasterGrid

    def scored_samples(self, samples: SamplePoints) -> gpd.GeoDataFrame:
        """Sample points with their normalized factors and final score."""
        columns = {f"{name}_factor": values for name, values in self.factors.items()}
        return samples.to_geodataframe(**columns, suitability=self.scores)


class SuitabilityPipeline:
    """
    Loader -> rescaler -> combiner -> interpolator -> masker.

    Args:
        scorer: Combiner defining the factors (default: floodplain scorer)
        config: Interpolation and weighting settings
    """

    def __init__(
        self,
        scorer: Optional[SuitabilityCombiner] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.config = config or PipelineConfig()
        scorer = scorer or create_meuse_scorer()

        if self.config.weights:
            scorer = scorer.with_weights(self.config.weights)
        if self.config.method is not None and self.config.method != scorer.method:
            scorer = SuitabilityCombiner(name=scorer.name, factors=scorer.factors, method=self.config.method)
        self.scorer = scorer

    def score_samples(self, samples: SamplePoints) -> tuple[Dict[str, np.ndarray], np.ndarray, np.ndarray]:
        """
        Compute normalized factors and scores for every sample point.

        Returns:
            (factors, raw_scores, scores) where scores are renormalized so
            the maximum is 1.0
        """
        if len(samples) == 0:
            raise EmptyInputError("Sample point set is empty")

        inputs = {name: samples[name] for name in self.scorer.factor_names}
        factors = self.scorer.get_factor_scores(inputs)
        for name, values in factors.items():
            logger.info(
                f"  Factor {name}: min={np.nanmin(values):.3f}, max={np.nanmax(values):.3f}, "
                f"zeros={int(np.sum(values == 0))}"
            )

        raw_scores = self.scorer.combine(factors)
        scores = normalize_by_max(raw_scores, label=f"{self.scorer.name} scores")
        logger.info(
            f"  Combined ({self.scorer.method}): {int(np.sum(raw_scores == 0))} of {len(samples)} "
            f"points scored 0"
        )
        return factors, raw_scores, scores

    def run(self, samples: SamplePoints, reference: RasterGrid) -> SuitabilityResult:
        """
        Run all stages on one sample set and reference raster.

        Args:
            samples: Sample points with every factor attribute
            reference: Grid defining the output geometry and valid footprint

        Returns:
            SuitabilityResult

        Raises:
            EmptyInputError: If samples is empty
            NormalizationError: If any factor or the combined score has a zero maximum
            KeyError: If a factor attribute is missing from samples
        """
        logger.info(f"Scoring {len(samples)} samples with '{self.scorer.name}'")
        factors, raw_scores, scores = self.score_samples(samples)

        interpolated = idw_to_grid(
            samples.xy,
            scores,
            reference,
            k=self.config.k,
            power=self.config.power,
            max_distance=self.config.max_distance,
            name="suitability_idw",
        )
        suitability = mask_grid(interpolated, reference, name="suitability")

        summary = suitability.describe()
        logger.info(f"Suitability surface: {summary['valid_cells']} valid cells")
        return SuitabilityResult(
            factors=factors,
            raw_scores=raw_scores,
            scores=scores,
            interpolated=interpolated,
            suitability=suitability,
        )
