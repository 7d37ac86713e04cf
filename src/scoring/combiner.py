"""
Factor combination system for multi-criteria suitability scoring.

Provides:
- SuitabilityFactor: Defines a single factor with its rescaling transform and weight
- SuitabilityCombiner: Combines multiple factors into one score per location

Combination methods:
- product: Weighted product, score = prod(f_i ** w_i). Any factor at 0 vetoes
  the location. With the default uniform weights this is the plain product.
- weighted_sum: score = sum(w_i * f_i) / sum(w_i). No veto.

Recode factors are divided by the largest recoded value present in the data.
Under product this cancels in the final renormalization, but under
weighted_sum it lifts a recode factor when its best class is absent. Set
scale_to_table=True to divide by the lookup table's top value instead.

Scores are renormalized by their maximum so the best location scores 1.0.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Optional, Union

import numpy as np

from src.config import DEFAULT_COMBINE_METHOD
from src.scoring.recode import LookupTable, recode
from src.scoring.transforms import NormalizationError, normalize_by_max, rescale_factor

# Type alias
NumericType = Union[float, np.ndarray]

TRANSFORMS = ("normalize", "invert", "recode")
COMBINE_METHODS = ("product", "weighted_sum")


@dataclass
class SuitabilityFactor:
    """
    A single suitability factor with transform and weight.

    Attributes:
        name: Identifier for this factor (used as key in input dict)
        transform: "normalize" (higher is better), "invert" (lower is better)
                   or "recode" (categorical lookup, then normalize)
        table: Lookup table, required when transform="recode"
        weight: Salience weight, must be positive (default: 1.0)
        scale_to_table: Recode only. Divide by the table's largest value
                        instead of the largest value in the data
    """

    name: str
    transform: str
    table: Optional[LookupTable] = None
    weight: float = 1.0
    scale_to_table: bool = False

    def __post_init__(self):
        """Validate the factor configuration."""
        if self.transform not in TRANSFORMS:
            raise ValueError(
                f"Unknown transform '{self.transform}'. Available: {list(TRANSFORMS)}"
            )

        if self.transform == "recode" and self.table is None:
            raise ValueError(
                f"Factor '{self.name}' has transform='recode' but no lookup table."
            )

        if not self.weight > 0:
            raise ValueError(f"Factor '{self.name}' weight must be positive, got {self.weight}")

        if self.scale_to_table and self.transform != "recode":
            raise ValueError(f"Factor '{self.name}': scale_to_table requires transform='recode'")

    def apply(self, values) -> np.ndarray:
        """
        Rescale raw values into a normalized factor.

        Args:
            values: Raw attribute values for every location

        Returns:
            Normalized factor in [0, 1], same length as values
        """
        if self.transform == "recode":
            recoded = recode(values, self.table)
            if not self.scale_to_table:
                return normalize_by_max(recoded, label=self.name)
            top = self.table.max_value
            if not top > 0:
                raise NormalizationError(
                    f"Cannot normalize {self.name}: lookup table maximum is {top}"
                )
            return recoded / top

        return rescale_factor(values, invert=self.transform == "invert", label=self.name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "transform": self.transform,
            "table": self.table.to_dict() if self.table is not None else None,
            "weight": self.weight,
            "scale_to_table": self.scale_to_table,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuitabilityFactor":
        """Deserialize from dictionary."""
        table = data.get("table")
        return cls(
            name=data["name"],
            transform=data["transform"],
            table=LookupTable.from_dict(table) if table is not None else None,
            weight=data.get("weight", 1.0),
            scale_to_table=data.get("scale_to_table", False),
        )


@dataclass
class SuitabilityCombiner:
    """
    Combines multiple SuitabilityFactors into a suitability score.

    Attributes:
        name: Identifier for this combiner
        factors: List of SuitabilityFactor instances
        method: "product" (veto on any zero factor) or "weighted_sum"
    """

    name: str
    factors: list[SuitabilityFactor] = field(default_factory=list)
    method: Literal["product", "weighted_sum"] = DEFAULT_COMBINE_METHOD

    def __post_init__(self):
        """Validate the combiner configuration."""
        if self.method not in COMBINE_METHODS:
            raise ValueError(
                f"Unknown combine method '{self.method}'. Available: {list(COMBINE_METHODS)}"
            )

        names = [f.name for f in self.factors]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate factor names: {duplicates}")

    @property
    def factor_names(self) -> list[str]:
        return [f.name for f in self.factors]

    def get_factor_scores(self, inputs: dict[str, Any]) -> dict[str, np.ndarray]:
        """
        Get the normalized factor for each configured factor.

        Useful for debugging and visualization.

        Args:
            inputs: Dictionary mapping factor names to raw values

        Returns:
            Dictionary mapping factor names to normalized factors
        """
        scores = {}
        length = None
        for factor in self.factors:
            if factor.name not in inputs:
                raise KeyError(
                    f"Missing input for factor '{factor.name}'. "
                    f"Available inputs: {list(inputs.keys())}"
                )
            score = np.atleast_1d(factor.apply(inputs[factor.name]))
            if length is not None and len(score) != length:
                raise ValueError(
                    f"Factor '{factor.name}' has {len(score)} values, expected {length}"
                )
            length = len(score)
            scores[factor.name] = score
        return scores

    def combine(self, factor_scores: dict[str, np.ndarray]) -> np.ndarray:
        """
        Combine already-normalized factors without renormalizing.

        Args:
            factor_scores: Dictionary mapping factor names to normalized factors

        Returns:
            Combined score per location
        """
        if not self.factors:
            raise ValueError(f"Combiner '{self.name}' has no factors")

        if self.method == "product":
            result = np.ones_like(factor_scores[self.factors[0].name], dtype=float)
            for factor in self.factors:
                score = factor_scores[factor.name]
                if factor.weight == 1.0:
                    result = result * score
                else:
                    result = result * np.power(score, factor.weight)
            return result

        total_weight = sum(f.weight for f in self.factors)
        result = np.zeros_like(factor_scores[self.factors[0].name], dtype=float)
        for factor in self.factors:
            result = result + factor.weight * factor_scores[factor.name]
        return result / total_weight

    def compute(self, inputs: dict[str, Any]) -> np.ndarray:
        """
        Compute combined scores from raw input values.

        Args:
            inputs: Dictionary mapping factor names to raw values

        Returns:
            Combined score per location, before renormalization
        """
        return self.combine(self.get_factor_scores(inputs))

    def score(self, inputs: dict[str, Any]) -> np.ndarray:
        """
        Compute suitability scores renormalized so the maximum is 1.0.

        Args:
            inputs: Dictionary mapping factor names to raw values

        Returns:
            Suitability score per location in [0, 1]

        Raises:
            NormalizationError: If every combined score is 0
        """
        return normalize_by_max(self.compute(inputs), label=f"{self.name} scores")

    def with_weights(self, weights: dict[str, float]) -> "SuitabilityCombiner":
        """
        Return a copy of this combiner with some factor weights replaced.

        Args:
            weights: Factor name -> new weight

        Returns:
            New SuitabilityCombiner; this one is left unchanged
        """
        unknown = sorted(set(weights) - set(self.factor_names))
        if unknown:
            raise KeyError(f"Unknown factor(s) {unknown}. Available: {self.factor_names}")

        factors = [
            replace(f, weight=weights[f.name]) if f.name in weights else f for f in self.factors
        ]
        return replace(self, factors=factors)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "method": self.method,
            "factors": [f.to_dict() for f in self.factors],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuitabilityCombiner":
        """Deserialize from dictionary."""
        factors = [SuitabilityFactor.from_dict(f) for f in data["factors"]]
        return cls(
            name=data["name"],
            factors=factors,
            method=data.get("method", DEFAULT_COMBINE_METHOD),
        )
