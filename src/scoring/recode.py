"""
Categorical recoding via lookup tables.

A LookupTable maps category codes to numeric substitutes. Tables are
immutable values: they are passed explicitly into the recoder so that
several scorers with different recode policies can coexist.

Codes are compared by their string form, so the integer class 1, the float
1.0 read from a CSV and the string "1" all resolve to the same entry.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import numpy as np

from src.config import DEFAULT_RECODE_FALLBACK

logger = logging.getLogger(__name__)


def _code_key(code: Any) -> str:
    """Canonical string form of a category code."""
    if isinstance(code, (float, np.floating)) and float(code).is_integer():
        return str(int(code))
    if isinstance(code, (int, np.integer)) and not isinstance(code, bool):
        return str(int(code))
    return str(code).strip()


@dataclass(frozen=True)
class LookupTable:
    """
    Ordered, read-only mapping from category code to numeric value.

    Attributes:
        name: Identifier used in log messages
        mapping: Category code -> numeric substitute
        default: Value used for codes missing from the mapping
    """

    name: str
    mapping: Mapping[str, float]
    default: float = DEFAULT_RECODE_FALLBACK

    def __post_init__(self):
        lookup = {}
        for code, value in dict(self.mapping).items():
            key = _code_key(code)
            if key in lookup:
                raise ValueError(f"Lookup table '{self.name}' has duplicate code '{key}'")
            lookup[key] = float(value)

        object.__setattr__(self, "mapping", MappingProxyType(dict(lookup)))
        object.__setattr__(self, "default", float(self.default))

    def __contains__(self, code: Any) -> bool:
        return _code_key(code) in self.mapping

    def __len__(self) -> int:
        return len(self.mapping)

    def get(self, code: Any) -> float:
        """Return the value for code, or the table default."""
        return self.mapping.get(_code_key(code), self.default)

    @property
    def max_value(self) -> float:
        """Largest value a code can resolve to (including the default)."""
        return max(list(self.mapping.values()) + [self.default])

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"name": self.name, "mapping": dict(self.mapping), "default": self.default}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LookupTable":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            mapping=data["mapping"],
            default=data.get("default", DEFAULT_RECODE_FALLBACK),
        )


def find_unmatched(values: Iterable[Any], table: LookupTable) -> dict[str, int]:
    """
    Count the codes in values that the table does not resolve.

    Args:
        values: Raw category codes
        table: Lookup table to check against

    Returns:
        Mapping of unmatched code -> number of occurrences
    """
    counts = Counter(_code_key(v) for v in values if v not in table)
    return dict(counts)


def recode(values: Iterable[Any], table: LookupTable) -> np.ndarray:
    """
    Replace each category code with its numeric substitute.

    Codes missing from the table take the table default instead of failing.
    The fallback is reported as a single warning per call.

    Args:
        values: Raw category codes (strings, ints or floats)
        table: Lookup table to apply

    Returns:
        Float array of the same length as values, with no missing entries

    Example:
        >>> table = LookupTable("landuse", {"W": 3, "DEN": 0})
        >>> recode(["W", "DEN", "XX"], table)
        array([3., 0., 0.])
    """
    values = list(np.asarray(values, dtype=object).ravel())
    result = np.array([table.get(v) for v in values], dtype=float)

    unmatched = find_unmatched(values, table)
    if unmatched:
        summary = ", ".join(f"{code!r} x{count}" for code, count in sorted(unmatched.items()))
        logger.warning(
            f"Lookup table '{table.name}': {sum(unmatched.values())} value(s) not in table, "
            f"using default {table.default}: {summary}"
        )

    return result
