"""
Factor rescaling functions.

All rescalers convert raw attribute values into normalized factors in the
range [0, 1].

Rescaling types:
1. normalize_by_max - divide by the largest observed value (higher is better)
2. invert - complement of a normalized factor (lower is better)

A zero maximum cannot be normalized and raises NormalizationError instead of
producing NaN or Inf.
"""

import logging
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)

# Type alias for values that can be scalar or array
NumericType = Union[float, np.ndarray]


class NormalizationError(ZeroDivisionError):
    """Raised when a set of values has no positive maximum to divide by."""

    pass


def _max_or_raise(values: np.ndarray, label: str) -> float:
    """Return the finite maximum of values, raising if it is zero or undefined."""
    if values.size == 0 or not np.any(np.isfinite(values)):
        raise NormalizationError(f"Cannot normalize {label}: no finite values")

    vmax = float(np.nanmax(values))
    if vmax == 0.0:
        raise NormalizationError(f"Cannot normalize {label}: maximum value is 0")
    if vmax < 0.0:
        raise NormalizationError(
            f"Cannot normalize {label}: maximum value {vmax} is negative"
        )
    return vmax


def normalize_by_max(
    value: NumericType,
    invert: bool = False,
    label: str = "values",
) -> NumericType:
    """
    Normalize values by dividing by their maximum.

    Args:
        value: Raw non-negative input value(s)
        invert: If True, return 1 - value / max (lower is better)
        label: Name used in error messages

    Returns:
        Factor in [0, 1]; the maximum input maps to 1.0 (0.0 when inverted)

    Raises:
        NormalizationError: If the maximum is zero, negative or not finite

    Example:
        >>> normalize_by_max(np.array([1.0, 2.0, 4.0]))
        array([0.25, 0.5 , 1.  ])
        >>> normalize_by_max(np.array([1.0, 2.0, 4.0]), invert=True)
        array([0.75, 0.5 , 0.  ])
    """
    value = np.asarray(value, dtype=float)
    vmax = _max_or_raise(value, label)

    result = value / vmax
    if invert:
        result = 1.0 - result

    # Return scalar if input was scalar
    if result.ndim == 0:
        return float(result)
    return result


def invert(value: NumericType) -> NumericType:
    """
    Complement a normalized factor.

    Args:
        value: Normalized factor(s) in [0, 1]

    Returns:
        1 - value

    Example:
        >>> invert(0.25)
        0.75
    """
    value = np.asarray(value, dtype=float)
    result = 1.0 - value

    if result.ndim == 0:
        return float(result)
    return result


def rescale_factor(
    value: NumericType,
    invert: bool = False,
    label: str = "values",
) -> NumericType:
    """
    Rescale a numeric attribute onto [0, 1].

    Negative values are clipped to zero before normalization so the result
    stays within [0, 1]. Missing (NaN) or infinite raw values are rejected.

    Args:
        value: Raw input value(s)
        invert: If True, low raw values score high
        label: Name used in error messages and log output

    Returns:
        Factor in [0, 1]

    Raises:
        ValueError: If any raw value is NaN or infinite
        NormalizationError: If the maximum is zero
    """
    value = np.asarray(value, dtype=float)
    missing = ~np.isfinite(value)
    if np.any(missing):
        raise ValueError(
            f"Cannot rescale {label}: {int(np.sum(missing))} of {value.size} value(s) "
            f"are missing or infinite"
        )
    if np.any(value < 0):
        logger.warning(f"Clipping {int(np.sum(value < 0))} negative {label} value(s) to 0")
        value = np.clip(value, 0.0, None)
    return normalize_by_max(value, invert=invert, label=label)
