"""
Inverse-distance weighted (IDW) interpolation of point samples onto grids.

Each target location is predicted as the weighted average of its K nearest
samples, with weight 1 / distance**power. A target that coincides with a
sample takes that sample's value exactly.

Every target is computed independently from read-only inputs, so targets can
be evaluated in any order or in separate chunks.
"""

import logging
from typing import Optional

import numpy as np
from scipy.spatial import cKDTree

from src.config import DEFAULT_IDW_NEIGHBOURS, DEFAULT_IDW_POWER
from src.raster.grid import RasterGrid

logger = logging.getLogger(__name__)


class EmptyInputError(ValueError):
    """Raised when there are no sample points to interpolate from."""

    pass


def _as_xy(coords, label: str) -> np.ndarray:
    """Coerce coordinates to an (n, 2) float array."""
    coords = np.asarray(coords, dtype=float)
    if coords.size == 0:
        return coords.reshape(0, 2)
    if coords.ndim == 1 and coords.shape[0] == 2:
        coords = coords.reshape(1, 2)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise ValueError(f"{label} must have shape (n, 2), got {coords.shape}")
    return coords


def idw_interpolate(
    sample_xy,
    sample_values,
    target_xy,
    k: int = DEFAULT_IDW_NEIGHBOURS,
    power: float = DEFAULT_IDW_POWER,
    max_distance: Optional[float] = None,
    chunk_size: int = 65536,
) -> np.ndarray:
    """
    Predict values at target locations from scattered samples.

    Args:
        sample_xy: (n, 2) sample coordinates
        sample_values: n sample values; NaN samples are ignored
        target_xy: (m, 2) target coordinates
        k: Number of nearest samples to use; all samples if k > n (default: 7)
        power: Distance exponent p in weight = 1 / d**p (default: 0.5)
        max_distance: Ignore samples farther than this (default: no limit)
        chunk_size: Targets evaluated per KD-tree query

    Returns:
        m predicted values. Targets with no sample within max_distance are NaN.

    Raises:
        EmptyInputError: If there are no (non-NaN) samples
        ValueError: If k < 1, power < 0 or input shapes disagree

    Example:
        >>> idw_interpolate([(0, 0), (10, 0)], [0.2, 0.8], [(5, 0)], k=2, power=1)
        array([0.5])
    """
    sample_xy = _as_xy(sample_xy, "sample_xy")
    sample_values = np.asarray(sample_values, dtype=float).ravel()
    target_xy = _as_xy(target_xy, "target_xy")

    if len(sample_values) != len(sample_xy):
        raise ValueError(
            f"Got {len(sample_xy)} sample locations but {len(sample_values)} values"
        )
    if len(sample_values) == 0:
        raise EmptyInputError("No sample points to interpolate from")
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    if power < 0:
        raise ValueError(f"power must be non-negative, got {power}")
    if max_distance is not None and max_distance <= 0:
        raise ValueError(f"max_distance must be positive, got {max_distance}")

    usable = np.isfinite(sample_values) & np.all(np.isfinite(sample_xy), axis=1)
    if not np.all(usable):
        logger.warning(f"Ignoring {int(np.sum(~usable))} sample(s) with missing value or location")
        sample_xy = sample_xy[usable]
        sample_values = sample_values[usable]
        if len(sample_values) == 0:
            raise EmptyInputError("All sample points have missing values")

    n_samples = len(sample_values)
    k_eff = min(int(k), n_samples)
    if k_eff < k:
        logger.debug(f"k={k} exceeds {n_samples} samples, using all samples")

    result = np.full(len(target_xy), np.nan, dtype=float)
    if len(target_xy) == 0:
        return result

    tree = cKDTree(sample_xy)
    upper_bound = np.inf if max_distance is None else float(max_distance)

    for start in range(0, len(target_xy), chunk_size):
        stop = min(start + chunk_size, len(target_xy))
        result[start:stop] = _idw_chunk(
            tree, sample_values, target_xy[start:stop], k_eff, power, upper_bound
        )

    return result


def _idw_chunk(
    tree: cKDTree,
    sample_values: np.ndarray,
    targets: np.ndarray,
    k: int,
    power: float,
    upper_bound: float,
) -> np.ndarray:
    """IDW prediction for one block of targets."""
    distances, indices = tree.query(targets, k=k, distance_upper_bound=upper_bound)
    if k == 1:
        distances = distances[:, np.newaxis]
        indices = indices[:, np.newaxis]

    # Missing neighbours come back as distance=inf, index=n
    in_range = np.isfinite(distances)
    neighbour_values = sample_values[np.where(in_range, indices, 0)]

    exact = in_range & (distances == 0.0)
    n_exact = exact.sum(axis=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        weights = np.where(in_range & ~exact, 1.0 / np.power(distances, power), 0.0)
        weight_sum = weights.sum(axis=1)
        blended = (weights * neighbour_values).sum(axis=1) / weight_sum
        coincident = np.where(exact, neighbour_values, 0.0).sum(axis=1) / n_exact

    predicted = np.where(n_exact > 0, coincident, blended)
    predicted[(n_exact == 0) & (weight_sum == 0)] = np.nan
    return predicted


def idw_to_grid(
    sample_xy,
    sample_values,
    template: RasterGrid,
    k: int = DEFAULT_IDW_NEIGHBOURS,
    power: float = DEFAULT_IDW_POWER,
    max_distance: Optional[float] = None,
    name: str = "idw",
) -> RasterGrid:
    """
    Interpolate samples onto every cell centre of a template grid.

    Only the template's geometry is used; its values are ignored.

    Args:
        sample_xy: (n, 2) sample coordinates
        sample_values: n sample values
        template: Grid defining extent and resolution of the output
        k: Number of nearest samples (default: 7)
        power: Distance exponent (default: 0.5)
        max_distance: Optional search radius
        name: Name of the output layer

    Returns:
        RasterGrid aligned with template
    """
    xs, ys = template.cell_centers()
    targets = np.column_stack([xs.ravel(), ys.ravel()])

    logger.info(
        f"IDW interpolation: {len(np.atleast_1d(sample_values))} samples -> "
        f"{targets.shape[0]} cells (k={k}, power={power})"
    )

    predicted = idw_interpolate(
        sample_xy,
        sample_values,
        targets,
        k=k,
        power=power,
        max_distance=max_distance,
    )
    return template.with_data(predicted.reshape(template.shape), name=name)
