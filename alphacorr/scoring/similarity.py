"""Similarity measures for aligned intensity vectors.

Pearson correlation and cosine similarity between two equal-length vectors,
with a fixed policy for degenerate input: the functions never raise for
numeric degeneracy and return NaN instead. Deciding whether a result is
usable is left to the caller.

Degenerate cases
----------------
- Pearson r: fewer than 2 points, or either vector constant -> NaN
- Cosine similarity: either vector all zero (or empty) -> NaN

Performance
-----------
- All kernels Numba-compiled with ``nogil=True`` so threads score in parallel
- All-vs-all profile matrices parallelised with ``prange``

Examples
--------
>>> profile1 = np.array([0.0, 10.0, 100.0, 50.0, 5.0])
>>> profile2 = np.array([0.0, 12.0, 95.0, 48.0, 6.0])
>>> pearson_r(profile1, profile2)  # > 0.99
>>> cosine_similarity(profile1, np.zeros(5))  # nan
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np
from numba import njit, prange


class SimilarityMeasure(Enum):
    """Similarity measures reported for a pairwise comparison."""
    PEARSON = "pearson"
    COSINE_SIM = "cosine_similarity"
    R_SQUARED = "r_squared"


@njit(nogil=True, cache=True)
def _is_constant(values: np.ndarray) -> bool:
    first = values[0]
    for i in range(1, len(values)):
        if values[i] != first:
            return False
    return True


@njit(nogil=True, cache=True)
def pearson_r_kernel(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson correlation coefficient (Numba kernel, no length check).

    ``sum((x - mx)(y - my)) / sqrt(sum((x - mx)^2) * sum((y - my)^2))``,
    clamped to [-1, 1]; NaN for fewer than 2 points or a constant vector.
    """
    n = len(x)
    if n < 2:
        return np.nan
    if _is_constant(x) or _is_constant(y):
        return np.nan

    mean_x = 0.0
    mean_y = 0.0
    for i in range(n):
        mean_x += x[i]
        mean_y += y[i]
    mean_x /= n
    mean_y /= n

    sxy = 0.0
    sxx = 0.0
    syy = 0.0
    for i in range(n):
        dx = x[i] - mean_x
        dy = y[i] - mean_y
        sxy += dx * dy
        sxx += dx * dx
        syy += dy * dy

    if sxx == 0.0 or syy == 0.0:
        return np.nan

    r = sxy / np.sqrt(sxx * syy)
    return max(-1.0, min(1.0, r))


@njit(nogil=True, cache=True)
def cosine_similarity_kernel(x: np.ndarray, y: np.ndarray) -> float:
    """Cosine similarity (Numba kernel, no length check).

    ``dot(x, y) / (||x|| * ||y||)`` clamped to [-1, 1], which is [0, 1] for
    non-negative intensities; NaN if either vector is all zero.
    """
    dot_product = 0.0
    norm1 = 0.0
    norm2 = 0.0

    for i in range(len(x)):
        dot_product += x[i] * y[i]
        norm1 += x[i] * x[i]
        norm2 += y[i] * y[i]

    if norm1 == 0.0 or norm2 == 0.0:
        return np.nan

    similarity = dot_product / (np.sqrt(norm1) * np.sqrt(norm2))
    return max(-1.0, min(1.0, similarity))


@njit(nogil=True, cache=True)
def score_pair_kernel(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    """(pearson r, cosine similarity) of two aligned vectors (Numba kernel)."""
    return pearson_r_kernel(x, y), cosine_similarity_kernel(x, y)


def _aligned(x, y) -> Tuple[np.ndarray, np.ndarray]:
    xa = np.ascontiguousarray(x, dtype=np.float64)
    ya = np.ascontiguousarray(y, dtype=np.float64)
    if xa.shape != ya.shape or xa.ndim != 1:
        raise ValueError(f"Vectors must be 1D with the same length, got {xa.shape} and {ya.shape}")
    return xa, ya


def pearson_r(x, y) -> float:
    """Pearson correlation of two equal-length vectors, NaN if undefined.

    Parameters
    ----------
    x, y : array-like
        Aligned intensity vectors

    Returns
    -------
    float
        r in [-1, 1], or NaN for fewer than 2 points or a constant vector

    Raises
    ------
    ValueError
        If the vectors differ in length
    """
    xa, ya = _aligned(x, y)
    return float(pearson_r_kernel(xa, ya))


def cosine_similarity(x, y) -> float:
    """Cosine similarity of two equal-length vectors, NaN if either is all zero.

    Examples
    --------
    >>> profile1 = np.array([10.0, 100.0, 50.0])
    >>> profile2 = np.array([20.0, 200.0, 100.0])  # Same shape, 2x intensity
    >>> cosine_similarity(profile1, profile2)  # 1.0
    """
    xa, ya = _aligned(x, y)
    return float(cosine_similarity_kernel(xa, ya))


def score_pair(x, y) -> Tuple[float, float]:
    """Pearson r and cosine similarity of two aligned vectors."""
    xa, ya = _aligned(x, y)
    r, cos = score_pair_kernel(xa, ya)
    return float(r), float(cos)


def similarity(x, y, measure: SimilarityMeasure) -> float:
    """Similarity of two aligned vectors for the requested measure."""
    if measure is SimilarityMeasure.PEARSON:
        return pearson_r(x, y)
    if measure is SimilarityMeasure.COSINE_SIM:
        return cosine_similarity(x, y)
    if measure is SimilarityMeasure.R_SQUARED:
        r = pearson_r(x, y)
        return r * r
    raise ValueError(f"Unknown similarity measure: {measure}")


@njit(parallel=True, cache=True)
def correlate_profiles_matrix(profiles: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """All-vs-all Pearson and cosine scores of equally gridded profiles.

    Parameters
    ----------
    profiles : np.ndarray (float64)
        2D array of profiles [n_profiles, n_points] on a shared grid

    Returns
    -------
    pearson : np.ndarray (float64)
        Symmetric [n_profiles, n_profiles] matrix, NaN where undefined
    cosine : np.ndarray (float64)
        Symmetric [n_profiles, n_profiles] matrix, NaN where undefined

    Notes
    -----
    - Rows are processed in parallel (prange), each pair computed once
    - The diagonal holds the self-similarity (1.0 unless degenerate)
    """
    n_profiles = profiles.shape[0]
    pearson = np.empty((n_profiles, n_profiles), dtype=np.float64)
    cosine = np.empty((n_profiles, n_profiles), dtype=np.float64)

    for i in prange(n_profiles):
        for j in range(i, n_profiles):
            r = pearson_r_kernel(profiles[i], profiles[j])
            c = cosine_similarity_kernel(profiles[i], profiles[j])
            pearson[i, j] = r
            pearson[j, i] = r
            cosine[i, j] = c
            cosine[j, i] = c

    return pearson, cosine


def find_coeluting_profiles(
    profiles: np.ndarray,
    min_similarity: float = 0.8,
    reference_idx: int = 0,
    measure: SimilarityMeasure = SimilarityMeasure.COSINE_SIM,
) -> np.ndarray:
    """Find profiles that co-elute with a reference profile.

    Parameters
    ----------
    profiles : np.ndarray
        2D array of profiles [n_profiles, n_points] on a shared grid
    min_similarity : float, default=0.8
        Minimum similarity for co-elution
    reference_idx : int, default=0
        Index of the reference profile
    measure : SimilarityMeasure
        Measure compared against ``min_similarity``

    Returns
    -------
    np.ndarray (bool)
        True for co-eluting profiles; the reference is always included.
        Undefined similarities (NaN) never count as co-elution.

    Examples
    --------
    >>> profiles = np.array([
    ...     [10.0, 100.0, 50.0],
    ...     [12.0, 95.0, 48.0],   # Similar to reference
    ...     [50.0, 10.0, 100.0],  # Different pattern
    ... ])
    >>> find_coeluting_profiles(profiles, min_similarity=0.8)  # [True, True, False]
    """
    profiles = np.ascontiguousarray(profiles, dtype=np.float64)
    n_profiles = profiles.shape[0]
    coeluting = np.zeros(n_profiles, dtype=np.bool_)
    coeluting[reference_idx] = True

    ref_profile = profiles[reference_idx]
    for i in range(n_profiles):
        if i == reference_idx:
            continue
        value = similarity(ref_profile, profiles[i], measure)
        # NaN >= x is False: undefined is no evidence
        if value >= min_similarity:
            coeluting[i] = True

    return coeluting
