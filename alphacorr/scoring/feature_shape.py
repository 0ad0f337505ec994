"""Feature-shape correlation of two traces on different time grids.

Compares two intensity traces that may describe the same elution event seen
by two signal sources (e.g. an MS1 feature and an MS2 fragment EIC).

Procedure
---------
1. Drop points below the noise floor in both traces
2. Determine the overlapping time range
3. Pick the reference grid: the trace with more points inside the overlap,
   trace A on ties
4. Linearly interpolate the other trace onto the reference time points
5. Score the aligned pair (Pearson r, cosine similarity)
6. ``valid = n >= min_corr_points`` and both scores defined

Argument order matters: with a different reference grid the interpolation
direction changes, so ``corr(a, b)`` and ``corr(b, a)`` may differ slightly
when both traces have the same number of overlapping points.

Examples
--------
>>> x = np.arange(-2.0, 2.05, 0.1)
>>> y = np.exp(-0.5 * (x / 0.25) ** 2)
>>> result = corr_feature_shape(x, y, x + 0.05, np.exp(-0.5 * ((x + 0.05) / 0.25) ** 2), 5)
>>> result.valid, result.pearson_r  # (True, ~0.99)
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from numba import njit

from ..config import DEFAULT_INTERPOLATION_ORDER, CorrelationParams
from ..series.interpolation import as_kernel_array, interpolate_linear
from ..series.timeseries import SeriesLike, validate_series_arrays
from .correlation_data import CorrelationData
from .similarity import score_pair_kernel


@njit(nogil=True, cache=True)
def align_feature_shapes(
    a_rts: np.ndarray,
    a_intensities: np.ndarray,
    b_rts: np.ndarray,
    b_intensities: np.ndarray,
    noise_floor: float,
) -> Tuple[np.ndarray, np.ndarray, bool]:
    """Align two traces on a common grid inside their overlap (Numba kernel).

    Parameters
    ----------
    a_rts, a_intensities : np.ndarray (float64)
        Trace A, times strictly increasing
    b_rts, b_intensities : np.ndarray (float64)
        Trace B, times strictly increasing
    noise_floor : float
        Points with intensity below this value are dropped first

    Returns
    -------
    a_values : np.ndarray (float64)
        Intensities of A on the reference grid
    b_values : np.ndarray (float64)
        Intensities of B on the reference grid
    reference_is_a : bool
        True if A's time points were used as the grid

    Notes
    -----
    Returns empty arrays if either trace is empty after filtering or the
    traces do not overlap.
    """
    a_keep = a_intensities >= noise_floor
    b_keep = b_intensities >= noise_floor
    a_t = a_rts[a_keep]
    a_v = a_intensities[a_keep]
    b_t = b_rts[b_keep]
    b_v = b_intensities[b_keep]

    empty = np.zeros(0, dtype=np.float64)
    if len(a_t) == 0 or len(b_t) == 0:
        return empty, empty, True

    lower = max(a_t[0], b_t[0])
    upper = min(a_t[-1], b_t[-1])
    if lower > upper:
        return empty, empty, True

    a_in = (a_t >= lower) & (a_t <= upper)
    b_in = (b_t >= lower) & (b_t <= upper)
    n_a = np.sum(a_in)
    n_b = np.sum(b_in)

    if n_b > n_a:
        grid = b_t[b_in]
        return interpolate_linear(grid, a_t, a_v), b_v[b_in], False

    grid = a_t[a_in]
    return a_v[a_in], interpolate_linear(grid, b_t, b_v), True


@njit(nogil=True, cache=True)
def corr_feature_shape_kernel(
    a_rts: np.ndarray,
    a_intensities: np.ndarray,
    b_rts: np.ndarray,
    b_intensities: np.ndarray,
    noise_floor: float,
) -> Tuple[int, float, float]:
    """(n, pearson r, cosine similarity) of two traces (Numba kernel).

    Scores are NaN when fewer than 2 points could be aligned.
    """
    a_values, b_values, _ = align_feature_shapes(
        a_rts, a_intensities, b_rts, b_intensities, noise_floor
    )
    n = len(a_values)
    if n < 2:
        return n, np.nan, np.nan
    r, cos = score_pair_kernel(a_values, b_values)
    return n, r, cos


def corr_feature_shape(
    a_rts,
    a_intensities,
    b_rts,
    b_intensities,
    min_corr_points: int,
    interpolation_order: int = DEFAULT_INTERPOLATION_ORDER,
    noise_floor: float = 0.0,
) -> CorrelationData:
    """Correlate the shapes of two traces sampled on different time grids.

    Parameters
    ----------
    a_rts, a_intensities : array-like
        Trace A (e.g. MS1 feature), times strictly increasing
    b_rts, b_intensities : array-like
        Trace B (e.g. MS2 fragment EIC), times strictly increasing
    min_corr_points : int
        Minimum aligned points for a valid result (>= 2)
    interpolation_order : int, default=2
        Interpolation hint; only linear (1 or 2) is supported
    noise_floor : float, default=0.0
        Points below this intensity are excluded

    Returns
    -------
    CorrelationData
        ``valid`` is False when fewer than ``min_corr_points`` points
        overlap or a score is undefined

    Raises
    ------
    ConfigurationError
        For invalid parameters
    InvalidSeriesError
        For malformed traces
    """
    params = CorrelationParams(
        min_corr_points=min_corr_points,
        noise_floor=noise_floor,
        interpolation_order=interpolation_order,
    )
    a_t, a_v = validate_series_arrays(a_rts, a_intensities)
    b_t, b_v = validate_series_arrays(b_rts, b_intensities)
    return _correlate(a_t, a_v, b_t, b_v, params)


def _correlate(
    a_t: np.ndarray,
    a_v: np.ndarray,
    b_t: np.ndarray,
    b_v: np.ndarray,
    params: CorrelationParams,
) -> CorrelationData:
    n, r, cos = corr_feature_shape_kernel(
        as_kernel_array(a_t),
        as_kernel_array(a_v),
        as_kernel_array(b_t),
        as_kernel_array(b_v),
        float(params.noise_floor),
    )
    return CorrelationData.from_scores(n, r, cos, params.min_corr_points)


class FeatureShapeCorrelator:
    """Feature-shape correlation with a fixed, validated parameter set.

    Parameters
    ----------
    params : CorrelationParams, optional
        Correlation parameters (default: ``CorrelationParams()``)

    Examples
    --------
    >>> correlator = FeatureShapeCorrelator(CorrelationParams(min_corr_points=5))
    >>> result = correlator.correlate(ms1_series, ms2_series)
    >>> if result.valid and result.r_squared > 0.8:
    ...     print("co-eluting")
    """

    def __init__(self, params: Optional[CorrelationParams] = None):
        self.params = params if params is not None else CorrelationParams()

    @property
    def min_corr_points(self) -> int:
        return self.params.min_corr_points

    def correlate(self, a: SeriesLike, b: SeriesLike) -> CorrelationData:
        """Correlate two series; ``a`` is the reference grid on ties."""
        return _correlate(a.times(), a.intensities(), b.times(), b.intensities(), self.params)

    def correlate_arrays(self, a_rts, a_intensities, b_rts, b_intensities) -> CorrelationData:
        """Correlate raw arrays after validating them."""
        a_t, a_v = validate_series_arrays(a_rts, a_intensities)
        b_t, b_v = validate_series_arrays(b_rts, b_intensities)
        return _correlate(a_t, a_v, b_t, b_v, self.params)

    def aligned_shapes(self, a: SeriesLike, b: SeriesLike) -> Tuple[np.ndarray, np.ndarray]:
        """Aligned intensity vectors (A side, B side) used for scoring."""
        a_values, b_values, _ = align_feature_shapes(
            as_kernel_array(a.times()),
            as_kernel_array(a.intensities()),
            as_kernel_array(b.times()),
            as_kernel_array(b.intensities()),
            float(self.params.noise_floor),
        )
        return a_values, b_values

    def __repr__(self) -> str:
        return f"FeatureShapeCorrelator({self.params})"
