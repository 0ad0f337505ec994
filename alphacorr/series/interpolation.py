"""Linear resampling of a series onto another series' time grid.

Edge policy
-----------
Reference time points outside the sampled domain ``[times[0], times[-1]]``
of the series being resampled are **excluded**: they are returned as NaN and
flagged False by :func:`available_mask`. No extrapolation and no reuse of
edge values takes place. A reference point lying exactly on a boundary gets
the boundary value.

Examples
--------
>>> ref_times = np.array([0.0, 0.5, 1.0, 1.5])
>>> times = np.array([0.0, 1.0])
>>> intensities = np.array([0.0, 10.0])
>>> interpolate_onto(ref_times, times, intensities)
array([ 0.,  5., 10., nan])
"""

from typing import Tuple

import numpy as np
from numba import njit

from .timeseries import SeriesLike


@njit(nogil=True, cache=True)
def _first_index_at_or_after(times: np.ndarray, t: float) -> int:
    """Binary search for the first index with ``times[idx] >= t``."""
    left, right = 0, len(times)
    while left < right:
        mid = (left + right) // 2
        if times[mid] < t:
            left = mid + 1
        else:
            right = mid
    return left


@njit(nogil=True, cache=True)
def interpolate_linear(
    ref_times: np.ndarray,
    times: np.ndarray,
    intensities: np.ndarray,
) -> np.ndarray:
    """Resample (times, intensities) onto ``ref_times`` (Numba kernel).

    Parameters
    ----------
    ref_times : np.ndarray (float64)
        Time points to report values for (strictly increasing)
    times : np.ndarray (float64)
        Time points of the series being resampled (strictly increasing)
    intensities : np.ndarray (float64)
        Intensities parallel to ``times``

    Returns
    -------
    np.ndarray (float64)
        One value per reference time, NaN outside the sampled domain

    Notes
    -----
    ``y = y0 + (t - t0) * (y1 - y0) / (t1 - t0)`` between the bracketing
    samples, ``y0`` when ``t1 == t0``.
    """
    n_ref = len(ref_times)
    n = len(times)
    out = np.empty(n_ref, dtype=np.float64)

    for i in range(n_ref):
        t = ref_times[i]
        if n == 0 or t < times[0] or t > times[n - 1]:
            out[i] = np.nan
            continue

        hi = _first_index_at_or_after(times, t)
        if times[hi] == t:
            out[i] = intensities[hi]
            continue

        # t > times[0], so hi >= 1
        lo = hi - 1
        t0 = times[lo]
        t1 = times[hi]
        y0 = intensities[lo]
        if t1 == t0:
            out[i] = y0
        else:
            out[i] = y0 + (t - t0) * (intensities[hi] - y0) / (t1 - t0)

    return out


def as_kernel_array(values) -> np.ndarray:
    """Contiguous, writable float64 array for the Numba kernels."""
    array = np.ascontiguousarray(values, dtype=np.float64)
    if not array.flags.writeable:
        array = array.copy()
    return array


def available_mask(ref_times, times) -> np.ndarray:
    """Boolean mask of reference points inside the sampled domain of ``times``."""
    ref = as_kernel_array(ref_times)
    t = as_kernel_array(times)
    if t.size == 0:
        return np.zeros(ref.size, dtype=np.bool_)
    return (ref >= t[0]) & (ref <= t[-1])


def interpolate_onto(ref_times, times, intensities) -> np.ndarray:
    """Resample a series onto reference time points.

    Parameters
    ----------
    ref_times : array-like
        Reference grid (series A)
    times, intensities : array-like
        Series B, possibly on a coarser or offset grid

    Returns
    -------
    np.ndarray
        Resampled intensities aligned 1:1 with ``ref_times``; NaN where the
        reference time lies outside B's domain

    Raises
    ------
    ValueError
        If ``times`` and ``intensities`` differ in length
    """
    t = as_kernel_array(times)
    v = as_kernel_array(intensities)
    if t.shape != v.shape:
        raise ValueError(f"times and intensities must have same length, got {t.size} vs {v.size}")
    return interpolate_linear(as_kernel_array(ref_times), t, v)


def interpolate_series(reference: SeriesLike, other: SeriesLike) -> Tuple[np.ndarray, np.ndarray]:
    """Resample ``other`` onto the time points of ``reference``.

    Returns
    -------
    values : np.ndarray
        Resampled intensities of ``other`` (NaN outside its domain)
    mask : np.ndarray (bool)
        True where a value is available
    """
    values = interpolate_onto(reference.times(), other.times(), other.intensities())
    return values, ~np.isnan(values)
