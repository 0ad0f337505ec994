"""Merge several series into one :class:`MergedSeries`.

Points of all source series are pooled and sorted by time. Consecutive
points whose time lies within ``time_tolerance`` of the running cluster
centre are combined into one point:

- time: mean of the cluster times
- intensity: sum, maximum or mean, depending on :class:`MergingType`

Examples
--------
>>> a = RawSeries([1.00, 1.10, 1.20], [10.0, 100.0, 50.0])
>>> b = RawSeries([1.001, 1.101], [5.0, 40.0])
>>> merged = merge_series([a, b], MergingType.SUMMED, time_tolerance=0.005)
>>> merged.intensities()  # [15.0, 140.0, 50.0]
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit

from ..exceptions import InvalidSeriesError
from ..storage.buffer_store import BufferStore
from .timeseries import MergedSeries, MergingType, SeriesLike

logger = logging.getLogger(__name__)

_MODE_CODES = {
    MergingType.SUMMED: 0,
    MergingType.MAXIMUM: 1,
    MergingType.AVERAGE: 2,
}


@njit(nogil=True, cache=True)
def merge_sorted_points(
    times: np.ndarray,
    intensities: np.ndarray,
    time_tolerance: float,
    mode: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Combine time-sorted points that lie within a tolerance (Numba kernel).

    Parameters
    ----------
    times : np.ndarray (float64)
        Pooled times, sorted ascending (ties allowed)
    intensities : np.ndarray (float64)
        Intensities parallel to ``times``
    time_tolerance : float
        Maximum distance to the running cluster centre
    mode : int
        0 = summed, 1 = maximum, 2 = average

    Returns
    -------
    merged_times : np.ndarray (float64)
        Strictly increasing cluster centres
    merged_intensities : np.ndarray (float64)
        Combined intensities
    """
    n = len(times)
    merged_times = np.empty(n, dtype=np.float64)
    merged_intensities = np.empty(n, dtype=np.float64)
    n_out = 0

    i = 0
    while i < n:
        center = times[i]
        total = intensities[i]
        highest = intensities[i]
        count = 1

        j = i + 1
        while j < n and abs(times[j] - center) <= time_tolerance:
            center += (times[j] - center) / (count + 1)
            total += intensities[j]
            if intensities[j] > highest:
                highest = intensities[j]
            count += 1
            j += 1

        merged_times[n_out] = center
        if mode == 0:
            merged_intensities[n_out] = total
        elif mode == 1:
            merged_intensities[n_out] = highest
        else:
            merged_intensities[n_out] = total / count
        n_out += 1
        i = j

    return merged_times[:n_out], merged_intensities[:n_out]


def merge_series(
    sources: Sequence[SeriesLike],
    merging_type: MergingType = MergingType.SUMMED,
    time_tolerance: float = 0.0,
    storage: Optional[BufferStore] = None,
    name: Optional[str] = None,
) -> MergedSeries:
    """Merge source series into a single :class:`MergedSeries`.

    Parameters
    ----------
    sources : sequence of SeriesLike
        Series to merge (at least one)
    merging_type : MergingType
        How intensities of combined points are merged
    time_tolerance : float
        Points closer than this to the running cluster centre are combined;
        0.0 only combines identical times
    storage : BufferStore, optional
        Shared store for the merged arrays
    name : str, optional
        Name of the merged series

    Raises
    ------
    InvalidSeriesError
        If ``sources`` is empty or ``time_tolerance`` is negative
    """
    if len(sources) == 0:
        raise InvalidSeriesError("Cannot merge an empty list of series.")
    if not np.isfinite(time_tolerance) or time_tolerance < 0:
        raise InvalidSeriesError(f"time_tolerance must be finite and >= 0, got {time_tolerance}")

    times = np.concatenate([np.asarray(s.times(), dtype=np.float64) for s in sources])
    intensities = np.concatenate([np.asarray(s.intensities(), dtype=np.float64) for s in sources])

    order = np.argsort(times, kind="stable")
    merged_times, merged_intensities = merge_sorted_points(
        times[order], intensities[order], float(time_tolerance), _MODE_CODES[merging_type]
    )
    logger.debug(
        f"Merged {len(sources)} series ({times.size:,} points) into {merged_times.size:,} points "
        f"({merging_type.value})"
    )
    return MergedSeries(
        merged_times,
        merged_intensities,
        sources=sources,
        merging_type=merging_type,
        storage=storage,
        name=name,
    )
