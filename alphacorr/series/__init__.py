"""Intensity time series, resampling and merging.

This module provides:
- Immutable series variants (RawSeries, MergedSeries) sharing one interface
- Linear resampling onto another series' time grid (NaN outside the domain)
- Merging of several series with summed / maximum / average intensities
"""

from .timeseries import (
    MergedSeries,
    MergingType,
    RawSeries,
    SeriesKind,
    SeriesLike,
    validate_series_arrays,
)

from .interpolation import (
    available_mask,
    interpolate_linear,
    interpolate_onto,
    interpolate_series,
)

from .merging import (
    merge_series,
    merge_sorted_points,
)

__all__ = [
    # Series
    'MergedSeries',
    'MergingType',
    'RawSeries',
    'SeriesKind',
    'SeriesLike',
    'validate_series_arrays',

    # Interpolation
    'available_mask',
    'interpolate_linear',
    'interpolate_onto',
    'interpolate_series',

    # Merging
    'merge_series',
    'merge_sorted_points',
]
