"""Row-to-row correlation across samples.

A row is one entity of a feature list (one ion species) with a detected
feature trace in some of the samples. Two rows are compared by:

1. Height correlation: feature heights of both rows across the samples where
   both were detected (needs ``min_height_corr_samples`` samples)
2. Feature-shape correlation: the two traces of every shared sample
3. Total shape correlation: the aligned shape points of all samples with a
   valid shape correlation, pooled into one vector pair
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, List, Mapping, Optional

import numpy as np

from ..scoring.correlation_data import CorrelationData
from ..scoring.feature_shape import FeatureShapeCorrelator
from ..scoring.similarity import score_pair
from ..series.timeseries import SeriesLike
from .data import RowCorrelationData


@dataclass(frozen=True, eq=False)
class FeatureRow:
    """An entity with one feature trace per sample.

    Attributes
    ----------
    row_id : hashable
        Identifier of the row
    shapes : mapping sample -> SeriesLike
        Feature trace of every sample the row was detected in
    heights : mapping sample -> float, optional
        Feature heights; the trace maximum is used where missing
    """

    row_id: Hashable
    shapes: Mapping[Hashable, SeriesLike] = field(default_factory=dict)
    heights: Mapping[Hashable, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "shapes", MappingProxyType(dict(self.shapes)))
        object.__setattr__(self, "heights", MappingProxyType(dict(self.heights)))

    @property
    def samples(self) -> List[Hashable]:
        return list(dict.fromkeys([*self.shapes.keys(), *self.heights.keys()]))

    def height(self, sample: Hashable) -> float:
        """Feature height in ``sample``, NaN if the row was not detected."""
        if sample in self.heights:
            return float(self.heights[sample])
        shape = self.shapes.get(sample)
        if shape is None or shape.length() == 0:
            return np.nan
        return float(np.max(shape.intensities()))

    @property
    def max_height(self) -> float:
        values = [self.height(s) for s in self.samples]
        values = [v for v in values if not np.isnan(v)]
        return max(values) if values else np.nan


def correlate_heights(
    row_a: FeatureRow, row_b: FeatureRow, min_samples: int
) -> Optional[CorrelationData]:
    """Correlation of feature heights across shared samples.

    Returns None if the rows share no sample with a height.
    """
    x: List[float] = []
    y: List[float] = []
    for sample in row_a.samples:
        ha = row_a.height(sample)
        hb = row_b.height(sample)
        if np.isnan(ha) or np.isnan(hb):
            continue
        x.append(ha)
        y.append(hb)

    if not x:
        return None
    r, cos = score_pair(np.array(x), np.array(y))
    return CorrelationData.from_scores(len(x), r, cos, min_samples)


def correlate_rows(
    row_a: FeatureRow,
    row_b: FeatureRow,
    correlator: FeatureShapeCorrelator,
) -> RowCorrelationData:
    """Correlate two rows by height and feature shape.

    Parameters
    ----------
    row_a, row_b : FeatureRow
        The rows to compare
    correlator : FeatureShapeCorrelator
        Shape correlator; its parameters also set the minimum number of
        samples for the height correlation

    Returns
    -------
    RowCorrelationData
        Height, per-sample shape and total shape correlation. Missing or
        insufficient data leaves the sub-measure undefined.
    """
    params = correlator.params
    height_corr = correlate_heights(row_a, row_b, params.min_height_corr_samples)

    shape_corrs: Dict[Hashable, CorrelationData] = {}
    pooled_a: List[np.ndarray] = []
    pooled_b: List[np.ndarray] = []
    for sample, shape_a in row_a.shapes.items():
        shape_b = row_b.shapes.get(sample)
        if shape_b is None:
            continue
        corr = correlator.correlate(shape_a, shape_b)
        shape_corrs[sample] = corr
        if corr.is_valid():
            a_values, b_values = correlator.aligned_shapes(shape_a, shape_b)
            pooled_a.append(a_values)
            pooled_b.append(b_values)

    total_corr = None
    if pooled_a:
        x = np.concatenate(pooled_a)
        y = np.concatenate(pooled_b)
        r, cos = score_pair(x, y)
        total_corr = CorrelationData.from_scores(x.size, r, cos, params.min_corr_points)

    return RowCorrelationData(
        row_a=row_a.row_id,
        row_b=row_b.row_id,
        height_corr=height_corr,
        shape_corrs=shape_corrs,
        total_corr=total_corr,
    )


def filter_correlated(
    correlations: Iterable[RowCorrelationData], min_pearson: float
) -> List[RowCorrelationData]:
    """Keep row pairs whose average shape r reaches ``min_pearson``.

    Pairs without a defined shape correlation are dropped (no evidence).
    """
    kept = []
    for corr in correlations:
        avg_r = corr.avg_shape_r
        if not np.isnan(avg_r) and avg_r >= min_pearson:
            kept.append(corr)
    return kept
