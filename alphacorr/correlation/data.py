"""Row-to-row correlation records.

:class:`RowCorrelationData` is the correlation between two named entities
(feature list rows): the height correlation across samples, the per-sample
feature-shape correlations and the pooled total-shape correlation.

Immutable. Accessors never raise for missing sub-measures and return NaN
instead; NaN means *no evidence*, never *dissimilar*.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Hashable, Mapping, Optional

from ..scoring.correlation_data import CorrelationData
from ..scoring.similarity import SimilarityMeasure


def _valid_or_none(corr: Optional[CorrelationData]) -> Optional[CorrelationData]:
    return corr if corr is not None and corr.is_valid() else None


@dataclass(frozen=True, eq=False)
class RowCorrelationData:
    """Correlation between two rows (entities) ``row_a`` and ``row_b``.

    Attributes
    ----------
    row_a, row_b : hashable
        Identifiers of the two rows
    height_corr : CorrelationData, optional
        Correlation of the rows' feature heights across samples
    shape_corrs : mapping sample -> CorrelationData
        Feature-shape correlation in every sample where both rows were detected
    total_corr : CorrelationData, optional
        Correlation of all shape data points of all samples pooled

    Notes
    -----
    Derived shape statistics use only the valid per-sample correlations.
    """

    row_a: Hashable
    row_b: Hashable
    height_corr: Optional[CorrelationData] = None
    shape_corrs: Mapping[Any, CorrelationData] = field(default_factory=dict)
    total_corr: Optional[CorrelationData] = None

    def __post_init__(self):
        object.__setattr__(self, "shape_corrs", MappingProxyType(dict(self.shape_corrs)))

    # ---- availability ----

    def has_height_corr(self) -> bool:
        return _valid_or_none(self.height_corr) is not None

    def has_feature_shape_correlation(self) -> bool:
        return any(c.is_valid() for c in self.shape_corrs.values())

    def is_valid(self) -> bool:
        return self.has_height_corr() or self.has_feature_shape_correlation()

    def involves(self, row: Hashable) -> bool:
        return self.row_a == row or self.row_b == row

    def partner_of(self, row: Hashable) -> Hashable:
        """The other row of this pair."""
        if self.row_a == row:
            return self.row_b
        if self.row_b == row:
            return self.row_a
        raise KeyError(f"Row {row!r} is not part of this correlation")

    # ---- height correlation ----

    @property
    def height_r(self) -> float:
        corr = _valid_or_none(self.height_corr)
        return corr.pearson_r if corr is not None else math.nan

    @property
    def cosine_height_corr(self) -> float:
        corr = _valid_or_none(self.height_corr)
        return corr.cosine_similarity if corr is not None else math.nan

    def get_height_similarity(self, measure: SimilarityMeasure) -> float:
        corr = _valid_or_none(self.height_corr)
        return corr.get_similarity(measure) if corr is not None else math.nan

    # ---- feature shape correlation ----

    def _valid_shapes(self):
        return [c for c in self.shape_corrs.values() if c.is_valid()]

    @property
    def total_r(self) -> float:
        corr = _valid_or_none(self.total_corr)
        return corr.pearson_r if corr is not None else math.nan

    def get_total_similarity(self, measure: SimilarityMeasure) -> float:
        corr = _valid_or_none(self.total_corr)
        return corr.get_similarity(measure) if corr is not None else math.nan

    def get_avg_feature_shape_similarity(self, measure: SimilarityMeasure) -> float:
        values = [c.get_similarity(measure) for c in self._valid_shapes()]
        return math.fsum(values) / len(values) if values else math.nan

    @property
    def avg_shape_r(self) -> float:
        return self.get_avg_feature_shape_similarity(SimilarityMeasure.PEARSON)

    @property
    def avg_shape_cosine_sim(self) -> float:
        return self.get_avg_feature_shape_similarity(SimilarityMeasure.COSINE_SIM)

    @property
    def min_shape_r(self) -> float:
        shapes = self._valid_shapes()
        return min(c.pearson_r for c in shapes) if shapes else math.nan

    @property
    def max_shape_r(self) -> float:
        shapes = self._valid_shapes()
        return max(c.pearson_r for c in shapes) if shapes else math.nan

    @property
    def avg_dp_count(self) -> float:
        shapes = self._valid_shapes()
        return sum(c.n for c in shapes) / len(shapes) if shapes else math.nan
