"""Result of one pairwise trace comparison.

:class:`CorrelationData` holds the point count, Pearson r, cosine similarity
and a validity flag. It is created once per comparison and never mutated.
Accessors return NaN for undefined measures; NaN means *no evidence*, never
*dissimilar*.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .similarity import SimilarityMeasure


def _measure_of(pearson_r: float, cosine: float, measure: SimilarityMeasure) -> float:
    if measure is SimilarityMeasure.PEARSON:
        return pearson_r
    if measure is SimilarityMeasure.COSINE_SIM:
        return cosine
    if measure is SimilarityMeasure.R_SQUARED:
        return pearson_r * pearson_r
    return math.nan


@dataclass(frozen=True)
class CorrelationData:
    """Result of correlating two aligned traces.

    Attributes
    ----------
    n : int
        Number of aligned data points used
    pearson_r : float
        Pearson r in [-1, 1], NaN if undefined
    cosine_similarity : float
        Cosine similarity ([0, 1] for intensities), NaN if undefined
    valid : bool
        True only if ``n`` reached the configured minimum and both
        measures are defined
    """

    n: int
    pearson_r: float
    cosine_similarity: float
    valid: bool

    def __post_init__(self):
        # invalid whenever a measure is undefined or fewer than 2 points, whatever the caller says
        if self.valid and (
            self.n < 2 or math.isnan(self.pearson_r) or math.isnan(self.cosine_similarity)
        ):
            object.__setattr__(self, "valid", False)

    @classmethod
    def from_scores(
        cls, n: int, pearson_r: float, cosine_similarity: float, min_points: int
    ) -> 'CorrelationData':
        """Build a result, deriving ``valid`` from the point count and scores."""
        valid = (
            n >= min_points
            and not math.isnan(pearson_r)
            and not math.isnan(cosine_similarity)
        )
        return cls(int(n), float(pearson_r), float(cosine_similarity), valid)

    @classmethod
    def invalid(cls, n: int = 0) -> 'CorrelationData':
        """A result that carries no evidence."""
        return cls(int(n), math.nan, math.nan, False)

    def is_valid(self) -> bool:
        return self.valid

    @property
    def r_squared(self) -> float:
        return self.pearson_r * self.pearson_r

    def get_similarity(self, measure: SimilarityMeasure) -> float:
        """Requested measure, NaN if undefined."""
        return _measure_of(self.pearson_r, self.cosine_similarity, measure)

    def get_dp_count(self) -> int:
        return self.n
