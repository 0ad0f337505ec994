"""Similarity scoring and feature-shape correlation.

This module provides:
- Pearson correlation and cosine similarity with NaN for degenerate input
- All-vs-all scoring of equally gridded profiles
- Feature-shape correlation of traces on different time grids
- The pairwise result object (CorrelationData)

Key Features
------------
- Numba-accelerated kernels, compiled with ``nogil`` for thread pools
- Degenerate input is data (NaN, ``valid=False``), never an exception
- Explicit reference-grid rule for non-aligned traces

Examples
--------
>>> from alphacorr.scoring import corr_feature_shape
>>>
>>> result = corr_feature_shape(ms1_rts, ms1_intensities, ms2_rts, ms2_intensities,
...                             min_corr_points=5, noise_floor=100.0)
>>> if result.valid:
...     print(result.pearson_r, result.cosine_similarity)
"""

from .similarity import (
    SimilarityMeasure,
    correlate_profiles_matrix,
    cosine_similarity,
    find_coeluting_profiles,
    pearson_r,
    score_pair,
    similarity,
)
from .correlation_data import CorrelationData
from .feature_shape import (
    FeatureShapeCorrelator,
    align_feature_shapes,
    corr_feature_shape,
)

__all__ = [
    # Similarity measures
    "SimilarityMeasure",
    "pearson_r",
    "cosine_similarity",
    "score_pair",
    "similarity",
    "correlate_profiles_matrix",
    "find_coeluting_profiles",
    # Pairwise result
    "CorrelationData",
    # Feature shape correlation
    "FeatureShapeCorrelator",
    "align_feature_shapes",
    "corr_feature_shape",
]
