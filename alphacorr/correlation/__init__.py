"""Row-to-row correlation and per-group aggregation.

This module provides:
- Row-to-row correlation records (height, per-sample shape, total shape)
- Correlation of two feature rows across samples
- Group aggregation with per-measure counters and explicit recompute
"""

from .data import RowCorrelationData

from .rows import (
    FeatureRow,
    correlate_heights,
    correlate_rows,
    filter_correlated,
)

from .group import (
    CorrelationRowGroup,
    GroupCorrelationData,
    GroupCorrelationSummary,
    recompute,
    summaries_from_groups,
    summaries_to_dataframe,
)

__all__ = [
    # Records
    'RowCorrelationData',

    # Row correlation
    'FeatureRow',
    'correlate_heights',
    'correlate_rows',
    'filter_correlated',

    # Group aggregation
    'CorrelationRowGroup',
    'GroupCorrelationData',
    'GroupCorrelationSummary',
    'recompute',
    'summaries_from_groups',
    'summaries_to_dataframe',
]
