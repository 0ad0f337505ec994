"""Aggregate a row's correlations to all other members of its group.

The summary is a pure function of the pairwise list: :func:`recompute` makes
a single pass with one counter per sub-measure and divides every sum by its
own counter. A pair without height correlation therefore never changes the
denominator of the shape statistics, and vice versa.

Statistics without any defined pair are NaN and flagged as undefined
(``has_height_stats`` / ``has_shape_stats`` / ``has_total_stats``), so NaN is
never mistaken for zero correlation.

Examples
--------
>>> group_data = GroupCorrelationData("row1", correlations)
>>> summary = group_data.summary
>>> if summary.has_shape_stats:
...     print(summary.avg_shape_r)
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Hashable, Iterable, Iterator, List, Mapping, Optional, Sequence

from ..scoring.similarity import SimilarityMeasure
from .data import RowCorrelationData

_HEIGHT_FIELDS = ("min_height_r", "avg_height_r", "max_height_r", "avg_cosine_height_corr")
_SHAPE_FIELDS = ("min_shape_r", "avg_shape_r", "max_shape_r", "avg_dp_count", "avg_shape_cosine_sim")
_TOTAL_FIELDS = ("avg_total_shape_r",)


@dataclass(frozen=True)
class GroupCorrelationSummary:
    """Statistics of one row's correlations to the other group members.

    Attributes
    ----------
    min_height_r, avg_height_r, max_height_r : float
        Height correlation r over pairs with a height correlation
    avg_cosine_height_corr : float
        Average cosine similarity of the height correlations
    min_shape_r, avg_shape_r, max_shape_r : float
        Feature-shape r over pairs with a shape correlation
    avg_dp_count : float
        Average number of shape data points
    avg_shape_cosine_sim : float
        Average shape cosine similarity
    avg_total_shape_r : float
        Average total (pooled) shape r
    n_height, n_shape, n_total : int
        Number of pairs each statistic was computed from
    n_pairs : int
        Total number of pairs scanned
    """

    min_height_r: float
    avg_height_r: float
    max_height_r: float
    avg_cosine_height_corr: float
    min_shape_r: float
    avg_shape_r: float
    max_shape_r: float
    avg_dp_count: float
    avg_shape_cosine_sim: float
    avg_total_shape_r: float
    n_height: int
    n_shape: int
    n_total: int
    n_pairs: int

    @property
    def has_height_stats(self) -> bool:
        return self.n_height > 0

    @property
    def has_shape_stats(self) -> bool:
        return self.n_shape > 0

    @property
    def has_total_stats(self) -> bool:
        return self.n_total > 0

    def is_defined(self, name: str) -> bool:
        """True if the statistic ``name`` was computed from at least one pair."""
        if name in _HEIGHT_FIELDS:
            return self.has_height_stats
        if name in _SHAPE_FIELDS:
            return self.has_shape_stats
        if name in _TOTAL_FIELDS:
            return self.has_total_stats
        raise KeyError(f"Unknown statistic: {name}")


def recompute(correlations: Iterable[RowCorrelationData]) -> GroupCorrelationSummary:
    """Recompute the group statistics from the full pairwise list.

    Parameters
    ----------
    correlations : iterable of RowCorrelationData
        All pairwise correlations of one row to the other group members

    Returns
    -------
    GroupCorrelationSummary
        New summary; statistics without defined pairs are NaN
    """
    min_height_r = 1.0
    max_height_r = -1.0
    sum_height_r = 0.0
    sum_cosine_height = 0.0
    min_shape_r = 1.0
    max_shape_r = -1.0
    sum_shape_r = 0.0
    sum_shape_cosine = 0.0
    sum_dp_count = 0.0
    sum_total_r = 0.0
    n_height = 0
    n_shape = 0
    n_total = 0
    n_pairs = 0

    for r2r in correlations:
        n_pairs += 1
        if r2r.has_height_corr():
            n_height += 1
            height_r = r2r.height_r
            sum_height_r += height_r
            sum_cosine_height += r2r.cosine_height_corr
            if height_r < min_height_r:
                min_height_r = height_r
            if height_r > max_height_r:
                max_height_r = height_r

        if r2r.has_feature_shape_correlation():
            n_shape += 1
            sum_shape_r += r2r.avg_shape_r
            sum_shape_cosine += r2r.avg_shape_cosine_sim
            sum_dp_count += r2r.avg_dp_count
            if r2r.min_shape_r < min_shape_r:
                min_shape_r = r2r.min_shape_r
            if r2r.max_shape_r > max_shape_r:
                max_shape_r = r2r.max_shape_r

            total_r = r2r.total_r
            if not math.isnan(total_r):
                n_total += 1
                sum_total_r += total_r

    nan = math.nan
    return GroupCorrelationSummary(
        min_height_r=min_height_r if n_height else nan,
        avg_height_r=sum_height_r / n_height if n_height else nan,
        max_height_r=max_height_r if n_height else nan,
        avg_cosine_height_corr=sum_cosine_height / n_height if n_height else nan,
        min_shape_r=min_shape_r if n_shape else nan,
        avg_shape_r=sum_shape_r / n_shape if n_shape else nan,
        max_shape_r=max_shape_r if n_shape else nan,
        avg_dp_count=sum_dp_count / n_shape if n_shape else nan,
        avg_shape_cosine_sim=sum_shape_cosine / n_shape if n_shape else nan,
        avg_total_shape_r=sum_total_r / n_total if n_total else nan,
        n_height=n_height,
        n_shape=n_shape,
        n_total=n_total,
        n_pairs=n_pairs,
    )


def _average(values: Iterable[float]) -> float:
    total = 0.0
    n = 0
    for v in values:
        if not math.isnan(v):
            total += v
            n += 1
    return total / n if n > 0 else math.nan


class GroupCorrelationData:
    """Correlation of one row to all other members of its group.

    The summary is recomputed in full every time the pairwise list is
    assigned via :meth:`set_correlations`; there is no partial update.

    Parameters
    ----------
    row : hashable
        The row this data belongs to
    correlations : sequence of RowCorrelationData
        Correlations of ``row`` to the other group members
    max_height : float
        Maximum feature height of the row
    """

    def __init__(
        self,
        row: Hashable,
        correlations: Sequence[RowCorrelationData],
        max_height: float = math.nan,
    ):
        self.row = row
        self.max_height = max_height
        self._correlations: tuple = ()
        self._summary: Optional[GroupCorrelationSummary] = None
        self.set_correlations(correlations)

    def set_correlations(self, correlations: Sequence[RowCorrelationData]) -> GroupCorrelationSummary:
        """Replace the pairwise list and recompute the summary."""
        self._correlations = tuple(correlations)
        self._summary = recompute(self._correlations)
        return self._summary

    @property
    def correlations(self) -> tuple:
        return self._correlations

    @property
    def summary(self) -> GroupCorrelationSummary:
        return self._summary

    def get_correlation_to_row(self, other: Hashable) -> Optional[RowCorrelationData]:
        """Correlation of this row to ``other``, None if not part of the group."""
        if other == self.row:
            return None
        for corr in self._correlations:
            if corr.involves(self.row) and corr.partner_of(self.row) == other:
                return corr
        return None

    def get_avg_height_similarity(self, measure: SimilarityMeasure) -> float:
        """Average height similarity over pairs where it is defined, else NaN."""
        return _average(c.get_height_similarity(measure) for c in self._correlations)

    def get_avg_total_similarity(self, measure: SimilarityMeasure) -> float:
        """Average total shape similarity over pairs where it is defined, else NaN."""
        return _average(c.get_total_similarity(measure) for c in self._correlations)

    def get_avg_feature_shape_similarity(self, measure: SimilarityMeasure) -> float:
        """Average feature-shape similarity over pairs where it is defined, else NaN."""
        return _average(c.get_avg_feature_shape_similarity(measure) for c in self._correlations)

    def __repr__(self) -> str:
        return f"GroupCorrelationData(row={self.row!r}, n_pairs={len(self._correlations)})"


class CorrelationRowGroup:
    """A group of co-eluting rows with one :class:`GroupCorrelationData` per row.

    Parameters
    ----------
    group_id : hashable
        Identifier of the group
    rows : sequence of hashable
        Member row identifiers
    correlations : iterable of RowCorrelationData
        Pairwise correlations between members
    max_heights : mapping row -> float, optional
        Maximum feature height per row
    """

    def __init__(
        self,
        group_id: Hashable,
        rows: Sequence[Hashable],
        correlations: Iterable[RowCorrelationData],
        max_heights: Optional[Mapping[Hashable, float]] = None,
    ):
        self.group_id = group_id
        self.rows = tuple(rows)
        max_heights = max_heights or {}
        correlations = list(correlations)
        self.corr: List[GroupCorrelationData] = [
            GroupCorrelationData(
                row,
                [c for c in correlations if c.involves(row)],
                max_heights.get(row, math.nan),
            )
            for row in self.rows
        ]

    def get_correlation_data(self, row: Hashable) -> Optional[GroupCorrelationData]:
        for data in self.corr:
            if data.row == row:
                return data
        return None

    def __len__(self) -> int:
        return len(self.rows)


def summaries_from_groups(groups: Optional[Iterable[object]]) -> Iterator[GroupCorrelationData]:
    """Yield the per-row correlation data of every correlation group.

    Items that are not :class:`CorrelationRowGroup` are skipped; ``None``
    yields nothing.
    """
    if groups is None:
        return
    for group in groups:
        if isinstance(group, CorrelationRowGroup):
            yield from group.corr


def summaries_to_dataframe(group_data: Iterable[GroupCorrelationData]):
    """One table row per entity with its group correlation statistics.

    Returns
    -------
    pd.DataFrame
        Columns ``row``, ``max_height`` and all summary fields
    """
    import pandas as pd

    records = []
    for data in group_data:
        record = {"row": data.row, "max_height": data.max_height}
        record.update(asdict(data.summary))
        records.append(record)
    columns = ["row", "max_height", *(f.name for f in fields(GroupCorrelationSummary))]
    return pd.DataFrame.from_records(records, columns=columns)
