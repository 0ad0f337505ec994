"""Thread-pool execution of correlation work units.

The scoring kernels are compiled with ``nogil=True``, so pairwise
comparisons scale across threads. Every unit checks a shared
:class:`CancellationToken` before it starts; units that were cancelled
produce ``None``. Results are always returned in input order.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import combinations
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from .correlation.data import RowCorrelationData
from .correlation.group import GroupCorrelationSummary, recompute
from .correlation.rows import FeatureRow, correlate_rows
from .scoring.correlation_data import CorrelationData
from .scoring.feature_shape import FeatureShapeCorrelator
from .series.timeseries import SeriesLike

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class CancellationToken:
    """Cooperative cancellation flag shared by all work units."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


def _run_units(
    func: Callable[[T], R],
    items: Sequence[T],
    token: Optional[CancellationToken],
    max_workers: Optional[int],
    label: str,
) -> List[Optional[R]]:
    n_items = len(items)
    out: List[Optional[R]] = [None] * n_items
    if n_items == 0:
        return out

    def work(item: T) -> Optional[R]:
        if token is not None and token.is_cancelled:
            return None
        return func(item)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(work, item): i for i, item in enumerate(items)}
        for fut in as_completed(futures):
            out[futures[fut]] = fut.result()

    n_done = sum(1 for r in out if r is not None)
    if n_done < n_items:
        logger.info(f"{label}: {n_items - n_done} of {n_items} units cancelled")
    else:
        logger.debug(f"{label}: {n_items} units done")
    return out


def correlate_pairs(
    pairs: Sequence[Tuple[SeriesLike, SeriesLike]],
    correlator: FeatureShapeCorrelator,
    token: Optional[CancellationToken] = None,
    max_workers: Optional[int] = None,
) -> List[Optional[CorrelationData]]:
    """Feature-shape correlation of many series pairs on a thread pool.

    Parameters
    ----------
    pairs : sequence of (SeriesLike, SeriesLike)
        Pairs to correlate; the first series is the reference on ties
    correlator : FeatureShapeCorrelator
        Shared correlator (stateless, safe to share between threads)
    token : CancellationToken, optional
        Units not yet started when the token is cancelled yield None
    max_workers : int, optional
        Thread pool size (default: executor default)

    Returns
    -------
    list of CorrelationData or None
        One entry per pair, in input order
    """
    return _run_units(
        lambda pair: correlator.correlate(pair[0], pair[1]),
        list(pairs),
        token,
        max_workers,
        "correlate_pairs",
    )


def correlate_group_rows(
    rows: Sequence[FeatureRow],
    correlator: FeatureShapeCorrelator,
    token: Optional[CancellationToken] = None,
    max_workers: Optional[int] = None,
) -> List[Optional[RowCorrelationData]]:
    """Row-to-row correlation of all row pairs ``(i, j)`` with ``i < j``."""
    return _run_units(
        lambda pair: correlate_rows(pair[0], pair[1], correlator),
        list(combinations(rows, 2)),
        token,
        max_workers,
        "correlate_group_rows",
    )


def summarize_groups(
    groups: Sequence[Sequence[RowCorrelationData]],
    token: Optional[CancellationToken] = None,
    max_workers: Optional[int] = None,
) -> List[Optional[GroupCorrelationSummary]]:
    """Aggregate the pairwise correlations of many entities independently.

    ``groups[i]`` holds all correlations of entity ``i`` to the other members
    of its group; the i-th result is its summary (None if cancelled).
    """
    return _run_units(recompute, list(groups), token, max_workers, "summarize_groups")
