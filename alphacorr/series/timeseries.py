"""Intensity time series consumed by the correlation core.

Two variants exist: :class:`RawSeries` (a detected trace, e.g. an EIC) and
:class:`MergedSeries` (built from several source series). Both expose the
same capability interface, :class:`SeriesLike`, so interpolation and scoring
never need to know which variant they are handed.

Series are immutable: arrays are validated once, stored through an optional
:class:`~alphacorr.storage.BufferStore` and exposed read-only.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

from ..exceptions import InvalidSeriesError
from ..storage.buffer_store import BufferHandle, BufferStore, store_values


class SeriesKind(Enum):
    RAW = "raw"
    MERGED = "merged"


class MergingType(Enum):
    """How intensities of points at (almost) the same time are combined."""
    SUMMED = "summed"
    MAXIMUM = "maximum"
    AVERAGE = "average"


@runtime_checkable
class SeriesLike(Protocol):
    """Structural interface shared by all series variants."""

    def times(self) -> np.ndarray: ...

    def intensities(self) -> np.ndarray: ...

    def length(self) -> int: ...


def validate_series_arrays(times, intensities) -> Tuple[np.ndarray, np.ndarray]:
    """Convert to float64 and check the series invariants.

    Times must be finite and strictly increasing, intensities finite and
    non-negative, both 1D with equal length.

    Raises
    ------
    InvalidSeriesError
        If any invariant is violated
    """
    t = np.asarray(times, dtype=np.float64)
    v = np.asarray(intensities, dtype=np.float64)

    if t.ndim != 1:
        raise InvalidSeriesError(f"`times` must be 1D, got shape {t.shape}")
    if v.ndim != 1:
        raise InvalidSeriesError(f"`intensities` must be 1D, got shape {v.shape}")
    if t.size != v.size:
        raise InvalidSeriesError(
            f"`times` and `intensities` must have same length, got {t.size} vs {v.size}"
        )
    if t.size > 0:
        if not np.isfinite(t).all():
            raise InvalidSeriesError("`times` contains non-finite values (NaN/Inf).")
        if not np.isfinite(v).all():
            raise InvalidSeriesError("`intensities` contains non-finite values (NaN/Inf).")
        if np.any(np.diff(t) <= 0):
            raise InvalidSeriesError("`times` must be strictly increasing.")
        if np.any(v < 0):
            raise InvalidSeriesError("`intensities` must be >= 0.")
    return t, v


class _StoredSeries:
    """Array handling shared by the series variants."""

    __slots__ = ("_times", "_intensities", "_name")

    kind: SeriesKind

    def __init__(
        self,
        times,
        intensities,
        storage: Optional[BufferStore] = None,
        name: Optional[str] = None,
    ):
        t, v = validate_series_arrays(times, intensities)
        self._times: BufferHandle = store_values(storage, t)
        self._intensities: BufferHandle = store_values(storage, v)
        self._name = name

    @property
    def name(self) -> Optional[str]:
        return self._name

    def times(self) -> np.ndarray:
        return self._times.array

    def intensities(self) -> np.ndarray:
        return self._intensities.array

    def length(self) -> int:
        return self._times.length

    def __len__(self) -> int:
        return self.length()

    @property
    def is_stored(self) -> bool:
        """True if the arrays live in a memory-mapped buffer store."""
        return self._times.is_mapped and self._intensities.is_mapped

    def rt_range(self) -> Optional[Tuple[float, float]]:
        """(first, last) time, or None for an empty series."""
        if self.length() == 0:
            return None
        t = self.times()
        return float(t[0]), float(t[-1])

    def apex_index(self) -> int:
        """Index of the most intense point, -1 for an empty series."""
        if self.length() == 0:
            return -1
        return int(np.argmax(self.intensities()))

    def max_intensity(self) -> float:
        if self.length() == 0:
            return 0.0
        return float(np.max(self.intensities()))

    def to_numpy(self, copy: bool = False) -> Tuple[np.ndarray, np.ndarray]:
        if copy:
            return np.array(self.times()), np.array(self.intensities())
        return self.times(), self.intensities()

    def __repr__(self) -> str:
        rng = self.rt_range()
        span = "empty" if rng is None else f"{rng[0]:.4f}-{rng[1]:.4f}"
        return f"{type(self).__name__}(name={self.name!r}, n={self.length()}, rt={span})"


class RawSeries(_StoredSeries):
    """A single detected trace (time, intensity).

    Examples
    --------
    >>> series = RawSeries([1.0, 1.1, 1.2], [10.0, 100.0, 20.0], name="EIC 500.25")
    >>> series.apex_index()
    1
    """

    __slots__ = ()

    kind = SeriesKind.RAW

    def slice_time(self, t_min: Optional[float] = None, t_max: Optional[float] = None) -> 'RawSeries':
        """New series restricted to ``t_min <= t <= t_max`` (in memory)."""
        t, v = self.times(), self.intensities()
        mask = np.ones(t.size, dtype=np.bool_)
        if t_min is not None:
            mask &= t >= t_min
        if t_max is not None:
            mask &= t <= t_max
        return RawSeries(t[mask], v[mask], name=self.name)


class MergedSeries(_StoredSeries):
    """A series built by merging several source series.

    Use :func:`alphacorr.series.merge_series` to create one.
    """

    __slots__ = ("_sources", "merging_type")

    kind = SeriesKind.MERGED

    def __init__(
        self,
        times,
        intensities,
        sources: Sequence[SeriesLike],
        merging_type: MergingType,
        storage: Optional[BufferStore] = None,
        name: Optional[str] = None,
    ):
        if len(sources) == 0:
            raise InvalidSeriesError("A merged series needs at least one source series.")
        super().__init__(times, intensities, storage=storage, name=name)
        self._sources = tuple(sources)
        self.merging_type = merging_type

    @property
    def sources(self) -> Tuple[SeriesLike, ...]:
        return self._sources

    def slice_time(self, t_min: Optional[float] = None, t_max: Optional[float] = None) -> 'RawSeries':
        """Restricted copy; the result is a plain :class:`RawSeries`."""
        return RawSeries(self.times(), self.intensities(), name=self.name).slice_time(t_min, t_max)
