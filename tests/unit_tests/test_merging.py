"""Tests for series variants and merging.

Tests cover:
1. Series construction and validation
2. Merging with summed / maximum / average intensities
3. Time tolerance clustering
4. Merged series as input for correlation
"""

import numpy as np
import pytest

from alphacorr.exceptions import InvalidSeriesError
from alphacorr.scoring import FeatureShapeCorrelator
from alphacorr.series import (
    MergedSeries,
    MergingType,
    RawSeries,
    SeriesKind,
    SeriesLike,
    merge_series,
    merge_sorted_points,
)


class TestRawSeries:
    """Test the raw series variant."""

    def test_basic_properties(self):
        series = RawSeries([1.0, 1.1, 1.2], [10.0, 100.0, 20.0], name="EIC 500.25")
        assert series.kind is SeriesKind.RAW
        assert series.length() == len(series) == 3
        assert series.apex_index() == 1
        assert series.max_intensity() == 100.0
        assert series.rt_range() == (1.0, 1.2)
        assert isinstance(series, SeriesLike)

    def test_name_is_read_only(self):
        series = RawSeries([1.0, 2.0], [3.0, 4.0], name="EIC 500.25")
        assert series.name == "EIC 500.25"
        with pytest.raises(AttributeError):
            series.name = "other"

    def test_arrays_are_read_only(self):
        series = RawSeries([1.0, 2.0], [3.0, 4.0])
        with pytest.raises(ValueError):
            series.intensities()[0] = 10.0

    def test_input_is_copied(self):
        intensities = np.array([3.0, 4.0])
        series = RawSeries([1.0, 2.0], intensities)
        intensities[0] = 100.0
        assert series.intensities()[0] == 3.0

    def test_empty_series(self):
        series = RawSeries([], [])
        assert series.length() == 0
        assert series.apex_index() == -1
        assert series.rt_range() is None

    @pytest.mark.parametrize("times, intensities", [
        ([1.0, 1.0, 2.0], [1.0, 2.0, 3.0]),
        ([2.0, 1.0], [1.0, 2.0]),
        ([1.0, 2.0], [1.0, -2.0]),
        ([1.0, np.nan], [1.0, 2.0]),
        ([1.0, 2.0], [1.0]),
    ])
    def test_invalid_input(self, times, intensities):
        with pytest.raises(InvalidSeriesError):
            RawSeries(times, intensities)

    def test_slice_time(self):
        series = RawSeries([1.0, 2.0, 3.0, 4.0], [1.0, 2.0, 3.0, 4.0])
        sliced = series.slice_time(2.0, 3.0)
        np.testing.assert_array_equal(sliced.times(), [2.0, 3.0])


class TestMergeSortedPoints:
    """Test the merge kernel."""

    def test_identical_times_combined(self):
        times = np.array([1.0, 1.0, 2.0])
        intensities = np.array([3.0, 5.0, 1.0])
        merged_t, merged_v = merge_sorted_points(times, intensities, 0.0, 0)
        np.testing.assert_array_equal(merged_t, [1.0, 2.0])
        np.testing.assert_array_equal(merged_v, [8.0, 1.0])

    def test_identical_times_stay_exact(self):
        times = np.array([0.1, 0.1, 0.1, 1.0])
        merged_t, _ = merge_sorted_points(times, np.ones(4), 0.0, 0)
        assert merged_t[0] == 0.1
        assert len(merged_t) == 2

    @pytest.mark.parametrize("mode, expected", [(0, 8.0), (1, 5.0), (2, 4.0)])
    def test_modes(self, mode, expected):
        times = np.array([1.0, 1.0])
        intensities = np.array([3.0, 5.0])
        _, merged_v = merge_sorted_points(times, intensities, 0.0, mode)
        assert merged_v[0] == expected


class TestMergeSeries:
    """Test merging of series objects."""

    def setup_method(self):
        self.a = RawSeries([1.00, 1.10, 1.20], [10.0, 100.0, 50.0])
        self.b = RawSeries([1.001, 1.101], [5.0, 40.0])

    def test_summed(self):
        merged = merge_series([self.a, self.b], MergingType.SUMMED, time_tolerance=0.005)
        assert isinstance(merged, MergedSeries)
        assert merged.kind is SeriesKind.MERGED
        np.testing.assert_allclose(merged.intensities(), [15.0, 140.0, 50.0])
        np.testing.assert_allclose(merged.times(), [1.0005, 1.1005, 1.2])

    def test_maximum(self):
        merged = merge_series([self.a, self.b], MergingType.MAXIMUM, time_tolerance=0.005)
        np.testing.assert_allclose(merged.intensities(), [10.0, 100.0, 50.0])

    def test_average(self):
        merged = merge_series([self.a, self.b], MergingType.AVERAGE, time_tolerance=0.005)
        np.testing.assert_allclose(merged.intensities(), [7.5, 70.0, 50.0])

    def test_repeated_source_keeps_source_times(self):
        source = RawSeries([0.1, 1.0], [1.0, 1.0])
        merged = merge_series([source] * 3, MergingType.SUMMED, time_tolerance=0.0)
        assert merged.times()[0] == 0.1
        np.testing.assert_array_equal(merged.intensities(), [3.0, 3.0])

    def test_zero_tolerance_keeps_distinct_times(self):
        merged = merge_series([self.a, self.b])
        assert merged.length() == 5
        assert np.all(np.diff(merged.times()) > 0)

    def test_sources_kept(self):
        merged = merge_series([self.a, self.b], MergingType.MAXIMUM)
        assert merged.sources == (self.a, self.b)
        assert merged.merging_type is MergingType.MAXIMUM

    def test_empty_sources_raise(self):
        with pytest.raises(InvalidSeriesError):
            merge_series([])

    def test_negative_tolerance_raises(self):
        with pytest.raises(InvalidSeriesError):
            merge_series([self.a], time_tolerance=-0.1)

    def test_merged_series_correlates_like_raw(self):
        """Consumers do not need to know the series variant."""
        times = np.linspace(0.0, 1.0, 21)
        intensities = np.exp(-0.5 * ((times - 0.5) / 0.1) ** 2)
        raw = RawSeries(times, intensities)
        merged = merge_series([raw], MergingType.SUMMED)

        result = FeatureShapeCorrelator().correlate(raw, merged)
        assert result.valid
        assert result.pearson_r == pytest.approx(1.0, abs=1e-9)

    def test_merged_slice_is_raw(self):
        merged = merge_series([self.a, self.b], MergingType.SUMMED, time_tolerance=0.005)
        sliced = merged.slice_time(1.05, 1.3)
        assert sliced.kind is SeriesKind.RAW
        assert sliced.length() == 2
