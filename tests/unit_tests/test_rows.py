"""Tests for row-to-row correlation across samples.

Tests cover:
1. Feature rows and heights
2. Height correlation across samples
3. Per-sample and total shape correlation
4. Filtering of correlated pairs
"""

import math

import numpy as np
import pytest

from alphacorr.config import CorrelationParams
from alphacorr.correlation import (
    FeatureRow,
    correlate_heights,
    correlate_rows,
    filter_correlated,
)
from alphacorr.scoring import FeatureShapeCorrelator
from alphacorr.series import RawSeries


def gaussian(x, mu=0.0, sigma=0.25):
    return np.exp(-0.5 * ((x - mu) / sigma) ** 2)


def _trace(height, mu=0.0, sigma=0.25, offset=0.0):
    times = np.round(np.arange(-1.0, 1.0 + 1e-9, 0.1), 10) + offset
    return RawSeries(times, height * gaussian(times, mu=mu, sigma=sigma))


@pytest.fixture
def correlator():
    return FeatureShapeCorrelator(CorrelationParams(min_corr_points=5, min_height_corr_samples=3))


@pytest.fixture
def coeluting_rows():
    """Two rows with the same shape and proportional heights in 4 samples."""
    heights = [1e5, 3e5, 2e5, 5e5]
    row_a = FeatureRow("a", shapes={f"s{i}": _trace(h) for i, h in enumerate(heights)})
    row_b = FeatureRow("b", shapes={f"s{i}": _trace(0.2 * h, offset=0.05) for i, h in enumerate(heights)})
    return row_a, row_b


class TestFeatureRow:
    """Test the row container."""

    def test_height_from_trace(self):
        row = FeatureRow("a", shapes={"s1": _trace(100.0)})
        assert row.height("s1") == pytest.approx(100.0)
        assert math.isnan(row.height("missing"))

    def test_explicit_height_wins(self):
        row = FeatureRow("a", shapes={"s1": _trace(100.0)}, heights={"s1": 42.0})
        assert row.height("s1") == 42.0

    def test_max_height(self):
        row = FeatureRow("a", heights={"s1": 5.0, "s2": 50.0})
        assert row.max_height == 50.0
        assert math.isnan(FeatureRow("empty").max_height)

    def test_samples_unique_in_order(self):
        row = FeatureRow("a", shapes={"s1": _trace(1.0)}, heights={"s2": 1.0, "s1": 2.0})
        assert row.samples == ["s1", "s2"]


class TestHeightCorrelation:
    """Heights across shared samples."""

    def test_proportional_heights(self, coeluting_rows):
        row_a, row_b = coeluting_rows
        corr = correlate_heights(row_a, row_b, min_samples=3)
        assert corr.valid
        assert corr.n == 4
        assert corr.pearson_r == pytest.approx(1.0, abs=1e-6)

    def test_too_few_samples(self):
        row_a = FeatureRow("a", heights={"s1": 1.0, "s2": 2.0})
        row_b = FeatureRow("b", heights={"s1": 2.0, "s2": 4.0})
        corr = correlate_heights(row_a, row_b, min_samples=3)
        assert not corr.valid

    def test_no_shared_samples(self):
        row_a = FeatureRow("a", heights={"s1": 1.0})
        row_b = FeatureRow("b", heights={"s2": 2.0})
        assert correlate_heights(row_a, row_b, min_samples=3) is None


class TestCorrelateRows:
    """Full row-to-row correlation."""

    def test_coeluting_rows(self, coeluting_rows, correlator):
        row_a, row_b = coeluting_rows
        r2r = correlate_rows(row_a, row_b, correlator)

        assert r2r.row_a == "a" and r2r.row_b == "b"
        assert r2r.has_height_corr()
        assert r2r.has_feature_shape_correlation()
        assert len(r2r.shape_corrs) == 4
        assert r2r.avg_shape_r > 0.98
        assert r2r.total_corr.valid
        assert r2r.total_corr.n == sum(c.n for c in r2r.shape_corrs.values())

    def test_disjoint_samples(self, correlator):
        row_a = FeatureRow("a", shapes={"s1": _trace(1.0)})
        row_b = FeatureRow("b", shapes={"s2": _trace(1.0)})
        r2r = correlate_rows(row_a, row_b, correlator)

        assert not r2r.is_valid()
        assert r2r.total_corr is None
        assert len(r2r.shape_corrs) == 0

    def test_displaced_peak_lowers_shape_r(self, correlator):
        row_a = FeatureRow("a", shapes={"s1": _trace(1.0)})
        same = FeatureRow("b", shapes={"s1": _trace(1.0, offset=0.05)})
        displaced = FeatureRow("c", shapes={"s1": _trace(1.0, mu=0.3)})

        r_same = correlate_rows(row_a, same, correlator).avg_shape_r
        r_displaced = correlate_rows(row_a, displaced, correlator).avg_shape_r
        assert r_same > r_displaced


class TestFilterCorrelated:
    """Keep pairs with enough shape correlation."""

    def test_filter(self, coeluting_rows, correlator):
        row_a, row_b = coeluting_rows
        row_c = FeatureRow("c", shapes={"s0": _trace(1.0, mu=0.6)})
        good = correlate_rows(row_a, row_b, correlator)
        bad = correlate_rows(row_a, row_c, correlator)
        empty = correlate_rows(row_a, FeatureRow("d"), correlator)

        kept = filter_correlated([good, bad, empty], min_pearson=0.9)
        assert kept == [good]
