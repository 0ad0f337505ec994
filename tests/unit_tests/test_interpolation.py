"""Tests for linear resampling onto a reference grid.

Tests cover:
1. Exact grid points and midpoints
2. Edge policy (points outside the sampled domain are excluded)
3. Series-level helpers and availability masks
"""

import numpy as np
import pytest

from alphacorr.series import (
    RawSeries,
    available_mask,
    interpolate_linear,
    interpolate_onto,
    interpolate_series,
)


class TestInterpolateOnto:
    """Test the resampling of raw arrays."""

    def test_identical_grid_is_exact(self):
        times = np.array([0.0, 0.1, 0.2, 0.3])
        intensities = np.array([1.0, 5.0, 3.0, 2.0])
        result = interpolate_onto(times, times, intensities)
        np.testing.assert_array_equal(result, intensities)

    def test_midpoints(self):
        times = np.array([0.0, 1.0, 2.0])
        intensities = np.array([0.0, 10.0, 4.0])
        result = interpolate_onto(np.array([0.5, 1.5]), times, intensities)
        np.testing.assert_allclose(result, [5.0, 7.0])

    def test_result_parallel_to_reference(self):
        times = np.array([0.0, 1.0, 2.0])
        intensities = np.array([0.0, 10.0, 4.0])
        ref = np.linspace(0.0, 2.0, 17)
        assert interpolate_onto(ref, times, intensities).shape == ref.shape

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="same length"):
            interpolate_onto(np.array([0.0]), np.array([0.0, 1.0]), np.array([1.0]))

    def test_read_only_input(self):
        """Memory-mapped (read-only) arrays are accepted."""
        times = np.array([0.0, 1.0, 2.0])
        intensities = np.array([0.0, 10.0, 4.0])
        times.setflags(write=False)
        intensities.setflags(write=False)
        result = interpolate_onto(np.array([1.0]), times, intensities)
        assert result[0] == 10.0


class TestEdgePolicy:
    """Reference points outside the domain are NaN; boundary points are kept."""

    def setup_method(self):
        self.times = np.array([1.0, 1.1, 1.2, 1.3])
        self.intensities = np.array([2.0, 8.0, 6.0, 4.0])

    def test_boundary_points_get_boundary_values(self):
        ref = np.array([1.0, 1.3])
        result = interpolate_onto(ref, self.times, self.intensities)
        np.testing.assert_array_equal(result, [2.0, 4.0])

    def test_one_step_beyond_is_excluded(self):
        ref = np.array([0.9, 1.4])
        result = interpolate_onto(ref, self.times, self.intensities)
        assert np.isnan(result).all()

    def test_mask_matches_values(self):
        ref = np.array([0.9, 1.0, 1.15, 1.3, 1.4])
        result = interpolate_onto(ref, self.times, self.intensities)
        mask = available_mask(ref, self.times)
        assert mask.tolist() == [False, True, True, True, False]
        np.testing.assert_array_equal(~np.isnan(result), mask)

    def test_empty_series(self):
        ref = np.array([1.0, 2.0])
        result = interpolate_linear(ref, np.zeros(0), np.zeros(0))
        assert np.isnan(result).all()
        assert not available_mask(ref, np.zeros(0)).any()


class TestInterpolateSeries:
    """Test resampling between series objects."""

    def test_offset_grid(self):
        reference = RawSeries([0.0, 0.5, 1.0, 1.5, 2.0], [0.0, 0.0, 0.0, 0.0, 0.0])
        other = RawSeries([0.25, 0.75, 1.25, 1.75], [1.0, 3.0, 5.0, 7.0])
        values, mask = interpolate_series(reference, other)

        assert mask.tolist() == [False, True, True, True, False]
        np.testing.assert_allclose(values[mask], [2.0, 4.0, 6.0])
