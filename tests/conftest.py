"""Pytest configuration for AlphaCorr tests.

Provides gaussian elution peaks on regular and offset time grids, the
typical input of feature-shape correlation.
"""

import numpy as np
import pytest


def gaussian(x: np.ndarray, mu: float = 0.0, sigma: float = 0.25) -> np.ndarray:
    """Gaussian elution peak with height 1."""
    return np.exp(-0.5 * ((x - mu) / sigma) ** 2)


@pytest.fixture
def peak_grid():
    """Regular time grid from -2 to 2 in steps of 0.1 (41 points)."""
    return np.round(np.arange(-2.0, 2.0 + 1e-9, 0.1), 10)


@pytest.fixture
def gaussian_peak(peak_grid):
    """(times, intensities) of a gaussian peak centred at 0."""
    return peak_grid, gaussian(peak_grid)


@pytest.fixture
def degraded_peaks(peak_grid):
    """Reference peak and three increasingly degraded copies on an offset grid.

    All comparators are sampled at ``x + 0.05``:
    A keeps the shape, B is wider (sigma 0.4), C is wider and displaced by 0.25.
    """
    offset_grid = peak_grid + 0.05
    reference = (peak_grid, gaussian(peak_grid))
    comparators = [
        (offset_grid, gaussian(offset_grid)),
        (offset_grid, gaussian(offset_grid, sigma=0.4)),
        (offset_grid, gaussian(offset_grid, mu=0.25, sigma=0.4)),
    ]
    return reference, comparators


@pytest.fixture
def noise_floor():
    """Noise floor used with the gaussian scenario."""
    return 1e-4


# Random seed for reproducibility
@pytest.fixture(scope="session", autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)
