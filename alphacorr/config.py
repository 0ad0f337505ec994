"""Parameter sets for feature-shape correlation and DIA MS2 assignment.

All parameter objects validate themselves on construction and raise
:class:`~alphacorr.exceptions.ConfigurationError` for values that would
produce meaningless scores.
"""

from dataclasses import dataclass

import numpy as np

from .exceptions import ConfigurationError


# Only linear interpolation is implemented. Order 1 and 2 both mean linear
# (two supporting points).
SUPPORTED_INTERPOLATION_ORDERS = (1, 2)

DEFAULT_MIN_CORR_POINTS = 5
DEFAULT_INTERPOLATION_ORDER = 2


def _check_min_corr_points(value: int, name: str = "min_corr_points") -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 2:
        raise ConfigurationError(f"{name} must be >= 2, got {value}")


def _check_non_negative(value: float, name: str) -> None:
    if not np.isfinite(value) or value < 0:
        raise ConfigurationError(f"{name} must be finite and >= 0, got {value}")


def _check_interpolation_order(value: int) -> None:
    if value not in SUPPORTED_INTERPOLATION_ORDERS:
        raise ConfigurationError(
            f"interpolation_order {value} is not supported "
            f"(supported: {SUPPORTED_INTERPOLATION_ORDERS})"
        )


def _check_unit_interval(value: float, name: str) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True)
class CorrelationParams:
    """Parameters for feature-shape and row-to-row correlation.

    Attributes
    ----------
    min_corr_points : int
        Minimum number of aligned data points for a valid shape correlation
    noise_floor : float
        Points with intensity below this value are excluded from scoring
    interpolation_order : int
        Interpolation hint, only linear (1 or 2) is supported
    min_height_corr_samples : int
        Minimum number of samples with heights for both rows before a
        height correlation across samples is computed
    min_pearson : float
        Minimum Pearson r for a row-to-row shape correlation to count as
        co-elution evidence
    """

    min_corr_points: int = DEFAULT_MIN_CORR_POINTS
    noise_floor: float = 0.0
    interpolation_order: int = DEFAULT_INTERPOLATION_ORDER
    min_height_corr_samples: int = 3
    min_pearson: float = 0.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        _check_min_corr_points(self.min_corr_points)
        _check_non_negative(self.noise_floor, "noise_floor")
        _check_interpolation_order(self.interpolation_order)
        _check_min_corr_points(self.min_height_corr_samples, "min_height_corr_samples")
        _check_unit_interval(self.min_pearson, "min_pearson")


@dataclass(frozen=True)
class DiaAssignmentParams:
    """Parameters for assigning DIA MS2 fragment traces to MS1 features.

    ``min_pearson`` is compared against r squared of the MS1/MS2 shape
    correlation.
    """

    min_ms1_intensity: float = 0.0
    min_ms2_intensity: float = 0.0
    min_corr_points: int = DEFAULT_MIN_CORR_POINTS
    min_pearson: float = 0.8
    mz_tolerance_ppm: float = 10.0
    interpolation_order: int = DEFAULT_INTERPOLATION_ORDER

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        _check_non_negative(self.min_ms1_intensity, "min_ms1_intensity")
        _check_non_negative(self.min_ms2_intensity, "min_ms2_intensity")
        _check_min_corr_points(self.min_corr_points)
        _check_unit_interval(self.min_pearson, "min_pearson")
        _check_interpolation_order(self.interpolation_order)
        if not self.mz_tolerance_ppm > 0:
            raise ConfigurationError(
                f"mz_tolerance_ppm must be > 0, got {self.mz_tolerance_ppm}"
            )

    @property
    def ms2_noise_floor(self) -> float:
        """Noise floor applied to MS2 traces during shape correlation."""
        return self.min_ms2_intensity / 3.0

    def correlation_params(self) -> CorrelationParams:
        """Shape correlation parameters used for MS1/MS2 comparisons."""
        return CorrelationParams(
            min_corr_points=self.min_corr_points,
            noise_floor=self.ms2_noise_floor,
            interpolation_order=self.interpolation_order,
        )

    @classmethod
    def for_dia(cls, min_ms2_intensity: float = 1000.0) -> 'DiaAssignmentParams':
        """Defaults for typical Orbitrap DIA runs (5 points, r^2 > 0.8)."""
        return cls(
            min_ms1_intensity=min_ms2_intensity,
            min_ms2_intensity=min_ms2_intensity,
            min_corr_points=5,
            min_pearson=0.8,
            mz_tolerance_ppm=10.0,
        )
