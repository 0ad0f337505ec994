"""Exception types raised by alphacorr.

Numeric degeneracy (constant vectors, all-zero vectors, too few overlapping
points) is never raised. It is reported as NaN scores and ``valid=False`` on
the result objects so that bulk scans over thousands of candidate pairs run
without per-pair exception handling.
"""


class AlphaCorrError(Exception):
    """Base error for all alphacorr exceptions."""


class ConfigurationError(AlphaCorrError, ValueError):
    """Raised when correlation parameters are invalid (e.g. min_corr_points < 2)."""


class InvalidSeriesError(AlphaCorrError, ValueError):
    """Raised when a series is constructed with invalid inputs."""


class StorageWriteError(AlphaCorrError, OSError):
    """Raised by a buffer store when values cannot be written to its backing file."""
