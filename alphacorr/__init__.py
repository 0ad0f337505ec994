"""AlphaCorr - Numba-accelerated signal correlation for mass spectrometry.

Scores how similar two intensity-over-time traces are (e.g. an MS1 feature
and an MS2 fragment EIC), even when they were sampled on different time
grids, and aggregates pairwise results into per-entity group statistics.

Degenerate input (too few points, flat traces) is reported as data: NaN
scores and ``valid=False``. Only invalid parameters raise.
"""

__version__ = "0.1.0"

# Import main submodules for convenient access
from alphacorr import series
from alphacorr import scoring
from alphacorr import correlation
from alphacorr import storage
from alphacorr import dia
from alphacorr import parallel

from alphacorr.config import CorrelationParams, DiaAssignmentParams
from alphacorr.exceptions import (
    AlphaCorrError,
    ConfigurationError,
    InvalidSeriesError,
    StorageWriteError,
)

__all__ = [
    "series",
    "scoring",
    "correlation",
    "storage",
    "dia",
    "parallel",
    # Configuration
    "CorrelationParams",
    "DiaAssignmentParams",
    # Errors
    "AlphaCorrError",
    "ConfigurationError",
    "InvalidSeriesError",
    "StorageWriteError",
]
