"""Assign DIA MS2 fragment traces to MS1 features by shape correlation.

In data-independent acquisition every MS2 scan fragments all precursors of
an isolation window, so fragments cannot be linked to a precursor by
isolation alone. A fragment belongs to an MS1 feature if its extracted ion
chromatogram (EIC) co-elutes with the feature.

Procedure
---------
1. Cut ``min_corr_points`` MS1 points (plus one on each side) around the apex
2. Select the MS2 scans inside that rt window; at least ``min_corr_points``
3. Find the MS2 scan closest to the apex rt
4. Every peak of that scan above ``min_ms2_intensity`` picks the fragment EIC
   within ``mz_tolerance_ppm``
5. Keep EICs with a valid shape correlation and ``r^2 > min_pearson``
6. Report the intensity-weighted m/z and the maximum intensity of each kept
   EIC inside the MS1 rt window as a pseudo MS2 spectrum

Examples
--------
>>> params = DiaAssignmentParams.for_dia(min_ms2_intensity=1000.0)
>>> spectrum = assign_dia_fragments(ms1_feature, fragment_eics, ms2_scans, params)
>>> if spectrum is not None:
...     print(spectrum.mzs, spectrum.intensities)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import DiaAssignmentParams
from ..scoring.correlation_data import CorrelationData
from ..scoring.feature_shape import FeatureShapeCorrelator
from ..series.timeseries import MergingType, SeriesLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Ms2Scan:
    """Centroided MS2 scan (m/z sorted ascending)."""

    rt: float
    mzs: np.ndarray
    intensities: np.ndarray
    scan_number: int = -1


@dataclass(frozen=True, eq=False)
class FragmentEic:
    """Extracted ion chromatogram of one MS2 fragment.

    Attributes
    ----------
    series : SeriesLike
        Time / intensity trace
    mzs : np.ndarray
        m/z of every trace point, parallel to ``series.times()``
    """

    series: SeriesLike
    mzs: np.ndarray

    def __post_init__(self):
        if len(self.mzs) != self.series.length():
            raise ValueError(
                f"mzs must have one value per point, got {len(self.mzs)} for "
                f"{self.series.length()} points"
            )

    @property
    def mz(self) -> float:
        """Intensity-weighted m/z over the whole trace."""
        return weighted_mz(self.mzs, self.series.intensities())


@dataclass(frozen=True, eq=False)
class DiaFragmentMatch:
    """A fragment EIC assigned to an MS1 feature."""

    eic_index: int
    mz: float
    intensity: float
    correlation: CorrelationData


@dataclass(frozen=True, eq=False)
class DiaMs2Spectrum:
    """Pseudo MS2 spectrum of one MS1 feature built from correlated fragments.

    Attributes
    ----------
    mzs, intensities : np.ndarray
        Fragment m/z (ascending) and their maximum intensity in the rt window
    precursor_rt : float
        Apex rt of the MS1 feature
    closest_scan_index : int
        Index (into the input scans) of the MS2 scan closest to the apex
    source_scan_indices : np.ndarray
        Indices of all MS2 scans inside the MS1 rt window
    fragments : list of DiaFragmentMatch
        Per-fragment details, same order as ``mzs``
    merging_type : MergingType
        How the fragment intensities were combined across scans
    """

    mzs: np.ndarray
    intensities: np.ndarray
    precursor_rt: float
    closest_scan_index: int
    source_scan_indices: np.ndarray
    fragments: List[DiaFragmentMatch] = field(default_factory=list)
    merging_type: MergingType = MergingType.MAXIMUM

    def __len__(self) -> int:
        return len(self.mzs)


def weighted_mz(mzs: np.ndarray, intensities: np.ndarray) -> float:
    """Intensity-weighted mean m/z, plain mean when all intensities are 0."""
    mzs = np.asarray(mzs, dtype=np.float64)
    intensities = np.asarray(intensities, dtype=np.float64)
    if mzs.size == 0:
        return np.nan
    total = intensities.sum()
    if total <= 0:
        return float(mzs.mean())
    return float(np.dot(mzs, intensities) / total)


def extract_points_around_maximum(
    series: SeriesLike,
    n_points: int,
    apex_index: Optional[int] = None,
) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """Cut the points around the apex of a trace.

    Takes ``n_points // 2 + 1`` points on each side of the apex, limited to
    the bounds of the trace. The extra point per side covers MS1 and MS2
    scans being acquired alternately, so the MS1 window still spans
    ``n_points`` MS2 scans.

    Parameters
    ----------
    series : SeriesLike
        MS1 feature trace
    n_points : int
        Number of points to fit into the window
    apex_index : int, optional
        Index of the maximum (default: most intense point)

    Returns
    -------
    (times, intensities) or None
        None for an empty trace or an apex index outside the trace
    """
    n = series.length()
    if apex_index is None:
        apex_index = int(np.argmax(series.intensities())) if n > 0 else -1
    if apex_index < 0 or apex_index >= n:
        return None

    half = n_points // 2 + 1
    lower = max(apex_index - half, 0)
    upper = min(apex_index + half, n - 1)
    times = np.array(series.times()[lower:upper + 1], dtype=np.float64)
    intensities = np.array(series.intensities()[lower:upper + 1], dtype=np.float64)
    return times, intensities


def closest_scan_index(target_rt: float, scan_rts: np.ndarray) -> int:
    """Index of the scan with minimal ``|rt - target_rt|``, -1 if there is none.

    Scans the full array; ``scan_rts`` does not need to be sorted. The first
    index wins ties.
    """
    scan_rts = np.asarray(scan_rts, dtype=np.float64)
    if scan_rts.size == 0:
        return -1
    return int(np.argmin(np.abs(scan_rts - target_rt)))


def scans_in_range(scan_rts: np.ndarray, rt_min: float, rt_max: float) -> np.ndarray:
    """Indices of scans with ``rt_min <= rt <= rt_max``."""
    scan_rts = np.asarray(scan_rts, dtype=np.float64)
    return np.nonzero((scan_rts >= rt_min) & (scan_rts <= rt_max))[0]


def find_closest_mz(sorted_mzs: np.ndarray, target_mz: float, tol_ppm: float) -> int:
    """Index of the closest m/z within ``tol_ppm``, -1 if there is none.

    Parameters
    ----------
    sorted_mzs : np.ndarray
        Sorted m/z array
    target_mz : float
        m/z to look up
    tol_ppm : float
        Tolerance in ppm of ``target_mz``
    """
    if len(sorted_mzs) == 0:
        return -1

    mass_tol = target_mz * tol_ppm / 1e6
    left = int(np.searchsorted(sorted_mzs, target_mz, side="left"))

    # Check neighbors for best match within tolerance
    best_idx = -1
    best_error = np.inf
    for idx in (left - 1, left):
        if 0 <= idx < len(sorted_mzs):
            error = abs(sorted_mzs[idx] - target_mz)
            if error <= mass_tol and error < best_error:
                best_error = error
                best_idx = idx

    return best_idx


def _eligible_eics(
    scan: Ms2Scan,
    eic_mzs_sorted: np.ndarray,
    eic_order: np.ndarray,
    params: DiaAssignmentParams,
) -> List[int]:
    """EIC indices matched by the intense peaks of ``scan`` (first match order)."""
    eligible: List[int] = []
    seen = set()
    for mz, intensity in zip(scan.mzs, scan.intensities):
        if intensity < params.min_ms2_intensity:
            continue
        pos = find_closest_mz(eic_mzs_sorted, float(mz), params.mz_tolerance_ppm)
        if pos == -1:
            continue
        eic_index = int(eic_order[pos])
        if eic_index not in seen:
            seen.add(eic_index)
            eligible.append(eic_index)
    return eligible


def assign_dia_fragments(
    ms1_feature: SeriesLike,
    fragment_eics: Sequence[FragmentEic],
    ms2_scans: Sequence[Ms2Scan],
    params: Optional[DiaAssignmentParams] = None,
    apex_index: Optional[int] = None,
) -> Optional[DiaMs2Spectrum]:
    """Build a pseudo MS2 spectrum for one MS1 feature.

    Parameters
    ----------
    ms1_feature : SeriesLike
        MS1 feature trace
    fragment_eics : sequence of FragmentEic
        Candidate fragment EICs of the same raw file
    ms2_scans : sequence of Ms2Scan
        MS2 scans of the isolation window covering the precursor
    params : DiaAssignmentParams, optional
        Assignment parameters (default: ``DiaAssignmentParams()``)
    apex_index : int, optional
        Apex index of the feature (default: most intense point)

    Returns
    -------
    DiaMs2Spectrum or None
        None if the feature is too weak, too few MS2 scans fall inside its rt
        window or no fragment correlates
    """
    if params is None:
        params = DiaAssignmentParams()

    if ms1_feature.length() == 0:
        return None
    if float(np.max(ms1_feature.intensities())) < params.min_ms1_intensity:
        return None

    shape = extract_points_around_maximum(ms1_feature, params.min_corr_points, apex_index)
    if shape is None:
        return None
    ms1_rts, ms1_intensities = shape
    rt_min, rt_max = float(ms1_rts[0]), float(ms1_rts[-1])

    scan_rts = np.array([s.rt for s in ms2_scans], dtype=np.float64)
    in_range = scans_in_range(scan_rts, rt_min, rt_max)
    if in_range.size < params.min_corr_points:
        logger.debug(
            f"Only {in_range.size} MS2 scans in rt range {rt_min:.4f}-{rt_max:.4f}, "
            f"need {params.min_corr_points}"
        )
        return None

    if apex_index is None:
        apex_index = int(np.argmax(ms1_feature.intensities()))
    apex_rt = float(ms1_feature.times()[apex_index])
    closest = int(in_range[closest_scan_index(apex_rt, scan_rts[in_range])])

    eic_centers = np.array([eic.mz for eic in fragment_eics], dtype=np.float64)
    eic_order = np.argsort(eic_centers, kind="stable")
    eligible = _eligible_eics(ms2_scans[closest], eic_centers[eic_order], eic_order, params)
    if not eligible:
        return None

    correlator = FeatureShapeCorrelator(params.correlation_params())
    matches: List[DiaFragmentMatch] = []
    for eic_index in eligible:
        eic = fragment_eics[eic_index]
        corr = correlator.correlate_arrays(
            ms1_rts, ms1_intensities, eic.series.times(), eic.series.intensities()
        )
        if not corr.valid or corr.r_squared <= params.min_pearson:
            continue

        times = eic.series.times()
        window = (times >= rt_min) & (times <= rt_max)
        if not window.any():
            continue
        intensities = np.asarray(eic.series.intensities())[window]
        matches.append(DiaFragmentMatch(
            eic_index=eic_index,
            mz=weighted_mz(np.asarray(eic.mzs)[window], intensities),
            intensity=float(intensities.max()),
            correlation=corr,
        ))

    if not matches:
        return None

    matches.sort(key=lambda m: m.mz)
    logger.debug(
        f"Assigned {len(matches)} of {len(eligible)} candidate fragments "
        f"to feature at rt {apex_rt:.4f}"
    )
    return DiaMs2Spectrum(
        mzs=np.array([m.mz for m in matches], dtype=np.float64),
        intensities=np.array([m.intensity for m in matches], dtype=np.float64),
        precursor_rt=apex_rt,
        closest_scan_index=closest,
        source_scan_indices=in_range,
        fragments=matches,
    )
