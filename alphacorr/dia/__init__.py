"""DIA MS2 fragment assignment by MS1/MS2 shape correlation."""

from .ms2_assignment import (
    DiaFragmentMatch,
    DiaMs2Spectrum,
    FragmentEic,
    Ms2Scan,
    assign_dia_fragments,
    closest_scan_index,
    extract_points_around_maximum,
    find_closest_mz,
    scans_in_range,
    weighted_mz,
)

__all__ = [
    # Data types
    'DiaFragmentMatch',
    'DiaMs2Spectrum',
    'FragmentEic',
    'Ms2Scan',

    # Assignment
    'assign_dia_fragments',
    'closest_scan_index',
    'extract_points_around_maximum',
    'find_closest_mz',
    'scans_in_range',
    'weighted_mz',
]
