"""
Proportion heuristic for defects whose introducing release is unknown.

For defects with a complete lifecycle, P = (FV - IV) / (FV - OV) measures how
far before the opening release the bug was introduced, in units of the
open-to-fix span. The median P over the project then fills IV for defects that
only know OV and FV: IV = FV - (FV - OV) * P.
"""

import math

import numpy as np

from .config import DEFAULT_PROPORTION, UNKNOWN_INDEX
from .models import DefectReport


def _known(index: int) -> bool:
    return index > 0


def proportion_samples(defects: list[DefectReport]) -> list[float]:
    samples = []
    for d in defects:
        if not (_known(d.introduction_index) and _known(d.fixed_index) and _known(d.opening_index)):
            continue
        if d.fixed_index <= d.opening_index:
            continue
        samples.append((d.fixed_index - d.introduction_index) / (d.fixed_index - d.opening_index))
    return samples


def compute_coefficient(defects: list[DefectReport]) -> float:
    """Median P over all fully known defects, DEFAULT_PROPORTION if there are none"""
    samples = proportion_samples(defects)
    if not samples:
        return DEFAULT_PROPORTION
    return float(np.median(samples))


def estimate_introduction(defect: DefectReport, p: float) -> int:
    """
    Introduction index for a defect, estimated with `p` when unknown.

    Returns the known index untouched, and UNKNOWN_INDEX when the estimate
    cannot be applied (fixed or opening unknown, or not fixed after opening).
    """
    if _known(defect.introduction_index):
        return defect.introduction_index
    fv, ov = defect.fixed_index, defect.opening_index
    if not (_known(fv) and _known(ov) and fv > ov):
        return UNKNOWN_INDEX
    # half-up rounding
    iv = math.floor(fv - (fv - ov) * p + 0.5)
    return max(iv, 1)


def labeling_window(defect: DefectReport, p: float) -> tuple[int, int] | None:
    """Half-open [introduction, fixed) interval of releases the defect lives in"""
    iv = estimate_introduction(defect, p)
    fv = defect.fixed_index
    if not (_known(iv) and _known(fv)):
        return None
    return iv, fv


def in_window(release_index: int, window: tuple[int, int]) -> bool:
    iv, fv = window
    return iv <= release_index < fv
