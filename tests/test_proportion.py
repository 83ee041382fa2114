#!/usr/bin/env python3
"""
Proportion coefficient and labeling window tests.

Usage:
    python -m pytest tests/test_proportion.py -v
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from defect_miner.models import DefectReport


def defect(iv=-1, ov=-1, fv=-1, key="P-1"):
    return DefectReport(
        key=key,
        created=datetime(2020, 1, 1),
        opening_index=ov,
        fixed_index=fv,
        introduction_index=iv,
    )


# =============================================================================
# COEFFICIENT
# =============================================================================

def test_default_without_samples():
    """No complete lifecycle yields the default coefficient"""
    from defect_miner.proportion import compute_coefficient

    assert compute_coefficient([]) == 1.5
    assert compute_coefficient([defect(ov=1, fv=2), defect(iv=1, ov=2, fv=2)]) == 1.5


def test_median_of_samples():
    from defect_miner.proportion import compute_coefficient

    # (fv - iv) / (fv - ov) = 2, 4, 6
    defects = [
        defect(iv=3, ov=4, fv=5, key="A"),
        defect(iv=1, ov=4, fv=5, key="B"),
        defect(iv=1, ov=6, fv=7, key="C"),
    ]
    assert compute_coefficient(defects) == pytest.approx(4.0)
    assert compute_coefficient(defects[:2]) == pytest.approx(3.0)


def test_samples_skip_incomplete_and_same_release_fixes():
    """Unknown indices and fixed <= opening never produce a sample"""
    from defect_miner.proportion import proportion_samples

    defects = [
        defect(iv=1, ov=3, fv=3, key="A"),
        defect(iv=1, ov=4, fv=2, key="B"),
        defect(iv=-1, ov=2, fv=4, key="C"),
        defect(iv=1, ov=2, fv=4, key="D"),
    ]
    assert proportion_samples(defects) == [1.5]


# =============================================================================
# INTRODUCTION ESTIMATE
# =============================================================================

def test_known_introduction_is_kept():
    from defect_miner.proportion import estimate_introduction

    assert estimate_introduction(defect(iv=2, ov=3, fv=4), 10.0) == 2


def test_estimate_rounds_half_up():
    from defect_miner.proportion import estimate_introduction

    # 5 - 2 * 1.25 = 2.5 -> 3
    assert estimate_introduction(defect(ov=3, fv=5), 1.25) == 3
    # 4 - 1 * 1.5 = 2.5 -> 3
    assert estimate_introduction(defect(ov=3, fv=4), 1.5) == 3


def test_estimate_clamped_to_first_release():
    from defect_miner.proportion import estimate_introduction

    assert estimate_introduction(defect(ov=2, fv=5), 4.0) == 1


def test_estimate_not_applicable():
    """Nothing is estimated without a fix after the opening release"""
    from defect_miner.proportion import estimate_introduction

    assert estimate_introduction(defect(ov=2), 1.5) == -1
    assert estimate_introduction(defect(ov=3, fv=3), 1.5) == -1
    assert estimate_introduction(defect(fv=3), 1.5) == -1


# =============================================================================
# LABELING WINDOW
# =============================================================================

def test_window_is_half_open():
    """Buggy from the introducing release up to, not including, the fix"""
    from defect_miner.proportion import in_window, labeling_window

    window = labeling_window(defect(iv=2, ov=3, fv=4), 1.5)
    assert window == (2, 4)
    assert not in_window(1, window)
    assert in_window(2, window)
    assert in_window(3, window)
    assert not in_window(4, window)


def test_window_requires_fix():
    from defect_miner.proportion import labeling_window

    assert labeling_window(defect(iv=1, ov=2), 1.5) is None
    assert labeling_window(defect(ov=2), 1.5) is None


def test_empty_window_when_fixed_in_introducing_release():
    from defect_miner.proportion import in_window, labeling_window

    window = labeling_window(defect(iv=3, ov=3, fv=3), 1.5)
    assert not any(in_window(i, window) for i in range(1, 6))
