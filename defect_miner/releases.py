"""
Release ordering and date-to-release alignment.
"""

from dataclasses import replace
from datetime import date, datetime

from .config import UNKNOWN_INDEX
from .models import DefectReport, Release


def assign_indices(releases: list[Release]) -> list[Release]:
    """Sort releases by date (stable on ties) and number them from 1"""
    ordered = sorted(releases, key=lambda r: r.date)
    return [replace(r, index=i) for i, r in enumerate(ordered, 1)]


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def index_for_date(when: date | datetime, releases: list[Release]) -> int:
    """
    Index of the earliest release dated on or after `when`.

    Dates past the last release fall back to the last release; an empty
    release list yields UNKNOWN_INDEX.
    """
    if not releases:
        return UNKNOWN_INDEX
    day = _as_date(when)
    for release in releases:
        if day <= release.date:
            return release.index
    return releases[-1].index


def assign_defect_indices(defects: list[DefectReport], releases: list[Release]):
    """Set opening, fixed and introduction indices on every defect"""
    by_name = {r.name: r.index for r in releases}
    for defect in defects:
        defect.opening_index = index_for_date(defect.created, releases)
        if defect.resolution_date is not None:
            defect.fixed_index = index_for_date(defect.resolution_date, releases)

        affected = [by_name[v] for v in defect.affected_versions if v in by_name]
        if affected:
            defect.introduction_index = min(affected)


def select_releases(releases: list[Release], ratio: float) -> list[Release]:
    """The chronologically earliest share of releases"""
    return releases[:int(len(releases) * ratio)]
