"""
Dataset diagnostics for assessing label quality of a mining run.
"""

import numpy as np

from .proportion import estimate_introduction, proportion_samples


def diagnose_dataset(report) -> dict:
    """Summarize how much of a mining run's labeling rests on solid ground"""
    print(f"\n{'='*60}")
    print(f"DATASET DIAGNOSTIC: {report.project}")
    print(f"{'='*60}")

    defects = report.defects
    total_defects = len(defects)
    linked = sum(1 for d in defects if d.fix_commit is not None)
    with_av = sum(1 for d in defects if d.introduction_index > 0)
    estimated = sum(
        1 for d in defects
        if d.introduction_index <= 0 and estimate_introduction(d, report.proportion) > 0
    )
    mapped = sum(1 for methods in report.bug_to_methods.values() if methods)
    samples = proportion_samples(defects)

    rows = len(report.rows)
    buggy = sum(1 for r in report.rows if r.is_buggy)

    link_ratio = linked / max(total_defects, 1)
    av_ratio = with_av / max(total_defects, 1)
    buggy_ratio = buggy / max(rows, 1)
    p_spread = float(np.std(samples)) if samples else 0.0

    quality_score = 0
    issues = []

    # Fix-commit linkage (ideal: most tickets referenced in commit messages)
    if link_ratio >= 0.6:
        quality_score += 25
    elif link_ratio >= 0.3:
        quality_score += 15
    else:
        issues.append(f"Only {link_ratio:.1%} of tickets linked to a fix commit - buggy labels will be sparse")

    # Affected-version metadata
    if av_ratio >= 0.5:
        quality_score += 25
    elif av_ratio >= 0.2:
        quality_score += 15
    else:
        issues.append(f"Affected versions known for {av_ratio:.1%} of tickets - introduction mostly estimated")

    # Proportion sample size
    if len(samples) >= 10:
        quality_score += 25
    elif samples:
        quality_score += 15
    else:
        issues.append("No ticket with a complete lifecycle - default proportion used")

    # Class balance (ideal: 5-40% buggy)
    if 0.05 <= buggy_ratio <= 0.40:
        quality_score += 25
    elif buggy > 0:
        quality_score += 15
        issues.append(f"Buggy ratio {buggy_ratio:.1%} outside ideal range (5-40%)")
    else:
        issues.append("No buggy rows - check tag naming and ticket linkage")

    if report.skipped_releases:
        issues.append(f"{len(report.skipped_releases)} release(s) skipped without a git tag: "
                      f"{', '.join(report.skipped_releases[:5])}")

    # Print report
    print(f"\nMetrics:")
    print(f"  Tickets:              {total_defects:>6}")
    print(f"  Linked to fix commit: {linked:>6} ({link_ratio:.1%})")
    print(f"  Mapped to methods:    {mapped:>6}")
    print(f"  Affected versions:    {with_av:>6} ({av_ratio:.1%})")
    print(f"  Estimated IV:         {estimated:>6}")
    print(f"  Proportion:           {report.proportion:>6.3f} (n={len(samples)}, std={p_spread:.3f})")
    print(f"  Releases analyzed:    {len(report.analyzed_releases):>6}")
    print(f"  Rows:                 {rows:>6} ({buggy} buggy, {buggy_ratio:.1%})")
    print(f"  Parse failures:       {report.parse_failures:>6}")
    print(f"  History failures:     {report.history_failures:>6}")

    print(f"\nQuality Score: {quality_score}/100")

    if quality_score >= 75:
        print("  GOOD - Labels well grounded")
    elif quality_score >= 50:
        print("  ~ FAIR - Usable with caveats")
    else:
        print("  POOR - Labels mostly heuristic")

    if issues:
        print(f"\nIssues:")
        for issue in issues:
            print(f"  - {issue}")

    return {
        'quality_score': quality_score,
        'link_ratio': link_ratio,
        'affected_version_ratio': av_ratio,
        'estimated_introductions': estimated,
        'proportion_samples': len(samples),
        'buggy_ratio': buggy_ratio,
        'rows': rows,
        'issues': issues,
    }
