"""
Dataset assembly: per-release method features and buggy labels.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from .bugs import BugMethodMapper
from .config import CLONE_DIR, CSV_COLUMNS, RELEASE_CUTOFF_RATIO
from .features import MethodRow, build_row, placeholder_change_features, static_features
from .history import ChangeHistoryCollector
from .jira import JiraConnector
from .models import Declaration, DefectReport, FailureReason, MethodKey, Release, TrackedMethod
from .parsing import parse_declarations
from .proportion import compute_coefficient, in_window, labeling_window
from .releases import assign_defect_indices, assign_indices, select_releases
from .repository import GitConnector, resolve_release_commit
from .tracking import EMPTY_SNAPSHOT, MethodIdentityTracker

log = logging.getLogger(__name__)


@dataclass
class MiningReport:
    """Everything one mining run produced, for output and diagnostics"""
    project: str
    releases: list[Release] = field(default_factory=list)
    defects: list[DefectReport] = field(default_factory=list)
    proportion: float = 0.0
    bug_to_methods: dict = field(default_factory=dict)
    analyzed_releases: list[str] = field(default_factory=list)
    skipped_releases: list[str] = field(default_factory=list)
    rows: list[MethodRow] = field(default_factory=list)
    parse_failures: int = 0
    history_failures: int = 0


def build_label_index(defects: list[DefectReport], bug_to_methods: dict, p: float) -> dict:
    """method key -> [(introduction, fixed)] windows of the defects whose fix touched it"""
    index = defaultdict(list)
    for defect in defects:
        touched = bug_to_methods.get(defect.key)
        if not touched:
            continue
        window = labeling_window(defect, p)
        if window is None:
            continue
        for key in touched:
            index[key].append(window)
    return dict(index)


def is_method_buggy(key: MethodKey, release_index: int, label_index: dict) -> bool:
    """Buggy when any defect touching the method is alive in this release"""
    return any(in_window(release_index, w) for w in label_index.get(key, ()))


class DatasetAssembler:
    """Runs the mining stages for one project over an opened repository"""

    def __init__(self, project: str, repo, tracker: MethodIdentityTracker = None,
                 cutoff_ratio: float = RELEASE_CUTOFF_RATIO):
        self.project = project
        self.repo = repo
        self.cutoff_ratio = cutoff_ratio
        self.tracker = tracker or MethodIdentityTracker()
        self.collector = ChangeHistoryCollector(repo)
        self.mapper = BugMethodMapper(repo)
        self.parse_failures = 0
        self.history_failures = 0

    def extract_declarations(self, commit_hash: str) -> list[Declaration]:
        """All callables in the source files of a snapshot; unparsable files contribute none"""
        declarations = []
        for path in self.repo.source_files_at(commit_hash):
            content = self.repo.file_content_at(path, commit_hash)
            outcome = parse_declarations(path, content)
            if outcome.ok:
                declarations.extend(outcome.value)
            elif outcome.reason == FailureReason.PARSE_ERROR:
                self.parse_failures += 1
                log.warning("Failed to parse %s in commit %s | %s", path, commit_hash[:8], outcome.detail)
        return declarations

    def change_features(self, method: TrackedMethod, commit_hash: str) -> dict:
        outcome = self.collector.try_collect_stats(
            method.filepath, method.start_line, method.end_line, commit_hash
        )
        if outcome.ok:
            return outcome.value.to_features()
        self.history_failures += 1
        log.warning("Could not compute history for %s (%s) %s",
                    method.name, outcome.reason.value, outcome.detail)
        return placeholder_change_features()

    def build(self, releases: list[Release], defects: list[DefectReport]) -> MiningReport:
        report = MiningReport(project=self.project, defects=defects)
        releases = assign_indices(releases)
        report.releases = releases

        # resolution dates come from the fix commits, so link before indexing
        self.mapper.link_fix_commits(defects)
        assign_defect_indices(defects, releases)

        p = compute_coefficient(defects)
        report.proportion = p
        print(f"  Proportion coefficient for {self.project}: {p:.3f}", flush=True)

        bug_to_methods = self.mapper.map_defects_to_methods(defects)
        report.bug_to_methods = bug_to_methods
        label_index = build_label_index(defects, bug_to_methods, p)

        snapshot = EMPTY_SNAPSHOT
        for release in select_releases(releases, self.cutoff_ratio):
            commit_hash = resolve_release_commit(self.repo, release.name, self.project)
            if commit_hash is None:
                log.warning("Skipping release %s: no matching git tag", release.name)
                report.skipped_releases.append(release.name)
                continue

            print(f"  Analyzing release: {release.name}", flush=True)
            declarations = self.extract_declarations(commit_hash)
            methods, snapshot = self.tracker.track_release(declarations, snapshot)

            for decl, method in zip(declarations, methods):
                method = method.with_features({
                    **static_features(decl),
                    **self.change_features(method, commit_hash),
                })
                buggy = is_method_buggy(method.key, release.index, label_index)
                report.rows.append(build_row(self.project, release.name, method, buggy))
            report.analyzed_releases.append(release.name)

        report.parse_failures = self.parse_failures + self.mapper.parse_failures
        report.history_failures = self.history_failures
        buggy = sum(1 for r in report.rows if r.is_buggy)
        print(f"  Extracted: {len(report.rows)} rows ({buggy} buggy) "
              f"from {len(report.analyzed_releases)} releases", flush=True)
        return report


def mine_project(project_key: str, repo_url: str, clone_dir: str | Path = CLONE_DIR) -> MiningReport:
    """Fetch the tracker data, open the clone and assemble the dataset of one project"""
    print(f"\nProcessing: {project_key}", flush=True)

    jira = JiraConnector(project_key)
    releases = jira.get_releases()
    defects = jira.get_bug_tickets()
    print(f"  Jira: {len(releases)} releases, {len(defects)} fixed bugs", flush=True)

    repo = GitConnector.clone_or_open(repo_url, Path(clone_dir) / project_key)
    return DatasetAssembler(project_key, repo).build(releases, defects)


def write_dataset(rows: list[MethodRow], path: str | Path) -> pd.DataFrame:
    df = pd.DataFrame([r.to_dict() for r in rows], columns=CSV_COLUMNS)
    df.to_csv(path, index=False)
    print(f"  Dataset saved: {path} ({len(df)} rows)", flush=True)
    return df
