"""
Change-history features of a method: revisions, authors and churn.

Every ancestor of the release commit is diffed against its first parent, and
the edits on the method's file whose post-change range meets the method's
current line range are attributed to it. Line ranges are not re-projected
through history, so a method that moved inside its file picks up edits that
belonged to its old neighbours.
"""

import logging
from collections import defaultdict

from .models import ChangeStats, CommitInfo, FailureReason, FileDiff, Outcome

log = logging.getLogger(__name__)


class ChangeHistoryCollector:
    """
    Accumulates ChangeStats for method line ranges.

    Diffs are cached per commit, and the per-file view of a release commit's
    ancestry is kept for the most recent target, so consecutive methods of the
    same release reuse one history walk.
    """

    def __init__(self, repo):
        self.repo = repo
        self._diffs: dict[str, list[FileDiff]] = {}
        self._index_target = None
        self._index: dict[str, list[tuple[CommitInfo, list[FileDiff]]]] = {}

    def _commit_diffs(self, commit: CommitInfo) -> list[FileDiff]:
        if commit.hash not in self._diffs:
            self._diffs[commit.hash] = self.repo.diff(commit.hash)
        return self._diffs[commit.hash]

    def _file_index(self, target_commit: str) -> dict:
        """path -> [(commit, diffs touching path)] over the ancestry of target_commit"""
        if target_commit == self._index_target:
            return self._index

        index = defaultdict(list)
        seen = set()
        for commit in self.repo.ancestors_of(target_commit):
            if commit.hash in seen or not commit.parents:
                continue
            seen.add(commit.hash)

            by_path = defaultdict(list)
            for diff in self._commit_diffs(commit):
                for path in {diff.old_path, diff.new_path} - {None}:
                    by_path[path].append(diff)
            for path, diffs in by_path.items():
                index[path].append((commit, diffs))

        self._index = dict(index)
        self._index_target = target_commit
        return self._index

    def collect_stats(self, filepath: str, start_line: int, end_line: int, target_commit: str) -> ChangeStats:
        stats = ChangeStats()
        for commit, diffs in self._file_index(target_commit).get(filepath, []):
            touched = False
            churn = 0
            for diff in diffs:
                for edit in diff.edits:
                    if not edit.overlaps(start_line, end_line):
                        continue
                    if not touched:
                        touched = True
                        stats.revisions += 1
                        stats.authors.add(commit.author_email)
                    stats.lines_added += edit.added
                    stats.lines_deleted += edit.deleted
                    churn += edit.added + edit.deleted

            if churn > 0:
                stats.total_churn += churn
                stats.max_churn = max(stats.max_churn, churn)
        return stats

    def try_collect_stats(self, filepath: str, start_line: int, end_line: int, target_commit: str) -> Outcome:
        """collect_stats, with unusable ranges and repository errors reported as failures"""
        if start_line < 0 or end_line < 0:
            return Outcome.failure(FailureReason.INVALID_RANGE, f"{start_line}-{end_line}")
        try:
            return Outcome.success(self.collect_stats(filepath, start_line, end_line, target_commit))
        except Exception as e:
            log.debug("History walk failed for %s@%s", filepath, target_commit, exc_info=True)
            return Outcome.failure(FailureReason.HISTORY_ERROR, f"{type(e).__name__}: {e}")
