"""
Linking defects to their fix commits and to the methods those fixes touch.
"""

import logging

from pydriller import ModificationType

from .config import TICKET_KEY_PATTERN
from .models import DefectReport, FailureReason, MethodKey
from .parsing import parse_declarations
from .repository import is_source_file

log = logging.getLogger(__name__)


class BugMethodMapper:
    """
    Builds the defect key -> touched method keys index used for labeling.

    The fix commit of a defect is the first commit of the log (newest first,
    all refs) whose message mentions its key. A later commit that merely
    references the key wins over the real fix; this is accepted as is.
    """

    def __init__(self, repo):
        self.repo = repo
        self.linked = False
        self.parse_failures = 0

    def link_fix_commits(self, defects: list[DefectReport]) -> int:
        """Set fix_commit and resolution_date from commit messages; returns how many were linked"""
        print("  Scanning git log to link commits to tickets...", flush=True)
        by_key = {d.key: d for d in defects}
        linked = 0
        for commit in self.repo.log_all():
            for key in TICKET_KEY_PATTERN.findall(commit.msg):
                defect = by_key.get(key)
                if defect is None or defect.fix_commit is not None:
                    continue
                defect.fix_commit = commit.hash
                defect.resolution_date = commit.author_date
                linked += 1
        self.linked = True
        print(f"  Linked {linked}/{len(defects)} tickets to fix commits", flush=True)
        return linked

    def methods_touched_by(self, commit_hash: str) -> list[MethodKey]:
        """Keys of the methods, in modified source files, that a commit's edits overlap"""
        touched = []
        for diff in self.repo.diff(commit_hash):
            if diff.change_type != ModificationType.MODIFY or not is_source_file(diff.new_path):
                continue

            content = self.repo.file_content_at(diff.new_path, commit_hash)
            outcome = parse_declarations(diff.new_path, content)
            if not outcome.ok:
                if outcome.reason == FailureReason.PARSE_ERROR:
                    self.parse_failures += 1
                    log.warning("Failed to parse %s in fix commit %s | %s",
                                diff.new_path, commit_hash[:8], outcome.detail)
                continue

            for edit in diff.edits:
                for decl in outcome.value:
                    if edit.overlaps(decl.start_line, decl.end_line):
                        touched.append(decl.key)
        return list(dict.fromkeys(touched))

    def map_defects_to_methods(self, defects: list[DefectReport]) -> dict[str, list[MethodKey]]:
        if not self.linked:
            self.link_fix_commits(defects)

        print("  Mapping bug fixes to methods...", flush=True)
        bug_to_methods = {}
        for defect in defects:
            if defect.fix_commit is None:
                continue
            commit = self.repo.commit(defect.fix_commit)
            if not commit.parents:
                continue
            bug_to_methods[defect.key] = self.methods_touched_by(defect.fix_commit)
        return bug_to_methods
