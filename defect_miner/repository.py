"""
Local repository access: ancestry, first-parent diffs, tags and file content.
"""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Iterator

from git import Repo
from pydriller import Git, ModificationType

from .config import EXCLUDE_PATH_KEYWORD, EXTRA_TAG_PREFIXES, SOURCE_EXTENSIONS, TAG_NAME_PATTERNS
from .models import CommitInfo, Edit, FileDiff

log = logging.getLogger(__name__)

HUNK_HEADER = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@')


def parse_edits(patch: str) -> tuple[Edit, ...]:
    """
    Split a unified diff of one file into its changed regions.

    Context lines separate regions, so a hunk with several changes produces
    several edits. Coordinates are 0-based with exclusive ends.
    """
    edits = []
    current = None
    old_line = new_line = 0
    in_hunk = False

    def flush():
        nonlocal current
        if current is not None:
            edits.append(Edit(*current))
            current = None

    for line in patch.splitlines():
        header = HUNK_HEADER.match(line)
        if header:
            flush()
            in_hunk = True
            old_start, old_len, new_start, new_len = header.groups()
            old_len = 1 if old_len is None else int(old_len)
            new_len = 1 if new_len is None else int(new_len)
            # an empty side names the line *before* the change
            old_line = int(old_start) - 1 if old_len > 0 else int(old_start)
            new_line = int(new_start) - 1 if new_len > 0 else int(new_start)
            continue
        if not in_hunk or line.startswith('\\'):
            continue
        if line.startswith('-'):
            if current is None:
                current = [old_line, old_line, new_line, new_line]
            current[1] += 1
            old_line += 1
        elif line.startswith('+'):
            if current is None:
                current = [old_line, old_line, new_line, new_line]
            current[3] += 1
            new_line += 1
        else:
            flush()
            old_line += 1
            new_line += 1
    flush()
    return tuple(edits)


def _change_type(diff) -> ModificationType:
    if diff.new_file:
        return ModificationType.ADD
    if diff.deleted_file:
        return ModificationType.DELETE
    if diff.renamed_file:
        return ModificationType.RENAME
    if diff.a_blob and diff.b_blob and diff.a_blob != diff.b_blob:
        return ModificationType.MODIFY
    return ModificationType.UNKNOWN


def is_source_file(path: str, extensions=SOURCE_EXTENSIONS) -> bool:
    return PurePosixPath(path).suffix in extensions and EXCLUDE_PATH_KEYWORD not in path.lower()


def _commit_info(commit) -> CommitInfo:
    return CommitInfo(
        hash=commit.hash,
        parents=tuple(commit.parents),
        author_email=commit.author.email,
        author_date=commit.author_date,
        msg=commit.msg,
    )


class GitConnector:
    """Read-only view of a local clone"""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.git = Git(str(self.path))
        self.repo: Repo = self.git.repo
        self._tags = None

    @classmethod
    def clone_or_open(cls, remote_url: str, local_path: str | Path) -> 'GitConnector':
        local_path = Path(local_path)
        if local_path.exists():
            log.info("Opening existing repository at %s", local_path)
        else:
            print(f"  Cloning {remote_url} to {local_path}...", flush=True)
            Repo.clone_from(remote_url, str(local_path))
            log.info("Clone complete")
        return cls(local_path)

    # -------------------------------------------------------------------------
    # Commits
    # -------------------------------------------------------------------------

    def ancestors_of(self, commit_hash: str) -> Iterator[CommitInfo]:
        """Every commit reachable from commit_hash, itself included, newest first"""
        for commit in self.git.get_list_commits(rev=commit_hash, reverse=False):
            yield _commit_info(commit)

    def log_all(self) -> Iterator[CommitInfo]:
        """Commits reachable from any ref, newest first"""
        for commit in self.git.get_list_commits(all=True, reverse=False):
            yield _commit_info(commit)

    def commit(self, commit_hash: str) -> CommitInfo:
        return _commit_info(self.git.get_commit(commit_hash))

    def diff(self, commit_hash: str) -> list[FileDiff]:
        """Changes of a commit against its first parent; empty for root commits"""
        commit = self.repo.commit(commit_hash)
        if not commit.parents:
            return []
        diff_index = commit.parents[0].diff(commit, create_patch=True, M=True)

        diffs = []
        for d in diff_index:
            change_type = _change_type(d)
            patch = d.diff.decode('utf-8', 'ignore') if isinstance(d.diff, bytes) else (d.diff or '')
            diffs.append(FileDiff(
                old_path=None if change_type == ModificationType.ADD else d.a_path,
                new_path=None if change_type == ModificationType.DELETE else d.b_path,
                change_type=change_type,
                edits=parse_edits(patch),
            ))
        return diffs

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def source_files_at(self, commit_hash: str) -> list[str]:
        tree = self.repo.commit(commit_hash).tree
        return [
            item.path for item in tree.traverse()
            if item.type == 'blob' and is_source_file(item.path)
        ]

    def file_content_at(self, path: str, commit_hash: str) -> str | None:
        try:
            blob = self.repo.commit(commit_hash).tree / path
        except KeyError:
            return None
        return blob.data_stream.read().decode('utf-8', 'ignore')

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def _tag_map(self) -> dict:
        if self._tags is None:
            self._tags = {}
            for tag in self.repo.tags:
                try:
                    self._tags[tag.name] = tag.commit.hexsha
                except ValueError:
                    # tag pointing at a tree or blob
                    log.debug("Ignoring tag %s: not a commit", tag.name)
        return self._tags

    def resolve_tag(self, name: str) -> str | None:
        return self._tag_map().get(name)


def tag_candidates(release_name: str, project: str) -> list[str]:
    """Tag names a release may have been published under, in lookup order"""
    candidates = [p.format(name=release_name, project=project.lower()) for p in TAG_NAME_PATTERNS]
    candidates += [f"{prefix}{release_name}" for prefix in EXTRA_TAG_PREFIXES]
    return candidates


def resolve_release_commit(repo, release_name: str, project: str) -> str | None:
    """Commit of the first tag matching a release naming convention"""
    for candidate in tag_candidates(release_name, project):
        commit_hash = repo.resolve_tag(candidate)
        if commit_hash is not None:
            return commit_hash
    return None
