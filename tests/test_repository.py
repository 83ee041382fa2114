#!/usr/bin/env python3
"""
Repository access tests: diff parsing, tag resolution and a real git clone.

Usage:
    python -m pytest tests/test_repository.py -v
"""

import shutil
import sys
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from defect_miner.models import Edit
from tests.fakes import FakeRepository


# =============================================================================
# DIFF PARSING
# =============================================================================

def test_parse_edits_replacement():
    """Changed lines between context lines form one edit"""
    from defect_miner.repository import parse_edits

    patch = (
        "--- a/Foo.java\n"
        "+++ b/Foo.java\n"
        "@@ -1,3 +1,4 @@\n"
        " line1\n"
        "-line2\n"
        "+line2 changed\n"
        "+line2b\n"
        " line3\n"
    )
    assert parse_edits(patch) == (Edit(1, 2, 1, 3),)


def test_parse_edits_pure_insertion_and_deletion():
    from defect_miner.repository import parse_edits

    inserted = "@@ -5,0 +6,2 @@\n+a\n+b\n"
    deleted = "@@ -3,2 +2,0 @@\n-a\n-b\n"

    assert parse_edits(inserted) == (Edit(5, 5, 5, 7),)
    assert parse_edits(deleted) == (Edit(2, 4, 2, 2),)


def test_parse_edits_splits_at_context():
    from defect_miner.repository import parse_edits

    patch = (
        "@@ -10,6 +10,6 @@\n"
        " a\n"
        "-b\n"
        "+B\n"
        " c\n"
        " d\n"
        "-e\n"
        "+E\n"
        " f\n"
        "@@ -40 +40 @@\n"
        "-x\n"
        "+y\n"
        "\\ No newline at end of file\n"
    )
    edits = parse_edits(patch)

    assert edits == (Edit(10, 11, 10, 11), Edit(13, 14, 13, 14), Edit(39, 40, 39, 40))
    assert sum(e.added for e in edits) == 3


def test_parse_edits_empty_patch():
    from defect_miner.repository import parse_edits

    assert parse_edits("") == ()
    assert parse_edits("Binary files a/x.png and b/x.png differ\n") == ()


def test_is_source_file():
    from defect_miner.repository import is_source_file

    assert is_source_file("core/src/main/java/Foo.java")
    assert is_source_file("pkg/module.py")
    assert not is_source_file("core/src/test/java/FooTest.java")
    assert not is_source_file("README.md")


# =============================================================================
# TAG RESOLUTION
# =============================================================================

def test_tag_candidates_order():
    from defect_miner.repository import tag_candidates

    assert tag_candidates("4.2.0", "BOOKKEEPER") == [
        "4.2.0",
        "v4.2.0",
        "release-4.2.0",
        "bookkeeper-4.2.0",
    ]


def test_resolve_release_commit():
    """The first existing candidate tag wins"""
    from defect_miner.repository import resolve_release_commit

    repo = FakeRepository()
    repo.tags = {"syncope-1.0.0": "aaa", "release-1.0.0": "bbb", "v2.0.0": "ccc"}

    assert resolve_release_commit(repo, "1.0.0", "SYNCOPE") == "bbb"
    assert resolve_release_commit(repo, "2.0.0", "SYNCOPE") == "ccc"
    assert resolve_release_commit(repo, "3.0.0", "SYNCOPE") is None


# =============================================================================
# REAL REPOSITORY
# =============================================================================

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


@pytest.fixture
def git_repo(tmp_path):
    """Two commits on app/calc.py, the second tagged v1.0"""
    from git import Actor, Repo

    repo_dir = tmp_path / "project"
    repo = Repo.init(repo_dir)
    author = Actor("Alice", "alice@example.com")
    source = repo_dir / "app" / "calc.py"
    source.parent.mkdir()

    source.write_text("def add(a, b):\n    return a + b\n\n\ndef sub(a, b):\n    return a - b\n")
    repo.index.add(["app/calc.py"])
    first = repo.index.commit("initial", author=author, committer=author,
                             author_date="2020-01-01T10:00:00", commit_date="2020-01-01T10:00:00")

    source.write_text("def add(a, b):\n    return b + a\n\n\ndef sub(a, b):\n    return a - b\n")
    (repo_dir / "notes.txt").write_text("notes\n")
    repo.index.add(["app/calc.py", "notes.txt"])
    second = repo.index.commit("PROJ-1 swap operands", author=author, committer=author,
                              author_date="2020-01-02T10:00:00", commit_date="2020-01-02T10:00:00")
    repo.create_tag("v1.0", ref=second)

    return repo_dir, first.hexsha, second.hexsha


@needs_git
def test_git_connector_history(git_repo):
    from defect_miner.repository import GitConnector

    repo_dir, first, second = git_repo
    connector = GitConnector(repo_dir)

    assert [c.hash for c in connector.ancestors_of(second)] == [second, first]
    assert [c.hash for c in connector.log_all()] == [second, first]
    commit = connector.commit(second)
    assert commit.parents == (first,)
    assert commit.author_email == "alice@example.com"
    assert "PROJ-1" in commit.msg


@needs_git
def test_git_connector_diff(git_repo):
    from pydriller import ModificationType
    from defect_miner.repository import GitConnector

    repo_dir, first, second = git_repo
    connector = GitConnector(repo_dir)

    assert connector.diff(first) == []
    diffs = {d.new_path: d for d in connector.diff(second)}
    assert diffs["app/calc.py"].change_type == ModificationType.MODIFY
    assert diffs["app/calc.py"].edits == (Edit(1, 2, 1, 2),)
    assert diffs["notes.txt"].change_type == ModificationType.ADD
    assert diffs["notes.txt"].old_path is None


@needs_git
def test_git_connector_snapshot_and_tags(git_repo):
    from defect_miner.repository import GitConnector, resolve_release_commit

    repo_dir, first, second = git_repo
    connector = GitConnector(repo_dir)

    assert connector.source_files_at(second) == ["app/calc.py"]
    assert "return b + a" in connector.file_content_at("app/calc.py", second)
    assert connector.file_content_at("missing.py", second) is None
    assert connector.resolve_tag("v1.0") == second
    assert resolve_release_commit(connector, "1.0", "PROJ") == second


@needs_git
def test_git_connector_links_newest_mention(git_repo):
    """On a real clone the newest commit mentioning a ticket becomes its fix"""
    from datetime import datetime
    from git import Actor, Repo
    from defect_miner.bugs import BugMethodMapper
    from defect_miner.models import DefectReport
    from defect_miner.repository import GitConnector

    repo_dir, first, second = git_repo
    repo = Repo(repo_dir)
    author = Actor("Bob", "bob@example.com")
    (repo_dir / "app" / "calc.py").write_text(
        "def add(a, b):\n    return b + a\n\n\ndef sub(a, b):\n    return b - a\n")
    repo.index.add(["app/calc.py"])
    third = repo.index.commit("PROJ-1 follow-up", author=author, committer=author,
                              author_date="2020-01-03T10:00:00", commit_date="2020-01-03T10:00:00")

    connector = GitConnector(repo_dir)
    assert [c.hash for c in connector.log_all()] == [third.hexsha, second, first]
    assert [c.hash for c in connector.ancestors_of(third.hexsha)] == [third.hexsha, second, first]

    defect = DefectReport(key="PROJ-1", created=datetime(2020, 1, 1))
    mapper = BugMethodMapper(connector)
    mapper.link_fix_commits([defect])

    assert defect.fix_commit == third.hexsha
    assert defect.resolution_date.date() == datetime(2020, 1, 3).date()
    assert mapper.map_defects_to_methods([defect]) == {"PROJ-1": [("app/calc.py", "sub(a, b)")]}
