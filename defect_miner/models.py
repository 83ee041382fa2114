"""
Domain objects shared by the mining stages.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydriller import ModificationType

from .config import UNKNOWN_INDEX

# (filepath, signature)
MethodKey = tuple[str, str]


@dataclass(frozen=True)
class Release:
    """A project release; index is its 1-based chronological rank"""
    name: str
    date: date
    index: int = 0


@dataclass(eq=False)
class DefectReport:
    """A fixed bug ticket and the release indices derived for it"""
    key: str
    created: datetime
    affected_versions: list[str] = field(default_factory=list)
    resolution_date: datetime | None = None
    fix_commit: str | None = None

    opening_index: int = UNKNOWN_INDEX
    fixed_index: int = UNKNOWN_INDEX
    introduction_index: int = UNKNOWN_INDEX

    def __eq__(self, other):
        return isinstance(other, DefectReport) and self.key == other.key

    def __hash__(self):
        return hash(self.key)


@dataclass(frozen=True)
class Declaration:
    """A callable found in one file of one snapshot"""
    path: str
    signature: str
    start_line: int
    end_line: int
    parameter_count: int = 0
    complexity: int = 1

    @property
    def key(self) -> MethodKey:
        return (self.path, self.signature)

    @property
    def loc(self) -> int:
        return self.end_line - self.start_line


@dataclass(frozen=True)
class TrackedMethod:
    id: str
    signature: str
    filepath: str
    start_line: int
    end_line: int
    features: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def key(self) -> MethodKey:
        return (self.filepath, self.signature)

    @property
    def name(self) -> str:
        return f"{self.filepath}/{self.signature}"

    def with_features(self, features: Mapping[str, float]) -> 'TrackedMethod':
        merged = {**self.features, **features}
        return replace(self, features=MappingProxyType(merged))


@dataclass
class ChangeStats:
    """Change counters for one method up to one commit"""
    revisions: int = 0
    authors: set[str] = field(default_factory=set)
    lines_added: int = 0
    lines_deleted: int = 0
    max_churn: int = 0
    total_churn: int = 0

    @property
    def avg_churn(self) -> float:
        if self.revisions == 0:
            return 0.0
        return self.total_churn / self.revisions

    def to_features(self) -> dict:
        return {
            'NR': self.revisions,
            'NAuth': len(self.authors),
            'stmtAdded': self.lines_added,
            'stmtDeleted': self.lines_deleted,
            'maxChurn': self.max_churn,
            'avgChurn': self.avg_churn,
        }


# =============================================================================
# REPOSITORY VIEW
# =============================================================================

@dataclass(frozen=True)
class CommitInfo:
    hash: str
    parents: tuple[str, ...]
    author_email: str
    author_date: datetime
    msg: str = ''


@dataclass(frozen=True)
class Edit:
    """
    A contiguous changed region, in edit-list coordinates:
    0-based begin, exclusive end, A = old file, B = new file.
    """
    begin_a: int
    end_a: int
    begin_b: int
    end_b: int

    @property
    def added(self) -> int:
        return self.end_b - self.begin_b

    @property
    def deleted(self) -> int:
        return self.end_a - self.begin_a

    def overlaps(self, start_line: int, end_line: int) -> bool:
        """True if the post-change side touches [start_line, end_line]"""
        return max(start_line, self.begin_b) <= min(end_line, self.end_b)


@dataclass(frozen=True)
class FileDiff:
    old_path: str | None
    new_path: str | None
    change_type: ModificationType
    edits: tuple[Edit, ...] = ()

    def affects(self, filepath: str) -> bool:
        return filepath == self.new_path or filepath == self.old_path


# =============================================================================
# RESULTS
# =============================================================================

class FailureReason(Enum):
    EMPTY_CONTENT = 'empty_content'
    UNSUPPORTED_LANGUAGE = 'unsupported_language'
    PARSE_ERROR = 'parse_error'
    INVALID_RANGE = 'invalid_range'
    HISTORY_ERROR = 'history_error'


@dataclass(frozen=True)
class Outcome:
    """Result of a step that may legitimately produce no data"""
    value: Any = None
    reason: FailureReason | None = None
    detail: str = ''

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value) -> 'Outcome':
        return cls(value=value)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = '') -> 'Outcome':
        return cls(reason=reason, detail=detail)
