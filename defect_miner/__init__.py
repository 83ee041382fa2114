"""
Defect Miner - Method-Level Defect Datasets from Issue and Commit History
=========================================================================

Builds a labeled defect-prediction dataset by correlating a project's Jira
history with its git history: every method of every analyzed release gets a
feature vector and a buggy/clean label.

Key insight: tracker metadata rarely says when a bug was introduced. The
proportion heuristic fills that gap from the tickets that do say it, so a
method can be labeled buggy in every release between introduction and fix.
"""

from .config import (
    DEFAULT_PROJECTS,
    CSV_COLUMNS,
    DEFAULT_PROPORTION,
    RELEASE_CUTOFF_RATIO,
)

from .models import (
    Release,
    DefectReport,
    Declaration,
    TrackedMethod,
    ChangeStats,
    Outcome,
    FailureReason,
)

from .releases import (
    assign_indices,
    index_for_date,
    assign_defect_indices,
)

from .proportion import (
    compute_coefficient,
    estimate_introduction,
)

from .parsing import parse_declarations

from .tracking import (
    MethodIdentityTracker,
    MethodSnapshot,
    EMPTY_SNAPSHOT,
)

from .history import ChangeHistoryCollector

from .bugs import BugMethodMapper

from .repository import GitConnector

from .jira import JiraConnector

from .features import MethodRow

from .extraction import (
    DatasetAssembler,
    MiningReport,
    mine_project,
    write_dataset,
)

from .diagnostics import diagnose_dataset

__version__ = "0.1.0"

__all__ = [
    # Config
    "DEFAULT_PROJECTS",
    "CSV_COLUMNS",
    "DEFAULT_PROPORTION",
    "RELEASE_CUTOFF_RATIO",
    # Models
    "Release",
    "DefectReport",
    "Declaration",
    "TrackedMethod",
    "ChangeStats",
    "Outcome",
    "FailureReason",
    # Releases and proportion
    "assign_indices",
    "index_for_date",
    "assign_defect_indices",
    "compute_coefficient",
    "estimate_introduction",
    # Methods
    "parse_declarations",
    "MethodIdentityTracker",
    "MethodSnapshot",
    "EMPTY_SNAPSHOT",
    "ChangeHistoryCollector",
    "BugMethodMapper",
    # Connectors
    "GitConnector",
    "JiraConnector",
    # Dataset
    "MethodRow",
    "DatasetAssembler",
    "MiningReport",
    "mine_project",
    "write_dataset",
    # Diagnostics
    "diagnose_dataset",
]
