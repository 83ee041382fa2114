"""
Feature row definitions and per-method metric assembly.
"""

from dataclasses import dataclass

from .models import Declaration


@dataclass
class MethodRow:
    """Features extracted for a single method at a single release"""
    project: str
    method_name: str
    release: str
    is_buggy: bool

    # Static metrics
    loc: int = 0
    cyclomatic_complexity: int = 1
    parameter_count: int = 0
    duplication: int = 0            # placeholder, no clone detection

    # Change history up to the release commit
    nr: int = 0                     # revisions touching the method
    nauth: int = 0                  # distinct authors of those revisions
    stmt_added: int = 0
    stmt_deleted: int = 0
    max_churn: int = 0              # largest added+deleted in one revision
    avg_churn: float = 0.0

    def to_dict(self) -> dict:
        """Convert to a dictionary keyed by the dataset column names"""
        return {
            'Project': self.project,
            'MethodName': self.method_name,
            'Release': self.release,
            'LOC': self.loc,
            'CyclomaticComplexity': self.cyclomatic_complexity,
            'ParameterCount': self.parameter_count,
            'Duplication': self.duplication,
            'NR': self.nr,
            'NAuth': self.nauth,
            'stmtAdded': self.stmt_added,
            'stmtDeleted': self.stmt_deleted,
            'maxChurn': self.max_churn,
            'avgChurn': self.avg_churn,
            'IsBuggy': 'yes' if self.is_buggy else 'no',
        }


def static_features(declaration: Declaration) -> dict:
    """Size and structure metrics computed from the parsed declaration"""
    return {
        'LOC': declaration.loc,
        'CyclomaticComplexity': declaration.complexity,
        'ParameterCount': declaration.parameter_count,
        'Duplication': 0,
    }


def placeholder_change_features() -> dict:
    """Zero-valued change features for methods whose history could not be read"""
    return {
        'NR': 0,
        'NAuth': 0,
        'stmtAdded': 0,
        'stmtDeleted': 0,
        'maxChurn': 0,
        'avgChurn': 0.0,
    }


def build_row(project: str, release_name: str, method, is_buggy: bool) -> MethodRow:
    """Flatten a featured TrackedMethod into an output row"""
    f = method.features
    return MethodRow(
        project=project,
        method_name=method.name,
        release=release_name,
        is_buggy=is_buggy,
        loc=int(f.get('LOC', 0)),
        cyclomatic_complexity=int(f.get('CyclomaticComplexity', 1)),
        parameter_count=int(f.get('ParameterCount', 0)),
        duplication=int(f.get('Duplication', 0)),
        nr=int(f.get('NR', 0)),
        nauth=int(f.get('NAuth', 0)),
        stmt_added=int(f.get('stmtAdded', 0)),
        stmt_deleted=int(f.get('stmtDeleted', 0)),
        max_churn=int(f.get('maxChurn', 0)),
        avg_churn=float(f.get('avgChurn', 0.0)),
    )
