"""
Configuration and constants for Defect Miner.
"""

import os
import re

# =============================================================================
# PROJECT SETTINGS
# =============================================================================

# Jira project key -> git remote
DEFAULT_PROJECTS = {
    "BOOKKEEPER": "https://github.com/apache/bookkeeper.git",
    "SYNCOPE": "https://github.com/apache/syncope.git",
}

CLONE_DIR = os.environ.get('DEFECT_MINER_CLONE_DIR', 'temp-repo')

# =============================================================================
# ISSUE TRACKER SETTINGS
# =============================================================================

JIRA_URL = os.environ.get('JIRA_URL', 'https://issues.apache.org/jira')
JIRA_PAGE_SIZE = int(os.environ.get('JIRA_PAGE_SIZE', '100'))
HTTP_TIMEOUT = 30

BUG_TICKETS_JQL = (
    "project = '{project}' AND issuetype = Bug AND status in (Resolved, Closed) "
    "AND resolution = Fixed ORDER BY created ASC"
)

# Jira timestamps look like 2009-04-01T15:59:07.000+0000
JIRA_DATE_FORMAT = '%Y-%m-%dT%H:%M:%S.%f%z'

# =============================================================================
# GIT / LINKING PATTERNS
# =============================================================================

# Ticket keys mentioned in commit messages, e.g. "BOOKKEEPER-1234"
TICKET_KEY_PATTERN = re.compile(r'([A-Z][A-Z0-9]+-\d+)')

# Tag names tried, in order, when resolving a release to a commit
TAG_NAME_PATTERNS = (
    '{name}',
    'v{name}',
    'release-{name}',
    '{project}-{name}',
)

EXTRA_TAG_PREFIXES = tuple(
    p.strip() for p in os.environ.get('DEFECT_MINER_TAG_PREFIXES', '').split(',') if p.strip()
)

SOURCE_EXTENSIONS = ('.java', '.py')

# Files whose path contains this keyword are not analyzed
EXCLUDE_PATH_KEYWORD = 'test'

# =============================================================================
# LABELING
# =============================================================================

# Only the earliest releases are analyzed: later ones still hide unreported bugs
RELEASE_CUTOFF_RATIO = 0.34

# Proportion used when no defect has a fully known lifecycle
DEFAULT_PROPORTION = 1.5

UNKNOWN_INDEX = -1

# =============================================================================
# FEATURE COLUMNS
# =============================================================================

STATIC_FEATURE_COLS = ['LOC', 'CyclomaticComplexity', 'ParameterCount', 'Duplication']

CHANGE_FEATURE_COLS = ['NR', 'NAuth', 'stmtAdded', 'stmtDeleted', 'maxChurn', 'avgChurn']

CSV_COLUMNS = (
    ['Project', 'MethodName', 'Release']
    + STATIC_FEATURE_COLS
    + CHANGE_FEATURE_COLS
    + ['IsBuggy']
)
