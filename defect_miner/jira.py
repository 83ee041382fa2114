"""
Jira REST integration for project releases and fixed bug tickets.
"""

from datetime import date, datetime

import requests

from .config import (
    JIRA_URL,
    JIRA_PAGE_SIZE,
    HTTP_TIMEOUT,
    BUG_TICKETS_JQL,
    JIRA_DATE_FORMAT,
)
from .models import DefectReport, Release
from .releases import assign_indices


def parse_jira_datetime(value: str) -> datetime:
    """Parse Jira's 2009-04-01T15:59:07.000+0000 timestamps (timezone-aware)"""
    return datetime.strptime(value, JIRA_DATE_FORMAT)


class JiraConnector:
    """Fetch releases and fixed bug tickets of one Jira project"""

    def __init__(self, project_key: str, base_url: str = JIRA_URL, session: requests.Session = None):
        self.project_key = project_key
        self.base_url = base_url.rstrip('/')
        self.api_calls = 0

        if session:
            self.session = session
        else:
            self.session = requests.Session()
            self.session.headers['Accept'] = 'application/json'
            self.session.headers['User-Agent'] = 'Defect-Miner'

    def _get(self, path: str, params: dict = None):
        resp = self.session.get(f'{self.base_url}{path}', params=params, timeout=HTTP_TIMEOUT)
        self.api_calls += 1
        resp.raise_for_status()
        return resp.json()

    def get_releases(self) -> list[Release]:
        """Released versions with a release date, chronologically indexed"""
        versions = self._get(f'/rest/api/2/project/{self.project_key}/versions')

        releases = []
        for version in versions:
            if not version.get('released') or 'releaseDate' not in version:
                continue
            releases.append(Release(
                name=version['name'],
                date=date.fromisoformat(version['releaseDate']),
            ))
        return assign_indices(releases)

    def get_bug_tickets(self) -> list[DefectReport]:
        """All fixed bugs of the project, oldest first"""
        jql = BUG_TICKETS_JQL.format(project=self.project_key)
        tickets = []
        start_at = 0

        while True:
            data = self._get('/rest/api/2/search', params={
                'jql': jql,
                'fields': 'key,created,versions',
                'startAt': start_at,
                'maxResults': JIRA_PAGE_SIZE,
            })
            issues = data.get('issues', [])

            for issue in issues:
                fields = issue['fields']
                tickets.append(DefectReport(
                    key=issue['key'],
                    created=parse_jira_datetime(fields['created']),
                    affected_versions=[v['name'] for v in fields.get('versions') or []],
                ))

            start_at += len(issues)
            if not issues or start_at >= data.get('total', 0):
                break

        return tickets

    def get_stats(self) -> dict:
        """Return API usage statistics"""
        return {
            'api_calls': self.api_calls,
        }
