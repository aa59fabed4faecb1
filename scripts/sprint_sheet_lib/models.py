"""
Data models for Jira Sprint Sheet
"""

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple


def parse_jira_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a Jira ISO-8601 timestamp, returning None when missing or invalid"""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    # Jira sends offsets without a colon (2024-05-01T09:00:00.000+0200)
    if len(text) > 5 and text[-5] in '+-' and text[-4:].isdigit():
        text = text[:-2] + ':' + text[-2:]
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class Board:
    """Represents a Jira agile board"""
    id: int
    name: str

    @classmethod
    def from_api_response(cls, data: dict) -> 'Board':
        """Create Board from Jira agile API response"""
        return cls(
            id=int(data.get('id', 0)),
            name=data.get('name') or ''
        )


@dataclass(frozen=True)
class Sprint:
    """Represents a Jira sprint"""
    id: int
    name: str
    state: str  # active, closed, future
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.state == 'active'

    @classmethod
    def from_api_response(cls, data: dict) -> 'Sprint':
        """Create Sprint from Jira agile API response"""
        return cls(
            id=int(data.get('id', 0)),
            name=data.get('name') or '',
            state=(data.get('state') or '').lower(),
            start_date=parse_jira_datetime(data.get('startDate')),
            end_date=parse_jira_datetime(data.get('endDate'))
        )


@dataclass(frozen=True)
class JiraIssue:
    """Represents a Jira issue"""
    key: str
    issue_type: str
    summary: str
    assignee: Optional[str]
    status: str

    @classmethod
    def from_api_response(cls, data: dict) -> 'JiraIssue':
        """Create JiraIssue from Jira search API response"""
        fields = data.get('fields') or {}

        # Extract assignee
        assignee_data = fields.get('assignee')
        assignee = assignee_data.get('displayName') if assignee_data else None

        return cls(
            key=data.get('key', ''),
            issue_type=(fields.get('issuetype') or {}).get('name', ''),
            summary=fields.get('summary') or '',
            assignee=assignee or None,
            status=(fields.get('status') or {}).get('name', '')
        )


@dataclass(frozen=True)
class ColumnLabels:
    """Header labels for the six report columns"""
    developer: str = 'Developer'
    issue_key: str = 'Issue key'
    issue_type: str = 'Issue Type'
    summary: str = 'Summary'
    assignee: str = 'Assignee'
    status: str = 'Status'

    def as_list(self) -> List[str]:
        return [self.developer, self.issue_key, self.issue_type,
                self.summary, self.assignee, self.status]


@dataclass(frozen=True)
class SkippedIssue:
    """An issue left out of the report and the reason why"""
    key: str
    assignee: Optional[str]
    reason: str  # unassigned, excluded, not_in_order


class GroupedReport:
    """
    Issues partitioned by assignee, in report order.

    The mapping is read-only: groups are tuples and the underlying dict is
    exposed through a MappingProxyType.
    """

    def __init__(self, groups: Sequence[Tuple[str, Sequence[JiraIssue]]],
                 skipped: Sequence[SkippedIssue] = ()):
        ordered: Dict[str, Tuple[JiraIssue, ...]] = {}
        for assignee, issues in groups:
            if assignee in ordered:
                raise ValueError(f"Duplicate assignee group: {assignee}")
            ordered[assignee] = tuple(issues)
        self._groups: Mapping[str, Tuple[JiraIssue, ...]] = MappingProxyType(ordered)
        self.skipped: Tuple[SkippedIssue, ...] = tuple(skipped)

    @property
    def assignees(self) -> List[str]:
        """Group sequence, including assignees without issues"""
        return list(self._groups)

    @property
    def groups(self) -> Mapping[str, Tuple[JiraIssue, ...]]:
        return self._groups

    @property
    def total_issues(self) -> int:
        return sum(len(issues) for issues in self._groups.values())

    def issues_for(self, assignee: str) -> Tuple[JiraIssue, ...]:
        return self._groups.get(assignee, ())

    def non_empty_groups(self) -> List[Tuple[str, Tuple[JiraIssue, ...]]]:
        return [(name, issues) for name, issues in self._groups.items() if issues]

    def __iter__(self) -> Iterator[Tuple[str, Tuple[JiraIssue, ...]]]:
        return iter(self._groups.items())

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"GroupedReport(assignees={self.assignees!r}, total_issues={self.total_issues})"
