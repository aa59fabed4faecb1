"""
Jira Sprint Sheet Library
Export the current Jira sprint to an Excel sheet grouped by developer
"""

from .config_manager import ConfigManager, Settings
from .models import Board, Sprint, JiraIssue, ColumnLabels, GroupedReport
from .api_client import JiraClient
from .sprint_resolver import SprintResolver
from .issue_grouper import group_by_assignee
from .report_generator import SprintSheetGenerator, report_filename, status_style
from .exceptions import (
    SprintSheetError,
    ConfigurationError,
    UpstreamError,
    NotFoundError,
    ReportWriteError,
)

__all__ = [
    'ConfigManager',
    'Settings',
    'Board',
    'Sprint',
    'JiraIssue',
    'ColumnLabels',
    'GroupedReport',
    'JiraClient',
    'SprintResolver',
    'group_by_assignee',
    'SprintSheetGenerator',
    'report_filename',
    'status_style',
    'SprintSheetError',
    'ConfigurationError',
    'UpstreamError',
    'NotFoundError',
    'ReportWriteError',
]
