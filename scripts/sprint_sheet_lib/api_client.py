"""
API client for Jira
Direct HTTP calls to the agile and core REST APIs
"""

import logging
from typing import Callable, List, Optional, TypeVar

import requests

from .exceptions import (
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
)
from .models import Board, JiraIssue, Sprint

logger = logging.getLogger(__name__)

T = TypeVar('T')

ISSUE_FIELDS = "summary,status,assignee,issuetype"


def call_jira(api_call: Callable[[], T], context: str) -> T:
    """Run a single Jira call, translating requests failures into library errors (no retries)"""
    try:
        return api_call()
    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        details = _error_details(e.response)
        if status_code in (401, 403):
            raise AuthenticationError(
                f"{context}: Jira rejected the credentials (HTTP {status_code})",
                status_code=status_code,
                details=details
            ) from e
        if status_code == 404:
            raise NotFoundError(f"{context}: not found (HTTP 404)", details=details) from e
        if status_code == 429:
            raise RateLimitError(
                f"{context}: rate limit exceeded",
                status_code=status_code,
                remediation="Wait a minute and run the report again",
                details=details
            ) from e
        raise UpstreamError(
            f"{context}: Jira returned HTTP {status_code}",
            status_code=status_code,
            details=details
        ) from e
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
        raise UpstreamError(
            f"{context}: network error",
            remediation="Check your network connection and JIRA_BASE_URL",
            details=str(e)
        ) from e
    except (requests.exceptions.InvalidURL, requests.exceptions.InvalidSchema,
            requests.exceptions.MissingSchema) as e:
        # these subclass ValueError too
        raise UpstreamError(
            f"{context}: invalid Jira URL",
            remediation="Check JIRA_BASE_URL",
            details=str(e)
        ) from e
    except ValueError as e:
        # response.json() on a non-JSON body (proxy error pages, SSO redirects)
        raise UpstreamError(f"{context}: unreadable response from Jira", details=str(e)) from e
    except requests.exceptions.RequestException as e:
        raise UpstreamError(f"{context}: request failed", details=str(e)) from e


def _error_details(response: Optional[requests.Response]) -> Optional[str]:
    """Pull Jira's errorMessages out of an error response, if any"""
    if response is None:
        return None
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or None
    if not isinstance(data, dict):
        return None
    messages = list(data.get('errorMessages') or [])
    messages.extend(f"{k}: {v}" for k, v in (data.get('errors') or {}).items())
    return "; ".join(messages) or None


def build_sprint_jql(sprint_id: int) -> str:
    """JQL for every issue in a sprint, grouped by assignee, most recently updated first"""
    return f"sprint = {sprint_id} ORDER BY assignee ASC, updated DESC"


class JiraClient:
    """Client for Jira REST API v2 and Agile API 1.0"""

    def __init__(self, base_url: str, email: str, api_token: str, timeout: float = 30):
        self.base_url = base_url.rstrip('/')
        self.api_v2_url = f"{self.base_url}/rest/api/2"
        self.agile_url = f"{self.base_url}/rest/agile/1.0"
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (email, api_token)
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json"
        })

    def __enter__(self) -> 'JiraClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def test_connection(self) -> bool:
        """Test Jira authentication"""
        try:
            self._get_json(f"{self.api_v2_url}/myself", "Connection test")
            return True
        except AuthenticationError:
            return False

    def get_all_boards(self, max_results: int = 50) -> List[Board]:
        """Get the first page of boards visible to the user"""
        logger.info("Fetching all boards...")
        data = self._get_json(
            f"{self.agile_url}/board",
            "Fetching boards",
            params={"startAt": 0, "maxResults": max_results}
        )
        boards = [Board.from_api_response(b) for b in data.get('values', [])]
        logger.info(f"Found {len(boards)} boards")
        return boards

    def get_sprints(self, board_id: int, start_at: int = 0, max_results: int = 50,
                    state: Optional[str] = None) -> List[Sprint]:
        """Get one page of a board's sprints, optionally filtered by state (active, closed, future)"""
        params = {"startAt": start_at, "maxResults": max_results}
        if state:
            params["state"] = state
        data = self._get_json(
            f"{self.agile_url}/board/{board_id}/sprint",
            f"Fetching sprints for board {board_id}",
            params=params
        )
        return [Sprint.from_api_response(s) for s in data.get('values', [])]

    def search_issues(self, jql: str, max_results: int = 500) -> List[JiraIssue]:
        """Run a JQL search and return the first page of results"""
        data = self._get_json(
            f"{self.api_v2_url}/search",
            "Searching issues",
            params={"jql": jql, "maxResults": max_results, "fields": ISSUE_FIELDS}
        )
        issues = [JiraIssue.from_api_response(i) for i in data.get('issues', [])]
        total = data.get('total', len(issues))
        if total > len(issues):
            logger.warning(f"Search matched {total} issues, only the first {len(issues)} are included")
        for issue in issues:
            logger.debug(f"  - {issue.key}: {issue.summary} [{issue.status}] ({issue.assignee or 'Unassigned'})")
        return issues

    def get_sprint_issues(self, sprint_id: int, max_results: int = 500) -> List[JiraIssue]:
        """Get all issues in a sprint, ordered by assignee then last update"""
        logger.info(f"Fetching issues for sprint {sprint_id} using JQL...")
        issues = self.search_issues(build_sprint_jql(sprint_id), max_results=max_results)
        logger.info(f"Found {len(issues)} issues in sprint {sprint_id}")
        return issues

    def _get_json(self, url: str, context: str, params: Optional[dict] = None) -> dict:
        def call():
            logger.debug(f"GET {url} params={params}")
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        data = call_jira(call, context)
        if not isinstance(data, dict):
            raise UpstreamError(
                f"{context}: unexpected response from Jira",
                details=f"expected a JSON object, got {type(data).__name__}"
            )
        return data
