"""
Sprint selection for a board: the active sprint, or the most recently started one
"""

import logging
from datetime import datetime, timezone
from typing import List

from .api_client import JiraClient
from .exceptions import NotFoundError
from .models import Sprint

logger = logging.getLogger(__name__)

SPRINT_PAGE_SIZE = 50

# Sprints without a usable start date sort as the earliest
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _start_sort_key(sprint: Sprint) -> datetime:
    start = sprint.start_date
    if start is None:
        return _EARLIEST
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return start


def most_recent_sprint(sprints: List[Sprint]) -> Sprint:
    """Latest start date first; ties keep the order the service returned"""
    return sorted(sprints, key=_start_sort_key, reverse=True)[0]


class SprintResolver:
    """Picks the sprint a report is generated for"""

    def __init__(self, jira_client: JiraClient):
        self.jira_client = jira_client

    def resolve_sprint(self, board_id: int) -> Sprint:
        """
        Return the board's active sprint, falling back to the most recently started sprint.

        When several sprints are active the first one returned by Jira wins.

        Raises:
            NotFoundError: the board has no sprints at all
        """
        logger.info(f"Fetching active sprint for board {board_id}...")
        active = self.jira_client.get_sprints(board_id, 0, SPRINT_PAGE_SIZE, state='active')
        if active:
            sprint = active[0]
            if len(active) > 1:
                logger.info(f"{len(active)} active sprints on board {board_id}, using the first")
            logger.info(f"Found active sprint: {sprint.name} (ID: {sprint.id})")
            return sprint

        logger.info("No active sprint found. Looking for most recent sprint...")
        sprints = self.jira_client.get_sprints(board_id, 0, SPRINT_PAGE_SIZE)
        if not sprints:
            raise NotFoundError(
                f"No sprints found for board {board_id}",
                remediation="Check the board id or name; Kanban boards have no sprints"
            )

        sprint = most_recent_sprint(sprints)
        logger.info(f"Found most recent sprint: {sprint.name} (ID: {sprint.id})")
        return sprint
