"""
Partition sprint issues into per-assignee groups
"""

import logging
from typing import Dict, Iterable, List, Sequence, Set

from .models import GroupedReport, JiraIssue, SkippedIssue

logger = logging.getLogger(__name__)


def resolve_group_order(assignees: Set[str], preferred_order: Sequence[str]) -> List[str]:
    """
    Decide which assignees get a group, and in what order.

    With a preferred order only the names it lists are kept, in its sequence;
    names with no issues are dropped. Without one, every assignee is kept,
    sorted alphabetically.
    """
    if preferred_order:
        ordered = []
        for name in preferred_order:
            if name in assignees and name not in ordered:
                ordered.append(name)
        return ordered
    return sorted(assignees)


def group_by_assignee(issues: Iterable[JiraIssue],
                      excluded_names: Sequence[str] = (),
                      preferred_order: Sequence[str] = ()) -> GroupedReport:
    """
    Group issues by assignee, excluding testers

    Args:
        issues: Sprint issues in retrieval order
        excluded_names: Assignees whose issues are dropped entirely
        preferred_order: Explicit group sequence (empty for alphabetical)

    Returns:
        GroupedReport whose groups follow the resolved order; issues keep
        their relative input order inside each group
    """
    issues = list(issues)
    excluded = set(excluded_names)

    # First pass: collect all assignees
    assignees: Set[str] = set()
    for issue in issues:
        if not issue.assignee:
            continue
        if issue.assignee in excluded:
            logger.info(f"Skipping issue {issue.key} assigned to tester {issue.assignee}")
            continue
        assignees.add(issue.assignee)

    ordered_assignees = resolve_group_order(assignees, preferred_order)
    buckets: Dict[str, List[JiraIssue]] = {name: [] for name in ordered_assignees}

    # Second pass: assign issues to groups
    skipped: List[SkippedIssue] = []
    for issue in issues:
        if not issue.assignee:
            skipped.append(SkippedIssue(issue.key, None, 'unassigned'))
            continue
        if issue.assignee in excluded:
            skipped.append(SkippedIssue(issue.key, issue.assignee, 'excluded'))
            continue
        if issue.assignee not in buckets:
            logger.info(f"Skipping issue {issue.key} assigned to {issue.assignee} (not in ordered list)")
            skipped.append(SkippedIssue(issue.key, issue.assignee, 'not_in_order'))
            continue
        buckets[issue.assignee].append(issue)

    unassigned = sum(1 for s in skipped if s.reason == 'unassigned')
    if unassigned:
        logger.info(f"Skipping {unassigned} unassigned issues")

    return GroupedReport([(name, buckets[name]) for name in ordered_assignees], skipped)
