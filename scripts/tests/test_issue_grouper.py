"""
Tests for the issue grouper

Covers exclusion, preferred ordering, alphabetical fallback, order
preservation inside groups and the skip log.
"""

import sys
from pathlib import Path

# Add scripts directory to path
scripts_dir = Path(__file__).parent.parent
sys.path.insert(0, str(scripts_dir))

import pytest
from sprint_sheet_lib.issue_grouper import group_by_assignee, resolve_group_order
from sprint_sheet_lib.models import GroupedReport, JiraIssue


def make_issue(key, assignee, status="To Do", issue_type="Task", summary=None):
    return JiraIssue(
        key=key,
        issue_type=issue_type,
        summary=summary or f"Summary of {key}",
        assignee=assignee,
        status=status
    )


class TestResolveGroupOrder:
    """Test suite for the group sequence decision"""

    def test_preferred_order_filters_and_orders(self):
        """Only names from the order list, in its sequence"""
        order = resolve_group_order({"Alice", "Bob", "Carol"}, ["Bob", "Alice"])
        assert order == ["Bob", "Alice"]

    def test_preferred_order_drops_names_without_issues(self):
        order = resolve_group_order({"Alice"}, ["Bob", "Alice", "Dave"])
        assert order == ["Alice"]

    def test_preferred_order_duplicates_collapse(self):
        order = resolve_group_order({"Alice", "Bob"}, ["Alice", "Bob", "Alice"])
        assert order == ["Alice", "Bob"]

    def test_alphabetical_without_preferred_order(self):
        assert resolve_group_order({"Zoe", "Amy"}, []) == ["Amy", "Zoe"]


class TestGroupByAssignee:
    """Test suite for group_by_assignee"""

    @pytest.fixture
    def issues(self):
        return [
            make_issue("CMS-1", "Alice"),
            make_issue("CMS-2", "Bob"),
            make_issue("CMS-3", "Carol"),
            make_issue("CMS-4", None),
            make_issue("CMS-5", "Alice"),
            make_issue("CMS-6", "Tina Tester"),
            make_issue("CMS-7", "Bob"),
        ]

    def test_preferred_order_excludes_untracked(self, issues):
        """Bob before Alice regardless of issue order, Carol dropped"""
        grouped = group_by_assignee(issues, [], ["Bob", "Alice"])

        assert isinstance(grouped, GroupedReport)
        assert grouped.assignees == ["Bob", "Alice"]
        assert [i.key for i in grouped.issues_for("Bob")] == ["CMS-2", "CMS-7"]
        assert [i.key for i in grouped.issues_for("Alice")] == ["CMS-1", "CMS-5"]
        assert grouped.issues_for("Carol") == ()

    def test_alphabetical_groups_without_order(self, issues):
        grouped = group_by_assignee(issues)

        assert grouped.assignees == ["Alice", "Bob", "Carol", "Tina Tester"]
        assert grouped.total_issues == 6

    def test_lexicographic_order(self):
        grouped = group_by_assignee([make_issue("A-1", "Zoe"), make_issue("A-2", "Amy")])
        assert grouped.assignees == ["Amy", "Zoe"]

    def test_excluded_testers_are_dropped(self, issues):
        grouped = group_by_assignee(issues, ["Tina Tester"], [])

        assert "Tina Tester" not in grouped.assignees
        kept = [i.key for _, group in grouped for i in group]
        assert "CMS-6" not in kept

    def test_excluded_name_in_order_list_is_still_dropped(self, issues):
        grouped = group_by_assignee(issues, ["Alice"], ["Alice", "Bob"])

        assert grouped.assignees == ["Bob"]

    def test_unassigned_issues_are_dropped(self, issues):
        grouped = group_by_assignee(issues)

        kept = [i.key for _, group in grouped for i in group]
        assert "CMS-4" not in kept

    def test_membership_rule(self, issues):
        """An issue is kept iff assigned, not excluded and in the group sequence"""
        excluded = ["Tina Tester"]
        order = ["Carol", "Alice"]
        grouped = group_by_assignee(issues, excluded, order)

        kept = {i.key for _, group in grouped for i in group}
        for issue in issues:
            expected = (
                bool(issue.assignee)
                and issue.assignee not in excluded
                and issue.assignee in grouped.assignees
            )
            assert (issue.key in kept) == expected

        # Every kept issue is in exactly one group
        all_keys = [i.key for _, group in grouped for i in group]
        assert len(all_keys) == len(set(all_keys))

    def test_skipped_issues_are_recorded(self, issues):
        grouped = group_by_assignee(issues, ["Tina Tester"], ["Bob", "Alice"])

        reasons = {s.key: s.reason for s in grouped.skipped}
        assert reasons == {
            "CMS-3": "not_in_order",
            "CMS-4": "unassigned",
            "CMS-6": "excluded",
        }

    def test_input_order_preserved_within_group(self):
        issues = [make_issue(f"A-{n}", "Alice") for n in (5, 3, 9, 1)]
        grouped = group_by_assignee(issues)

        assert [i.key for i in grouped.issues_for("Alice")] == ["A-5", "A-3", "A-9", "A-1"]

    def test_empty_input(self):
        grouped = group_by_assignee([], ["X"], ["Y"])

        assert grouped.assignees == []
        assert grouped.total_issues == 0
        assert grouped.non_empty_groups() == []

    def test_input_list_not_mutated(self, issues):
        snapshot = list(issues)
        group_by_assignee(issues, ["Tina Tester"], ["Bob"])
        assert issues == snapshot


class TestGroupedReport:
    """Test suite for the GroupedReport structure"""

    def test_groups_are_read_only(self):
        grouped = GroupedReport([("Alice", [make_issue("A-1", "Alice")])])

        with pytest.raises(TypeError):
            grouped.groups["Bob"] = ()
        assert isinstance(grouped.issues_for("Alice"), tuple)

    def test_empty_groups_kept_in_sequence(self):
        grouped = GroupedReport([("Alice", []), ("Bob", [make_issue("B-1", "Bob")])])

        assert grouped.assignees == ["Alice", "Bob"]
        assert [name for name, _ in grouped.non_empty_groups()] == ["Bob"]
        assert len(grouped) == 2

    def test_duplicate_group_rejected(self):
        with pytest.raises(ValueError):
            GroupedReport([("Alice", []), ("Alice", [])])
