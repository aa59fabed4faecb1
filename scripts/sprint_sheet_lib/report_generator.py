"""
Excel report generation for sprint issues grouped by assignee
"""

import io
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .exceptions import ReportWriteError
from .models import ColumnLabels, GroupedReport, JiraIssue

logger = logging.getLogger(__name__)

APP_NAME = "Jira Sprint Sheet"

# (row key, width) in fixed column order; headers come from ColumnLabels
COLUMNS: List[Tuple[str, int]] = [
    ('developer', 25),
    ('key', 15),
    ('type', 15),
    ('summary', 50),
    ('assignee', 20),
    ('status', 15),
]

STATUS_STYLES = {
    'Closed': 'done',
    'Done': 'done',
    'In Dev': 'in-progress',
    'In Progress': 'in-progress',
    'Review': 'review',
}

STYLE_COLORS = {
    'done': 'FFE6F0E6',         # Light green
    'in-progress': 'FFFFF0E0',  # Light orange
    'review': 'FFE0F0FF',       # Light blue
}

HEADER_COLOR = 'FFE0E0E0'  # Light gray

_THIN = Side(style='thin')
CELL_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)

_INVALID_TITLE_CHARS = re.compile(r'[\\/*?:\[\]]')
MAX_SHEET_TITLE = 31


def cell_text(value: Optional[str]) -> Optional[str]:
    """Cell value with control characters the xlsx format cannot hold removed"""
    if not isinstance(value, str):
        return value
    return ILLEGAL_CHARACTERS_RE.sub('', value)


def status_style(status: Optional[str]) -> Optional[str]:
    """Style tag for a status (exact, case-sensitive match), or None"""
    return STATUS_STYLES.get(status) if status else None


def report_filename(sprint_name: str, today: date, extension: str = "xlsx") -> str:
    """Sprint_<name with whitespace runs as underscores>_<yyyy-mm-dd>.<ext>"""
    safe_name = re.sub(r'\s+', '_', sprint_name)
    return f"Sprint_{safe_name}_{today.isoformat()}.{extension}"


def sheet_title(sprint_name: str) -> str:
    """Worksheet title Excel accepts: no []:*?/\\ and at most 31 characters"""
    title = _INVALID_TITLE_CHARS.sub('_', sprint_name).strip()[:MAX_SHEET_TITLE]
    return title or "Sprint"


@dataclass(frozen=True)
class ReportRow:
    """One issue row of the sheet"""
    developer: str
    key: str
    type: str
    summary: str
    assignee: str
    status: str
    style: Optional[str] = None

    @classmethod
    def from_issue(cls, assignee: str, issue: JiraIssue) -> 'ReportRow':
        return cls(
            developer=assignee,  # Use full name
            key=issue.key,
            type=issue.issue_type,
            summary=issue.summary,
            assignee=assignee,
            status=issue.status,
            style=status_style(issue.status)
        )

    def values(self) -> List[str]:
        return [getattr(self, key) for key, _ in COLUMNS]


def build_rows(grouped: GroupedReport) -> List[Optional[ReportRow]]:
    """
    Lay out the data rows: each non-empty group's issues followed by one
    blank separator (None). Empty groups contribute nothing.
    """
    rows: List[Optional[ReportRow]] = []
    for assignee, issues in grouped:
        if not issues:
            logger.info(f"No issues found for {assignee}, skipping...")
            continue

        logger.info(f"Adding {len(issues)} issues for {assignee}...")
        rows.extend(ReportRow.from_issue(assignee, issue) for issue in issues)

        # Add a blank row between assignees
        rows.append(None)
    return rows


class SprintSheetGenerator:
    """Renders grouped sprint issues into a styled Excel workbook"""

    def __init__(self, column_labels: Optional[ColumnLabels] = None):
        self.column_labels = column_labels or ColumnLabels()

    def build_workbook(self, sprint_name: str, grouped: GroupedReport) -> Workbook:
        """Create the workbook in memory"""
        workbook = Workbook()
        workbook.properties.creator = APP_NAME
        workbook.properties.lastModifiedBy = APP_NAME

        worksheet = workbook.active
        worksheet.title = sheet_title(sprint_name)

        self._add_header(worksheet)

        for row in build_rows(grouped):
            if row is None:
                worksheet.append([None] * len(COLUMNS))
                continue

            self._append_text_row(worksheet, row.values())
            self._style_data_row(worksheet, worksheet.max_row, row.style)

        last_column = get_column_letter(len(COLUMNS))

        # Auto filter for the header row
        worksheet.auto_filter.ref = f"A1:{last_column}1"

        # Freeze the header row
        worksheet.freeze_panes = "A2"

        return workbook

    def build_report(self, sprint_name: str, grouped: GroupedReport) -> bytes:
        """Serialize the workbook to .xlsx bytes"""
        workbook = self.build_workbook(sprint_name, grouped)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def save_report(self, output_dir: Path, sprint_name: str, grouped: GroupedReport,
                    today: Optional[date] = None) -> Path:
        """
        Build the report and write it to output_dir.

        The file is written under a temporary name and moved into place, so a
        failed run never leaves a partial file or clobbers an earlier report.

        Returns:
            Path to saved file
        """
        today = today or datetime.now(timezone.utc).date()
        output_dir = Path(output_dir)
        output_file = output_dir / report_filename(sprint_name, today)

        content = self.build_report(sprint_name, grouped)

        tmp_path = None
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=output_dir, suffix='.tmp', delete=False) as tmp:
                tmp_path = tmp.name
                tmp.write(content)
            os.replace(tmp_path, output_file)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ReportWriteError(
                f"Could not write report to {output_file}",
                remediation="Check that the output directory exists and is writable",
                details=str(e)
            ) from e

        logger.info(f"Excel report saved: {output_file}")
        return output_file

    def _add_header(self, worksheet) -> None:
        """Define columns and style the header row"""
        self._append_text_row(worksheet, self.column_labels.as_list())

        for index, (_, width) in enumerate(COLUMNS, 1):
            worksheet.column_dimensions[get_column_letter(index)].width = width

        header_fill = PatternFill(fill_type='solid', fgColor=HEADER_COLOR)
        for cell in worksheet[1]:
            cell.font = Font(bold=True)
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = CELL_BORDER

    def _style_data_row(self, worksheet, row_index: int, style: Optional[str]) -> None:
        fill = PatternFill(fill_type='solid', fgColor=STYLE_COLORS[style]) if style else None
        for cell in worksheet[row_index]:
            if fill:
                cell.fill = fill
            cell.border = CELL_BORDER

    def _append_text_row(self, worksheet, values: List[str]) -> None:
        """Append Jira text verbatim: a leading '=' stays text, never a formula"""
        worksheet.append([cell_text(value) for value in values])
        for cell in worksheet[worksheet.max_row]:
            if cell.data_type == 'f':
                cell.data_type = 's'
