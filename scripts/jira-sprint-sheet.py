#!/usr/bin/env python3
"""
Jira Sprint Sheet - Standalone CLI Tool
Export the current sprint of a Jira board to an Excel sheet grouped by developer

Usage:
  python jira-sprint-sheet.py                # Default board (DEFAULT_BOARD_ID)
  python jira-sprint-sheet.py 42             # Board by id
  python jira-sprint-sheet.py "mobile"       # First board whose name contains "mobile"
  python jira-sprint-sheet.py --config       # Store API token in the system keyring

Requirements:
  pip install -e .
"""

import sys
from pathlib import Path

# Add script directory to path to import sprint_sheet_lib
sys.path.insert(0, str(Path(__file__).parent))

from sprint_sheet_lib.cli import main


if __name__ == "__main__":
    sys.exit(main())
