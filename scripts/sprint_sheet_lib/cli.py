"""
Command line entry point for Jira Sprint Sheet

Usage:
  jira-sprint-sheet                  # Default board (DEFAULT_BOARD_ID)
  jira-sprint-sheet 42               # Board by id
  jira-sprint-sheet "mobile"         # First board whose name contains "mobile"
  jira-sprint-sheet --config         # Store the Jira API token in the system keyring
"""

import argparse
import getpass
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .api_client import JiraClient
from .config_manager import ConfigManager, Settings
from .exceptions import ConfigurationError, SprintSheetError
from .issue_grouper import group_by_assignee
from .models import GroupedReport, Sprint
from .report_generator import SprintSheetGenerator
from .sprint_resolver import SprintResolver

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Log to stdout, and to log_file when given"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        except OSError as e:
            raise ConfigurationError(
                f"Cannot open log file {log_file}",
                remediation="Pass a writable path to --log-file",
                details=str(e)
            ) from e

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=handlers,
        force=True
    )
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)


def parse_board_id(value: Optional[str]) -> Optional[int]:
    """Board argument as an integer id, or None when it is a name"""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def resolve_board_id(board_arg: Optional[str], jira_client: JiraClient, default_board_id: int) -> int:
    """
    Turn the CLI board argument into a board id.

    Integers are used as-is. Anything else is matched case-insensitively as a
    substring of board names; the first match wins. Without an argument, or
    when no board matches, the default board is used.
    """
    if not board_arg:
        logger.info(f"Using default board ID: {default_board_id}")
        return default_board_id

    board_id = parse_board_id(board_arg)
    if board_id is not None:
        return board_id

    logger.info(f'Looking for board with name containing "{board_arg}"...')
    needle = board_arg.lower()
    matching_boards = [b for b in jira_client.get_all_boards() if needle in b.name.lower()]

    if not matching_boards:
        logger.warning(f'No boards found with name containing "{board_arg}"')
        logger.info(f"Using default board ID: {default_board_id}")
        return default_board_id

    logger.info(f"Found {len(matching_boards)} matching boards:")
    for board in matching_boards:
        logger.info(f"- {board.name} (ID: {board.id})")
    return matching_boards[0].id


@dataclass(frozen=True)
class ReportResult:
    """Outcome of one report run"""
    output_path: Path
    sprint: Sprint
    grouped: GroupedReport
    fetched_issues: int


def generate_sprint_report(settings: Settings, jira_client: JiraClient, board_id: int,
                           output_dir: Path) -> ReportResult:
    """Resolve the sprint, fetch and group its issues and write the workbook"""
    logger.info(f"Generating sprint report for board {board_id}...")

    sprint = SprintResolver(jira_client).resolve_sprint(board_id)
    issues = jira_client.get_sprint_issues(sprint.id)

    grouped = group_by_assignee(issues, settings.excluded_names, settings.preferred_order)
    logger.info(
        f"Grouped {grouped.total_issues} of {len(issues)} issues "
        f"into {len(grouped.non_empty_groups())} developer groups"
    )

    generator = SprintSheetGenerator(settings.column_labels)
    output_path = generator.save_report(output_dir, sprint.name, grouped)
    return ReportResult(output_path, sprint, grouped, len(issues))


def store_api_token(config_mgr: ConfigManager) -> int:
    """--config: prompt for the API token and keep it in the system keyring"""
    print("=" * 60)
    print("Jira Sprint Sheet - Store API token")
    print("=" * 60)
    print("Get your API token: https://id.atlassian.com/manage-profile/security/api-tokens")
    print()

    email = (config_mgr.env.get('JIRA_EMAIL') or '').strip() or input("Jira email: ").strip()
    if not email:
        print("[ERROR] Jira email is required")
        return 1

    token = getpass.getpass("Jira API token: ").strip()
    if not token:
        print("[ERROR] Jira API token is required")
        return 1

    config_mgr.save_api_token(email, token)
    print("[OK] API token stored securely in system keyring")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jira-sprint-sheet",
        description="Export the current Jira sprint to an Excel sheet grouped by developer"
    )
    parser.add_argument(
        "board",
        nargs="?",
        help="Board ID, or part of a board name (default: DEFAULT_BOARD_ID)"
    )
    parser.add_argument("--output-dir", type=Path, default=Path.cwd(),
                        help="Directory for the .xlsx file (default: current directory)")
    parser.add_argument("--env-file", type=Path, help="Load settings from this .env file")
    parser.add_argument("--config", action="store_true",
                        help="Store the Jira API token in the system keyring and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        setup_logging(args.verbose, args.log_file)
        config_mgr = ConfigManager(env_file=args.env_file)

        if args.config:
            return store_api_token(config_mgr)

        settings = config_mgr.load_settings()

        with JiraClient(settings.jira_base_url, settings.jira_email,
                        settings.jira_api_token, timeout=settings.timeout) as jira_client:
            board_id = resolve_board_id(args.board, jira_client, settings.default_board_id)
            result = generate_sprint_report(settings, jira_client, board_id, args.output_dir)

    except KeyboardInterrupt:
        print()
        print("[CANCELLED] Report generation interrupted by user")
        return 130

    except SprintSheetError as e:
        logger.error(f"Report generation failed: {e}")
        return 1

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Traceback", exc_info=True)
        return 1

    print()
    print("=" * 60)
    print("REPORT GENERATED SUCCESSFULLY")
    print("=" * 60)
    print(f"Output:          {result.output_path}")
    print(f"Sprint:          {result.sprint.name}")
    print(f"Developers:      {len(result.grouped.non_empty_groups())}")
    print(f"Issues:          {result.grouped.total_issues} of {result.fetched_issues}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
