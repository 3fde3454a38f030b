"""
redmine2md - Mirror Redmine issues into local Markdown files.

Each issue becomes one Markdown file with YAML frontmatter. Comments
(journals) are appended to an anchored block at the end of the file and
are never rewritten, so the files can be edited and committed.

Usage:
    # Create an example configuration
    redmine2md init

    # Verify credentials and project access
    redmine2md check

    # Sync one issue by id or by URL
    redmine2md sync issue --id 42
    redmine2md sync issue --url https://redmine.example.com/issues/42

    # Sync a whole project (preview first)
    redmine2md --dry-run sync project --status open
    redmine2md sync project --updated-since 2024-01-01

Environment Variables:
    REDMINE_BASE_URL: Overrides baseUrl
    REDMINE_API_KEY: Overrides apiAccessToken
    REDMINE_OUTPUT_DIR: Overrides outputDir
"""

import argparse
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .. import __version__
from ..adapters.config import (
    DEFAULT_CONFIG_FILENAME,
    EXAMPLE_CONFIG_FILENAME,
    YamlConfigProvider,
    write_example_config,
)
from ..adapters.formatters import MarkdownCommentFormatter
from ..adapters.parsers import MarkdownDocumentParser
from ..adapters.redmine import RedmineAdapter
from ..application.queries import check_connectivity
from ..application.sync import IssueSyncEngine, ProjectSyncOrchestrator
from ..core.ports.config_provider import AppConfig, ConfigError
from .exit_codes import ExitCode
from .output import Console


ISSUE_URL_PATTERN = re.compile(r"/issues/(\d+)(?:/|$)")

SYNC_SCRIPT_NAME = "redmine-sync-issue.sh"

SYNC_SCRIPT = """\
#!/bin/bash

# redmine2md - Issue Sync Script
# Usage: ./scripts/redmine-sync-issue.sh <id|url>

if [ $# -eq 0 ]; then
    echo "Usage: $0 <issue-id|issue-url>"
    echo ""
    echo "Examples:"
    echo "  $0 12345"
    echo "  $0 https://redmine.example.com/issues/12345"
    exit 1
fi

INPUT="$1"

if [[ "$INPUT" =~ ^https?:// ]]; then
    redmine2md sync issue --url "$INPUT"
else
    if [[ ! "$INPUT" =~ ^[0-9]+$ ]]; then
        echo "Invalid issue ID: $INPUT (must be a number)"
        exit 1
    fi
    redmine2md sync issue --id "$INPUT"
fi
"""


# =============================================================================
# Helpers
# =============================================================================

def extract_issue_id_from_url(url: str) -> Optional[int]:
    """
    Extract the issue id from a Redmine issue URL.

    Args:
        url: URL such as https://redmine.example.com/issues/42

    Returns:
        The issue id, or None if the URL has no ``/issues/<n>`` segment
    """
    match = ISSUE_URL_PATTERN.search(url.split("?", 1)[0].split("#", 1)[0])
    if not match:
        return None
    return int(match.group(1))


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: '{value}'")
    return number


def iso_date(value: str) -> str:
    """argparse type for YYYY-MM-DD dates."""
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{value}'")
    return value


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="redmine2md",
        description="Sync Redmine issues to local Markdown files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=DEFAULT_CONFIG_FILENAME,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_FILENAME})"
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        help="Output directory for markdown files"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without writing files"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    commands = parser.add_subparsers(dest="command", metavar="<command>")
    commands.required = True

    commands.add_parser("init", help="Write an example configuration in the current directory")
    commands.add_parser("check", help="Check connectivity to the Redmine API")

    sync = commands.add_parser("sync", help="Sync Redmine issues to markdown files")
    targets = sync.add_subparsers(dest="target", metavar="<target>")
    targets.required = True

    issue = targets.add_parser("issue", help="Sync a single issue")
    selector = issue.add_mutually_exclusive_group(required=True)
    selector.add_argument("--id", "-i", type=positive_int, help="Issue ID")
    selector.add_argument("--url", "-u", type=str, help="Issue URL")

    project = targets.add_parser("project", help="Sync all issues in the configured project")
    project.add_argument(
        "--status", "-s",
        type=str,
        help="Filter by status id, 'open', 'closed' or '*' (default from config)"
    )
    project.add_argument(
        "--updated-since",
        type=iso_date,
        help="Only sync issues updated since YYYY-MM-DD"
    )
    project.add_argument(
        "--concurrency",
        type=positive_int,
        help="Number of concurrent requests (1-10)"
    )
    project.add_argument(
        "--page-size",
        type=positive_int,
        help="Page size for API requests (1-100)"
    )

    return parser


def load_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration with CLI overrides applied; raises ConfigError."""
    provider = YamlConfigProvider(
        config_path=Path(args.config),
        cli_overrides={
            "output_dir": args.output_dir,
            "concurrency": getattr(args, "concurrency", None),
            "page_size": getattr(args, "page_size", None),
        },
    )
    return provider.load()


def build_engine(config: AppConfig, tracker: RedmineAdapter) -> IssueSyncEngine:
    """Wire the single-issue engine from its adapters."""
    return IssueSyncEngine(
        tracker=tracker,
        parser=MarkdownDocumentParser(config.comments.anchors),
        formatter=MarkdownCommentFormatter(),
        config=config,
    )


# =============================================================================
# Commands
# =============================================================================

def run_init(args: argparse.Namespace, console: Console) -> int:
    """Write the example configuration and helper script."""
    cwd = Path.cwd()

    try:
        config_path = write_example_config(cwd)
    except FileExistsError:
        console.warning(f"{EXAMPLE_CONFIG_FILENAME} already exists in current directory")
        console.detail("If you want to recreate it, please delete the existing file first.")
        return ExitCode.SUCCESS

    console.success(f"Created {config_path.name}")

    script_path = cwd / "scripts" / SYNC_SCRIPT_NAME
    script_path.parent.mkdir(parents=True, exist_ok=True)
    script_path.write_text(SYNC_SCRIPT, encoding="utf-8")
    os.chmod(script_path, 0o755)
    console.success(f"Created scripts/{SYNC_SCRIPT_NAME} (executable)")

    console.section("Next steps")
    console.detail(f"1. Copy {EXAMPLE_CONFIG_FILENAME} to {DEFAULT_CONFIG_FILENAME}")
    console.detail("2. Update the configuration with your Redmine details")
    console.detail("3. Run 'redmine2md check' to verify connectivity")
    console.detail("4. Run 'redmine2md sync issue --id <number>'")
    return ExitCode.SUCCESS


def run_check(args: argparse.Namespace, console: Console) -> int:
    """Check connectivity to Redmine and the configured project."""
    config = load_config(args)
    tracker = RedmineAdapter(config)
    try:
        result = check_connectivity(tracker, config)
    finally:
        tracker.close()

    if args.json:
        console.json(result.to_dict())
    else:
        console.connectivity_result(result)

    return ExitCode.SUCCESS if result.success else ExitCode.SYNC_FAILED


def run_sync_issue(args: argparse.Namespace, console: Console) -> int:
    """Sync a single issue."""
    issue_id = args.id
    if issue_id is None:
        issue_id = extract_issue_id_from_url(args.url)
        if issue_id is None:
            console.error(f"Could not extract issue ID from URL: {args.url}")
            return ExitCode.INVALID_ARGS

    config = load_config(args)
    tracker = RedmineAdapter(config)
    engine = build_engine(config, tracker)

    if args.dry_run and not args.json:
        console.dry_run_banner()

    try:
        result = engine.sync_one(issue_id, dry_run=args.dry_run, output_dir=config.output_dir)
    finally:
        tracker.close()

    if args.json:
        console.json(result.to_dict())
    else:
        console.issue_result(result)

    return ExitCode.SUCCESS if result.success else ExitCode.SYNC_FAILED


def run_sync_project(args: argparse.Namespace, console: Console) -> int:
    """Sync every issue of the configured project."""
    config = load_config(args)
    tracker = RedmineAdapter(config)
    orchestrator = ProjectSyncOrchestrator(tracker, build_engine(config, tracker), config)

    if args.dry_run and not args.json:
        console.dry_run_banner()

    def show_progress(current: int, total: int) -> None:
        console.progress(current, total, f"{current}/{total} issues fetched")

    try:
        result = orchestrator.sync_project(
            status=args.status,
            updated_since=args.updated_since,
            concurrency=config.defaults.concurrency,
            page_size=config.defaults.page_size,
            dry_run=args.dry_run,
            output_dir=config.output_dir,
            on_progress=None if args.json else show_progress,
        )
    finally:
        tracker.close()

    if args.json:
        console.json(result.to_dict())
    else:
        console.project_result(result)

    return ExitCode.SUCCESS if result.success else ExitCode.PARTIAL_FAILURE


# =============================================================================
# Main
# =============================================================================

def run(args: argparse.Namespace) -> int:
    """Dispatch parsed arguments to a command."""
    console = Console(color=not args.no_color, verbose=args.verbose)
    logger = logging.getLogger("main")

    try:
        if args.command == "init":
            return run_init(args, console)
        if args.command == "check":
            return run_check(args, console)
        if args.target == "issue":
            return run_sync_issue(args, console)
        return run_sync_project(args, console)
    except ConfigError as e:
        logger.debug(f"Configuration error: {e}")
        console.config_errors(str(e), e.errors)
        return ExitCode.CONFIG_ERROR
    except OSError as e:
        logger.error(str(e))
        console.error(str(e))
        return ExitCode.ERROR
    except KeyboardInterrupt:
        console.warning("Interrupted")
        return ExitCode.INTERRUPTED


def main(argv: Optional[list[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    return int(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
