"""
Output - Console output formatting.

Provides pretty-printed output with colors and formatting.
"""

import json
import sys
from typing import Any, Optional

from ..application.queries import ConnectivityResult
from ..application.sync import IssueSyncResult, ProjectSyncResult
from ..core.domain.enums import SyncAction


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"

    BG_YELLOW = "\033[43m"


class Symbols:
    """Unicode symbols for output."""

    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    SKIP = "↷"
    WARN = "⚠"
    INFO = "ℹ"
    GEAR = "⚙"


class Console:
    """Console output helper with colors and formatting."""

    MAX_LISTED_ERRORS = 10

    def __init__(self, color: bool = True, verbose: bool = False):
        self.color = color and sys.stdout.isatty()
        self.verbose = verbose

    def _c(self, text: str, *codes: str) -> str:
        """Apply color codes to text."""
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "") -> None:
        """Print text."""
        print(text)

    def json(self, data: Any) -> None:
        """Print data as indented JSON."""
        self.print(json.dumps(data, indent=2, ensure_ascii=False))

    def section(self, text: str) -> None:
        """Print a section header."""
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))

    def success(self, text: str) -> None:
        """Print success message."""
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def error(self, text: str) -> None:
        """Print error message."""
        self.print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED))

    def warning(self, text: str) -> None:
        """Print warning message."""
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def info(self, text: str) -> None:
        """Print info message."""
        self.print(self._c(f"  {Symbols.INFO} {text}", Colors.CYAN))

    def skipped(self, text: str) -> None:
        """Print a no-op outcome."""
        self.print(self._c(f"  {Symbols.SKIP} {text}", Colors.DIM))

    def detail(self, text: str) -> None:
        """Print detail text (dimmed)."""
        self.print(self._c(f"    {text}", Colors.DIM))

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Print a simple table."""
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_line = "  " + "  ".join(
            self._c(h.ljust(widths[i]), Colors.BOLD)
            for i, h in enumerate(headers)
        )
        self.print(header_line)
        self.print("  " + "  ".join("-" * w for w in widths))

        for row in rows:
            row_line = "  " + "  ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            )
            self.print(row_line)

    def progress(self, current: int, total: int, message: str = "") -> None:
        """Print progress bar."""
        if total <= 0:
            return

        width = 30
        filled = int(width * current / total)
        bar = "█" * filled + "░" * (width - filled)
        pct = int(100 * current / total)

        sys.stdout.write(f"\r  [{bar}] {pct}% {message}")
        sys.stdout.flush()

        if current >= total:
            self.print()

    def dry_run_banner(self) -> None:
        """Print dry-run mode banner."""
        self.print()
        banner = f"  {Symbols.GEAR} DRY-RUN MODE - No files will be written"
        if self.color:
            self.print(f"{Colors.BG_YELLOW}{Colors.BOLD}{banner}{Colors.RESET}")
        else:
            self.print(f"*** {banner} ***")
        self.print()

    # -------------------------------------------------------------------------
    # Result Rendering
    # -------------------------------------------------------------------------

    def connectivity_result(self, result: ConnectivityResult) -> None:
        """Print the outcome of a connectivity check."""
        if not result.success:
            self.error(result.message)
            self.detail(f"Base URL: {result.details.get('baseUrl', '')}")
            return

        self.success(result.message)
        project = result.details.get("project")
        if project:
            self.detail(f"Project: {project['name']} ({project['identifier']})")
            self.detail(f"Project ID: {project['id']}")

    def issue_result(self, result: IssueSyncResult) -> None:
        """Print the outcome of a single issue sync."""
        if not result.success:
            self.error(result.message)
        elif result.action == SyncAction.SKIPPED:
            self.skipped(result.message)
        else:
            self.success(result.message)

        if result.file_path:
            self.detail(f"File: {result.file_path}")
        if self.verbose and result.changes:
            changed = [name for name, flag in result.changes.items() if flag]
            self.detail(f"Changes: {', '.join(changed) or 'none'}")

    def project_result(self, result: ProjectSyncResult) -> None:
        """Print project sync summary."""
        self.section("Sync Summary")
        self.print()

        if result.dry_run:
            self.info("Mode: DRY-RUN (no files written)")

        stats = [
            ["Total issues", str(result.total_issues)],
            ["Processed", str(result.processed)],
            ["Created", str(result.created)],
            ["Updated", str(result.updated)],
            ["Skipped", str(result.skipped)],
            ["Failed", str(result.failed)],
        ]
        self.table(["Metric", "Count"], stats)

        if result.errors:
            self.print()
            self.error(f"{len(result.errors)} error(s):")
            for error in result.errors[: self.MAX_LISTED_ERRORS]:
                self.detail(f"Issue {error.issue_id}: {error.error}")
            if len(result.errors) > self.MAX_LISTED_ERRORS:
                self.detail(f"... and {len(result.errors) - self.MAX_LISTED_ERRORS} more")

        self.print()
        if result.success:
            self.success("Sync completed successfully")
        else:
            self.error("Sync completed with errors")

    def config_errors(self, message: str, errors: Optional[list[str]] = None) -> None:
        """Print configuration problems."""
        if not errors:
            self.error(message)
            return
        self.error("Configuration is invalid:")
        for error in errors:
            self.detail(error)
