"""
Sync Orchestrator - Coordinates the synchronization of a whole project.

This is the main entry point for project sync operations.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ...adapters.naming import FilenameGenerator
from ...core.domain.entities import Issue
from ...core.domain.enums import SyncAction
from ...core.domain.events import (
    EventBus,
    IssueSynced,
    IssuesFetched,
    SyncCompleted,
    SyncStarted,
)
from ...core.ports.config_provider import AppConfig
from ...core.ports.issue_tracker import (
    IssueFilters,
    IssueTrackerError,
    IssueTrackerPort,
    ProgressCallback,
    describe_error,
)
from .issue_sync import IssueSyncEngine, IssueSyncResult


@dataclass
class SyncError:
    """A per-issue failure; issue id 0 marks a project-level failure."""

    issue_id: int
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"issueId": self.issue_id, "error": self.error}


@dataclass
class ProjectSyncResult:
    """Result of a project sync operation."""

    success: bool = True
    dry_run: bool = False

    # Counts
    total_issues: int = 0
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    # Details
    results: list[IssueSyncResult] = field(default_factory=list)
    errors: list[SyncError] = field(default_factory=list)

    def add_error(self, issue_id: int, error: str) -> None:
        """Add an error message."""
        self.errors.append(SyncError(issue_id, error))
        self.success = False

    def record(self, issue_result: IssueSyncResult) -> None:
        """Fold one issue result into the counters."""
        self.processed += 1
        self.results.append(issue_result)

        if not issue_result.success:
            self.failed += 1
            self.add_error(issue_result.issue_id, issue_result.message)
        elif issue_result.action == SyncAction.CREATED:
            self.created += 1
        elif issue_result.action == SyncAction.UPDATED:
            self.updated += 1
        else:
            self.skipped += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "dryRun": self.dry_run,
            "totalIssues": self.total_issues,
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": [error.to_dict() for error in self.errors],
        }


class ProjectSyncOrchestrator:
    """
    Orchestrates the synchronization of every matching issue in a project.

    Phases:
    1. List matching issues (concurrent pagination)
    2. Assign filenames, one issue at a time, with a per-run dedupe set
    3. Sync issues on a bounded worker pool
    4. Aggregate per-issue results
    """

    def __init__(
        self,
        tracker: IssueTrackerPort,
        engine: IssueSyncEngine,
        config: AppConfig,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            tracker: Issue tracker port
            engine: Single-issue sync engine
            config: Application configuration
            event_bus: Optional event bus
        """
        self.tracker = tracker
        self.engine = engine
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger("ProjectSyncOrchestrator")

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def sync_project(
        self,
        status: Optional[str] = None,
        updated_since: Optional[str] = None,
        concurrency: Optional[int] = None,
        page_size: Optional[int] = None,
        dry_run: bool = False,
        output_dir: Union[str, Path, None] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_issue: Optional[Callable[[IssueSyncResult], None]] = None,
    ) -> ProjectSyncResult:
        """
        Sync every issue of the configured project.

        Args:
            status: Redmine status filter (``*`` for all)
            updated_since: Only issues updated on or after YYYY-MM-DD
            concurrency: Worker count (defaults to config)
            page_size: Listing page size (defaults to config)
            dry_run: Report decisions without writing
            output_dir: Directory holding issue files (defaults to config)
            on_progress: Called with (fetched, total) while listing
            on_issue: Called with each issue result as it completes

        Returns:
            ProjectSyncResult with counters and errors
        """
        defaults = self.config.defaults
        project_id = self.config.project.id
        workers = concurrency or defaults.concurrency
        target_dir = Path(output_dir or self.config.output_dir)

        result = ProjectSyncResult(dry_run=dry_run)
        self.event_bus.publish(SyncStarted(project_id=project_id, dry_run=dry_run))

        # The list endpoint carries no journals; each issue is re-fetched
        # with its includes by the engine.
        filters = IssueFilters(
            status=status or defaults.status,
            updated_since=updated_since,
        )

        try:
            issues = self.tracker.get_issues_concurrently(
                project_id,
                filters,
                page_size=page_size or defaults.page_size,
                on_progress=on_progress,
            )
        except IssueTrackerError as e:
            return self._listing_failed(project_id, result, describe_error(e, f"Project {project_id}"))
        except Exception as e:
            self.logger.exception(f"Unexpected error listing issues of project {project_id}")
            return self._listing_failed(project_id, result, str(e) or type(e).__name__)

        result.total_issues = len(issues)
        self.event_bus.publish(IssuesFetched(project_id=project_id, total=len(issues)))
        self.logger.info(f"Found {len(issues)} issues in project {project_id}")

        if issues:
            filenames = self._assign_filenames(issues)
            self._run(issues, filenames, workers, dry_run, target_dir, result, on_issue)

        result.success = result.failed == 0
        self._publish_completed(project_id, result)
        return result

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def _assign_filenames(self, issues: list[Issue]) -> dict[int, str]:
        """Filenames in listing order, deduplicated within this run."""
        generator = FilenameGenerator(self.config.filename)
        return {issue.id: generator.filename(issue.id, issue.subject) for issue in issues}

    def _run(
        self,
        issues: list[Issue],
        filenames: dict[int, str],
        workers: int,
        dry_run: bool,
        output_dir: Path,
        result: ProjectSyncResult,
        on_issue: Optional[Callable[[IssueSyncResult], None]],
    ) -> None:
        total = len(issues)

        with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
            futures = [
                pool.submit(
                    self.engine.sync_one,
                    issue.id,
                    dry_run=dry_run,
                    output_dir=output_dir,
                    filename=filenames[issue.id],
                )
                for issue in issues
            ]

            # Results are folded on this thread only
            for future in as_completed(futures):
                issue_result = future.result()
                result.record(issue_result)

                self.event_bus.publish(IssueSynced(
                    issue_id=issue_result.issue_id,
                    filename=issue_result.filename,
                    action=str(issue_result.action),
                    success=issue_result.success,
                    message=issue_result.message,
                    processed=result.processed,
                    total=total,
                ))
                if on_issue:
                    on_issue(issue_result)

    def _listing_failed(
        self,
        project_id: int,
        result: ProjectSyncResult,
        message: str,
    ) -> ProjectSyncResult:
        self.logger.error(f"Failed to fetch issues: {message}")
        result.add_error(0, f"Failed to fetch issues: {message}")
        self._publish_completed(project_id, result)
        return result

    def _publish_completed(self, project_id: int, result: ProjectSyncResult) -> None:
        self.event_bus.publish(SyncCompleted(
            project_id=project_id,
            created=result.created,
            updated=result.updated,
            skipped=result.skipped,
            failed=result.failed,
            errors=[error.error for error in result.errors],
        ))
