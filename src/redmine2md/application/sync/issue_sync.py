"""
Issue Sync - Decide and apply the create/update/skip outcome for one issue.

For a single issue the engine:
1. Fetches the issue (with the configured includes) from the tracker
2. Reads the local document it maps to
3. Refuses to touch a file that records a different issue id
4. Detects content and comment changes
5. Regenerates the document and writes it (unless dry-run)

Failures are reported as results, never raised.
"""

import glob
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from ...adapters.naming import generate_filename
from ...core.domain.document import Frontmatter, MarkdownDocument
from ...core.domain.entities import Issue, parse_timestamp
from ...core.domain.enums import SyncAction
from ...core.ports.config_provider import AppConfig
from ...core.ports.document_formatter import DocumentFormatterPort
from ...core.ports.document_parser import DocumentParserPort, ParserError
from ...core.ports.issue_tracker import IssueTrackerError, IssueTrackerPort, describe_error
from ..commands import RemoveDocumentCommand, WriteDocumentCommand
from .reconciler import CommentReconciler


@dataclass
class IssueSyncResult:
    """Outcome of syncing a single issue."""

    success: bool
    issue_id: int
    filename: str = ""
    action: SyncAction = SyncAction.SKIPPED
    message: str = ""
    changes: Optional[dict[str, bool]] = None
    file_path: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "issueId": self.issue_id,
            "filename": self.filename,
            "action": str(self.action),
            "message": self.message,
        }
        if self.changes is not None:
            data["changes"] = dict(self.changes)
        if self.file_path is not None:
            data["filePath"] = self.file_path
        return data


def build_frontmatter(
    issue: Issue,
    last_journal_id: Optional[int] = None,
    extra: Optional[dict[str, Any]] = None,
) -> Frontmatter:
    """
    Frontmatter for an issue.

    Args:
        issue: Issue snapshot from the tracker
        last_journal_id: Journal marker to record
        extra: Unknown keys carried over from the previous file
    """
    relations = [
        {
            "type": relation.relation_type,
            "issue_id": relation.issue_to_id,
            **({"delay": relation.delay} if relation.delay is not None else {}),
        }
        for relation in issue.relations
    ]

    attachments = []
    for attachment in issue.attachments:
        item: dict[str, Any] = {
            "id": attachment.id,
            "filename": attachment.filename,
            "filesize": attachment.filesize,
            "content_type": attachment.content_type,
            "author": attachment.author,
            "created_on": attachment.created_on,
        }
        if attachment.content_url:
            item["content_url"] = attachment.content_url
        attachments.append(item)

    return Frontmatter(
        id=issue.id,
        subject=issue.subject,
        status=issue.status,
        priority=issue.priority,
        author=issue.author,
        assigned_to=issue.assigned_to,
        created_on=issue.created_on,
        updated_on=issue.updated_on,
        project=issue.project,
        tracker=issue.tracker,
        last_journal_id=last_journal_id,
        relations=relations or None,
        attachments=attachments or None,
        extra=dict(extra or {}),
    )


class IssueSyncEngine:
    """
    Syncs one remote issue into one local Markdown file.

    Safe to call from several threads at once as long as each call
    targets a different file.
    """

    def __init__(
        self,
        tracker: IssueTrackerPort,
        parser: DocumentParserPort,
        formatter: DocumentFormatterPort,
        config: AppConfig,
    ):
        """
        Initialize the engine.

        Args:
            tracker: Issue tracker port
            parser: Document codec
            formatter: Journal renderer
            config: Application configuration
        """
        self.tracker = tracker
        self.parser = parser
        self.config = config
        self.reconciler = CommentReconciler(formatter)
        self.logger = logging.getLogger("IssueSyncEngine")

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def sync_one(
        self,
        issue_id: int,
        dry_run: bool = False,
        output_dir: Union[str, Path, None] = None,
        filename: Optional[str] = None,
    ) -> IssueSyncResult:
        """
        Sync a single issue.

        Args:
            issue_id: Redmine issue id
            dry_run: Report the decision without writing
            output_dir: Directory holding issue files (defaults to config)
            filename: Pre-computed filename; derived from the subject if None

        Returns:
            IssueSyncResult describing what happened
        """
        target_dir = Path(output_dir or self.config.output_dir)

        try:
            return self._sync(issue_id, dry_run, target_dir, filename)
        except IssueTrackerError as e:
            message = describe_error(e, f"Issue {issue_id}")
        except (ParserError, OSError) as e:
            message = str(e)
        except Exception as e:
            self.logger.exception(f"Unexpected error syncing issue {issue_id}")
            message = str(e)

        self.logger.error(f"Failed to sync issue {issue_id}: {message}")
        return IssueSyncResult(
            success=False,
            issue_id=issue_id,
            filename=filename or "",
            action=SyncAction.SKIPPED,
            message=f"Failed to sync issue {issue_id}: {message}",
        )

    # -------------------------------------------------------------------------
    # Decision Logic
    # -------------------------------------------------------------------------

    def _sync(
        self,
        issue_id: int,
        dry_run: bool,
        output_dir: Path,
        filename: Optional[str],
    ) -> IssueSyncResult:
        issue = self.tracker.get_issue(issue_id, self.config.defaults.include)

        filename = filename or generate_filename(issue.id, issue.subject, self.config.filename)
        path = output_dir / filename
        existing_path = self._locate_existing(issue, output_dir, path)

        # Without renames, a file found under an older title keeps its name
        if not self.config.filename.rename_on_title_change:
            path = existing_path
            filename = existing_path.name

        document = self.parser.read(existing_path)
        recorded_id = document.issue_id

        if recorded_id is not None and recorded_id != issue.id:
            self.logger.warning(
                f"{filename} records issue {recorded_id}; refusing to overwrite with {issue.id}"
            )
            return IssueSyncResult(
                success=False,
                issue_id=issue.id,
                filename=filename,
                action=SyncAction.SKIPPED,
                message=f"File {filename} contains issue {recorded_id}, not {issue.id}",
            )

        content_changed = self.needs_content_update(issue, document)
        comments_changed = self.needs_comments_update(issue, document)

        if not content_changed and not comments_changed:
            self.logger.debug(f"Issue {issue_id} unchanged")
            return IssueSyncResult(
                success=True,
                issue_id=issue.id,
                filename=filename,
                action=SyncAction.SKIPPED,
                message=f"Issue {issue_id} is already up to date",
            )

        updated = self._build_document(issue, document, comments_changed)
        action = SyncAction.UPDATED if recorded_id is not None else SyncAction.CREATED
        changes = {
            "frontmatter": content_changed,
            "content": content_changed,
            "comments": comments_changed,
        }

        result = WriteDocumentCommand(self.parser, path, updated, dry_run=dry_run).execute()
        if not result.success:
            raise OSError(result.error)

        if result.dry_run:
            return IssueSyncResult(
                success=True,
                issue_id=issue.id,
                filename=filename,
                action=action,
                message=f"Would {action} issue {issue_id} (dry run)",
                changes=changes,
                file_path=str(path),
            )

        if existing_path != path:
            removal = RemoveDocumentCommand(existing_path).execute()
            if not removal.success:
                self.logger.warning(removal.error)

        self.logger.info(f"{action.value.capitalize()} {path}")
        return IssueSyncResult(
            success=True,
            issue_id=issue.id,
            filename=filename,
            action=action,
            message=f"Successfully {action} issue {issue_id}",
            changes=changes,
            file_path=str(path),
        )

    @staticmethod
    def needs_content_update(issue: Issue, document: MarkdownDocument) -> bool:
        """True without a local timestamp or when the remote one is strictly later."""
        local_updated = parse_timestamp(document.frontmatter.updated_on)
        if local_updated is None:
            return True

        remote_updated = issue.updated_at
        return remote_updated is not None and remote_updated > local_updated

    @staticmethod
    def needs_comments_update(issue: Issue, document: MarkdownDocument) -> bool:
        """True when the issue has journals the file has not seen yet."""
        last_id = document.last_journal_id
        if last_id is None:
            return bool(issue.journals)
        return any(journal.id > last_id for journal in issue.journals)

    def _build_document(
        self,
        issue: Issue,
        document: MarkdownDocument,
        comments_changed: bool,
    ) -> MarkdownDocument:
        previous_marker = document.last_journal_id
        markers = [m for m in (issue.last_journal_id, previous_marker) if m is not None]

        comments = document.comments or None
        if comments_changed:
            comments = self.reconciler.reconcile(
                issue.journals,
                previous_marker,
                comments,
                self.config.comments.track_by,
            )

        return MarkdownDocument(
            frontmatter=build_frontmatter(
                issue,
                last_journal_id=max(markers) if markers else None,
                extra=document.frontmatter.extra,
            ),
            content=issue.description or "",
            comments=comments or None,
        )

    # -------------------------------------------------------------------------
    # File Lookup
    # -------------------------------------------------------------------------

    def _locate_existing(self, issue: Issue, output_dir: Path, path: Path) -> Path:
        """
        Find the file already holding this issue.

        Titles feed into filenames, so after a rename on the server the
        issue's file may sit under an older name. Candidates share the
        pattern's prefix up to the slug and must record the same id.
        """
        if path.exists():
            return path

        pattern = self.config.filename.pattern
        prefix = pattern.split("{slug}", 1)[0].replace("{issueId}", str(issue.id))
        if str(issue.id) not in prefix:
            return path

        for candidate in sorted(output_dir.glob(f"{glob.escape(prefix)}*")):
            if not candidate.is_file() or candidate == path:
                continue
            try:
                recorded = self.parser.read(candidate).issue_id
            except ParserError as e:
                self.logger.debug(f"Ignoring unreadable candidate {candidate}: {e}")
                continue
            if recorded == issue.id:
                self.logger.debug(f"Issue {issue.id} found under {candidate.name}")
                return candidate

        return path
