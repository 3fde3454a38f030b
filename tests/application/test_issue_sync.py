"""Tests for the single-issue sync engine."""

import pytest
from pathlib import Path
from unittest.mock import Mock, patch

from redmine2md.adapters.formatters import MarkdownCommentFormatter
from redmine2md.adapters.parsers import MarkdownDocumentParser
from redmine2md.application.commands import WriteDocumentCommand
from redmine2md.application.sync import IssueSyncEngine, build_frontmatter
from redmine2md.application.sync import issue_sync
from redmine2md.core.domain.document import Frontmatter, MarkdownDocument
from redmine2md.core.domain.entities import IssueAttachment, IssueRelation
from redmine2md.core.domain.enums import SyncAction
from redmine2md.core.ports.issue_tracker import NotFoundError, TransientError


class TestIssueSyncEngine:
    """Tests for IssueSyncEngine.sync_one."""

    @pytest.fixture
    def tracker(self):
        return Mock()

    @pytest.fixture
    def parser(self):
        return MarkdownDocumentParser()

    @pytest.fixture
    def engine(self, tracker, parser, config):
        return IssueSyncEngine(tracker, parser, MarkdownCommentFormatter(), config)

    @pytest.fixture
    def output_dir(self, config):
        return Path(config.output_dir)

    def test_first_sync_creates_file(self, engine, tracker, parser, output_dir, make_issue, make_journal):
        tracker.get_issue.return_value = make_issue(
            42, journals=[make_journal(5, notes="Looking into it.")]
        )

        result = engine.sync_one(42)

        assert result.success
        assert result.action == SyncAction.CREATED
        assert result.filename == "42-fix-bug.md"
        assert result.message == "Successfully created issue 42"
        assert result.changes == {"frontmatter": True, "content": True, "comments": True}

        doc = parser.read(output_dir / "42-fix-bug.md")
        assert doc.issue_id == 42
        assert doc.last_journal_id == 5
        assert doc.content == "It is broken."
        assert "Looking into it." in doc.comments

    def test_fetches_configured_includes(self, engine, tracker, config, make_issue):
        tracker.get_issue.return_value = make_issue(42)

        engine.sync_one(42)

        tracker.get_issue.assert_called_once_with(42, config.defaults.include)

    def test_second_sync_is_idempotent(self, engine, tracker, output_dir, make_issue, make_journal):
        tracker.get_issue.return_value = make_issue(42, journals=[make_journal(5)])
        engine.sync_one(42)
        path = output_dir / "42-fix-bug.md"
        before = path.read_bytes()

        result = engine.sync_one(42)

        assert result.success
        assert result.action == SyncAction.SKIPPED
        assert result.message == "Issue 42 is already up to date"
        assert path.read_bytes() == before

    def test_identity_guard(self, engine, tracker, parser, output_dir, make_issue):
        path = output_dir / "42-fix-bug.md"
        parser.write(path, MarkdownDocument(frontmatter=Frontmatter(id=7), content="Other issue"))
        before = path.read_bytes()
        tracker.get_issue.return_value = make_issue(42)

        result = engine.sync_one(42)

        assert not result.success
        assert result.action == SyncAction.SKIPPED
        assert result.message == "File 42-fix-bug.md contains issue 7, not 42"
        assert path.read_bytes() == before

    def test_silent_update_advances_marker(self, engine, tracker, parser, output_dir, make_issue, make_journal, detail):
        tracker.get_issue.return_value = make_issue(42, journals=[make_journal(5, notes="Hello")])
        engine.sync_one(42)
        path = output_dir / "42-fix-bug.md"
        comments_before = parser.read(path).comments

        tracker.get_issue.return_value = make_issue(
            42, journals=[make_journal(5, notes="Hello"), make_journal(6, notes=None, details=[detail])]
        )
        result = engine.sync_one(42)

        doc = parser.read(path)
        assert result.action == SyncAction.UPDATED
        assert result.changes["comments"]
        assert doc.last_journal_id == 6
        assert doc.comments == comments_before

    def test_new_comments_are_appended(self, engine, tracker, parser, output_dir, make_issue, make_journal):
        tracker.get_issue.return_value = make_issue(42, journals=[make_journal(5, notes="First")])
        engine.sync_one(42)
        path = output_dir / "42-fix-bug.md"
        first = parser.read(path).comments

        tracker.get_issue.return_value = make_issue(
            42, journals=[make_journal(5, notes="First"), make_journal(8, notes="Second")]
        )
        engine.sync_one(42)

        doc = parser.read(path)
        assert doc.comments.startswith(first + "\n\n---\n\n")
        assert doc.comments.count("First") == 1
        assert "Second" in doc.comments
        assert doc.last_journal_id == 8

    def test_hand_edited_comments_survive(self, engine, tracker, parser, output_dir, make_issue, make_journal):
        path = output_dir / "42-fix-bug.md"
        parser.write(path, MarkdownDocument(
            frontmatter=Frontmatter(id=42, updated_on="2024-01-02T00:00:00Z", last_journal_id=5),
            content="Old",
            comments="My own notes",
        ))
        tracker.get_issue.return_value = make_issue(
            42, journals=[make_journal(5), make_journal(6, notes="New one")]
        )

        engine.sync_one(42)

        assert parser.read(path).comments.startswith("My own notes\n\n---\n\n")

    def test_marker_never_decreases(self, engine, tracker, parser, output_dir, make_issue, make_journal):
        path = output_dir / "42-fix-bug.md"
        parser.write(path, MarkdownDocument(
            frontmatter=Frontmatter(id=42, updated_on="2024-01-01T00:00:00Z", last_journal_id=10),
        ))
        tracker.get_issue.return_value = make_issue(
            42, updated_on="2024-02-01T00:00:00Z", journals=[make_journal(3)]
        )

        result = engine.sync_one(42)

        assert result.action == SyncAction.UPDATED
        assert result.changes == {"frontmatter": True, "content": True, "comments": False}
        assert parser.read(path).last_journal_id == 10

    def test_updated_on_compared_as_instants(self, engine, tracker, parser, output_dir, make_issue):
        path = output_dir / "42-fix-bug.md"
        parser.write(path, MarkdownDocument(
            frontmatter=Frontmatter(id=42, updated_on="2024-01-02T02:00:00+02:00"),
        ))
        tracker.get_issue.return_value = make_issue(42, updated_on="2024-01-02T00:00:00Z")

        result = engine.sync_one(42)

        assert result.action == SyncAction.SKIPPED

    def test_dry_run_writes_nothing(self, engine, tracker, output_dir, make_issue):
        tracker.get_issue.return_value = make_issue(42)

        result = engine.sync_one(42, dry_run=True)

        assert result.success
        assert result.action == SyncAction.CREATED
        assert result.message == "Would created issue 42 (dry run)"
        assert not (output_dir / "42-fix-bug.md").exists()

    def test_dry_run_goes_through_write_command(self, engine, tracker, output_dir, make_issue):
        tracker.get_issue.return_value = make_issue(42)

        with patch.object(issue_sync, "WriteDocumentCommand", wraps=WriteDocumentCommand) as command_cls:
            result = engine.sync_one(42, dry_run=True)

        assert result.success
        assert command_cls.call_args.kwargs["dry_run"] is True
        assert not (output_dir / "42-fix-bug.md").exists()

    def test_fetch_failure_is_reported(self, engine, tracker):
        tracker.get_issue.side_effect = NotFoundError("missing", status=404)

        result = engine.sync_one(99)

        assert not result.success
        assert result.action == SyncAction.SKIPPED
        assert result.filename == ""
        assert result.message == "Failed to sync issue 99: Issue 99 not found or inaccessible"

    def test_network_failure_is_reported(self, engine, tracker):
        tracker.get_issue.side_effect = TransientError("Connection failed: refused")

        result = engine.sync_one(99)

        assert not result.success
        assert "Connection failed" in result.message

    def test_malformed_local_file_is_reported(self, engine, tracker, output_dir, make_issue):
        output_dir.mkdir(parents=True)
        (output_dir / "42-fix-bug.md").write_text("---\nid: [\n---\n", encoding="utf-8")
        tracker.get_issue.return_value = make_issue(42)

        result = engine.sync_one(42)

        assert not result.success
        assert result.message.startswith("Failed to sync issue 42:")

    def test_explicit_output_dir_and_filename(self, engine, tracker, tmp_path, make_issue):
        tracker.get_issue.return_value = make_issue(42)

        result = engine.sync_one(42, output_dir=tmp_path / "elsewhere", filename="42-custom.md")

        assert result.filename == "42-custom.md"
        assert (tmp_path / "elsewhere" / "42-custom.md").exists()

    def test_retitled_issue_keeps_existing_file(self, engine, tracker, output_dir, make_issue):
        tracker.get_issue.return_value = make_issue(42, subject="Fix bug")
        engine.sync_one(42)

        tracker.get_issue.return_value = make_issue(
            42, subject="Fix the real bug", updated_on="2024-03-01T00:00:00Z"
        )
        result = engine.sync_one(42)

        assert result.action == SyncAction.UPDATED
        assert result.filename == "42-fix-bug.md"
        assert sorted(p.name for p in output_dir.iterdir()) == ["42-fix-bug.md"]

    def test_retitled_issue_is_renamed_when_enabled(self, engine, tracker, config, output_dir, make_issue):
        config.filename.rename_on_title_change = True
        tracker.get_issue.return_value = make_issue(42, subject="Fix bug")
        engine.sync_one(42)

        tracker.get_issue.return_value = make_issue(
            42, subject="Fix the real bug", updated_on="2024-03-01T00:00:00Z"
        )
        result = engine.sync_one(42)

        assert result.action == SyncAction.UPDATED
        assert result.filename == "42-fix-the-real-bug.md"
        assert sorted(p.name for p in output_dir.iterdir()) == ["42-fix-the-real-bug.md"]

    def test_result_to_dict(self, engine, tracker, make_issue):
        tracker.get_issue.return_value = make_issue(42)

        data = engine.sync_one(42, dry_run=True).to_dict()

        assert data["issueId"] == 42
        assert data["action"] == "created"
        assert data["changes"]["content"] is True


class TestBuildFrontmatter:
    """Tests for build_frontmatter."""

    def test_maps_issue_fields(self, make_issue):
        issue = make_issue(
            42,
            assigned_to="Bob",
            relations=[IssueRelation("relates", 43), IssueRelation("precedes", 44, delay=2)],
            attachments=[IssueAttachment(9, "log.txt", 10, "text/plain", "Alice", "2024-01-02T00:00:00Z")],
        )

        frontmatter = build_frontmatter(issue, last_journal_id=7, extra={"tags": ["x"]})
        mapping = frontmatter.to_mapping()

        assert list(mapping)[:10] == [
            "id", "subject", "status", "priority", "author", "assigned_to",
            "created_on", "updated_on", "project", "tracker",
        ]
        assert mapping["lastJournalId"] == 7
        assert mapping["relations"] == [
            {"type": "relates", "issue_id": 43},
            {"type": "precedes", "issue_id": 44, "delay": 2},
        ]
        assert "content_url" not in mapping["attachments"][0]
        assert mapping["tags"] == ["x"]

    def test_empty_collections_are_omitted(self, make_issue):
        mapping = build_frontmatter(make_issue(42)).to_mapping()

        assert "relations" not in mapping
        assert "attachments" not in mapping
        assert "assigned_to" not in mapping
        assert "lastJournalId" not in mapping
