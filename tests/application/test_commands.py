"""Tests for application commands."""

import pytest
from unittest.mock import Mock

from redmine2md.application.commands import (
    CommandResult,
    RemoveDocumentCommand,
    WriteDocumentCommand,
)
from redmine2md.core.domain.document import Frontmatter, MarkdownDocument


class TestCommandResult:
    """Tests for CommandResult."""

    def test_ok(self):
        result = CommandResult.ok("data")
        assert result.success
        assert result.data == "data"
        assert not result.dry_run

    def test_ok_dry_run(self):
        result = CommandResult.ok("data", dry_run=True)
        assert result.success
        assert result.dry_run

    def test_fail(self):
        result = CommandResult.fail("error message")
        assert not result.success
        assert result.error == "error message"

    def test_skip(self):
        result = CommandResult.skip("reason")
        assert result.success
        assert result.skipped
        assert result.skip_reason == "reason"


class TestWriteDocumentCommand:
    """Tests for WriteDocumentCommand."""

    @pytest.fixture
    def parser(self):
        return Mock()

    @pytest.fixture
    def document(self):
        return MarkdownDocument(frontmatter=Frontmatter(id=42), content="Body")

    def test_validate_directory_target(self, parser, document, tmp_path):
        cmd = WriteDocumentCommand(parser, tmp_path, document)
        assert cmd.validate() is not None

    def test_execute_dry_run(self, parser, document, tmp_path):
        path = tmp_path / "42-fix-bug.md"
        cmd = WriteDocumentCommand(parser, path, document, dry_run=True)

        result = cmd.execute()

        assert result.success
        assert result.dry_run
        assert result.data == path
        parser.write.assert_not_called()

    def test_execute_success(self, parser, document, tmp_path):
        path = tmp_path / "42-fix-bug.md"
        cmd = WriteDocumentCommand(parser, path, document)

        result = cmd.execute()

        assert result.success
        parser.write.assert_called_once_with(path, document)

    def test_execute_io_error(self, parser, document, tmp_path):
        parser.write.side_effect = PermissionError("read-only")
        cmd = WriteDocumentCommand(parser, tmp_path / "42.md", document)

        result = cmd.execute()

        assert not result.success
        assert "read-only" in result.error


class TestRemoveDocumentCommand:
    """Tests for RemoveDocumentCommand."""

    def test_execute_success(self, tmp_path):
        path = tmp_path / "old.md"
        path.write_text("x")

        result = RemoveDocumentCommand(path).execute()

        assert result.success
        assert not path.exists()

    def test_execute_dry_run(self, tmp_path):
        path = tmp_path / "old.md"
        path.write_text("x")

        result = RemoveDocumentCommand(path, dry_run=True).execute()

        assert result.dry_run
        assert path.exists()

    def test_validate_missing_file(self, tmp_path):
        result = RemoveDocumentCommand(tmp_path / "missing.md").execute()

        assert not result.success
