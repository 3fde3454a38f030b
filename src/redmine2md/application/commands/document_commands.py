"""
Document Commands - Write operations on local issue files.
"""

from pathlib import Path
from typing import Optional

from ...core.domain.document import MarkdownDocument
from ...core.ports.document_parser import DocumentParserPort
from .base import Command


class WriteDocumentCommand(Command):
    """Serialize a document and write it to disk."""

    def __init__(
        self,
        parser: DocumentParserPort,
        path: Path,
        document: MarkdownDocument,
        dry_run: bool = False,
    ):
        super().__init__(dry_run)
        self.parser = parser
        self.path = Path(path)
        self.document = document

    @property
    def name(self) -> str:
        return f"write {self.path.name}"

    def validate(self) -> Optional[str]:
        if not self.path.name:
            return "Target path is required"
        if self.path.exists() and self.path.is_dir():
            return f"{self.path} is a directory"
        return None

    def _preview(self) -> Path:
        return self.path

    def _execute(self) -> Path:
        self.parser.write(self.path, self.document)
        self.logger.debug(f"Wrote {self.path}")
        return self.path


class RemoveDocumentCommand(Command):
    """Remove a superseded issue file (after a rename)."""

    def __init__(
        self,
        path: Path,
        dry_run: bool = False,
    ):
        super().__init__(dry_run)
        self.path = Path(path)

    @property
    def name(self) -> str:
        return f"remove {self.path.name}"

    def validate(self) -> Optional[str]:
        if not self.path.is_file():
            return f"{self.path} is not a file"
        return None

    def _preview(self) -> Path:
        return self.path

    def _execute(self) -> Path:
        self.path.unlink()
        self.logger.debug(f"Removed {self.path}")
        return self.path
