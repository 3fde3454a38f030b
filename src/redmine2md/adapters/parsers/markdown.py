"""
Markdown Parser - Read and write issue files with YAML frontmatter.

Implements the DocumentParserPort interface.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ...core.domain.document import Frontmatter, MarkdownDocument
from ...core.ports.config_provider import AnchorsConfig
from ...core.ports.document_parser import DocumentParserPort, ParserError


class MarkdownDocumentParser(DocumentParserPort):
    """
    Codec for synced issue files.

    File layout::

        ---
        id: 42
        subject: Fix bug
        ...
        ---

        <issue description>

        <!-- redmine:comments:start -->
        <rendered journals>
        <!-- redmine:comments:end -->

    The blank line after the closing frontmatter marker, the blank line
    before the start anchor and the newline after the end anchor belong
    to the framing, so ``parse(serialize(doc)) == doc`` for any document
    the sync engine produces.
    """

    FRONTMATTER_MARKER = "---"
    FRONTMATTER_PATTERN = re.compile(
        r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)",
        re.DOTALL | re.MULTILINE,
    )
    COMMENTS_SEPARATOR = "\n\n"

    def __init__(self, anchors: Optional[AnchorsConfig] = None):
        """
        Initialize parser.

        Args:
            anchors: Comment block anchors (defaults to the redmine anchors)
        """
        self.anchors = anchors or AnchorsConfig()
        self.logger = logging.getLogger("MarkdownDocumentParser")

    # -------------------------------------------------------------------------
    # DocumentParserPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "Markdown"

    @property
    def supported_extensions(self) -> list[str]:
        return [".md", ".markdown"]

    def can_parse(self, source: Union[str, Path]) -> bool:
        if isinstance(source, Path):
            return source.suffix.lower() in self.supported_extensions
        return bool(self.FRONTMATTER_PATTERN.match(source))

    def parse(self, raw: Union[str, bytes]) -> MarkdownDocument:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        if text.startswith("\ufeff"):
            text = text[1:]

        if not text.strip():
            return MarkdownDocument.empty()

        data, body = self._split_frontmatter(text)
        comments, content = self._split_comments(body)

        return MarkdownDocument(
            frontmatter=Frontmatter.from_mapping(data),
            content=content,
            comments=comments,
        )

    def serialize(self, document: MarkdownDocument) -> str:
        output = ""

        mapping = document.frontmatter.to_mapping()
        if mapping:
            output += f"{self.FRONTMATTER_MARKER}\n"
            output += self._dump_yaml(mapping)
            output += f"{self.FRONTMATTER_MARKER}\n\n"

        output += document.content

        if document.comments:
            output += self.COMMENTS_SEPARATOR
            output += f"{self.anchors.start}\n{document.comments}\n{self.anchors.end}\n"

        return output

    def read(self, path: Path) -> MarkdownDocument:
        try:
            with open(path, encoding="utf-8", newline="") as handle:
                raw = handle.read()
        except FileNotFoundError:
            self.logger.debug(f"No existing file at {path}")
            return MarkdownDocument.empty()

        try:
            return self.parse(raw)
        except ParserError as e:
            raise ParserError(f"{path}: {e}", source=path) from e

    def write(self, path: Path, document: MarkdownDocument) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(self.serialize(document))
            os.replace(tmp_path, path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise

        self.logger.debug(f"Wrote {path}")

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _split_frontmatter(self, text: str) -> tuple[dict[str, Any], str]:
        """Split off the frontmatter block, returning (mapping, body)."""
        match = self.FRONTMATTER_PATTERN.match(text)
        if not match:
            return {}, text

        try:
            data = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise ParserError(f"Invalid YAML frontmatter: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParserError(
                f"Frontmatter must be a mapping, got {type(data).__name__}"
            )

        body = text[match.end():]
        if body.startswith("\r\n"):
            body = body[2:]
        elif body.startswith("\n"):
            body = body[1:]

        return data, body

    def _split_comments(self, body: str) -> tuple[Optional[str], str]:
        """Split the anchored comment block out of the body."""
        start_index = body.find(self.anchors.start)
        end_index = body.find(self.anchors.end)

        if start_index == -1 or end_index == -1:
            return None, body

        comments_start = start_index + len(self.anchors.start)
        if comments_start >= end_index:
            # Start anchor at or after the end anchor: malformed
            return None, body

        comments = body[comments_start:end_index].strip()

        before = body[:start_index]
        if before.endswith(self.COMMENTS_SEPARATOR):
            before = before[: -len(self.COMMENTS_SEPARATOR)]

        after = body[end_index + len(self.anchors.end):]
        if after.startswith("\r\n"):
            after = after[2:]
        elif after.startswith("\n"):
            after = after[1:]

        return comments, before + after

    @staticmethod
    def _dump_yaml(mapping: dict[str, Any]) -> str:
        return yaml.safe_dump(
            mapping,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
