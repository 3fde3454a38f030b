"""
Comment Formatter - Render Redmine journals as Markdown comments.

Implements the DocumentFormatterPort interface.
"""

from datetime import timezone
from typing import Sequence

from ...core.domain.entities import Journal, JournalDetail
from ...core.domain.enums import TrackBy
from ...core.ports.document_formatter import DocumentFormatterPort


class MarkdownCommentFormatter(DocumentFormatterPort):
    """
    Markdown renderer for journal entries.

    Each journal with a note becomes::

        ## Jane Doe - 2024-03-01 14:05

        The note text.

        **Changes:**
        - status: New → In Progress

        ---

    Journals without a note are silent updates and are not rendered.
    """

    NONE_PLACEHOLDER = "(none)"
    ENTRY_DELIMITER = "---"

    @property
    def name(self) -> str:
        return "Markdown"

    # -------------------------------------------------------------------------
    # DocumentFormatterPort Implementation
    # -------------------------------------------------------------------------

    def format_journals(
        self,
        journals: Sequence[Journal],
        track_by: TrackBy = TrackBy.JOURNAL_ID,
    ) -> str:
        """Render journals in ``track_by`` order; empty string if nothing to show."""
        if not journals:
            return ""

        output = ""
        for journal in self.sort_journals(journals, track_by):
            if not journal.has_note:
                continue
            output += self.format_journal(journal)

        return output.strip()

    # -------------------------------------------------------------------------
    # Building Blocks
    # -------------------------------------------------------------------------

    @staticmethod
    def sort_journals(journals: Sequence[Journal], track_by: TrackBy) -> list[Journal]:
        """Return a sorted copy; the input sequence is left untouched."""
        if track_by == TrackBy.CREATED_ON:
            # Unparseable timestamps sort by their raw text, after the rest
            return sorted(
                journals,
                key=lambda j: (j.created_at is None, j.created_at or j.created_on, j.id),
            )
        return sorted(journals, key=lambda j: j.id)

    def format_journal(self, journal: Journal) -> str:
        """Render one journal entry, including the trailing delimiter."""
        text = f"## {journal.user} - {self.format_timestamp(journal)}\n\n"
        text += f"{journal.notes}\n\n"

        if journal.details:
            text += "**Changes:**\n"
            for detail in journal.details:
                text += self.format_detail(detail) + "\n"
            text += "\n"

        text += f"{self.ENTRY_DELIMITER}\n\n"
        return text

    def format_detail(self, detail: JournalDetail) -> str:
        old_value = detail.old_value or self.NONE_PLACEHOLDER
        new_value = detail.new_value or self.NONE_PLACEHOLDER
        return f"- {detail.name}: {old_value} → {new_value}"

    @staticmethod
    def format_timestamp(journal: Journal) -> str:
        created_at = journal.created_at
        if created_at is None:
            return journal.created_on
        return created_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M")
