"""
Comment Reconciler - Append newly seen journals to an existing comment block.

The block is an append-only log: text already in the file is never
rewritten, removed or reordered.
"""

from typing import Optional, Sequence

from ...core.domain.entities import Journal
from ...core.domain.enums import TrackBy
from ...core.ports.document_formatter import DocumentFormatterPort


class CommentReconciler:
    """Selects, renders and merges journals into the local comment block."""

    MERGE_SEPARATOR = "\n\n---\n\n"

    def __init__(self, formatter: DocumentFormatterPort):
        self.formatter = formatter

    @staticmethod
    def select_new(
        journals: Sequence[Journal],
        last_id: Optional[int],
    ) -> list[Journal]:
        """
        Journals not yet synced.

        Args:
            journals: Journals returned by the tracker
            last_id: Highest journal id already written, if any

        Returns:
            Journals with an id above ``last_id`` (all of them when there is
            no marker), in input order
        """
        if last_id is None:
            return list(journals)
        return [journal for journal in journals if journal.id > last_id]

    def render(
        self,
        journals: Sequence[Journal],
        track_by: TrackBy = TrackBy.JOURNAL_ID,
    ) -> str:
        return self.formatter.format_journals(journals, track_by)

    def merge(self, existing: Optional[str], rendered: str) -> Optional[str]:
        if not rendered:
            return existing
        if existing:
            return f"{existing}{self.MERGE_SEPARATOR}{rendered}"
        return rendered

    def reconcile(
        self,
        journals: Sequence[Journal],
        last_id: Optional[int],
        existing: Optional[str],
        track_by: TrackBy = TrackBy.JOURNAL_ID,
    ) -> Optional[str]:
        """Select, render and merge in one step."""
        new_journals = self.select_new(journals, last_id)
        if not new_journals:
            return existing
        return self.merge(existing, self.render(new_journals, track_by))
