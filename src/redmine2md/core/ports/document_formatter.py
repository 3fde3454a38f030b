"""
Document Formatter Port - Abstract interface for rendering journals.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..domain.entities import Journal
from ..domain.enums import TrackBy


class DocumentFormatterPort(ABC):
    """Renders journal entries into the text stored in the comment block."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the formatter name."""
        ...

    @abstractmethod
    def format_journals(
        self,
        journals: Sequence[Journal],
        track_by: TrackBy = TrackBy.JOURNAL_ID,
    ) -> str:
        """
        Render journals as comment text.

        Returns an empty string when no journal produces visible output.
        """
        ...
