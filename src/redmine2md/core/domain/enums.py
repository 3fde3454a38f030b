"""
Domain Enums - Closed sets of values used across the sync engine.
"""

from enum import Enum


class SyncAction(Enum):
    """What a sync did (or would do) to a local document."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


class TrackBy(Enum):
    """Ordering used when rendering journals into comments."""

    JOURNAL_ID = "journalId"
    CREATED_ON = "createdOn"

    @classmethod
    def from_string(cls, value: str) -> "TrackBy":
        """Parse a config value, accepting either the value or the member name."""
        normalized = value.strip()
        for member in cls:
            if normalized == member.value or normalized.upper() == member.name:
                return member
        raise ValueError(
            f"Unknown trackBy '{value}' (expected one of: "
            f"{', '.join(m.value for m in cls)})"
        )


class IncludeOption(Enum):
    """Optional issue sub-resources that can be fetched with an issue."""

    JOURNALS = "journals"
    RELATIONS = "relations"
    ATTACHMENTS = "attachments"

    @classmethod
    def from_string(cls, value: str) -> "IncludeOption":
        normalized = value.strip().lower()
        for member in cls:
            if normalized == member.value:
                return member
        raise ValueError(
            f"Unknown include '{value}' (expected one of: "
            f"{', '.join(m.value for m in cls)})"
        )
