"""
Domain Entities - Read-only snapshots of Redmine objects.

These are populated by the Redmine adapter and consumed by the sync
engine. Nothing in this module performs I/O.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Redmine ISO-8601 timestamp into an aware datetime.

    Naive values are assumed to be UTC. Unparseable or empty values
    return None.
    """
    if not value:
        return None

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class JournalDetail:
    """A single field change recorded in a journal entry."""

    name: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None


@dataclass(frozen=True)
class Journal:
    """
    One entry in an issue's history.

    A journal may carry a note, field changes, or both. Ids are assigned
    monotonically by Redmine but are not contiguous within an issue.
    """

    id: int
    user: str
    created_on: str
    notes: Optional[str] = None
    details: tuple[JournalDetail, ...] = ()

    @property
    def has_note(self) -> bool:
        return bool(self.notes and self.notes.strip())

    @property
    def created_at(self) -> Optional[datetime]:
        return parse_timestamp(self.created_on)


@dataclass(frozen=True)
class IssueRelation:
    """Relation from this issue to another one."""

    relation_type: str
    issue_to_id: int
    delay: Optional[int] = None


@dataclass(frozen=True)
class IssueAttachment:
    """File attached to an issue."""

    id: int
    filename: str
    filesize: int
    content_type: str
    author: str
    created_on: str
    content_url: Optional[str] = None


@dataclass
class Issue:
    """
    Snapshot of a Redmine issue.

    Collections are only populated when the corresponding sub-resource
    was requested with ``include``.
    """

    id: int
    subject: str
    status: str
    priority: str
    author: str
    created_on: str
    updated_on: str
    project: str
    tracker: str
    description: str = ""
    assigned_to: Optional[str] = None
    journals: list[Journal] = field(default_factory=list)
    relations: list[IssueRelation] = field(default_factory=list)
    attachments: list[IssueAttachment] = field(default_factory=list)

    @property
    def updated_at(self) -> Optional[datetime]:
        return parse_timestamp(self.updated_on)

    @property
    def last_journal_id(self) -> Optional[int]:
        """Highest journal id on the issue, or None without journals."""
        if not self.journals:
            return None
        return max(journal.id for journal in self.journals)


@dataclass(frozen=True)
class Project:
    """Redmine project summary."""

    id: int
    identifier: str
    name: str
    created_on: Optional[str] = None
    updated_on: Optional[str] = None
