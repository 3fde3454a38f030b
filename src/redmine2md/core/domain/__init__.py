"""
Domain - Entities, documents, enums and events.
"""

from .entities import (
    Issue,
    IssueAttachment,
    IssueRelation,
    Journal,
    JournalDetail,
    Project,
    parse_timestamp,
)
from .document import Frontmatter, MarkdownDocument, coerce_int
from .enums import IncludeOption, SyncAction, TrackBy
from .events import (
    DomainEvent,
    EventBus,
    IssueSynced,
    IssuesFetched,
    SyncCompleted,
    SyncStarted,
)

__all__ = [
    "Issue",
    "IssueAttachment",
    "IssueRelation",
    "Journal",
    "JournalDetail",
    "Project",
    "parse_timestamp",
    "Frontmatter",
    "MarkdownDocument",
    "coerce_int",
    "IncludeOption",
    "SyncAction",
    "TrackBy",
    "DomainEvent",
    "EventBus",
    "IssueSynced",
    "IssuesFetched",
    "SyncCompleted",
    "SyncStarted",
]
