"""
Domain Events - Things that happened during a sync run.

Events are immutable records of something that occurred.
They let the CLI report progress without the engine knowing about it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__


@dataclass(frozen=True)
class SyncStarted(DomainEvent):
    """Event: A project sync started."""

    project_id: Optional[int] = None
    dry_run: bool = False


@dataclass(frozen=True)
class IssuesFetched(DomainEvent):
    """Event: The issue listing for a project was retrieved."""

    project_id: Optional[int] = None
    total: int = 0


@dataclass(frozen=True)
class IssueSynced(DomainEvent):
    """Event: One issue finished syncing (successfully or not)."""

    issue_id: int = 0
    filename: str = ""
    action: str = "skipped"
    success: bool = True
    message: str = ""
    processed: int = 0
    total: int = 0


@dataclass(frozen=True)
class SyncCompleted(DomainEvent):
    """Event: A project sync completed."""

    project_id: Optional[int] = None
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list = field(default_factory=list)


class EventBus:
    """
    Simple event bus for publishing and subscribing to domain events.

    Subscribing to ``DomainEvent`` receives every event.
    """

    def __init__(self):
        self._handlers: dict[type, list[Callable[[DomainEvent], None]]] = {}
        self._history: list[DomainEvent] = []

    def subscribe(self, event_type: type, handler: Callable[[DomainEvent], None]) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        self._history.append(event)

        for handler in self._handlers.get(type(event), []):
            handler(event)

        # Catch-all handlers
        if type(event) is not DomainEvent:
            for handler in self._handlers.get(DomainEvent, []):
                handler(event)

    def get_history(self) -> list[DomainEvent]:
        """Get all published events."""
        return self._history.copy()

    def clear_history(self) -> None:
        """Clear event history."""
        self._history.clear()
