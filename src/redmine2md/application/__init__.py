"""
Application Layer - Use cases, commands, and orchestration.

This layer contains:
- commands/: Write operations on local files
- queries/: Read-only queries (connectivity)
- sync/: Single-issue engine and project orchestrator
"""

from .commands import Command, CommandResult, RemoveDocumentCommand, WriteDocumentCommand
from .queries import ConnectivityResult, check_connectivity
from .sync import (
    CommentReconciler,
    IssueSyncEngine,
    IssueSyncResult,
    ProjectSyncOrchestrator,
    ProjectSyncResult,
)

__all__ = [
    "Command",
    "CommandResult",
    "RemoveDocumentCommand",
    "WriteDocumentCommand",
    "ConnectivityResult",
    "check_connectivity",
    "CommentReconciler",
    "IssueSyncEngine",
    "IssueSyncResult",
    "ProjectSyncOrchestrator",
    "ProjectSyncResult",
]
