"""
Sync Module - One-way synchronization from Redmine into Markdown files.
"""

from .issue_sync import IssueSyncEngine, IssueSyncResult, build_frontmatter
from .orchestrator import ProjectSyncOrchestrator, ProjectSyncResult, SyncError
from .reconciler import CommentReconciler

__all__ = [
    "IssueSyncEngine",
    "IssueSyncResult",
    "build_frontmatter",
    "ProjectSyncOrchestrator",
    "ProjectSyncResult",
    "SyncError",
    "CommentReconciler",
]
