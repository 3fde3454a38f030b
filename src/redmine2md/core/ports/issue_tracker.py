"""
Issue Tracker Port - Abstract interface for the remote issue source.

The sync engine only ever reads from the tracker; there are no write
operations on this port.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ..domain.entities import Issue, Project
from ..domain.enums import IncludeOption


# -------------------------------------------------------------------------
# Errors
# -------------------------------------------------------------------------


class IssueTrackerError(Exception):
    """Base error for issue tracker operations."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        endpoint: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.endpoint = endpoint
        self.cause = cause


class AuthenticationError(IssueTrackerError):
    """Credentials were rejected (HTTP 401)."""


class PermissionError(IssueTrackerError):
    """Authenticated but not allowed (HTTP 403)."""


class NotFoundError(IssueTrackerError):
    """Resource does not exist or is hidden (HTTP 404)."""


class RateLimitError(IssueTrackerError):
    """Server asked us to slow down (HTTP 429)."""


class TransientError(IssueTrackerError):
    """Server-side or network failure that may succeed on retry."""


def describe_error(error: IssueTrackerError, subject: str = "Resource") -> str:
    """
    Turn a tracker error into a user-facing message.

    Args:
        error: The error raised by the tracker
        subject: What was being accessed, e.g. ``Issue 42``

    Returns:
        Message with special wording for 401/403/404
    """
    if error.status == 401:
        return "Authentication failed - please check your API access token"
    if error.status == 403:
        return f"Access forbidden - insufficient permissions for {subject}"
    if error.status == 404:
        return f"{subject} not found or inaccessible"
    return f"Redmine API error: {error.message}"


# -------------------------------------------------------------------------
# Data Transfer Objects
# -------------------------------------------------------------------------


@dataclass
class IssueFilters:
    """Filters applied when listing the issues of a project."""

    status: str = "*"
    updated_since: Optional[str] = None
    include: Sequence[IncludeOption] = field(default_factory=tuple)


@dataclass
class IssuePage:
    """One page of an issue listing."""

    issues: list[Issue]
    total_count: int
    offset: int = 0
    limit: int = 0


ProgressCallback = Callable[[int, int], None]


# -------------------------------------------------------------------------
# Port
# -------------------------------------------------------------------------


class IssueTrackerPort(ABC):
    """
    Abstract interface for issue trackers.

    Implementations are expected to retry transient failures themselves;
    callers treat any raised IssueTrackerError as terminal.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tracker name."""
        ...

    @abstractmethod
    def check_connectivity(self) -> bool:
        """Probe the API; raises IssueTrackerError when unreachable."""
        ...

    @abstractmethod
    def get_project(self, identifier: str) -> Project:
        """Fetch a project by identifier or numeric id."""
        ...

    @abstractmethod
    def get_issue(
        self,
        issue_id: int,
        include: Sequence[IncludeOption] = (),
    ) -> Issue:
        """Fetch one issue with the requested sub-resources."""
        ...

    @abstractmethod
    def get_issues_page(
        self,
        project_id: int,
        filters: IssueFilters,
        offset: int = 0,
        limit: int = 100,
    ) -> IssuePage:
        """Fetch one page of a project's issues."""
        ...

    @abstractmethod
    def get_issues_concurrently(
        self,
        project_id: int,
        filters: IssueFilters,
        page_size: int = 100,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[Issue]:
        """Fetch every matching issue, pages requested in parallel."""
        ...
