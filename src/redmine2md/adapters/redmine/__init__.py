"""
Redmine Adapter - Implementation of IssueTrackerPort for Redmine.
"""

from .adapter import RedmineAdapter
from .client import RedmineApiClient

__all__ = [
    "RedmineAdapter",
    "RedmineApiClient",
]
