"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .issue_tracker import (
    AuthenticationError,
    IssueFilters,
    IssuePage,
    IssueTrackerError,
    IssueTrackerPort,
    NotFoundError,
    PermissionError,
    RateLimitError,
    TransientError,
    describe_error,
)
from .document_parser import DocumentParserPort, ParserError
from .document_formatter import DocumentFormatterPort
from .config_provider import (
    AnchorsConfig,
    AppConfig,
    CommentsConfig,
    ConfigError,
    ConfigProviderPort,
    DefaultsConfig,
    FilenameConfig,
    ProjectConfig,
    RetryConfig,
    SlugConfig,
)

__all__ = [
    "AuthenticationError",
    "IssueFilters",
    "IssuePage",
    "IssueTrackerError",
    "IssueTrackerPort",
    "NotFoundError",
    "PermissionError",
    "RateLimitError",
    "TransientError",
    "describe_error",
    "DocumentParserPort",
    "ParserError",
    "DocumentFormatterPort",
    "AnchorsConfig",
    "AppConfig",
    "CommentsConfig",
    "ConfigError",
    "ConfigProviderPort",
    "DefaultsConfig",
    "FilenameConfig",
    "ProjectConfig",
    "RetryConfig",
    "SlugConfig",
]
