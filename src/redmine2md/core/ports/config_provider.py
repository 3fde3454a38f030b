"""
Config Provider Port - Abstract interface for configuration loading.

Also defines the configuration dataclasses shared by every layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

from ..domain.enums import IncludeOption, TrackBy


DEFAULT_START_ANCHOR = "<!-- redmine:comments:start -->"
DEFAULT_END_ANCHOR = "<!-- redmine:comments:end -->"


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass
class RetryConfig:
    """Retry policy for HTTP requests."""

    retries: int = 3
    base_ms: int = 300


@dataclass
class SlugConfig:
    """Slug generation options."""

    max_length: int = 80
    dedupe: bool = True
    lowercase: bool = True


@dataclass
class FilenameConfig:
    """How issue files are named."""

    pattern: str = "{issueId}-{slug}.md"
    slug: SlugConfig = field(default_factory=SlugConfig)
    rename_on_title_change: bool = False


@dataclass
class AnchorsConfig:
    """Literal marker lines around the comment block."""

    start: str = DEFAULT_START_ANCHOR
    end: str = DEFAULT_END_ANCHOR


@dataclass
class CommentsConfig:
    """Comment block rendering options."""

    anchors: AnchorsConfig = field(default_factory=AnchorsConfig)
    track_by: TrackBy = TrackBy.JOURNAL_ID


@dataclass
class DefaultsConfig:
    """Defaults for fetching issues."""

    include: list[IncludeOption] = field(
        default_factory=lambda: [IncludeOption.JOURNALS]
    )
    status: str = "*"
    page_size: int = 100
    concurrency: int = 4
    retry: RetryConfig = field(default_factory=RetryConfig)


@dataclass
class ProjectConfig:
    """The Redmine project being mirrored."""

    id: int = 0
    identifier: str = ""


@dataclass
class AppConfig:
    """Complete application configuration."""

    base_url: str = ""
    api_access_token: str = ""
    project: ProjectConfig = field(default_factory=ProjectConfig)
    output_dir: str = ".redmine/issues"
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    filename: FilenameConfig = field(default_factory=FilenameConfig)
    comments: CommentsConfig = field(default_factory=CommentsConfig)

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        parsed = urlparse(self.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"baseUrl must be an http(s) URL, got '{self.base_url}'")
        if not self.api_access_token:
            errors.append("apiAccessToken must not be empty")
        if not isinstance(self.project.id, int) or self.project.id <= 0:
            errors.append("project.id must be a positive integer")
        if not self.project.identifier:
            errors.append("project.identifier must not be empty")
        if not self.output_dir:
            errors.append("outputDir must not be empty")

        defaults = self.defaults
        if not 1 <= defaults.page_size <= 100:
            errors.append("defaults.pageSize must be between 1 and 100")
        if not 1 <= defaults.concurrency <= 10:
            errors.append("defaults.concurrency must be between 1 and 10")
        if defaults.retry.retries < 0:
            errors.append("defaults.retry.retries must be >= 0")
        if defaults.retry.base_ms < 100:
            errors.append("defaults.retry.baseMs must be >= 100")

        if "{issueId}" not in self.filename.pattern and "{slug}" not in self.filename.pattern:
            errors.append("filename.pattern must contain {issueId} or {slug}")
        if self.filename.slug.max_length < 10:
            errors.append("filename.slug.maxLength must be >= 10")

        anchors = self.comments.anchors
        if not anchors.start or not anchors.end:
            errors.append("comments.anchors.start and comments.anchors.end must not be empty")
        elif anchors.start == anchors.end:
            errors.append("comments.anchors.start and comments.anchors.end must differ")

        return errors


class ConfigProviderPort(ABC):
    """Abstract interface for configuration sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """Load and validate the configuration; raises ConfigError."""
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """Return validation errors without raising."""
        ...
