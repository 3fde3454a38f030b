"""
Adapters - Concrete implementations of ports.

This module contains implementations for:
- Issue Trackers: Redmine
- Parsers: Markdown with YAML frontmatter
- Formatters: Markdown comment block
- Config: YAML file plus environment variables
- Naming: Slugs and filenames
"""

from .redmine import RedmineAdapter
from .parsers import MarkdownDocumentParser
from .formatters import MarkdownCommentFormatter
from .config import YamlConfigProvider
from .naming import FilenameGenerator

__all__ = [
    "RedmineAdapter",
    "MarkdownDocumentParser",
    "MarkdownCommentFormatter",
    "YamlConfigProvider",
    "FilenameGenerator",
]
