"""
Formatters - Render domain entities as Markdown.
"""

from .comments import MarkdownCommentFormatter

__all__ = ["MarkdownCommentFormatter"]
