"""
Document Parsers - Read and write local issue documents.
"""

from .markdown import MarkdownDocumentParser

__all__ = ["MarkdownDocumentParser"]
