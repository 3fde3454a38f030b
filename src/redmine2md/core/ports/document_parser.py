"""
Document Parser Port - Abstract interface for reading and writing issue files.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from ..domain.document import MarkdownDocument


class ParserError(Exception):
    """Raised when a document cannot be decoded."""

    def __init__(self, message: str, source: Union[str, Path, None] = None):
        super().__init__(message)
        self.source = source


class DocumentParserPort(ABC):
    """
    Abstract interface for the local document codec.

    ``parse`` and ``serialize`` are pure. ``read`` and ``write`` add file
    access on top; reading a file that doesn't exist yields the empty
    document rather than an error.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the parser name."""
        ...

    @abstractmethod
    def parse(self, raw: Union[str, bytes]) -> MarkdownDocument:
        """Decode raw file contents into a document."""
        ...

    @abstractmethod
    def serialize(self, document: MarkdownDocument) -> str:
        """Encode a document into file contents."""
        ...

    @abstractmethod
    def read(self, path: Path) -> MarkdownDocument:
        """Read and parse a file; missing files read as empty documents."""
        ...

    @abstractmethod
    def write(self, path: Path, document: MarkdownDocument) -> None:
        """Serialize and write a file, creating parent directories."""
        ...
