"""
Commands - Individual write operations.

Commands represent write operations and can be:
- Validated before running
- Previewed in dry-run mode
- Logged
"""

from .base import Command, CommandResult
from .document_commands import RemoveDocumentCommand, WriteDocumentCommand

__all__ = [
    "Command",
    "CommandResult",
    "WriteDocumentCommand",
    "RemoveDocumentCommand",
]
