"""
Command Base - Shared shape of write operations.

A command validates its inputs, performs one side effect (or previews it
in dry-run mode) and reports a CommandResult instead of raising.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CommandResult:
    """Outcome of executing a command."""

    success: bool = True
    data: Any = None
    error: Optional[str] = None
    dry_run: bool = False
    skipped: bool = False
    skip_reason: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, dry_run: bool = False) -> "CommandResult":
        return cls(success=True, data=data, dry_run=dry_run)

    @classmethod
    def fail(cls, error: str) -> "CommandResult":
        return cls(success=False, error=error)

    @classmethod
    def skip(cls, reason: str) -> "CommandResult":
        return cls(success=True, skipped=True, skip_reason=reason)


class Command(ABC):
    """
    Base class for commands.

    Subclasses implement ``validate`` and ``_execute``; ``execute`` wires
    validation, dry-run handling and error capture around them.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable command name."""
        ...

    @abstractmethod
    def validate(self) -> Optional[str]:
        """
        Check the command inputs.

        Returns:
            Error message, or None if the command can run
        """
        ...

    @abstractmethod
    def _execute(self) -> Any:
        """Perform the side effect and return its data."""
        ...

    def _preview(self) -> Any:
        """Data reported in dry-run mode instead of executing."""
        return None

    def execute(self) -> CommandResult:
        """Validate, then execute (or preview in dry-run mode)."""
        error = self.validate()
        if error:
            return CommandResult.fail(error)

        if self.dry_run:
            self.logger.info(f"[DRY-RUN] Would {self.name}")
            return CommandResult.ok(self._preview(), dry_run=True)

        try:
            return CommandResult.ok(self._execute())
        except OSError as e:
            self.logger.error(f"Failed to {self.name}: {e}")
            return CommandResult.fail(f"Failed to {self.name}: {e}")
