"""
Local Document - The on-disk representation of a synced issue.

A document is the triple (frontmatter, content, comments). Frontmatter is
a closed record of the fields the sync engine writes, plus a residual
mapping so unknown keys survive a parse/serialize cycle.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


def coerce_int(value: Any) -> Optional[int]:
    """Read an int from an int or a numeric string; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return None
    return None


def _as_timestamp_text(value: Any) -> Optional[str]:
    # Hand-edited files may carry unquoted timestamps that YAML decodes
    # into datetime objects.
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


@dataclass
class Frontmatter:
    """
    Frontmatter written at the top of every synced issue file.

    Field order here is the emission order on serialization. ``None``
    fields are omitted from the file.
    """

    id: Optional[int] = None
    subject: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    author: Optional[str] = None
    assigned_to: Optional[str] = None
    created_on: Optional[str] = None
    updated_on: Optional[str] = None
    project: Optional[str] = None
    tracker: Optional[str] = None
    last_journal_id: Optional[int] = None
    relations: Optional[list[dict[str, Any]]] = None
    attachments: Optional[list[dict[str, Any]]] = None
    extra: dict[str, Any] = field(default_factory=dict)

    # Maps attribute names to frontmatter keys where they differ.
    KEY_ALIASES = {"last_journal_id": "lastJournalId"}

    _FIELDS = (
        "id",
        "subject",
        "status",
        "priority",
        "author",
        "assigned_to",
        "created_on",
        "updated_on",
        "project",
        "tracker",
        "last_journal_id",
        "relations",
        "attachments",
    )

    @classmethod
    def from_mapping(cls, data: Optional[dict[str, Any]]) -> "Frontmatter":
        """
        Build a Frontmatter from a decoded YAML mapping.

        Args:
            data: Mapping as returned by the YAML loader (may be None)

        Returns:
            Frontmatter with known keys lifted into fields and the rest
            kept in ``extra``
        """
        if not data:
            return cls()

        remaining = dict(data)
        values: dict[str, Any] = {}

        for attr in cls._FIELDS:
            key = cls.KEY_ALIASES.get(attr, attr)
            if key in remaining:
                values[attr] = remaining.pop(key)

        if "id" in values:
            values["id"] = coerce_int(values["id"])
        if "last_journal_id" in values:
            values["last_journal_id"] = coerce_int(values["last_journal_id"])
        for attr in ("created_on", "updated_on"):
            if attr in values:
                values[attr] = _as_timestamp_text(values[attr])

        return cls(**values, extra=remaining)

    def to_mapping(self) -> dict[str, Any]:
        """Mapping in emission order, without absent fields."""
        data: dict[str, Any] = {}
        for attr in self._FIELDS:
            value = getattr(self, attr)
            if value is None:
                continue
            data[self.KEY_ALIASES.get(attr, attr)] = value
        for key, value in self.extra.items():
            if key not in data:
                data[key] = value
        return data

    @property
    def is_empty(self) -> bool:
        return not self.to_mapping()


@dataclass
class MarkdownDocument:
    """A parsed issue file: frontmatter, free-form content, comment block."""

    frontmatter: Frontmatter = field(default_factory=Frontmatter)
    content: str = ""
    comments: Optional[str] = None

    @classmethod
    def empty(cls) -> "MarkdownDocument":
        """The shape returned for empty input and for files that don't exist."""
        return cls()

    @property
    def issue_id(self) -> Optional[int]:
        return self.frontmatter.id

    @property
    def last_journal_id(self) -> Optional[int]:
        return self.frontmatter.last_journal_id
