"""
Slug Generator - Map (issue id, title) to a stable filename.

Generation is deterministic for a given title, config and set of slugs
already taken. The taken set belongs to one sync run and is passed in
explicitly; nothing here keeps state between runs.
"""

import re
import unicodedata
from typing import Optional

from ...core.ports.config_provider import FilenameConfig, SlugConfig


FALLBACK_SLUG = "issue"


def generate_slug(
    title: str,
    config: Optional[SlugConfig] = None,
    existing: Optional[set[str]] = None,
) -> str:
    """
    Convert a title into a filesystem-safe slug.

    Args:
        title: Issue subject
        config: Slug options (length, case, dedupe)
        existing: Slugs already used in this run; updated in place when
            deduplication is enabled

    Returns:
        The slug, suffixed with ``-1``, ``-2``... if it was already taken
    """
    config = config or SlugConfig()

    text = unicodedata.normalize("NFKD", title or "")
    text = text.encode("ascii", "ignore").decode("ascii")
    if config.lowercase:
        text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text).strip("-")

    slug = text[: config.max_length].rstrip("-") or FALLBACK_SLUG

    if not config.dedupe or existing is None:
        return slug

    final_slug = slug
    counter = 1
    while final_slug in existing:
        suffix = f"-{counter}"
        base = slug[: config.max_length - len(suffix)].rstrip("-")
        final_slug = f"{base}{suffix}"
        counter += 1

    existing.add(final_slug)
    return final_slug


def generate_filename(
    issue_id: int,
    title: str,
    config: Optional[FilenameConfig] = None,
    existing: Optional[set[str]] = None,
) -> str:
    """Fill the filename pattern with the issue id and title slug."""
    config = config or FilenameConfig()
    slug = generate_slug(title, config.slug, existing)
    return config.pattern.replace("{issueId}", str(issue_id)).replace("{slug}", slug)


class FilenameGenerator:
    """
    Filename generator bound to one sync run.

    Each instance owns a fresh set of taken slugs, so two runs never
    influence each other's names.
    """

    def __init__(self, config: Optional[FilenameConfig] = None):
        self.config = config or FilenameConfig()
        self._taken: set[str] = set()

    def filename(self, issue_id: int, title: str) -> str:
        return generate_filename(issue_id, title, self.config, self._taken)

    @property
    def taken(self) -> frozenset[str]:
        return frozenset(self._taken)
