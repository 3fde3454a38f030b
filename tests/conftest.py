"""Shared fixtures."""

import pytest

from redmine2md.core.domain.entities import Issue, Journal, JournalDetail
from redmine2md.core.ports.config_provider import AppConfig, ProjectConfig


@pytest.fixture
def make_journal():
    def factory(journal_id, notes="A note", user="Alice", created_on="2024-01-02T10:30:00Z", details=()):
        return Journal(
            id=journal_id,
            user=user,
            created_on=created_on,
            notes=notes,
            details=tuple(details),
        )
    return factory


@pytest.fixture
def make_issue():
    def factory(issue_id=42, subject="Fix bug", updated_on="2024-01-02T00:00:00Z", **kwargs):
        values = dict(
            id=issue_id,
            subject=subject,
            status="New",
            priority="Normal",
            author="Alice",
            created_on="2024-01-01T00:00:00Z",
            updated_on=updated_on,
            project="Demo",
            tracker="Bug",
            description="It is broken.",
        )
        values.update(kwargs)
        return Issue(**values)
    return factory


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        base_url="https://redmine.example.com",
        api_access_token="secret",
        project=ProjectConfig(id=1, identifier="demo"),
        output_dir=str(tmp_path / "issues"),
    )


@pytest.fixture
def detail():
    return JournalDetail(name="status_id", old_value="1", new_value="2")
