"""Tests for the Redmine adapter."""

import pytest
from unittest.mock import Mock

from redmine2md.adapters.redmine import RedmineAdapter
from redmine2md.core.domain.enums import IncludeOption
from redmine2md.core.ports.issue_tracker import IssueFilters, IssueTrackerError


def issue_payload(issue_id, subject="Fix bug", **extra):
    payload = {
        "id": issue_id,
        "subject": subject,
        "description": "It is broken.",
        "status": {"id": 1, "name": "New"},
        "priority": {"id": 2, "name": "Normal"},
        "author": {"id": 3, "name": "Alice"},
        "project": {"id": 1, "name": "Demo"},
        "tracker": {"id": 1, "name": "Bug"},
        "created_on": "2024-01-01T00:00:00Z",
        "updated_on": "2024-01-02T00:00:00Z",
    }
    payload.update(extra)
    return payload


class TestRedmineAdapter:
    """Tests for RedmineAdapter."""

    @pytest.fixture
    def client(self):
        return Mock()

    @pytest.fixture
    def adapter(self, config, client):
        return RedmineAdapter(config, client=client)

    def test_get_issue_maps_payload(self, adapter, client):
        client.get.return_value = {"issue": issue_payload(
            42,
            assigned_to={"id": 4, "name": "Bob"},
            journals=[{
                "id": 7,
                "user": {"id": 3, "name": "Alice"},
                "notes": "Looking",
                "created_on": "2024-01-02T10:00:00Z",
                "details": [{"property": "attr", "name": "status_id", "old_value": "1", "new_value": 2}],
            }],
            relations=[{"id": 1, "issue_id": 42, "issue_to_id": 43, "relation_type": "relates"}],
            attachments=[{
                "id": 9, "filename": "log.txt", "filesize": 10, "content_type": "text/plain",
                "author": {"id": 3, "name": "Alice"}, "created_on": "2024-01-02T00:00:00Z",
                "content_url": "https://redmine.example.com/attachments/download/9/log.txt",
            }],
        )}

        issue = adapter.get_issue(42, [IncludeOption.JOURNALS, IncludeOption.RELATIONS])

        client.get.assert_called_once_with(
            "/issues/42.json", params={"include": "journals,relations"}
        )
        assert issue.id == 42
        assert issue.status == "New"
        assert issue.assigned_to == "Bob"
        assert issue.journals[0].details[0].new_value == "2"
        assert issue.relations[0].issue_to_id == 43
        assert issue.relations[0].delay is None
        assert issue.attachments[0].author == "Alice"
        assert issue.last_journal_id == 7

    def test_missing_optional_fields(self, adapter, client):
        payload = issue_payload(1)
        del payload["description"]
        client.get.return_value = {"issue": payload}

        issue = adapter.get_issue(1)

        assert issue.description == ""
        assert issue.assigned_to is None
        assert issue.journals == []

    def test_malformed_payload_raises_tracker_error(self, adapter, client):
        client.get.return_value = {"issue": {"subject": "no id"}}

        with pytest.raises(IssueTrackerError):
            adapter.get_issue(1)

    @pytest.mark.parametrize("reply", ["<html>Login</html>", ["not", "a", "mapping"], {"total_count": 3}])
    def test_unexpected_listing_reply_raises_tracker_error(self, adapter, client, reply):
        client.get.return_value = reply

        with pytest.raises(IssueTrackerError):
            adapter.get_issues_page(5, IssueFilters())

    def test_unexpected_issue_reply_raises_tracker_error(self, adapter, client):
        client.get.return_value = "<html>Login</html>"

        with pytest.raises(IssueTrackerError):
            adapter.get_issue(1)

    def test_unexpected_project_reply_raises_tracker_error(self, adapter, client):
        client.get.return_value = {"project": "demo"}

        with pytest.raises(IssueTrackerError):
            adapter.get_project("demo")

    def test_get_issues_page_params(self, adapter, client):
        client.get.return_value = {"issues": [issue_payload(1)], "total_count": 1, "offset": 0, "limit": 25}

        page = adapter.get_issues_page(
            5, IssueFilters(status="open", updated_since="2024-01-01"), offset=0, limit=25
        )

        client.get.assert_called_once_with("/issues.json", params={
            "project_id": 5,
            "status_id": "open",
            "sort": "id",
            "offset": 0,
            "limit": 25,
            "updated_on": ">=2024-01-01",
        })
        assert page.total_count == 1
        assert [i.id for i in page.issues] == [1]

    def test_all_statuses_are_requested_explicitly(self, adapter, client):
        client.get.return_value = {"issues": [], "total_count": 0}

        adapter.get_issues_page(5, IssueFilters())

        assert client.get.call_args.kwargs["params"]["status_id"] == "*"

    def test_get_issues_concurrently(self, adapter, client):
        ids = list(range(1, 6))

        def fake_get(endpoint, params):
            offset, limit = params["offset"], params["limit"]
            chunk = ids[offset:offset + limit]
            return {"issues": [issue_payload(i) for i in chunk], "total_count": len(ids)}

        client.get.side_effect = fake_get
        progress = Mock()

        issues = adapter.get_issues_concurrently(5, IssueFilters(), page_size=2, on_progress=progress)

        assert [i.id for i in issues] == ids
        # one count request plus three pages
        assert client.get.call_count == 4
        assert progress.call_args_list[-1].args == (5, 5)

    def test_get_issues_concurrently_dedupes(self, adapter, client):
        pages = {
            0: [issue_payload(1), issue_payload(2)],
            2: [issue_payload(2), issue_payload(3)],
        }

        def fake_get(endpoint, params):
            if params["limit"] == 1:
                return {"issues": [issue_payload(1)], "total_count": 4}
            return {"issues": pages[params["offset"]], "total_count": 4}

        client.get.side_effect = fake_get

        issues = adapter.get_issues_concurrently(5, IssueFilters(), page_size=2)

        assert [i.id for i in issues] == [1, 2, 3]

    def test_get_issues_concurrently_empty(self, adapter, client):
        client.get.return_value = {"issues": [], "total_count": 0}

        assert adapter.get_issues_concurrently(5, IssueFilters()) == []
        assert client.get.call_count == 1

    def test_get_all_issues_sequential(self, adapter, client):
        client.get.side_effect = [
            {"issues": [issue_payload(1), issue_payload(2)], "total_count": 3},
            {"issues": [issue_payload(3)], "total_count": 3},
        ]

        issues = adapter.get_all_issues(5, IssueFilters(), page_size=2)

        assert [i.id for i in issues] == [1, 2, 3]

    def test_check_connectivity_and_project(self, adapter, client):
        client.get.side_effect = [
            {"projects": [], "total_count": 0},
            {"project": {"id": 1, "identifier": "demo", "name": "Demo"}},
        ]

        assert adapter.check_connectivity()
        project = adapter.get_project("demo")

        assert project.name == "Demo"
        client.get.assert_any_call("/projects.json", params={"limit": 1})
        client.get.assert_any_call("/projects/demo.json")

    def test_close_releases_client(self, adapter, client):
        adapter.close()

        client.close.assert_called_once_with()
