"""Tests for the connectivity query."""

import pytest
from unittest.mock import Mock

from redmine2md.application.queries import check_connectivity
from redmine2md.core.domain.entities import Project
from redmine2md.core.ports.issue_tracker import (
    AuthenticationError,
    NotFoundError,
    PermissionError,
    TransientError,
)


class TestCheckConnectivity:
    """Tests for check_connectivity."""

    @pytest.fixture
    def tracker(self):
        tracker = Mock()
        tracker.check_connectivity.return_value = True
        tracker.get_project.return_value = Project(id=1, identifier="demo", name="Demo")
        return tracker

    def test_success(self, tracker, config):
        result = check_connectivity(tracker, config)

        assert result.success
        assert result.message == 'Successfully connected to Redmine and found project "Demo"'
        assert result.details["project"] == {"id": 1, "identifier": "demo", "name": "Demo"}
        tracker.get_project.assert_called_once_with("demo")

    @pytest.mark.parametrize("error,expected", [
        (AuthenticationError("x", status=401), "Authentication failed - please check your API access token"),
        (PermissionError("x", status=403), 'Access forbidden - insufficient permissions for Project "demo"'),
        (NotFoundError("x", status=404), 'Project "demo" not found or inaccessible'),
        (TransientError("Connection failed: refused"), "Redmine API error: Connection failed: refused"),
    ])
    def test_errors_are_described(self, tracker, config, error, expected):
        tracker.get_project.side_effect = error

        result = check_connectivity(tracker, config)

        assert not result.success
        assert result.message == expected
        assert result.details == {"baseUrl": "https://redmine.example.com"}

    def test_unreachable_server(self, tracker, config):
        tracker.check_connectivity.return_value = False

        result = check_connectivity(tracker, config)

        assert not result.success
        tracker.get_project.assert_not_called()
