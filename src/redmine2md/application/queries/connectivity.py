"""
Connectivity Query - Verify credentials and project access.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ...core.ports.config_provider import AppConfig
from ...core.ports.issue_tracker import IssueTrackerError, IssueTrackerPort, describe_error


logger = logging.getLogger("Connectivity")


@dataclass
class ConnectivityResult:
    """Outcome of a connectivity check."""

    success: bool
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "details": self.details}


def check_connectivity(tracker: IssueTrackerPort, config: AppConfig) -> ConnectivityResult:
    """
    Probe the tracker, then look up the configured project.

    Args:
        tracker: Issue tracker port
        config: Application configuration

    Returns:
        ConnectivityResult; failures are reported, not raised
    """
    details: dict[str, Any] = {"baseUrl": config.base_url}
    identifier = config.project.identifier

    try:
        if not tracker.check_connectivity():
            return ConnectivityResult(False, "Failed to connect to Redmine API", details)

        project = tracker.get_project(identifier)
    except IssueTrackerError as e:
        message = describe_error(e, f'Project "{identifier}"')
        logger.error(f"Connectivity check failed: {message}")
        return ConnectivityResult(False, message, details)

    details["project"] = {
        "id": project.id,
        "identifier": project.identifier,
        "name": project.name,
    }
    logger.info(f"Connected to {config.base_url}, project {project.identifier}")
    return ConnectivityResult(
        True,
        f'Successfully connected to Redmine and found project "{project.name}"',
        details,
    )
