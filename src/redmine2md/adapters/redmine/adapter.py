"""
Redmine Adapter - Implements IssueTrackerPort for Redmine.

This is the main entry point for Redmine integration. It translates the
REST API's JSON into domain entities and implements concurrent
pagination on top of RedmineApiClient.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Sequence

from ...core.domain.entities import (
    Issue,
    IssueAttachment,
    IssueRelation,
    Journal,
    JournalDetail,
    Project,
)
from ...core.domain.enums import IncludeOption
from ...core.ports.config_provider import AppConfig
from ...core.ports.issue_tracker import (
    IssueFilters,
    IssuePage,
    IssueTrackerError,
    IssueTrackerPort,
    ProgressCallback,
)
from .client import RedmineApiClient


class RedmineAdapter(IssueTrackerPort):
    """
    Redmine implementation of the IssueTrackerPort.

    Read-only: the sync is one-way, so no write endpoints are used.
    """

    def __init__(
        self,
        config: AppConfig,
        client: Optional[RedmineApiClient] = None,
    ):
        """
        Initialize the Redmine adapter.

        Args:
            config: Application configuration
            client: Optional pre-built API client
        """
        self.config = config
        self.concurrency = config.defaults.concurrency
        self.logger = logging.getLogger("RedmineAdapter")

        self._client = client or RedmineApiClient(
            base_url=config.base_url,
            api_key=config.api_access_token,
            retry=config.defaults.retry,
            concurrency=config.defaults.concurrency,
        )

    # -------------------------------------------------------------------------
    # IssueTrackerPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "Redmine"

    def close(self) -> None:
        """Release the HTTP session."""
        self._client.close()

    def check_connectivity(self) -> bool:
        self._client.get("/projects.json", params={"limit": 1})
        return True

    def get_project(self, identifier: str) -> Project:
        endpoint = f"/projects/{identifier}.json"
        data = self._expect_mapping(self._client.get(endpoint), endpoint, "project")
        try:
            return self._parse_project(data["project"])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise IssueTrackerError(f"Malformed project payload: {e}", endpoint=endpoint, cause=e) from e

    def get_issue(
        self,
        issue_id: int,
        include: Sequence[IncludeOption] = (),
    ) -> Issue:
        params = {}
        if include:
            params["include"] = self._include_param(include)

        endpoint = f"/issues/{issue_id}.json"
        data = self._expect_mapping(self._client.get(endpoint, params=params), endpoint, "issue")
        return self._parse_issue(data["issue"])

    def get_issues_page(
        self,
        project_id: int,
        filters: IssueFilters,
        offset: int = 0,
        limit: int = 100,
    ) -> IssuePage:
        params: dict[str, Any] = {
            "project_id": project_id,
            "status_id": filters.status or "*",
            "sort": "id",
            "offset": offset,
            "limit": limit,
        }
        if filters.include:
            params["include"] = self._include_param(filters.include)
        if filters.updated_since:
            params["updated_on"] = f">={filters.updated_since}"

        data = self._expect_mapping(
            self._client.get("/issues.json", params=params), "/issues.json", "issues"
        )
        try:
            return IssuePage(
                issues=[self._parse_issue(item) for item in data["issues"] or []],
                total_count=int(data.get("total_count", 0)),
                offset=int(data.get("offset", offset)),
                limit=int(data.get("limit", limit)),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise IssueTrackerError(f"Malformed issue list payload: {e}", endpoint="/issues.json", cause=e) from e

    def get_all_issues(
        self,
        project_id: int,
        filters: IssueFilters,
        page_size: int = 100,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[Issue]:
        """Fetch every matching issue one page at a time."""
        issues: list[Issue] = []
        offset = 0

        while True:
            page = self.get_issues_page(project_id, filters, offset, page_size)
            issues.extend(page.issues)

            if on_progress:
                on_progress(len(issues), page.total_count)

            offset += page_size
            if not page.issues or len(issues) >= page.total_count:
                break

        return issues

    def get_issues_concurrently(
        self,
        project_id: int,
        filters: IssueFilters,
        page_size: int = 100,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[Issue]:
        first = self.get_issues_page(project_id, filters, offset=0, limit=1)
        total = first.total_count
        if total == 0:
            return []

        offsets = [index * page_size for index in range(math.ceil(total / page_size))]
        self.logger.info(
            f"Fetching {total} issues of project {project_id} in {len(offsets)} page(s)"
        )

        fetched = 0
        progress_lock = threading.Lock()

        def fetch(offset: int) -> list[Issue]:
            nonlocal fetched
            page = self.get_issues_page(project_id, filters, offset, page_size)
            if on_progress:
                with progress_lock:
                    fetched += len(page.issues)
                    on_progress(fetched, total)
            return page.issues

        # The client's semaphore bounds in-flight requests; the pool only
        # avoids spawning one thread per page.
        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            pages = list(pool.map(fetch, offsets))

        # Issues can shift between pages while listing; keep the first copy
        issues: list[Issue] = []
        seen: set[int] = set()
        for page_issues in pages:
            for issue in page_issues:
                if issue.id not in seen:
                    seen.add(issue.id)
                    issues.append(issue)

        return issues

    # -------------------------------------------------------------------------
    # JSON Mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _expect_mapping(data: Any, endpoint: str, key: str) -> dict[str, Any]:
        """Reject replies that are not a JSON object carrying ``key``, e.g. a proxy's HTML page."""
        if not isinstance(data, dict) or key not in data:
            raise IssueTrackerError(
                f"Unexpected response from {endpoint}: expected a JSON object with '{key}'",
                endpoint=endpoint,
            )
        return data

    @staticmethod
    def _include_param(include: Sequence[IncludeOption]) -> str:
        return ",".join(option.value for option in include)

    @staticmethod
    def _name(ref: Optional[dict[str, Any]]) -> Optional[str]:
        if not ref:
            return None
        return ref.get("name")

    def _parse_project(self, data: dict[str, Any]) -> Project:
        return Project(
            id=int(data["id"]),
            identifier=data.get("identifier", ""),
            name=data.get("name", ""),
            created_on=data.get("created_on"),
            updated_on=data.get("updated_on"),
        )

    def _parse_issue(self, data: dict[str, Any]) -> Issue:
        try:
            return Issue(
                id=int(data["id"]),
                subject=data.get("subject", ""),
                description=data.get("description") or "",
                status=self._name(data.get("status")) or "",
                priority=self._name(data.get("priority")) or "",
                author=self._name(data.get("author")) or "",
                assigned_to=self._name(data.get("assigned_to")),
                created_on=data.get("created_on", ""),
                updated_on=data.get("updated_on", ""),
                project=self._name(data.get("project")) or "",
                tracker=self._name(data.get("tracker")) or "",
                journals=[self._parse_journal(j) for j in data.get("journals") or []],
                relations=[self._parse_relation(r) for r in data.get("relations") or []],
                attachments=[
                    self._parse_attachment(a) for a in data.get("attachments") or []
                ],
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise IssueTrackerError(f"Malformed issue payload: {e}", cause=e) from e

    def _parse_journal(self, data: dict[str, Any]) -> Journal:
        details = tuple(
            JournalDetail(
                name=str(detail.get("name", "")),
                old_value=self._optional_text(detail.get("old_value")),
                new_value=self._optional_text(detail.get("new_value")),
            )
            for detail in data.get("details") or []
        )
        return Journal(
            id=int(data["id"]),
            user=self._name(data.get("user")) or "",
            created_on=data.get("created_on", ""),
            notes=data.get("notes"),
            details=details,
        )

    def _parse_relation(self, data: dict[str, Any]) -> IssueRelation:
        delay = data.get("delay")
        return IssueRelation(
            relation_type=data.get("relation_type", ""),
            issue_to_id=int(data["issue_to_id"]),
            delay=int(delay) if delay is not None else None,
        )

    def _parse_attachment(self, data: dict[str, Any]) -> IssueAttachment:
        return IssueAttachment(
            id=int(data["id"]),
            filename=data.get("filename", ""),
            filesize=int(data.get("filesize") or 0),
            content_type=data.get("content_type") or "",
            author=self._name(data.get("author")) or "",
            created_on=data.get("created_on", ""),
            content_url=data.get("content_url"),
        )

    @staticmethod
    def _optional_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)
