"""
Redmine API Client - Low-level HTTP client for the Redmine REST API.

This handles the raw HTTP communication with Redmine: authentication,
JSON decoding, error mapping, retries with exponential backoff and a
shared limit on in-flight requests.
The RedmineAdapter uses this to implement the IssueTrackerPort.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

import requests

from ...core.ports.config_provider import RetryConfig
from ...core.ports.issue_tracker import (
    AuthenticationError,
    IssueTrackerError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    TransientError,
)


class RedmineApiClient:
    """
    Low-level Redmine REST API client.

    All requests share one requests.Session and one bounded semaphore,
    so at most ``concurrency`` requests are in flight no matter how many
    threads call into the client.
    """

    API_KEY_HEADER = "X-Redmine-API-Key"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        api_key: str,
        retry: Optional[RetryConfig] = None,
        concurrency: int = 4,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the Redmine client.

        Args:
            base_url: Redmine instance URL (e.g., https://redmine.example.com)
            api_key: API access token
            retry: Retry policy (attempts after the first, backoff base)
            concurrency: Maximum number of simultaneous requests
            timeout: Per-request timeout in seconds
            session: Optional pre-configured session (mainly for tests)
            sleep: Sleep function used between retries
        """
        self.base_url = base_url.rstrip("/")
        self.retry = retry or RetryConfig()
        self.timeout = timeout
        self.logger = logging.getLogger("RedmineApiClient")

        self.headers = {
            self.API_KEY_HEADER: api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        self._session = session or requests.Session()
        self._session.headers.update(self.headers)
        self._limiter = threading.BoundedSemaphore(max(1, concurrency))
        self._sleep = sleep

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an authenticated request to the Redmine API, with retries.

        Args:
            method: HTTP method
            endpoint: API path (e.g., '/issues/42.json')
            **kwargs: Additional arguments for requests

        Returns:
            Decoded JSON (or raw text for non-JSON responses)

        Raises:
            IssueTrackerError: When the request fails for good
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault("timeout", self.timeout)
        attempts = self.retry.retries + 1

        for attempt in range(1, attempts + 1):
            try:
                with self._limiter:
                    response = self._session.request(method, url, **kwargs)
                return self._handle_response(response, endpoint)
            except requests.exceptions.Timeout as e:
                error: IssueTrackerError = TransientError(
                    f"Request timed out: {e}", endpoint=endpoint, cause=e
                )
            except requests.exceptions.ConnectionError as e:
                error = TransientError(
                    f"Connection failed: {e}", endpoint=endpoint, cause=e
                )
            except requests.exceptions.ChunkedEncodingError as e:
                error = TransientError(
                    f"Connection broken while reading response: {e}", endpoint=endpoint, cause=e
                )
            except requests.exceptions.RequestException as e:
                error = IssueTrackerError(
                    f"Request failed: {e}", endpoint=endpoint, cause=e
                )
            except IssueTrackerError as e:
                error = e

            if attempt >= attempts or not self._should_retry(error):
                raise error

            delay = self._backoff_delay(attempt)
            self.logger.warning(
                f"Request failed (attempt {attempt}/{attempts}): {error.message}; "
                f"retrying in {delay:.2f}s"
            )
            self._sleep(delay)

        # Unreachable: the loop either returns or raises
        raise IssueTrackerError(f"Request to {endpoint} failed", endpoint=endpoint)

    def get(self, endpoint: str, **kwargs) -> Any:
        """GET request."""
        return self.request("GET", endpoint, **kwargs)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(
        self,
        response: requests.Response,
        endpoint: str
    ) -> Any:
        """Handle API response and errors."""
        if response.ok:
            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                try:
                    return response.json()
                except ValueError as e:
                    raise IssueTrackerError(
                        f"Invalid JSON in response: {e}", endpoint=endpoint, cause=e
                    ) from e
            return response.text

        status = response.status_code
        message = self._error_message(response)

        if status == 401:
            raise AuthenticationError(message, status=status, endpoint=endpoint)

        if status == 403:
            raise PermissionError(message, status=status, endpoint=endpoint)

        if status == 404:
            raise NotFoundError(message, status=status, endpoint=endpoint)

        if status == 429:
            raise RateLimitError(message, status=status, endpoint=endpoint)

        if status >= 500:
            raise TransientError(message, status=status, endpoint=endpoint)

        raise IssueTrackerError(message, status=status, endpoint=endpoint)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Prefer Redmine's ``errors`` array over the bare status line."""
        message = f"HTTP {response.status_code}: {response.reason}"
        try:
            data = response.json()
        except ValueError:
            return message

        errors = data.get("errors") if isinstance(data, dict) else None
        if isinstance(errors, list) and errors:
            return ", ".join(str(e) for e in errors)
        return message

    # -------------------------------------------------------------------------
    # Retry Policy
    # -------------------------------------------------------------------------

    @staticmethod
    def _should_retry(error: IssueTrackerError) -> bool:
        return isinstance(error, (TransientError, RateLimitError))

    def _backoff_delay(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (1-based)."""
        base_ms = self.retry.base_ms
        delay_ms = min(base_ms * (2 ** (attempt - 1)), base_ms * 8)
        return delay_ms / 1000.0

    def close(self) -> None:
        self._session.close()
