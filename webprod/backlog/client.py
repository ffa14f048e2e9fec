"""Thin client for the Backlog REST API (v2).

Only the three calls the issue workflow needs: connection verification,
project listing and issue creation. Authentication is the per-operator API
key, sent as the ``apiKey`` query parameter.

Reference: https://developer.nulab.com/docs/backlog/
"""

import logging
from typing import Any

import httpx

from webprod.config import (
    BACKLOG_ISSUE_TYPE_IDS,
    BACKLOG_PRIORITY_IDS,
    DEFAULT_BACKLOG_DOMAIN,
    DEFAULT_BACKLOG_TIMEOUT,
    DEFAULT_ISSUE_TYPE,
    DEFAULT_PRIORITY,
)

from .models import BacklogProject, BacklogUser

logger = logging.getLogger(__name__)


class BacklogAPIError(Exception):
    """Error returned by (or while calling) the Backlog API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BacklogAuthError(BacklogAPIError):
    """The API key was rejected."""


def issue_type_id(issue_type: str) -> int:
    """Map an issue type to its Backlog id; unknown types fall back to task."""
    return BACKLOG_ISSUE_TYPE_IDS.get(issue_type, BACKLOG_ISSUE_TYPE_IDS[DEFAULT_ISSUE_TYPE])


def priority_id(priority: str) -> int:
    """Map a priority to its Backlog id; unknown priorities fall back to normal."""
    return BACKLOG_PRIORITY_IDS.get(priority, BACKLOG_PRIORITY_IDS[DEFAULT_PRIORITY])


class BacklogClient:
    """Backlog API client bound to one space and API key.

    Example:
        with BacklogClient("myspace", api_key) as client:
            user = client.get_myself()
            projects = client.list_projects()
            key = client.create_issue("12345", "件名", "詳細", "task", "normal")
            url = client.issue_url(key)
    """

    def __init__(
        self,
        space: str,
        api_key: str,
        domain: str = DEFAULT_BACKLOG_DOMAIN,
        timeout: float = DEFAULT_BACKLOG_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            space: Backlog space identifier (``{space}.backlog.jp``)
            api_key: Operator's Backlog API key
            domain: Backlog domain (``backlog.jp`` or ``backlog.com``)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        if not space or not api_key:
            raise ValueError("space and api_key are required")
        self.space = space
        self.domain = domain
        self._api_key = api_key
        self._client = httpx.Client(
            base_url=f"https://{space}.{domain}/api/v2",
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "BacklogClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def base_url(self) -> str:
        return f"https://{self.space}.{self.domain}"

    def issue_url(self, issue_key: str) -> str:
        """Browser URL of an issue."""
        return f"{self.base_url}/view/{issue_key}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request with the API key and return the decoded JSON body."""
        params = dict(kwargs.pop("params", None) or {})
        params["apiKey"] = self._api_key

        try:
            response = self._client.request(method, path, params=params, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise BacklogAuthError("APIキーが無効です", status) from e
            raise BacklogAPIError(f"Backlog API error: {e.response.text}", status) from e
        except httpx.TimeoutException as e:
            raise BacklogAPIError("Backlog API timeout") from e
        except httpx.HTTPError as e:
            raise BacklogAPIError(f"Backlog request failed: {e}") from e
        except ValueError as e:
            raise BacklogAPIError("Backlog API returned a non-JSON response") from e

    def get_myself(self) -> BacklogUser:
        """Return the user owning the API key; used as the connection check."""
        try:
            data = self._request("GET", "/users/myself")
        except BacklogAuthError:
            raise
        except BacklogAPIError as e:
            if e.status_code == 404:
                raise BacklogAPIError("スペース名が見つかりません", 404) from e
            if e.status_code is not None:
                raise BacklogAPIError(f"Backlog API error: {e.status_code}", e.status_code) from e
            raise
        return BacklogUser(id=data.get("id"), name=data.get("name", ""))

    def list_projects(self) -> list[BacklogProject]:
        """List every project visible to the API key, archived ones included."""
        data = self._request("GET", "/projects")
        projects = [BacklogProject.from_api(item) for item in data]
        logger.info(f"Fetched {len(projects)} Backlog projects from {self.space}")
        return projects

    def create_issue(
        self,
        project_id: str,
        summary: str,
        description: str,
        issue_type: str = DEFAULT_ISSUE_TYPE,
        priority: str = DEFAULT_PRIORITY,
        assignee_id: str | None = None,
    ) -> str:
        """Create an issue and return its key (e.g. ``PROJ-123``)."""
        form = {
            "projectId": str(project_id),
            "summary": summary,
            "description": description,
            "issueTypeId": str(issue_type_id(issue_type)),
            "priorityId": str(priority_id(priority)),
        }
        if assignee_id:
            form["assigneeId"] = str(assignee_id)

        data = self._request("POST", "/issues", data=form)
        issue_key = data.get("issueKey")
        if not issue_key:
            raise BacklogAPIError("Backlog API response did not include an issueKey")

        logger.info(f"Created Backlog issue {issue_key} in project {project_id}")
        return issue_key
