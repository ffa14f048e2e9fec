"""Backlog API records and submission request/response types."""

from dataclasses import dataclass, field
from typing import Any

from webprod.config import DEFAULT_ISSUE_TYPE, DEFAULT_PRIORITY


@dataclass(frozen=True)
class BacklogUser:
    """Authenticated Backlog user (``/users/myself``)."""

    id: int
    name: str


@dataclass(frozen=True)
class BacklogProject:
    """Backlog project as listed by ``/projects``."""

    id: int
    project_key: str
    name: str
    archived: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "BacklogProject":
        return cls(
            id=data["id"],
            project_key=data.get("projectKey", ""),
            name=data.get("name", ""),
            archived=bool(data.get("archived", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "projectKey": self.project_key,
            "name": self.name,
            "archived": self.archived,
        }


@dataclass
class SubmissionRequest:
    """Everything needed to file one issue.

    Attributes:
        target_project_id: Backlog project id
        summary: Issue title
        description: Issue body
        issue_type: One of ``IssueType`` values
        priority: One of ``Priority`` values
        assignee_id: Optional Backlog user id
        selected_items: Selection snapshot recorded in issue history
        template_version: Version of the template used
    """

    target_project_id: str
    summary: str
    description: str
    issue_type: str = DEFAULT_ISSUE_TYPE
    priority: str = DEFAULT_PRIORITY
    assignee_id: str | None = None
    selected_items: list[dict[str, Any]] = field(default_factory=list)
    template_version: str = ""


@dataclass(frozen=True)
class CreatedIssue:
    """Result of a successful submission."""

    issue_key: str
    issue_url: str

    def to_dict(self) -> dict[str, str]:
        return {"issueKey": self.issue_key, "issueUrl": self.issue_url}
