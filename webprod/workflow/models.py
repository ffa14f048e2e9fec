"""Workflow session data: setup metadata, editable draft and session snapshot."""

from dataclasses import dataclass, field, replace
from typing import Any

from webprod.backlog import BacklogProject, CreatedIssue
from webprod.config import (
    DEFAULT_ISSUE_TYPE,
    DEFAULT_PRIORITY,
    MSG_PROJECT_REQUIRED,
    IssueType,
    Priority,
    WorkflowStage,
)
from webprod.selection import SelectionModel


@dataclass(frozen=True)
class ProjectSetup:
    """Project and issue metadata captured at setup.

    Attributes:
        target_project_id: Backlog project id (mandatory)
        issue_type: One of ``IssueType`` values
        priority: One of ``Priority`` values
        assignee_id: Optional Backlog user id
    """

    target_project_id: str
    issue_type: str = DEFAULT_ISSUE_TYPE
    priority: str = DEFAULT_PRIORITY
    assignee_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ProjectSetup":
        assignee_id = str(payload.get("assignee_id") or "").strip()
        return cls(
            target_project_id=str(payload.get("target_project_id") or "").strip(),
            issue_type=payload.get("issue_type") or DEFAULT_ISSUE_TYPE,
            priority=payload.get("priority") or DEFAULT_PRIORITY,
            assignee_id=assignee_id or None,
        )

    def validate(self) -> list[str]:
        """Return user-facing error messages; empty when the setup is usable."""
        errors = []
        if not self.target_project_id.strip():
            errors.append(MSG_PROJECT_REQUIRED)
        if self.issue_type not in IssueType.values():
            errors.append(f"課題種別が不正です: {self.issue_type}")
        if self.priority not in Priority.values():
            errors.append(f"優先度が不正です: {self.priority}")
        return errors


@dataclass(frozen=True)
class IssueDraft:
    """Editable summary/description pair shown in preview."""

    summary: str
    description: str

    @property
    def is_complete(self) -> bool:
        """Both fields are non-empty after trimming."""
        return bool(self.summary.strip() and self.description.strip())

    def edited(self, summary: str | None = None, description: str | None = None) -> "IssueDraft":
        changes = {}
        if summary is not None:
            changes["summary"] = summary
        if description is not None:
            changes["description"] = description
        return replace(self, **changes)


@dataclass(frozen=True)
class WorkflowSession:
    """Read-only snapshot of one issue-creation cycle.

    Attributes:
        stage: Current stage (transient stages while a call is in flight)
        setup: Metadata captured at project setup
        selection: Current selection model
        generated_from: Selection snapshot the current draft was generated from
        draft: Editable draft (None until generation succeeds)
        result: Filed issue (None until submission succeeds)
        error: User-facing message of the last failure, if any
    """

    stage: WorkflowStage
    setup: ProjectSetup | None
    selection: SelectionModel
    generated_from: list[dict[str, Any]] = field(default_factory=list)
    draft: IssueDraft | None = None
    result: CreatedIssue | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProjectListing:
    """Outcome of the project lookup shown at setup."""

    projects: list[BacklogProject] = field(default_factory=list)
    default_project_id: str = ""
    error: str | None = None
