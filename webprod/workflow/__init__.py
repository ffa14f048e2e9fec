"""Issue-creation workflow: project setup, selection, generation, preview, submission."""

from .models import IssueDraft, ProjectListing, ProjectSetup, WorkflowSession
from .orchestrator import IssueWorkflow, create_issue_workflow
from .workflow_builder import WorkflowProgressHook, build_issue_workflow

__all__ = [
    "IssueDraft",
    "IssueWorkflow",
    "ProjectListing",
    "ProjectSetup",
    "WorkflowProgressHook",
    "WorkflowSession",
    "build_issue_workflow",
    "create_issue_workflow",
]
