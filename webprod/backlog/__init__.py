"""Backlog issue tracker integration."""

from .client import BacklogAPIError, BacklogAuthError, BacklogClient, issue_type_id, priority_id
from .models import BacklogProject, BacklogUser, CreatedIssue, SubmissionRequest
from .settings import SettingsService, VerificationResult
from .submitter import (
    BacklogIssueSubmitter,
    IssueSubmitter,
    SubmissionError,
    default_client_factory,
    fetch_active_projects,
)

__all__ = [
    # Client
    "BacklogAPIError",
    "BacklogAuthError",
    "BacklogClient",
    "issue_type_id",
    "priority_id",
    # Models
    "BacklogProject",
    "BacklogUser",
    "CreatedIssue",
    "SubmissionRequest",
    # Submission
    "BacklogIssueSubmitter",
    "IssueSubmitter",
    "SubmissionError",
    "default_client_factory",
    "fetch_active_projects",
    # Settings
    "SettingsService",
    "VerificationResult",
]
