"""Submission collaborator: files a drafted issue in Backlog.

``IssueSubmitter`` is the seam the workflow depends on; ``BacklogIssueSubmitter``
loads the operator's Backlog settings, files the issue, then records issue
history and an audit event.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from webprod.account import AccountSession, AccountStore, BacklogSettings, IssueGenerationRecord
from webprod.config import AUDIT_SUMMARY_CHARS, DEFAULT_BACKLOG_DOMAIN, DEFAULT_BACKLOG_TIMEOUT

from .client import BacklogAPIError, BacklogClient
from .models import BacklogProject, CreatedIssue, SubmissionRequest

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BacklogSettings], BacklogClient]


class SubmissionError(Exception):
    """Issue could not be filed."""


class IssueSubmitter(ABC):
    """Submission collaborator."""

    @abstractmethod
    def create_issue(self, request: SubmissionRequest, session: AccountSession) -> CreatedIssue:
        """
        File an issue on behalf of the signed-in operator.

        Raises:
            SubmissionError: On any failure
        """


def default_client_factory(
    domain: str = DEFAULT_BACKLOG_DOMAIN, timeout: float = DEFAULT_BACKLOG_TIMEOUT
) -> ClientFactory:
    """Build a factory creating real clients from stored settings."""

    def factory(settings: BacklogSettings) -> BacklogClient:
        return BacklogClient(
            settings.space_identifier, settings.api_key, domain=domain, timeout=timeout
        )

    return factory


class BacklogIssueSubmitter(IssueSubmitter):
    """Files issues through the Backlog API using per-operator settings."""

    def __init__(self, store: AccountStore, client_factory: ClientFactory | None = None):
        self.store = store
        self.client_factory = client_factory or default_client_factory()

    def _load_connected_settings(self, user_id: str) -> BacklogSettings:
        settings = self.store.get_settings(user_id)
        if settings is None or not settings.space_identifier or not settings.api_key:
            raise SubmissionError(
                "Backlog設定が見つかりません。先にBacklog連携設定を完了してください。"
            )
        if not settings.is_connected:
            raise SubmissionError("Backlogが接続されていません。接続テストを実行してください。")
        return settings

    def create_issue(self, request: SubmissionRequest, session: AccountSession) -> CreatedIssue:
        settings = self._load_connected_settings(session.user_id)

        try:
            with self.client_factory(settings) as client:
                issue_key = client.create_issue(
                    project_id=request.target_project_id,
                    summary=request.summary,
                    description=request.description,
                    issue_type=request.issue_type,
                    priority=request.priority,
                    assignee_id=request.assignee_id,
                )
                created = CreatedIssue(issue_key=issue_key, issue_url=client.issue_url(issue_key))
        except BacklogAPIError as e:
            logger.error(f"Backlog issue creation failed: {e}")
            raise SubmissionError(str(e)) from e

        self._record_history(session.user_id, request, created)
        self._record_audit(session.user_id, request, created)
        return created

    def _record_history(
        self, user_id: str, request: SubmissionRequest, created: CreatedIssue
    ) -> None:
        record = IssueGenerationRecord(
            template_version=request.template_version,
            selected_items=request.selected_items,
            generated_summary=request.summary,
            generated_description=request.description,
            edited_summary=request.summary,
            edited_description=request.description,
            issue_key=created.issue_key,
            issue_url=created.issue_url,
        )
        try:
            self.store.record_issue_generation(user_id, record)
        except Exception as e:
            logger.error(f"Failed to record issue history for {created.issue_key}: {e}")

    def _record_audit(
        self, user_id: str, request: SubmissionRequest, created: CreatedIssue
    ) -> None:
        try:
            self.store.record_audit(
                user_id,
                "create_issue",
                "issue",
                {
                    "issueKey": created.issue_key,
                    "backlogProjectId": request.target_project_id,
                    "summary": request.summary[:AUDIT_SUMMARY_CHARS],
                    "itemCount": len(request.selected_items),
                },
            )
        except Exception as e:
            logger.error(f"Failed to record audit event for {created.issue_key}: {e}")


def fetch_active_projects(
    store: AccountStore,
    session: AccountSession,
    client_factory: ClientFactory | None = None,
) -> list[BacklogProject]:
    """List the operator's non-archived Backlog projects.

    Raises:
        SubmissionError: Settings missing or the API call failed
    """
    settings = store.get_settings(session.user_id)
    if settings is None or not settings.space_identifier or not settings.api_key:
        raise SubmissionError("Backlog設定が見つかりません")

    factory = client_factory or default_client_factory()
    try:
        with factory(settings) as client:
            projects = client.list_projects()
    except BacklogAPIError as e:
        raise SubmissionError(str(e)) from e

    return [project for project in projects if not project.archived]
