"""Issue workflow facade.

``IssueWorkflow`` is what a front end talks to: one method per operator
action, read-only properties for rendering. Each action is sent to the Burr
application as an event; nothing raised inside escapes to the caller, a
failure only ever shows up as ``error``.

Example:
    workflow = create_issue_workflow(session=AccountSession("user-1", token))
    workflow.setup_project("12345", issue_type="bug")
    workflow.toggle_item("project-name")
    workflow.update_value("project-name", "Acme Redesign")
    ...
    if workflow.generate():
        workflow.edit_draft(summary="…")
        workflow.submit()
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Any

from burr.core import Application

from webprod.account import (
    AccountSession,
    AccountStore,
    AuthorizationError,
    FileAccountStore,
    require_session,
)
from webprod.backlog import (
    BacklogIssueSubmitter,
    BacklogProject,
    IssueSubmitter,
    SubmissionError,
    default_client_factory,
    fetch_active_projects,
)
from webprod.config import (
    DEFAULT_TRACKING_PROJECT,
    MSG_AUTH_REQUIRED,
    MSG_BACKLOG_SETTINGS_REQUIRED,
    MSG_NO_ACTIVE_PROJECTS,
    MSG_PROJECTS_FAILED,
    MSG_UNEXPECTED_ERROR,
    AppConfig,
    WorkflowEvent,
    WorkflowStage,
    load_environment,
)
from webprod.generation import AgentIssueGenerator, IssueGenerator
from webprod.selection import SelectionModel, validate
from webprod.telemetry import TelemetryConfig, init_telemetry
from webprod.template import Template, default_template

from .burr_actions import initial_state
from .models import IssueDraft, ProjectListing, WorkflowSession
from .workflow_builder import build_issue_workflow

logger = logging.getLogger(__name__)

ProjectLister = Callable[[AccountStore, AccountSession], list[BacklogProject]]


class IssueWorkflow:
    """Drives one operator's issue-creation cycles."""

    def __init__(
        self,
        generator: IssueGenerator,
        submitter: IssueSubmitter,
        store: AccountStore,
        template: Template | None = None,
        project_lister: ProjectLister | None = None,
        on_stage_change: Callable[[WorkflowStage], None] | None = None,
        enable_tracking: bool = False,
        tracking_project: str = DEFAULT_TRACKING_PROJECT,
    ):
        """Initialize the workflow.

        Args:
            generator: Generation collaborator
            submitter: Submission collaborator
            store: Account store (session, settings, audit)
            template: Questionnaire template; the bundled default when omitted
            project_lister: Project lookup for setup; Backlog when omitted
            on_stage_change: Called on every stage change, transient stages included
            enable_tracking: Enable the Burr tracking UI
            tracking_project: Burr tracking project name
        """
        self.template = template or default_template()
        self.store = store
        self._generator = generator
        self._submitter = submitter
        self._project_lister = project_lister or fetch_active_projects
        self._on_stage_change = on_stage_change
        self._enable_tracking = enable_tracking
        self._tracking_project = tracking_project
        self._in_flight: WorkflowStage | None = None
        self._failure: str | None = None
        self._app = self._build(initial_state(self.template))

    def _build(self, state: dict[str, Any]) -> Application:
        return build_issue_workflow(
            self.template,
            self._generator,
            self._submitter,
            self.store,
            state=state,
            on_call_start=self._call_started,
            on_stage_change=self._stage_settled,
            enable_tracking=self._enable_tracking,
            tracking_project=self._tracking_project,
        )

    # ------------------------------------------------------------------
    # Hook callbacks
    # ------------------------------------------------------------------

    def _call_started(self, stage: WorkflowStage) -> None:
        self._in_flight = stage
        self._notify(stage)

    def _stage_settled(self, stage: WorkflowStage) -> None:
        self._in_flight = None
        self._notify(stage)

    def _notify(self, stage: WorkflowStage) -> None:
        if self._on_stage_change:
            self._on_stage_change(stage)

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, event: WorkflowEvent, payload: dict[str, Any] | None = None) -> bool:
        """Send one event through the application.

        Returns:
            True when the event was handled without an error
        """
        self._failure = None
        last_good = {key: self._app.state[key] for key in initial_state(self.template)}
        try:
            self._app.step(inputs={"event": event.value, "payload": payload or {}})
            self._app.step()
        except Exception as e:
            logger.error(f"Workflow event '{event.value}' failed: {e}", exc_info=True)
            self._in_flight = None
            self._failure = MSG_UNEXPECTED_ERROR
            self._app = self._build(last_good)
            return False
        return self._app.state["error"] is None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def stage(self) -> WorkflowStage:
        if self._in_flight is not None:
            return self._in_flight
        return WorkflowStage(self._app.state["stage"])

    @property
    def busy(self) -> bool:
        """True while a generation or submission call is in flight."""
        return self._in_flight is not None

    @property
    def selection(self) -> SelectionModel:
        return self._app.state["selection"]

    @property
    def error(self) -> str | None:
        return self._failure or self._app.state["error"]

    @property
    def draft(self) -> IssueDraft | None:
        return self._app.state["draft"]

    @property
    def session(self) -> WorkflowSession:
        state = self._app.state
        return WorkflowSession(
            stage=self.stage,
            setup=state["setup"],
            selection=state["selection"],
            generated_from=list(state["generated_from"]),
            draft=state["draft"],
            result=state["result"],
            error=self.error,
        )

    def validation_errors(self) -> list[str]:
        """Violations that currently block generation."""
        return validate(self.template, self.selection)

    # ------------------------------------------------------------------
    # Project setup
    # ------------------------------------------------------------------

    def load_projects(self) -> ProjectListing:
        """Active Backlog projects plus the operator's default project."""
        try:
            session = require_session(self.store)
        except AuthorizationError:
            return ProjectListing(error=MSG_AUTH_REQUIRED)

        default_project_id = ""
        try:
            settings = self.store.get_settings(session.user_id)
            if settings is not None:
                default_project_id = settings.default_project_id
            projects = self._project_lister(self.store, session)
        except SubmissionError as e:
            logger.warning(f"Project lookup failed: {e}")
            return ProjectListing(error=str(e) or MSG_BACKLOG_SETTINGS_REQUIRED)
        except Exception as e:
            logger.error(f"Project lookup failed: {e}", exc_info=True)
            return ProjectListing(error=MSG_PROJECTS_FAILED)

        if not projects:
            return ProjectListing(default_project_id=default_project_id, error=MSG_NO_ACTIVE_PROJECTS)

        known_ids = {str(project.id) for project in projects}
        if default_project_id not in known_ids:
            default_project_id = ""
        return ProjectListing(projects=projects, default_project_id=default_project_id)

    def setup_project(
        self,
        target_project_id: str,
        issue_type: str | None = None,
        priority: str | None = None,
        assignee_id: str | None = None,
    ) -> bool:
        return self._dispatch(
            WorkflowEvent.SUBMIT_PROJECT_SETUP,
            {
                "target_project_id": target_project_id,
                "issue_type": issue_type,
                "priority": priority,
                "assignee_id": assignee_id,
            },
        )

    # ------------------------------------------------------------------
    # Template selection
    # ------------------------------------------------------------------

    def toggle_item(self, item_id: str, section_id: str | None = None) -> bool:
        return self._dispatch(
            WorkflowEvent.EDIT_SELECTION,
            {"op": "toggle", "item_id": item_id, "section_id": section_id},
        )

    def select_all_in_section(self, section_id: str) -> bool:
        return self._dispatch(
            WorkflowEvent.EDIT_SELECTION, {"op": "select_all", "section_id": section_id}
        )

    def deselect_all_in_section(self, section_id: str) -> bool:
        return self._dispatch(
            WorkflowEvent.EDIT_SELECTION, {"op": "deselect_all", "section_id": section_id}
        )

    def update_value(self, item_id: str, value: str | Iterable[str]) -> bool:
        if not isinstance(value, str):
            value = list(value)
        return self._dispatch(
            WorkflowEvent.EDIT_SELECTION, {"op": "update", "item_id": item_id, "value": value}
        )

    def generate(self) -> bool:
        """Generate a draft from the current selection."""
        return self._dispatch(WorkflowEvent.GENERATE_DRAFT)

    # ------------------------------------------------------------------
    # Preview / edit and submission
    # ------------------------------------------------------------------

    def edit_draft(self, summary: str | None = None, description: str | None = None) -> bool:
        return self._dispatch(
            WorkflowEvent.EDIT_DRAFT, {"summary": summary, "description": description}
        )

    def submit(self) -> bool:
        """File the current draft."""
        return self._dispatch(WorkflowEvent.SUBMIT_ISSUE)

    def create_another(self) -> bool:
        """Reset everything and start a new cycle."""
        return self._dispatch(WorkflowEvent.CREATE_ANOTHER)


def create_issue_workflow(
    config: AppConfig | None = None,
    session: AccountSession | None = None,
    store: AccountStore | None = None,
    **kwargs: Any,
) -> IssueWorkflow:
    """Wire the production collaborators from configuration.

    Args:
        config: Runtime configuration; read from the environment (and .env) when omitted
        session: Signed-in operator, used when ``store`` is omitted
        store: Account store; a ``FileAccountStore`` under ``config.data_dir`` when omitted
        **kwargs: Passed through to ``IssueWorkflow``
    """
    if config is None:
        load_environment()
        config = AppConfig.from_env()
    init_telemetry(replace(TelemetryConfig.from_env(), log_level=config.log_level))

    store = store or FileAccountStore(config.data_dir, session=session)
    client_factory = default_client_factory(config.backlog_domain, config.backlog_timeout)

    generator = AgentIssueGenerator(
        max_tokens=config.generation_max_tokens,
        temperature=config.generation_temperature,
    )
    submitter = BacklogIssueSubmitter(store, client_factory=client_factory)

    def project_lister(store: AccountStore, session: AccountSession) -> list[BacklogProject]:
        return fetch_active_projects(store, session, client_factory=client_factory)

    kwargs.setdefault("project_lister", project_lister)
    return IssueWorkflow(generator, submitter, store, **kwargs)
