"""Builds the Burr application driving one issue-creation session."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from burr.core import Application, ApplicationBuilder, default, when
from burr.lifecycle import PostRunStepHook
from burr.tracking import LocalTrackingClient

from webprod.account import AccountStore
from webprod.backlog import IssueSubmitter
from webprod.config import DEFAULT_TRACKING_PROJECT, WorkflowEvent, WorkflowStage
from webprod.generation import IssueGenerator
from webprod.template import Template

from .burr_actions import (
    create_another,
    edit_draft,
    edit_selection,
    generate_draft,
    initial_state,
    receive_event,
    reject_event,
    submit_issue,
    submit_project_setup,
)

logger = logging.getLogger(__name__)

ENTRYPOINT = "receive_event"


# ---------------------------------------------------------------------------
# Lifecycle Hook
# ---------------------------------------------------------------------------


@dataclass
class WorkflowProgressHook(PostRunStepHook):
    """Reports the settled stage after every handler."""

    on_stage_change: Callable[[WorkflowStage], None] | None = None

    def post_run_step(self, *, action, state, **kwargs):
        if action.name == ENTRYPOINT:
            return

        stage = WorkflowStage(state["stage"])
        logger.info(f"Completed: {action.name} (stage={stage.value})")
        if self.on_stage_change:
            try:
                self.on_stage_change(stage)
            except (TypeError, AttributeError, ValueError) as e:
                logger.error(f"on_stage_change callback failed: {e}")


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def _routing_transitions() -> list[tuple]:
    """Route each event to its handler, only from the stage that owns it."""
    transitions: list[tuple] = []
    for event in WorkflowEvent:
        transitions.append(
            (
                ENTRYPOINT,
                event.value,
                when(event=event.value, stage=event.allowed_stage.value),
            )
        )
    transitions.append((ENTRYPOINT, "reject_event", default))
    for event in WorkflowEvent:
        transitions.append((event.value, ENTRYPOINT))
    transitions.append(("reject_event", ENTRYPOINT))
    return transitions


def build_issue_workflow(
    template: Template,
    generator: IssueGenerator,
    submitter: IssueSubmitter,
    store: AccountStore,
    state: dict[str, Any] | None = None,
    on_call_start: Callable[[WorkflowStage], None] | None = None,
    on_stage_change: Callable[[WorkflowStage], None] | None = None,
    enable_tracking: bool = False,
    tracking_project: str = DEFAULT_TRACKING_PROJECT,
    app_id: str | None = None,
) -> Application:
    """Build a Burr Application for one issue-creation session.

    Args:
        template: Questionnaire template
        generator: Generation collaborator
        submitter: Submission collaborator
        store: Account store (session lookup and audit)
        state: Starting state; a fresh cycle when omitted
        on_call_start: Called with the transient stage when an outbound call starts
        on_stage_change: Called with the settled stage after each handler
        enable_tracking: Enable the Burr tracking UI
        tracking_project: Burr tracking project name
        app_id: Optional custom app ID

    Returns:
        Burr Application positioned at ``receive_event``
    """
    if app_id is None:
        app_id = f"{tracking_project}-{uuid.uuid4().hex[:8]}"

    tracker = None
    if enable_tracking:
        try:
            tracker = LocalTrackingClient(project=tracking_project)
            logger.info(f"Burr tracking enabled: {tracking_project}")
        except (OSError, RuntimeError) as e:
            logger.warning(f"Could not enable tracking: {e}")

    progress_hook = WorkflowProgressHook(on_stage_change=on_stage_change)

    builder = (
        ApplicationBuilder()
        .with_actions(
            receive_event=receive_event,
            reject_event=reject_event,
            submit_project_setup=submit_project_setup,
            edit_selection=edit_selection,
            generate_draft=generate_draft.bind(
                generator=generator, store=store, on_call_start=on_call_start
            ),
            edit_draft=edit_draft,
            submit_issue=submit_issue.bind(
                submitter=submitter, store=store, on_call_start=on_call_start
            ),
            create_another=create_another,
        )
        .with_transitions(*_routing_transitions())
        .with_state(**(state or initial_state(template)))
        .with_entrypoint(ENTRYPOINT)
        .with_hooks(progress_hook)
        .with_identifiers(app_id=app_id)
    )

    if tracker:
        builder = builder.with_tracker(tracker)

    app = builder.build()
    logger.debug(f"Issue workflow {app_id} created")
    return app
