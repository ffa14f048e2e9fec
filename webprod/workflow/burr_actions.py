"""Burr actions for the issue-creation workflow.

``receive_event`` records the operator event; transitions route it to the
handler for the current stage, or to ``reject_event`` when the event does not
belong there. Every handler returns control to ``receive_event``.

Handlers never raise for collaborator failures: the failure becomes a
user-facing ``error`` and the stage the operator was editing is kept.

The @action decorator specifies:
- reads: State keys this action needs to read
- writes: State keys this action will write to
"""

import logging
from collections.abc import Callable
from typing import Any

from burr.core import State, action

from webprod.account import AccountSession, AccountStore, AuthorizationError, require_session
from webprod.backlog import IssueSubmitter, SubmissionRequest
from webprod.config import (
    MSG_AUTH_REQUIRED,
    MSG_DRAFT_REQUIRED,
    MSG_EVENT_REJECTED,
    MSG_GENERATION_FAILED,
    MSG_SUBMISSION_FAILED,
    WorkflowStage,
)
from webprod.generation import GeneratedIssue, GenerationRequest, IssueGenerator
from webprod.selection import SelectionError, SelectionModel, validate
from webprod.telemetry import operation_span
from webprod.template import Template

from .models import IssueDraft, ProjectSetup

logger = logging.getLogger(__name__)

CallStartCallback = Callable[[WorkflowStage], None]


def initial_state(template: Template) -> dict[str, Any]:
    """State of a fresh issue-creation cycle."""
    return {
        "template": template,
        "stage": WorkflowStage.PROJECT_SETUP.value,
        "setup": None,
        "selection": SelectionModel(template),
        "generated_from": [],
        "draft": None,
        "result": None,
        "error": None,
        "event": "",
        "payload": {},
    }


# =============================================================================
# Routing
# =============================================================================


@action(reads=[], writes=["event", "payload", "error"])
def receive_event(state: State, event: str, payload: dict | None = None) -> State:
    """Record the operator event; clears the previous error."""
    return state.update(event=event, payload=payload or {}, error=None)


@action(reads=["event", "stage"], writes=["error"])
def reject_event(state: State) -> State:
    """Event not allowed in the current stage; nothing else changes."""
    logger.warning(f"Rejected event '{state['event']}' in stage '{state['stage']}'")
    return state.update(error=MSG_EVENT_REJECTED)


# =============================================================================
# Project setup
# =============================================================================


@action(reads=["payload"], writes=["setup", "stage", "error"])
def submit_project_setup(state: State) -> State:
    """Capture setup metadata and move on to template selection."""
    setup = ProjectSetup.from_payload(state["payload"])
    errors = setup.validate()
    if errors:
        return state.update(error="\n".join(errors))

    logger.info(
        f"Project setup captured: project={setup.target_project_id}, "
        f"type={setup.issue_type}, priority={setup.priority}"
    )
    return state.update(setup=setup, stage=WorkflowStage.TEMPLATE_SELECTION.value)


# =============================================================================
# Template selection
# =============================================================================


def _apply_selection_change(
    template: Template, selection: SelectionModel, payload: dict[str, Any]
) -> SelectionModel:
    op = payload.get("op")
    if op == "toggle":
        item_id = payload["item_id"]
        item = template.get_item(item_id)
        section_id = payload.get("section_id") or template.section_of(item_id).id
        return selection.toggle_item(item, section_id)
    if op == "select_all":
        return selection.select_all_in_section(template.get_section(payload["section_id"]))
    if op == "deselect_all":
        return selection.deselect_all_in_section(template.get_section(payload["section_id"]))
    if op == "update":
        return selection.update_value(payload["item_id"], payload["value"])
    raise SelectionError(f"Unknown selection operation '{op}'")


@action(reads=["template", "selection", "payload"], writes=["selection", "error"])
def edit_selection(state: State) -> State:
    """Apply one selection-model mutation."""
    try:
        selection = _apply_selection_change(state["template"], state["selection"], state["payload"])
    except (SelectionError, KeyError) as e:
        logger.error(f"Invalid selection change {state['payload']}: {e}")
        return state.update(error=str(e))
    return state.update(selection=selection)


def _announce_call(on_call_start: CallStartCallback | None, stage: WorkflowStage) -> None:
    """Report the transient stage once every gate has passed."""
    logger.info(f"Starting outbound call ({stage.value})")
    if on_call_start is None:
        return
    try:
        on_call_start(stage)
    except (TypeError, AttributeError, ValueError) as e:
        logger.error(f"on_call_start callback failed: {e}")


def _record_generation_audit(
    store: AccountStore,
    session: AccountSession,
    request: GenerationRequest,
    issue: GeneratedIssue,
) -> None:
    try:
        store.record_audit(
            session.user_id,
            "generate_content",
            "generation",
            {
                "itemCount": len(request.selected_items),
                "summaryLength": len(issue.summary),
                "descriptionLength": len(issue.description),
            },
        )
    except Exception as e:
        logger.error(f"Failed to record generation audit event: {e}")


@action(
    reads=["template", "selection"],
    writes=["stage", "generated_from", "draft", "error"],
)
def generate_draft(
    state: State,
    generator: IssueGenerator,
    store: AccountStore,
    on_call_start: CallStartCallback | None = None,
) -> State:
    """Validate, then call the generation collaborator exactly once.

    On failure the stage stays at template selection with the selection intact.
    """
    template: Template = state["template"]
    selection: SelectionModel = state["selection"]

    violations = validate(template, selection)
    if violations:
        logger.info(f"Generation blocked by {len(violations)} validation errors")
        return state.update(error="\n".join(violations))

    try:
        session = require_session(store)
    except AuthorizationError as e:
        logger.warning(f"Generation not authorized: {e}")
        return state.update(error=MSG_AUTH_REQUIRED)

    request = GenerationRequest.from_selection(template, selection)
    _announce_call(on_call_start, WorkflowStage.GENERATING)
    try:
        with operation_span(
            "generate",
            item_count=len(request.selected_items),
            record_count=len(request.records),
            template_version=template.version,
        ):
            issue = generator.generate(request)
    except Exception as e:
        logger.error(f"Generation failed: {e}")
        return state.update(stage=WorkflowStage.TEMPLATE_SELECTION.value, error=MSG_GENERATION_FAILED)

    _record_generation_audit(store, session, request, issue)
    return state.update(
        stage=WorkflowStage.PREVIEW_EDIT.value,
        generated_from=request.selected_items,
        draft=IssueDraft(summary=issue.summary, description=issue.description),
    )


# =============================================================================
# Preview / edit
# =============================================================================


@action(reads=["draft", "payload"], writes=["draft"])
def edit_draft(state: State) -> State:
    """Replace the summary and/or description of the draft."""
    payload = state["payload"]
    draft: IssueDraft = state["draft"] or IssueDraft(summary="", description="")
    return state.update(
        draft=draft.edited(summary=payload.get("summary"), description=payload.get("description"))
    )


@action(
    reads=["template", "setup", "draft", "generated_from"],
    writes=["stage", "result", "error"],
)
def submit_issue(
    state: State,
    submitter: IssueSubmitter,
    store: AccountStore,
    on_call_start: CallStartCallback | None = None,
) -> State:
    """File the draft; on failure the draft stays editable in preview."""
    draft: IssueDraft | None = state["draft"]
    if draft is None or not draft.is_complete:
        return state.update(error=MSG_DRAFT_REQUIRED)

    try:
        session = require_session(store)
    except AuthorizationError as e:
        logger.warning(f"Submission not authorized: {e}")
        return state.update(error=MSG_AUTH_REQUIRED)

    setup: ProjectSetup = state["setup"]
    request = SubmissionRequest(
        target_project_id=setup.target_project_id,
        summary=draft.summary,
        description=draft.description,
        issue_type=setup.issue_type,
        priority=setup.priority,
        assignee_id=setup.assignee_id,
        selected_items=state["generated_from"],
        template_version=state["template"].version,
    )
    _announce_call(on_call_start, WorkflowStage.SUBMITTING)
    try:
        with operation_span(
            "submit",
            project_id=setup.target_project_id,
            issue_type=setup.issue_type,
            priority=setup.priority,
        ):
            created = submitter.create_issue(request, session)
    except Exception as e:
        logger.error(f"Submission failed: {e}")
        return state.update(stage=WorkflowStage.PREVIEW_EDIT.value, error=MSG_SUBMISSION_FAILED)

    logger.info(f"Issue filed: {created.issue_key}")
    return state.update(stage=WorkflowStage.SUCCESS.value, result=created)


# =============================================================================
# Success
# =============================================================================


@action(
    reads=["template"],
    writes=["stage", "setup", "selection", "generated_from", "draft", "result"],
)
def create_another(state: State) -> State:
    """Discard the whole session and start a new cycle."""
    fresh = initial_state(state["template"])
    return state.update(
        stage=fresh["stage"],
        setup=fresh["setup"],
        selection=fresh["selection"],
        generated_from=fresh["generated_from"],
        draft=fresh["draft"],
        result=fresh["result"],
    )
