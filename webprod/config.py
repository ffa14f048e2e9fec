"""Centralized configuration for WebProd Issue Agent.

Single source of truth for constants, enums and environment-driven settings.

Design Principles:
- Stage, issue type and priority values defined once as enums
- Timeouts and generation parameters in one place
- Environment variables read through ``AppConfig.from_env()``
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

# =============================================================================
# Enums for Type Safety
# =============================================================================


class WorkflowStage(Enum):
    """Stages of one issue-creation cycle."""

    PROJECT_SETUP = "project_setup"
    TEMPLATE_SELECTION = "template_selection"
    GENERATING = "generating"  # Transient, only while the LLM call is in flight
    PREVIEW_EDIT = "preview_edit"
    SUBMITTING = "submitting"  # Transient, only while the Backlog call is in flight
    SUCCESS = "success"


class IssueType(Enum):
    """Issue types offered at project setup."""

    TASK = "task"
    BUG = "bug"
    REQUEST = "request"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        return [t.value for t in cls]


class Priority(Enum):
    """Issue priorities offered at project setup."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @classmethod
    def values(cls) -> list[str]:
        return [p.value for p in cls]


DEFAULT_ISSUE_TYPE = IssueType.TASK.value
DEFAULT_PRIORITY = Priority.NORMAL.value


class WorkflowEvent(Enum):
    """Operator events accepted by the workflow, named after their handler actions."""

    SUBMIT_PROJECT_SETUP = "submit_project_setup"
    EDIT_SELECTION = "edit_selection"
    GENERATE_DRAFT = "generate_draft"
    EDIT_DRAFT = "edit_draft"
    SUBMIT_ISSUE = "submit_issue"
    CREATE_ANOTHER = "create_another"

    @property
    def allowed_stage(self) -> WorkflowStage:
        """The only stage in which this event is handled."""
        return _EVENT_STAGES[self]


_EVENT_STAGES = {
    WorkflowEvent.SUBMIT_PROJECT_SETUP: WorkflowStage.PROJECT_SETUP,
    WorkflowEvent.EDIT_SELECTION: WorkflowStage.TEMPLATE_SELECTION,
    WorkflowEvent.GENERATE_DRAFT: WorkflowStage.TEMPLATE_SELECTION,
    WorkflowEvent.EDIT_DRAFT: WorkflowStage.PREVIEW_EDIT,
    WorkflowEvent.SUBMIT_ISSUE: WorkflowStage.PREVIEW_EDIT,
    WorkflowEvent.CREATE_ANOTHER: WorkflowStage.SUCCESS,
}

DEFAULT_TRACKING_PROJECT = "webprod-issue-agent"


# =============================================================================
# Backlog API
# =============================================================================

# Backlog numeric ids for the setup choices
BACKLOG_ISSUE_TYPE_IDS: dict[str, int] = {
    IssueType.TASK.value: 1,
    IssueType.BUG.value: 2,
    IssueType.REQUEST.value: 3,
    IssueType.OTHER.value: 4,
}

BACKLOG_PRIORITY_IDS: dict[str, int] = {
    Priority.HIGH.value: 1,
    Priority.NORMAL.value: 2,
    Priority.LOW.value: 3,
}

DEFAULT_BACKLOG_DOMAIN = "backlog.jp"
DEFAULT_BACKLOG_TIMEOUT = 30.0


# =============================================================================
# Generation
# =============================================================================

# Separator used when rendering multi-select values
MULTI_VALUE_SEPARATOR = ", "

DEFAULT_GENERATION_TEMPERATURE = 0.2
DEFAULT_GENERATION_MAX_TOKENS = 2000

# Truncation applied to summaries stored in audit details
AUDIT_SUMMARY_CHARS = 100


# =============================================================================
# Storage
# =============================================================================

DEFAULT_DATA_DIR = Path(".webprod")


# =============================================================================
# User-facing messages
# =============================================================================

MSG_GENERATION_FAILED = "AI生成に失敗しました。もう一度お試しください。"
MSG_SUBMISSION_FAILED = "Backlogへの起票に失敗しました。もう一度お試しください。"
MSG_AUTH_REQUIRED = "ログインセッションが無効です。再度ログインしてください。"
MSG_DRAFT_REQUIRED = "件名と詳細は必須です"
MSG_PROJECT_REQUIRED = "Backlogプロジェクトを選択してください"
MSG_PROJECTS_FAILED = "プロジェクトの取得に失敗しました"
MSG_NO_ACTIVE_PROJECTS = "利用可能なプロジェクトがありません"
MSG_EVENT_REJECTED = "現在の画面ではこの操作を実行できません"
MSG_UNEXPECTED_ERROR = "予期しないエラーが発生しました。もう一度お試しください。"
MSG_BACKLOG_SETTINGS_REQUIRED = (
    "Backlog設定を確認してください。設定画面から連携設定を完了してください。"
)


# =============================================================================
# Environment
# =============================================================================


def load_environment(env_path: Path | None = None) -> None:
    """Load a .env file into the process environment."""
    from dotenv import load_dotenv

    load_dotenv(env_path)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}='{raw}', using default {default}")
        return default


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration.

    All values are read from environment variables with sensible defaults.
    """

    data_dir: Path = DEFAULT_DATA_DIR
    backlog_domain: str = DEFAULT_BACKLOG_DOMAIN
    backlog_timeout: float = DEFAULT_BACKLOG_TIMEOUT
    generation_temperature: float = DEFAULT_GENERATION_TEMPERATURE
    generation_max_tokens: int = DEFAULT_GENERATION_MAX_TOKENS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create config from environment variables."""
        return cls(
            data_dir=Path(os.getenv("WEBPROD_DATA_DIR", str(DEFAULT_DATA_DIR))),
            backlog_domain=os.getenv("BACKLOG_DOMAIN", DEFAULT_BACKLOG_DOMAIN),
            backlog_timeout=_env_float("BACKLOG_TIMEOUT", DEFAULT_BACKLOG_TIMEOUT),
            generation_temperature=_env_float(
                "GENERATION_TEMPERATURE", DEFAULT_GENERATION_TEMPERATURE
            ),
            generation_max_tokens=int(
                _env_float("GENERATION_MAX_TOKENS", DEFAULT_GENERATION_MAX_TOKENS)
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
