"""Account store: session lookup, Backlog settings, audit log and history.

The workflow only depends on the ``AccountStore`` interface. ``FileAccountStore``
keeps everything as JSON under a data directory:

    {base_dir}/
    ├── settings/{user_id}.json       # BacklogSettings
    ├── audit_logs.json               # list of audit events
    └── issue_generations.json        # list of filed-issue records
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from urllib.parse import quote

from .models import AccountSession, BacklogSettings, IssueGenerationRecord, utc_now_iso

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """No valid session/credential is available for an outbound call."""


class AccountStore(ABC):
    """Account/session collaborator."""

    @abstractmethod
    def get_session(self) -> AccountSession | None:
        """Return the signed-in session, or None."""

    @abstractmethod
    def get_settings(self, user_id: str) -> BacklogSettings | None:
        """Return the latest saved settings for a user, or None."""

    @abstractmethod
    def save_settings(self, user_id: str, settings: BacklogSettings) -> BacklogSettings:
        """Persist settings (last write wins) and return the stored copy."""

    @abstractmethod
    def record_audit(
        self,
        user_id: str,
        action: str,
        resource_type: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Append an audit event."""

    @abstractmethod
    def record_issue_generation(self, user_id: str, record: IssueGenerationRecord) -> None:
        """Append a filed-issue history record."""


def require_session(store: AccountStore) -> AccountSession:
    """Return a valid session or raise AuthorizationError."""
    session = store.get_session()
    if session is None or not session.is_valid:
        raise AuthorizationError("No valid session")
    return session


class FileAccountStore(AccountStore):
    """JSON-file backed account store.

    Args:
        base_dir: Data directory
        session: Signed-in session, if any
    """

    def __init__(self, base_dir: Path | str, session: AccountSession | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._session = session
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def get_session(self) -> AccountSession | None:
        return self._session

    def set_session(self, session: AccountSession | None) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _settings_file(self, user_id: str) -> Path:
        file_id = quote(user_id, safe="")
        return self.base_dir / "settings" / f"{file_id}.json"

    def get_settings(self, user_id: str) -> BacklogSettings | None:
        settings_file = self._settings_file(user_id)
        with self._lock:
            if not settings_file.exists():
                return None
            try:
                data = json.loads(settings_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning(f"Corrupted settings file for user {user_id}")
                return None
        return BacklogSettings.from_dict(data)

    def save_settings(self, user_id: str, settings: BacklogSettings) -> BacklogSettings:
        settings_file = self._settings_file(user_id)
        with self._lock:
            current_version = 0
            if settings_file.exists():
                try:
                    current_version = int(
                        json.loads(settings_file.read_text(encoding="utf-8")).get("version", 0)
                    )
                except (json.JSONDecodeError, ValueError):
                    logger.warning(f"Overwriting corrupted settings file for user {user_id}")
            stored = BacklogSettings.from_dict({**settings.to_dict(), "version": current_version + 1})
            settings_file.parent.mkdir(parents=True, exist_ok=True)
            settings_file.write_text(
                json.dumps(stored.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
            )
        logger.info(f"Saved Backlog settings for user {user_id} (version={stored.version})")
        return stored

    # ------------------------------------------------------------------
    # Append-only logs
    # ------------------------------------------------------------------

    def _append(self, filename: str, entry: dict[str, Any]) -> None:
        log_file = self.base_dir / filename
        with self._lock:
            entries: list[dict[str, Any]] = []
            if log_file.exists():
                try:
                    entries = json.loads(log_file.read_text(encoding="utf-8"))
                except json.JSONDecodeError:
                    logger.warning(f"Corrupted {filename}, starting a new list")
            entries.append(entry)
            log_file.write_text(json.dumps(entries, indent=2, ensure_ascii=False), encoding="utf-8")

    def _read(self, filename: str) -> list[dict[str, Any]]:
        log_file = self.base_dir / filename
        with self._lock:
            if not log_file.exists():
                return []
            try:
                return json.loads(log_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                return []

    def record_audit(
        self,
        user_id: str,
        action: str,
        resource_type: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self._append(
            "audit_logs.json",
            {
                "user_id": user_id,
                "action": action,
                "resource_type": resource_type,
                "details": details or {},
                "created_at": utc_now_iso(),
            },
        )

    def record_issue_generation(self, user_id: str, record: IssueGenerationRecord) -> None:
        self._append("issue_generations.json", {"user_id": user_id, **record.to_dict()})

    def audit_events(self) -> list[dict[str, Any]]:
        return self._read("audit_logs.json")

    def issue_generations(self) -> list[dict[str, Any]]:
        return self._read("issue_generations.json")
