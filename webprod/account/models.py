"""Account, settings and history records."""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class AccountSession:
    """Signed-in operator and the bearer credential for outbound calls."""

    user_id: str
    access_token: str

    @property
    def is_valid(self) -> bool:
        return bool(self.user_id and self.access_token)

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"


@dataclass
class BacklogSettings:
    """Per-operator Backlog connection settings.

    Attributes:
        space_identifier: Backlog space name (``{space}.backlog.jp``)
        api_key: Backlog API key
        default_project_id: Project preselected at setup
        is_connected: Whether the last connection check succeeded
        last_verified_at: ISO timestamp of the last successful check
        version: Incremented on every save (last write wins)
    """

    space_identifier: str = ""
    api_key: str = ""
    default_project_id: str = ""
    is_connected: bool = False
    last_verified_at: str | None = None
    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BacklogSettings":
        return cls(
            space_identifier=data.get("space_identifier", ""),
            api_key=data.get("api_key", ""),
            default_project_id=data.get("default_project_id", "") or "",
            is_connected=bool(data.get("is_connected", False)),
            last_verified_at=data.get("last_verified_at"),
            version=int(data.get("version", 0)),
        )


@dataclass
class IssueGenerationRecord:
    """History entry written after an issue is filed."""

    template_version: str
    selected_items: list[dict[str, Any]]
    generated_summary: str
    generated_description: str
    edited_summary: str
    edited_description: str
    issue_key: str
    issue_url: str
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
