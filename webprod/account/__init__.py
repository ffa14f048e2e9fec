"""Account/session store and per-operator records."""

from .models import AccountSession, BacklogSettings, IssueGenerationRecord
from .store import AccountStore, AuthorizationError, FileAccountStore, require_session

__all__ = [
    "AccountSession",
    "AccountStore",
    "AuthorizationError",
    "BacklogSettings",
    "FileAccountStore",
    "IssueGenerationRecord",
    "require_session",
]
