"""Backlog connection settings: verify the credentials, then save them."""

import logging
from dataclasses import dataclass

from webprod.account import AccountStore, BacklogSettings
from webprod.account.models import utc_now_iso

from .client import BacklogAPIError, BacklogClient
from .models import BacklogUser
from .submitter import ClientFactory, default_client_factory

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of a connection check.

    Exactly one of ``settings`` (saved on success) or ``error`` (user-facing
    message) is set.
    """

    settings: BacklogSettings | None = None
    user: BacklogUser | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class SettingsService:
    """Verifies Backlog credentials and persists them per operator."""

    def __init__(self, store: AccountStore, client_factory: ClientFactory | None = None):
        self.store = store
        self.client_factory = client_factory or default_client_factory()

    def verify_and_save(
        self,
        user_id: str,
        space_identifier: str,
        api_key: str,
        default_project_id: str = "",
    ) -> VerificationResult:
        """Check the credentials against ``/users/myself`` and save on success.

        Stored settings are left untouched when the check fails.
        """
        space_identifier = space_identifier.strip()
        api_key = api_key.strip()
        if not space_identifier or not api_key:
            return VerificationResult(error="スペース名とAPIキーを入力してください")

        candidate = BacklogSettings(
            space_identifier=space_identifier,
            api_key=api_key,
            default_project_id=default_project_id.strip(),
        )

        try:
            client: BacklogClient = self.client_factory(candidate)
            with client:
                user = client.get_myself()
        except BacklogAPIError as e:
            logger.warning(f"Backlog connection check failed for {space_identifier}: {e}")
            return VerificationResult(error=str(e))
        except ValueError as e:
            return VerificationResult(error=str(e))

        candidate.is_connected = True
        candidate.last_verified_at = utc_now_iso()
        saved = self.store.save_settings(user_id, candidate)
        logger.info(f"Backlog connection verified for {space_identifier} as {user.name}")
        return VerificationResult(settings=saved, user=user)
