"""Organization access policy domain service."""

import logfire

from sso.config import DingtalkSettings
from sso.util.logging import StructuredLogger

from .base import Service


class AccessPolicyEvaluator(Service):
    """Allow/block lists keyed by DingTalk organization (corpId).

    The block list always wins. An empty allow list allows every
    organization that is not blocked.
    """

    def __init__(
        self, settings: DingtalkSettings, log: StructuredLogger = logfire
    ) -> None:
        self.settings = settings
        self.log = log

    def is_allowed(self, organization_id: str | None) -> bool:
        """Check whether logins from an organization are permitted.

        Args:
            organization_id: corpId from the token exchange, if disclosed

        Returns:
            True when the login may proceed
        """
        if not self.settings.track_organizations or not organization_id:
            return True

        if organization_id in self.settings.blocked_corp_ids:
            self.log.warn(
                "Organization blocked", organization_id=organization_id
            )
            return False

        allowed = self.settings.allowed_corp_ids
        if allowed and organization_id not in allowed:
            self.log.warn(
                "Organization not in allow list", organization_id=organization_id
            )
            return False

        return True
