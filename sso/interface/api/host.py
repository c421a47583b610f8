"""Host application authentication.

Login itself is public, but every route that acts on an existing account
is called by the host application on behalf of a user it has already
authenticated. The host proves that with a shared API key header.
"""

import logging
import secrets

from sso.config import HostAuthSettings
from sso.interface.error import HostAuthenticationError

logger = logging.getLogger(__name__)

HOST_KEY_HEADER = "X-Host-Api-Key"


def ensure_host(settings: HostAuthSettings, api_key: str | None) -> None:
    """Reject callers that do not present the configured host API key.

    Raises:
        HostAuthenticationError: If no key is configured, or the presented
            key is missing or wrong
    """
    if not settings.api_key:
        logger.warning("Host API key is not configured; refusing host route")
        raise HostAuthenticationError("Host authentication is not configured")
    if not api_key or not secrets.compare_digest(
        api_key.encode(), settings.api_key.encode()
    ):
        logger.warning("Rejected host route call with a missing or invalid key")
        raise HostAuthenticationError("Missing or invalid host API key")
