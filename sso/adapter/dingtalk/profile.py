"""DingTalk user profile fetch.

Profile failures never fail a login: any provider-side problem is logged
and an empty profile returned.
"""

import logging

import httpx
from pydantic import ValidationError

from sso.adapter.dingtalk.http import RetryingHttpClient, provider_error_message
from sso.config import DingtalkSettings
from sso.domain.value import ProviderProfile

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "x-acs-dingtalk-access-token"


class ProfileFetcher:
    """Fetches ``/v1.0/contact/users/me`` for an access token.

    One instance serves one login attempt and fetches each token's profile
    at most once.
    """

    def __init__(self, settings: DingtalkSettings, http: RetryingHttpClient) -> None:
        self.settings = settings
        self.http = http
        self._cache: dict[str, ProviderProfile] = {}

    @property
    def profile_url(self) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}{self.settings.profile_path}"

    async def fetch(self, access_token: str) -> ProviderProfile:
        """Fetch the profile behind ``access_token``.

        Args:
            access_token: DingTalk user access token

        Returns:
            The profile, or an empty profile on any provider-side failure
        """
        if not access_token or not access_token.strip():
            return ProviderProfile.empty()

        cached = self._cache.get(access_token)
        if cached is not None:
            return cached

        profile = await self._fetch(access_token)
        self._cache[access_token] = profile
        return profile

    async def _fetch(self, access_token: str) -> ProviderProfile:
        try:
            response = await self.http.send(
                "GET",
                self.profile_url,
                retry_statuses=False,
                headers={
                    ACCESS_TOKEN_HEADER: access_token,
                    "Content-Type": "application/json",
                },
            )
        except httpx.TransportError as e:
            logger.error(
                f"DingTalk user info request failed: {type(e).__name__} - {e}"
            )
            return ProviderProfile.empty()

        try:
            data = response.json()
        except ValueError:
            logger.error(
                f"DingTalk user info parse error (status {response.status_code}): "
                f"{response.text[:500]}"
            )
            return ProviderProfile.empty()

        error_message = provider_error_message(data)
        if error_message:
            logger.error(f"DingTalk API error: {error_message}")
            return ProviderProfile.empty()

        if response.status_code >= 400 or not isinstance(data, dict):
            logger.error(
                f"DingTalk user info unexpected response (status {response.status_code})"
            )
            return ProviderProfile.empty()

        if self.settings.debug_auth:
            logger.debug(f"DingTalk user info fields: {sorted(data.keys())}")

        try:
            return ProviderProfile.from_response(data)
        except ValidationError as e:
            logger.error(f"DingTalk user info has unexpected field types: {e}")
            return ProviderProfile.empty()
