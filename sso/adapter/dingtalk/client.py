"""DingTalk OAuth 2.0 client.

Composes the authorization URL, the token exchange and the profile fetch
behind the provider-neutral OAuthClient interface.
"""

from urllib.parse import urlencode

import logfire

from sso.adapter.dingtalk.profile import ProfileFetcher
from sso.adapter.dingtalk.token import TokenExchangeClient
from sso.adapter.error import TokenExchangeError
from sso.config import DingtalkSettings
from sso.domain.service.auth_service import OAuthClient
from sso.domain.value import FailureKind, ProviderProfile, ProviderToken


class DingtalkOAuthClient(OAuthClient):
    """Base class for DingTalk OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealDingtalkOAuthClient(DingtalkOAuthClient):
    """DingTalk OAuth client talking to the real API."""

    def __init__(
        self,
        settings: DingtalkSettings,
        token_client: TokenExchangeClient,
        profile_fetcher: ProfileFetcher,
    ) -> None:
        """Initialize DingTalk OAuth client.

        Args:
            settings: DingTalk settings (client id, URLs, scope)
            token_client: Authorization-code exchange client
            profile_fetcher: Per-login profile fetcher
        """
        self.settings = settings
        self.token_client = token_client
        self.profile_fetcher = profile_fetcher

    def authorization_url(self, state: str) -> str:
        """Build the DingTalk consent URL.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect the browser to
        """
        params = {
            "redirect_uri": self.settings.callback_url,
            "response_type": "code",
            "client_id": self.settings.client_id,
            "scope": self.settings.scope,
            "state": state,
            "prompt": "consent",
        }
        logfire.info(
            "DingTalk OAuth authorization initiated",
            redirect_uri=self.settings.callback_url,
        )
        return f"{self.settings.authorize_url}?{urlencode(params)}"

    async def exchange_token(self, code: str) -> ProviderToken:
        """Exchange an authorization code.

        Raises:
            TokenExchangeError: If the exchange failed
        """
        return await self.token_client.exchange(code)

    async def fetch_profile(self, token: ProviderToken) -> ProviderProfile:
        """Fetch the profile behind a token (empty profile on failure)."""
        return await self.profile_fetcher.fetch(token.access_token)


class MockDingtalkOAuthClient(DingtalkOAuthClient):
    """Mock DingTalk OAuth client for testing.

    Returns deterministic data derived from the authorization code without
    making API calls. Code ``"invalid"`` behaves like an expired code.
    Tests can script a specific profile with ``register``.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, ProviderProfile] = {}
        self._organizations: dict[str, str | None] = {}

    def register(
        self,
        code: str,
        profile: ProviderProfile,
        organization_id: str | None = "ding_mock_corp",
    ) -> None:
        """Make ``code`` resolve to ``profile`` from ``organization_id``."""
        self._profiles[f"mock-token-{code}"] = profile
        self._organizations[code] = organization_id

    def authorization_url(self, state: str) -> str:
        return f"https://login.dingtalk.com/oauth2/auth?state={state}&mock=true"

    async def exchange_token(self, code: str) -> ProviderToken:
        if not code or not code.strip():
            raise TokenExchangeError(
                FailureKind.MALFORMED_REQUEST, "Authorization code is missing"
            )
        if code == "invalid":
            raise TokenExchangeError(
                FailureKind.PROVIDER_PROTOCOL_ERROR,
                "DingTalk token error: invalid code (code: 40078)",
            )
        return ProviderToken(
            access_token=f"mock-token-{code}",
            refresh_token=f"mock-refresh-{code}",
            expires_in=7200,
            organization_id=self._organizations.get(code, "ding_mock_corp"),
        )

    async def fetch_profile(self, token: ProviderToken) -> ProviderProfile:
        registered = self._profiles.get(token.access_token)
        if registered is not None:
            return registered

        code = token.access_token.removeprefix("mock-token-")
        return ProviderProfile(
            union_id=f"union_{code}",
            open_id=f"open_{code}",
            nick=code,
            name=f"Mock {code}",
            email=f"{code}@example.com",
        )
