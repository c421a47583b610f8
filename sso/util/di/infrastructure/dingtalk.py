"""DingTalk infrastructure providers."""

from dishka import Scope, provide

from sso.adapter.dingtalk import (
    DingtalkOAuthClient,
    ProfileFetcher,
    RealDingtalkOAuthClient,
    RetryingHttpClient,
    TokenExchangeClient,
)
from sso.config import DingtalkSettings
from sso.util.di.base import ProviderBase
from sso.util.error import ConfigurationError


class DingtalkProvider(ProviderBase):
    """DingTalk component base."""

    __mock_component__ = "dingtalk"


class ProdDingtalkProvider(DingtalkProvider):
    """Production DingTalk provider talking to api.dingtalk.com."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_http_client(self, settings: DingtalkSettings) -> RetryingHttpClient:
        """Provide the retrying HTTP client for DingTalk calls."""
        return RetryingHttpClient(settings.http)

    @provide(scope=Scope.APP)
    def get_token_exchange_client(
        self, settings: DingtalkSettings, http: RetryingHttpClient
    ) -> TokenExchangeClient:
        """Provide the authorization-code exchange client.

        Raises:
            ConfigurationError: If DingTalk credentials are not configured
        """
        if not settings.client_id:
            raise ConfigurationError("DINGTALK__CLIENT_ID", "must be configured")
        if not settings.client_secret:
            raise ConfigurationError("DINGTALK__CLIENT_SECRET", "must be configured")
        return TokenExchangeClient(settings, http)

    @provide(scope=Scope.REQUEST)
    def get_profile_fetcher(
        self, settings: DingtalkSettings, http: RetryingHttpClient
    ) -> ProfileFetcher:
        """Provide a profile fetcher for one login (caches per token)."""
        return ProfileFetcher(settings, http)

    @provide(scope=Scope.REQUEST)
    def get_dingtalk_oauth_client(
        self,
        settings: DingtalkSettings,
        token_client: TokenExchangeClient,
        profile_fetcher: ProfileFetcher,
    ) -> DingtalkOAuthClient:
        """Provide DingTalk OAuth client."""
        return RealDingtalkOAuthClient(settings, token_client, profile_fetcher)
