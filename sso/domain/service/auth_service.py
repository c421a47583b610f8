"""Authentication domain service."""

from sso.domain.value.types import AuthProvider, ProviderProfile, ProviderToken

from .base import Service


class OAuthClient:
    """OAuth client interface for identity providers."""

    def authorization_url(self, state: str) -> str:
        """Build the provider URL the browser is redirected to.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL
        """
        raise NotImplementedError

    async def exchange_token(self, code: str) -> ProviderToken:
        """Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the OAuth callback

        Returns:
            Provider token

        Raises:
            TokenExchangeError: If the exchange failed (classified)
        """
        raise NotImplementedError

    async def fetch_profile(self, token: ProviderToken) -> ProviderProfile:
        """Fetch the profile of the user who owns ``token``.

        Never raises for provider-side problems; returns an empty profile.

        Args:
            token: Token from exchange_token

        Returns:
            Provider profile, possibly empty
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service routing OAuth operations to the provider's client."""

    def __init__(self, oauth_clients: dict[AuthProvider, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
        """
        self.oauth_clients = oauth_clients

    def _client(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            raise ValueError(f"Unsupported provider: {provider}")
        return client

    def initiate_login(self, provider: AuthProvider, state: str) -> str:
        """Authorization URL for a provider.

        Raises:
            ValueError: If provider not supported
        """
        return self._client(provider).authorization_url(state)

    async def exchange_token(self, provider: AuthProvider, code: str) -> ProviderToken:
        """Exchange an authorization code with a provider.

        Raises:
            ValueError: If provider not supported
            TokenExchangeError: If the exchange failed
        """
        return await self._client(provider).exchange_token(code)

    async def fetch_profile(
        self, provider: AuthProvider, token: ProviderToken
    ) -> ProviderProfile:
        """Fetch the profile behind a token from a provider.

        Raises:
            ValueError: If provider not supported
        """
        return await self._client(provider).fetch_profile(token)
