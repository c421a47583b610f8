"""Login use case."""

import logfire
from pydantic import BaseModel

from sso.adapter.error import TokenExchangeError
from sso.domain.service import AuthService
from sso.domain.value import AuthProvider, ProviderToken, UserId

from ..base import BaseUseCase
from .authenticate import AuthenticateRequest, AuthenticateUseCase, AuthOutcome


class LoginRequest(BaseModel):
    """Login request from the OAuth callback."""

    code: str  # OAuth authorization code
    existing_account_id: UserId | None = None  # set when connecting an account


class LoginUseCase(BaseUseCase[LoginRequest, AuthOutcome]):
    """Use case for the full DingTalk login: code exchange, then authenticate."""

    def __init__(
        self, auth_service: AuthService, authenticate: AuthenticateUseCase
    ) -> None:
        """Initialize login use case.

        Args:
            auth_service: Authentication domain service
            authenticate: Authenticate use case
        """
        self.auth_service = auth_service
        self.authenticate = authenticate

    async def exchange_token(self, code: str) -> ProviderToken:
        """Exchange an authorization code for a DingTalk token.

        Args:
            code: Authorization code

        Returns:
            Provider token

        Raises:
            TokenExchangeError: Classified exchange failure
        """
        return await self.auth_service.exchange_token(AuthProvider.DINGTALK, code)

    async def execute(self, request: LoginRequest) -> AuthOutcome:
        """Execute the login flow.

        Steps:
        1. Exchange the authorization code (retried per HTTP policy)
        2. Run the authenticate state machine with the token

        Args:
            request: Login request with the authorization code

        Returns:
            Authentication outcome; exchange failures become failed outcomes
        """
        with logfire.span("login.execute"):
            try:
                token = await self.exchange_token(request.code)
            except TokenExchangeError as e:
                logfire.warn(
                    "DingTalk token exchange failed",
                    failure_kind=e.kind.value,
                    error=str(e),
                )
                return AuthOutcome.failure(e.kind, str(e))

            return await self.authenticate.execute(
                AuthenticateRequest(
                    token=token, existing_account_id=request.existing_account_id
                )
            )
