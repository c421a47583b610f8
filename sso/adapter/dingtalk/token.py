"""DingTalk authorization-code exchange.

DingTalk does not accept the standard form-encoded OAuth2 token request.
The exchange is a JSON POST with camelCase keys:

    POST /v1.0/oauth2/userAccessToken
    {"clientId": ..., "clientSecret": ..., "code": ..., "grantType": "authorization_code"}
"""

import logging

import httpx
from pydantic import ValidationError

from sso.adapter.dingtalk.http import (
    RetryingHttpClient,
    classify_transport_error,
    provider_error_message,
)
from sso.adapter.error import TokenExchangeError
from sso.config import DingtalkSettings
from sso.domain.value import FailureKind, ProviderToken

logger = logging.getLogger(__name__)

GRANT_TYPE = "authorization_code"


class TokenExchangeClient:
    """Exchanges authorization codes for DingTalk user access tokens."""

    def __init__(self, settings: DingtalkSettings, http: RetryingHttpClient) -> None:
        """Initialize the token exchange client.

        Args:
            settings: DingTalk settings (credentials, token URL)
            http: Retrying HTTP client
        """
        self.settings = settings
        self.http = http

    async def exchange(self, code: str) -> ProviderToken:
        """Exchange an authorization code for a ProviderToken.

        Transport failures and 429/5xx responses are retried; protocol and
        parse errors are not.

        Args:
            code: Authorization code from the OAuth callback

        Returns:
            The provider token

        Raises:
            TokenExchangeError: malformed-request, timeout, connection-error,
                response-parse-error or provider-protocol-error
        """
        if not code or not code.strip():
            raise TokenExchangeError(
                FailureKind.MALFORMED_REQUEST, "Authorization code is missing"
            )

        body = {
            "clientId": self.settings.client_id,
            "clientSecret": self.settings.client_secret,
            "code": code.strip(),
            "grantType": GRANT_TYPE,
        }

        try:
            response = await self.http.send(
                "POST",
                self.settings.token_url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        except httpx.TransportError as e:
            kind = classify_transport_error(e)
            raise TokenExchangeError(
                kind, f"DingTalk token request failed: {type(e).__name__} - {e}"
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                f"DingTalk token response parse error (status {response.status_code}): "
                f"{response.text[:500]}"
            )
            raise TokenExchangeError(
                FailureKind.RESPONSE_PARSE_ERROR,
                f"DingTalk token response is not JSON (status {response.status_code})",
            ) from e

        error_message = provider_error_message(data)
        if error_message:
            logger.error(f"DingTalk token error: {error_message}")
            raise TokenExchangeError(
                FailureKind.PROVIDER_PROTOCOL_ERROR,
                f"DingTalk token error: {error_message}",
            )

        if response.status_code >= 400 or not isinstance(data, dict):
            raise TokenExchangeError(
                FailureKind.RESPONSE_PARSE_ERROR,
                f"Unexpected DingTalk token response (status {response.status_code})",
            )

        try:
            token = ProviderToken.from_response(data)
        except ValidationError as e:
            raise TokenExchangeError(
                FailureKind.RESPONSE_PARSE_ERROR,
                f"Unexpected DingTalk token field types: {e}",
            ) from e
        if not token.access_token:
            raise TokenExchangeError(
                FailureKind.RESPONSE_PARSE_ERROR,
                "DingTalk token response has no accessToken",
            )

        logger.info(
            f"DingTalk token exchanged (corp: {token.organization_id or 'n/a'})"
        )
        return token
