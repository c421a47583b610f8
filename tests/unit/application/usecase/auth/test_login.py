"""Unit tests for LoginUseCase."""

import pytest
from dishka import AsyncContainer

from sso.adapter.dingtalk import DingtalkOAuthClient
from sso.adapter.error import TokenExchangeError
from sso.application.usecase.auth import LoginUseCase
from sso.application.usecase.auth.login import LoginRequest
from sso.config import DingtalkSettings
from sso.domain.service import LinkAction
from sso.domain.value import FailureKind
from tests.harness import create_env_fixture
from tests.helpers import make_profile

# Unit test fixture
unit_env = create_env_fixture()


class TestLoginUseCase:
    """Tests for LoginUseCase."""

    @pytest.mark.asyncio
    async def test_login_creates_account_from_code(self, unit_env: AsyncContainer):
        """Code exchange, profile fetch and account creation in one call."""
        # Arrange
        login_use_case = await unit_env.get(LoginUseCase)

        # Act
        outcome = await login_use_case.execute(LoginRequest(code="alice"))

        # Assert
        assert outcome.failed is False
        assert outcome.action == LinkAction.CREATED
        assert outcome.identity.username.root == "alice"
        assert outcome.identity.organization_id == "ding_mock_corp"

    @pytest.mark.asyncio
    async def test_exchange_token_returns_provider_token(self, unit_env):
        login_use_case = await unit_env.get(LoginUseCase)

        token = await login_use_case.exchange_token("alice")

        assert token.access_token == "mock-token-alice"
        assert token.organization_id == "ding_mock_corp"

    @pytest.mark.asyncio
    async def test_exchange_token_raises_classified_error(self, unit_env):
        login_use_case = await unit_env.get(LoginUseCase)

        with pytest.raises(TokenExchangeError) as exc_info:
            await login_use_case.exchange_token("invalid")

        assert exc_info.value.kind == FailureKind.PROVIDER_PROTOCOL_ERROR

    @pytest.mark.asyncio
    async def test_expired_code_is_a_failed_outcome(self, unit_env):
        login_use_case = await unit_env.get(LoginUseCase)

        outcome = await login_use_case.execute(LoginRequest(code="invalid"))

        assert outcome.failed is True
        assert outcome.failure_kind == FailureKind.PROVIDER_PROTOCOL_ERROR

    @pytest.mark.asyncio
    async def test_blank_code_is_malformed(self, unit_env):
        login_use_case = await unit_env.get(LoginUseCase)

        outcome = await login_use_case.execute(LoginRequest(code=" "))

        assert outcome.failure_kind == FailureKind.MALFORMED_REQUEST

    @pytest.mark.asyncio
    async def test_registered_profile_from_blocked_corp(self, unit_env):
        # Arrange
        settings = await unit_env.get(DingtalkSettings)
        settings.blocked_corp_ids = ["blocked_corp_1"]
        client = await unit_env.get(DingtalkOAuthClient)
        client.register("zhang", make_profile(), organization_id="blocked_corp_1")
        login_use_case = await unit_env.get(LoginUseCase)

        # Act
        outcome = await login_use_case.execute(LoginRequest(code="zhang"))

        # Assert
        assert outcome.failure_kind == FailureKind.ORGANIZATION_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_connect_flow_links_existing_account(self, unit_env):
        login_use_case = await unit_env.get(LoginUseCase)
        first = await login_use_case.execute(LoginRequest(code="alice"))

        outcome = await login_use_case.execute(
            LoginRequest(code="bob", existing_account_id=first.account_id)
        )

        assert outcome.action == LinkAction.LINKED
        assert outcome.account_id == first.account_id
