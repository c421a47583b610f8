"""Unit tests for AuthenticateUseCase."""

import asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from dishka import AsyncContainer
from pydantic import ValidationError

from sso.application.usecase.auth import (
    AuthenticateRequest,
    AuthenticateUseCase,
    AuthOutcome,
)
from sso.config import DingtalkSettings
from sso.domain.repository import (
    AccountRepository,
    ExternalLinkRepository,
    MembershipRepository,
)
from sso.domain.service import (
    AccessPolicyEvaluator,
    AccountLinker,
    AuthService,
    IdentityNormalizer,
    LinkAction,
    OrganizationTracker,
)
from sso.domain.value import (
    AuthProvider,
    FailureKind,
    ProviderProfile,
    ProviderToken,
    UserId,
)
from sso.persistence.repository.inmemory import (
    InMemoryAccountRepository,
    InMemoryExternalLinkRepository,
    InMemoryMembershipRepository,
    InMemoryStore,
    InMemoryUnitOfWork,
)
from tests.harness import create_env_fixture
from tests.helpers import RecordingLogger, make_profile

# Unit test fixture
unit_env = create_env_fixture()


def make_token(organization_id: str | None = "corp_a") -> ProviderToken:
    return ProviderToken(access_token="access-123", organization_id=organization_id)


async def build_use_case(
    env: AsyncContainer, log: RecordingLogger, account_linker=None
) -> AuthenticateUseCase:
    """Assemble the use case from container parts with a recording logger."""
    return AuthenticateUseCase(
        auth_service=await env.get(AuthService),
        identity_normalizer=await env.get(IdentityNormalizer),
        access_policy=await env.get(AccessPolicyEvaluator),
        account_linker=account_linker or await env.get(AccountLinker),
        organization_tracker=await env.get(OrganizationTracker),
        settings=await env.get(DingtalkSettings),
        log=log,
    )


class TestAuthenticateUseCase:
    """Tests for AuthenticateUseCase."""

    @pytest.mark.asyncio
    async def test_creates_account_and_tracks_organization(
        self, unit_env: AsyncContainer
    ):
        """A new DingTalk identity ends in Done with a fresh account."""
        # Arrange
        use_case = await unit_env.get(AuthenticateUseCase)
        memberships = await unit_env.get(MembershipRepository)

        # Act
        outcome = await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile())
        )

        # Assert
        assert outcome.failed is False
        assert outcome.failure_kind is None
        assert outcome.action == LinkAction.CREATED
        assert outcome.identity.external_id == "union_abc123def456"

        tracked = await memberships.find_by_user_and_organization(
            outcome.account_id, "corp_a"
        )
        assert tracked is not None
        assert tracked.external_id == "union_abc123def456"

    @pytest.mark.asyncio
    async def test_second_login_reuses_account(self, unit_env):
        use_case = await unit_env.get(AuthenticateUseCase)
        request = AuthenticateRequest(token=make_token(), profile=make_profile())

        first = await use_case.execute(request)
        second = await use_case.execute(request)

        assert second.action == LinkAction.REUSED
        assert second.account_id == first.account_id

    @pytest.mark.asyncio
    async def test_fetches_profile_when_not_supplied(self, unit_env):
        """The mock DingTalk client derives a profile from the token."""
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(
            AuthenticateRequest(token=ProviderToken(access_token="mock-token-alice"))
        )

        assert outcome.failed is False
        assert outcome.identity.external_id == "union_alice"
        assert outcome.identity.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_missing_token_is_invalid(self, unit_env):
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(AuthenticateRequest(token=None))

        assert outcome.failed is True
        assert outcome.failure_kind == FailureKind.INVALID_TOKEN
        assert outcome.account_id is None

    @pytest.mark.asyncio
    async def test_blank_access_token_is_invalid(self, unit_env):
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(
            AuthenticateRequest(
                token=ProviderToken(access_token="  "), profile=make_profile()
            )
        )

        assert outcome.failure_kind == FailureKind.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_profile_without_identity_is_invalid(self, unit_env):
        """An empty profile (degraded fetch) cannot yield an externalId."""
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=ProviderProfile.empty())
        )

        assert outcome.failure_kind == FailureKind.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_missing_email_when_virtual_emails_disabled(self, unit_env):
        settings = await unit_env.get(DingtalkSettings)
        settings.allow_virtual_email = False
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile(email=None))
        )

        assert outcome.failure_kind == FailureKind.MISSING_EMAIL

    @pytest.mark.asyncio
    async def test_blocked_organization_regardless_of_allow_list(self, unit_env):
        """Block list wins even when the corp is also allowed."""
        # Arrange
        settings = await unit_env.get(DingtalkSettings)
        settings.allowed_corp_ids = ["blocked_corp_1", "corp_a"]
        settings.blocked_corp_ids = ["blocked_corp_1"]
        use_case = await unit_env.get(AuthenticateUseCase)
        accounts = await unit_env.get(AccountRepository)

        # Act
        outcome = await use_case.execute(
            AuthenticateRequest(
                token=make_token("blocked_corp_1"), profile=make_profile()
            )
        )

        # Assert
        assert outcome.failure_kind == FailureKind.ORGANIZATION_NOT_ALLOWED
        assert outcome.identity.organization_id == "blocked_corp_1"
        assert await accounts.find_by_email("zhangsan@example.com") is None

    @pytest.mark.asyncio
    async def test_registration_disabled(self, unit_env):
        settings = await unit_env.get(DingtalkSettings)
        settings.authorize_signup = False
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile())
        )

        assert outcome.failure_kind == FailureKind.REGISTRATION_DISABLED

    @pytest.mark.asyncio
    async def test_unknown_account_hint(self, unit_env):
        use_case = await unit_env.get(AuthenticateUseCase)

        outcome = await use_case.execute(
            AuthenticateRequest(
                token=make_token(),
                profile=make_profile(),
                existing_account_id=UserId(uuid4()),
            )
        )

        assert outcome.failure_kind == FailureKind.ACCOUNT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_account_of_another_identity_is_a_conflict(self, unit_env):
        use_case = await unit_env.get(AuthenticateUseCase)
        owner = await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile())
        )

        outcome = await use_case.execute(
            AuthenticateRequest(
                token=make_token(), profile=make_profile(union_id="union_intruder")
            )
        )

        assert outcome.failed is True
        assert outcome.failure_kind == FailureKind.ACCOUNT_CONFLICT
        assert outcome.account_id is None
        links = await unit_env.get(ExternalLinkRepository)
        link = await links.find_by_user_id(AuthProvider.DINGTALK, owner.account_id)
        assert link.external_id == "union_abc123def456"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_classified(self, unit_env):
        """Nothing escapes execute."""
        log = RecordingLogger()
        broken_linker = AsyncMock(spec=AccountLinker)
        broken_linker.link.side_effect = RuntimeError("database is gone")
        use_case = await build_use_case(unit_env, log, account_linker=broken_linker)

        outcome = await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile())
        )

        assert outcome.failure_kind == FailureKind.UNEXPECTED_ERROR
        assert "database is gone" in outcome.failure_message
        assert "Unexpected error during DingTalk authentication" in log.messages(
            "error"
        )

    @pytest.mark.asyncio
    async def test_walks_state_machine_in_order(self, unit_env):
        log = RecordingLogger()
        use_case = await build_use_case(unit_env, log)

        await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile())
        )

        states = [
            attrs["state"]
            for level, msg, attrs in log.events
            if msg == "Auth state transition"
        ]
        assert states == [
            "validating",
            "resolving",
            "policy-check",
            "matching",
            "creating",
            "tracking",
            "done",
        ]

    @pytest.mark.asyncio
    async def test_failure_enters_failed_state(self, unit_env):
        log = RecordingLogger()
        use_case = await build_use_case(unit_env, log)

        await use_case.execute(AuthenticateRequest(token=None))

        failures = [
            attrs for level, msg, attrs in log.events if level == "warn"
        ]
        assert failures[0]["state"] == "failed"
        assert failures[0]["failure_kind"] == "invalid-token"

    @pytest.mark.asyncio
    async def test_debug_logs_full_result(self, unit_env):
        settings = await unit_env.get(DingtalkSettings)
        settings.debug_auth = True
        log = RecordingLogger()
        use_case = await build_use_case(unit_env, log)

        await use_case.execute(
            AuthenticateRequest(token=make_token(), profile=make_profile())
        )

        assert "DingTalk auth result" in log.messages("info")


class TestAuthOutcome:
    """Tests for AuthOutcome exclusivity."""

    def test_failure_cannot_carry_account(self):
        with pytest.raises(ValidationError):
            AuthOutcome(
                account_id=uuid4(),
                failed=True,
                failure_kind=FailureKind.TIMEOUT,
            )

    def test_success_needs_account(self):
        with pytest.raises(ValidationError):
            AuthOutcome(failed=False)


class YieldingAccountRepository(InMemoryAccountRepository):
    """Lets other logins run between the username check and the insert."""

    async def find_by_username(self, username):
        found = await super().find_by_username(username)
        await asyncio.sleep(0)
        return found


def build_request_use_case(
    store: InMemoryStore, settings: DingtalkSettings
) -> AuthenticateUseCase:
    """One request's worth of services over a store shared between requests."""
    log = RecordingLogger()
    normalizer = IdentityNormalizer(settings, log=log)
    unit_of_work = InMemoryUnitOfWork(store)
    return AuthenticateUseCase(
        auth_service=AuthService({}),
        identity_normalizer=normalizer,
        access_policy=AccessPolicyEvaluator(settings, log=log),
        account_linker=AccountLinker(
            account_repository=YieldingAccountRepository(store),
            external_link_repository=InMemoryExternalLinkRepository(store),
            unit_of_work=unit_of_work,
            identity_normalizer=normalizer,
            settings=settings,
            log=log,
        ),
        organization_tracker=OrganizationTracker(
            InMemoryMembershipRepository(store), unit_of_work, settings, log=log
        ),
        settings=settings,
        log=log,
    )


class TestConcurrentLogins:
    """Parallel first logins of one person converge on a single account."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["zhangsan@example.com", None])
    async def test_same_identity_creates_one_account(self, email):
        # Arrange
        store = InMemoryStore()
        settings = DingtalkSettings()
        request = AuthenticateRequest(
            token=make_token(), profile=make_profile(email=email)
        )

        # Act
        outcomes = await asyncio.gather(
            *(
                build_request_use_case(store, settings).execute(request)
                for _ in range(5)
            )
        )

        # Assert
        assert all(not outcome.failed for outcome in outcomes)
        assert len({outcome.account_id for outcome in outcomes}) == 1
        assert [outcome.action for outcome in outcomes].count(LinkAction.CREATED) == 1
        assert len(store.accounts) == 1
        assert len(store.links) == 1
        assert list(store.accounts) == [outcomes[0].account_id]
