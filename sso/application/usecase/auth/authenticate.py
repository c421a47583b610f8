"""Authenticate use case.

Runs the login state machine for a DingTalk token:

    Validating -> Resolving -> PolicyCheck -> Matching
        -> {Creating | Linking | Reusing} -> Tracking -> Done

Any state can end in Failed. Failures come back as a classified
AuthOutcome; no exception escapes ``execute``.
"""

from enum import Enum

import logfire
from pydantic import BaseModel, model_validator

from sso.config import DingtalkSettings
from sso.domain.error import (
    AccountConflictError,
    AccountValidationError,
    IdentityResolutionError,
    NotFoundError,
    RegistrationDisabledError,
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
    ResolvedIdentity,
    UserId,
)
from sso.util.logging import StructuredLogger

from ..base import BaseUseCase


class AuthState(str, Enum):
    """States of the login state machine."""

    VALIDATING = "validating"
    RESOLVING = "resolving"
    POLICY_CHECK = "policy-check"
    MATCHING = "matching"
    CREATING = "creating"
    LINKING = "linking"
    REUSING = "reusing"
    TRACKING = "tracking"
    DONE = "done"
    FAILED = "failed"


_STATE_FOR_ACTION = {
    LinkAction.CREATED: AuthState.CREATING,
    LinkAction.LINKED: AuthState.LINKING,
    LinkAction.REUSED: AuthState.REUSING,
}


class AuthenticateRequest(BaseModel):
    """Authenticate request.

    ``profile`` may be supplied when the caller already fetched it;
    otherwise it is fetched with the token.
    """

    token: ProviderToken | None
    profile: ProviderProfile | None = None
    existing_account_id: UserId | None = None  # connect-existing-account flow


class AuthOutcome(BaseModel):
    """Result returned to the host. Success and failure are exclusive."""

    account_id: UserId | None = None
    failed: bool = False
    failure_kind: FailureKind | None = None
    failure_message: str | None = None
    identity: ResolvedIdentity | None = None
    action: LinkAction | None = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "AuthOutcome":
        if self.failed:
            if self.failure_kind is None:
                raise ValueError("A failed outcome needs a failure kind")
            if self.account_id is not None:
                raise ValueError("A failed outcome cannot carry an account")
        else:
            if self.account_id is None:
                raise ValueError("A successful outcome needs an account")
            if self.failure_kind is not None:
                raise ValueError("A successful outcome cannot carry a failure kind")
        return self

    @classmethod
    def success(
        cls,
        account_id: UserId,
        identity: ResolvedIdentity,
        action: LinkAction,
    ) -> "AuthOutcome":
        return cls(account_id=account_id, identity=identity, action=action)

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        message: str,
        identity: ResolvedIdentity | None = None,
    ) -> "AuthOutcome":
        return cls(
            failed=True,
            failure_kind=kind,
            failure_message=message,
            identity=identity,
        )


class AuthenticateUseCase(BaseUseCase[AuthenticateRequest, AuthOutcome]):
    """Use case resolving a DingTalk token into a local account."""

    def __init__(
        self,
        auth_service: AuthService,
        identity_normalizer: IdentityNormalizer,
        access_policy: AccessPolicyEvaluator,
        account_linker: AccountLinker,
        organization_tracker: OrganizationTracker,
        settings: DingtalkSettings,
        log: StructuredLogger = logfire,
    ) -> None:
        """Initialize authenticate use case.

        Args:
            auth_service: Authentication domain service (profile fetch)
            identity_normalizer: Profile to identity normalization
            access_policy: Organization allow/block lists
            account_linker: Account matching, linking and creation
            organization_tracker: Membership history
            settings: DingTalk settings
            log: Structured logger
        """
        self.auth_service = auth_service
        self.identity_normalizer = identity_normalizer
        self.access_policy = access_policy
        self.account_linker = account_linker
        self.organization_tracker = organization_tracker
        self.settings = settings
        self.log = log

    async def execute(self, request: AuthenticateRequest) -> AuthOutcome:
        """Run the login state machine.

        Args:
            request: Token, optional profile and optional account hint

        Returns:
            Success with the account id, or a classified failure
        """
        with self.log.span(
            "authenticate.execute",
            connect_flow=request.existing_account_id is not None,
        ):
            try:
                outcome = await self._run(request)
            except Exception as e:
                self.log.error(
                    "Unexpected error during DingTalk authentication",
                    error=str(e),
                    error_type=type(e).__name__,
                    _exc_info=True,
                )
                outcome = self._fail(
                    FailureKind.UNEXPECTED_ERROR, f"Unexpected error: {e}"
                )

            if self.settings.debug_auth:
                self.log.info(
                    "DingTalk auth result", outcome=outcome.model_dump(mode="json")
                )
            return outcome

    async def _run(self, request: AuthenticateRequest) -> AuthOutcome:
        self._enter(AuthState.VALIDATING)
        token = request.token
        if token is None or not token.access_token.strip():
            return self._fail(FailureKind.INVALID_TOKEN, "Token payload is missing")

        profile = request.profile
        if profile is None:
            profile = await self.auth_service.fetch_profile(
                AuthProvider.DINGTALK, token
            )
        if not (profile.union_id or "").strip() and not (profile.open_id or "").strip():
            return self._fail(
                FailureKind.INVALID_TOKEN, "Token did not yield a DingTalk identity"
            )

        self._enter(AuthState.RESOLVING)
        try:
            identity = self.identity_normalizer.normalize(
                profile, organization_id=token.organization_id
            )
        except IdentityResolutionError as e:
            return self._fail(e.kind, str(e))

        self._enter(AuthState.POLICY_CHECK, external_id=identity.external_id)
        if not self.access_policy.is_allowed(identity.organization_id):
            return self._fail(
                FailureKind.ORGANIZATION_NOT_ALLOWED,
                f"Organization {identity.organization_id} is not allowed",
                identity,
            )

        self._enter(AuthState.MATCHING, external_id=identity.external_id)
        try:
            result = await self.account_linker.link(
                identity, request.existing_account_id
            )
        except NotFoundError as e:
            return self._fail(FailureKind.ACCOUNT_NOT_FOUND, str(e), identity)
        except RegistrationDisabledError as e:
            return self._fail(FailureKind.REGISTRATION_DISABLED, str(e), identity)
        except AccountConflictError as e:
            return self._fail(FailureKind.ACCOUNT_CONFLICT, str(e), identity)
        except AccountValidationError as e:
            return self._fail(
                FailureKind.ACCOUNT_CREATION_INVALID, "; ".join(e.messages), identity
            )

        account = result.account
        self._enter(
            _STATE_FOR_ACTION[result.action],
            external_id=identity.external_id,
            user_id=str(account.id),
        )

        self._enter(AuthState.TRACKING, user_id=str(account.id))
        await self.organization_tracker.track(
            account.id,
            identity.organization_id,
            identity.external_id,
            identity.open_id,
        )

        self._enter(AuthState.DONE, user_id=str(account.id))
        return AuthOutcome.success(account.id, identity, result.action)

    def _enter(self, state: AuthState, **attributes: str) -> None:
        self.log.info("Auth state transition", state=state.value, **attributes)

    def _fail(
        self,
        kind: FailureKind,
        message: str,
        identity: ResolvedIdentity | None = None,
    ) -> AuthOutcome:
        self.log.warn(
            "DingTalk authentication failed",
            state=AuthState.FAILED.value,
            failure_kind=kind.value,
            message=message,
        )
        return AuthOutcome.failure(kind, message, identity)
