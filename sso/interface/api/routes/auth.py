"""DingTalk authentication routes."""

import logging
import secrets
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, Header, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from sso.application.usecase.auth import (
    AuthOutcome,
    DescribeLinkUseCase,
    LoginRequest,
    LoginUseCase,
    RevokeLinkUseCase,
)
from sso.config import Settings
from sso.domain.service import AuthService
from sso.domain.value import AuthProvider, UserId
from sso.interface.api.host import HOST_KEY_HEADER, ensure_host
from sso.interface.error import ProviderDisabledError, failure_to_http

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth/dingtalk", tags=["authentication"], route_class=DishkaRoute
)

STATE_COOKIE = "dingtalk_oauth_state"
STATE_COOKIE_MAX_AGE = 10 * 60


class LoginResponse(BaseModel):
    """Successful DingTalk login."""

    account_id: str
    action: str
    username: str
    email: str
    email_is_authoritative: bool
    organization_id: str | None


class ConnectRequest(BaseModel):
    """Authorization code the host obtained for one of its signed-in users."""

    code: str
    account_id: UUID


class RevokeRequest(BaseModel):
    """Revoke request for an account's DingTalk link."""

    account_id: UUID


class RevokeResponse(BaseModel):
    """Revoke response."""

    success: bool


class DescriptionResponse(BaseModel):
    """Human-readable description of an account's DingTalk link."""

    account_id: str
    description: str


def _ensure_enabled(settings: Settings) -> None:
    if not settings.dingtalk.enabled:
        raise ProviderDisabledError("DingTalk login is disabled")


@router.get("")
async def initiate_login(
    auth_service: FromDishka[AuthService],
    settings: FromDishka[Settings],
) -> RedirectResponse:
    """Redirect the browser to the DingTalk consent page.

    A random state is stored in a short-lived cookie and checked on the
    callback.

    Returns:
        HTTP 302 redirect to login.dingtalk.com
    """
    _ensure_enabled(settings)

    state = secrets.token_urlsafe(32)
    auth_url = auth_service.initiate_login(AuthProvider.DINGTALK, state)
    logger.info("Initiating DingTalk login")

    response = RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=STATE_COOKIE,
        value=state,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=STATE_COOKIE_MAX_AGE,
    )
    return response


def _check_state(state: str | None, expected: str | None) -> None:
    if (
        not state
        or not expected
        or not secrets.compare_digest(state.encode(), expected.encode())
    ):
        logger.warning("DingTalk callback state missing or mismatched")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="OAuth state mismatch",
        )


def _login_response(outcome: AuthOutcome) -> LoginResponse:
    if outcome.failed:
        logger.info(f"DingTalk login failed: {outcome.failure_kind}")
        raise failure_to_http(outcome.failure_kind, outcome.failure_message or "")

    identity = outcome.identity
    return LoginResponse(
        account_id=str(outcome.account_id),
        action=outcome.action.value,
        username=str(identity.username),
        email=identity.email,
        email_is_authoritative=identity.email_is_authoritative,
        organization_id=identity.organization_id,
    )


@router.get("/callback", response_model=LoginResponse)
async def dingtalk_callback(
    code: str,
    response: Response,
    login_use_case: FromDishka[LoginUseCase],
    settings: FromDishka[Settings],
    state: str | None = None,
    dingtalk_oauth_state: str | None = Cookie(default=None),
) -> LoginResponse:
    """Handle the DingTalk OAuth callback and complete login.

    The callback never connects an existing account: the browser is not
    authenticated here, so any account hint would be caller-controlled.
    Connecting goes through ``POST /auth/dingtalk/connect``.

    Args:
        code: Authorization code from DingTalk
        response: Response used to clear the state cookie
        login_use_case: Login use case from DI
        settings: Application settings from DI
        state: State echoed back by DingTalk
        dingtalk_oauth_state: State cookie set by ``initiate_login``

    Returns:
        The resolved account

    Raises:
        HTTPException: If the state is missing or does not match, or login fails

    Example:
        GET /auth/dingtalk/callback?code=abc123&state=xyz789

        Response:
        {
            "account_id": "123e4567-e89b-12d3-a456-426614174000",
            "action": "created",
            "username": "zhang_san",
            ...
        }
    """
    _ensure_enabled(settings)
    _check_state(state, dingtalk_oauth_state)

    outcome = await login_use_case.execute(LoginRequest(code=code))
    login = _login_response(outcome)
    response.delete_cookie(STATE_COOKIE)
    return login


@router.post("/connect", response_model=LoginResponse)
async def connect_account(
    request: ConnectRequest,
    login_use_case: FromDishka[LoginUseCase],
    settings: FromDishka[Settings],
    host_api_key: str | None = Header(default=None, alias=HOST_KEY_HEADER),
) -> LoginResponse:
    """Connect a DingTalk identity to an account the host has signed in.

    The host runs its own consent redirect and state check, then posts the
    code together with the id of its signed-in user. That account wins over
    any link or email match.
    """
    ensure_host(settings.host_auth, host_api_key)
    _ensure_enabled(settings)

    outcome = await login_use_case.execute(
        LoginRequest(code=request.code, existing_account_id=UserId(request.account_id))
    )
    return _login_response(outcome)


@router.post("/revoke", response_model=RevokeResponse)
async def revoke_link(
    request: RevokeRequest,
    revoke_link_use_case: FromDishka[RevokeLinkUseCase],
    settings: FromDishka[Settings],
    host_api_key: str | None = Header(default=None, alias=HOST_KEY_HEADER),
) -> RevokeResponse:
    """Remove the DingTalk link of an account. Host only.

    Idempotent: revoking an account without a link still succeeds.
    """
    ensure_host(settings.host_auth, host_api_key)
    success = await revoke_link_use_case.execute(UserId(request.account_id))
    return RevokeResponse(success=success)


@router.get("/description/{account_id}", response_model=DescriptionResponse)
async def describe_link(
    account_id: UUID,
    describe_link_use_case: FromDishka[DescribeLinkUseCase],
    settings: FromDishka[Settings],
    host_api_key: str | None = Header(default=None, alias=HOST_KEY_HEADER),
) -> DescriptionResponse:
    """Describe the DingTalk link of an account. Host only.

    An empty description means the account has no link.
    """
    ensure_host(settings.host_auth, host_api_key)
    description = await describe_link_use_case.execute(UserId(account_id))
    return DescriptionResponse(account_id=str(account_id), description=description)
