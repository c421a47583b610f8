"""Interface layer errors."""

from fastapi import HTTPException, status

from sso.domain.value import FailureKind


class InterfaceError(Exception):
    """Base interface error."""

    pass


class ProviderDisabledError(InterfaceError):
    """DingTalk login is switched off in settings."""

    pass


class HostAuthenticationError(InterfaceError):
    """Caller of a host-only route is not the host application."""

    pass


# Client-side problems map to 4xx, provider trouble to 502/504
_FAILURE_STATUS: dict[FailureKind, int] = {
    FailureKind.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    FailureKind.MALFORMED_REQUEST: status.HTTP_400_BAD_REQUEST,
    FailureKind.MISSING_IDENTITY: status.HTTP_401_UNAUTHORIZED,
    FailureKind.MISSING_EMAIL: status.HTTP_401_UNAUTHORIZED,
    FailureKind.PROVIDER_PROTOCOL_ERROR: status.HTTP_401_UNAUTHORIZED,
    FailureKind.ORGANIZATION_NOT_ALLOWED: status.HTTP_403_FORBIDDEN,
    FailureKind.REGISTRATION_DISABLED: status.HTTP_403_FORBIDDEN,
    FailureKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.ACCOUNT_CONFLICT: status.HTTP_409_CONFLICT,
    FailureKind.ACCOUNT_CREATION_INVALID: status.HTTP_422_UNPROCESSABLE_CONTENT,
    FailureKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    FailureKind.CONNECTION_ERROR: status.HTTP_502_BAD_GATEWAY,
    FailureKind.RESPONSE_PARSE_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def failure_to_http(kind: FailureKind, message: str) -> HTTPException:
    """Translate a classified login failure into an HTTP error."""
    return HTTPException(
        status_code=_FAILURE_STATUS.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"failure_kind": kind.value, "message": message},
    )
