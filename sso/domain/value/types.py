"""Domain value objects for DingTalk SSO.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules for data crossing the provider boundary.
"""

import re
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from sso.domain.value.common import RootValueObject, ValueObject

USERNAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{1,18}[a-z0-9]$")


class AuthProvider(str, Enum):
    """Supported identity providers."""

    DINGTALK = "dingtalk"


class FailureKind(str, Enum):
    """Classified reasons a login can fail.

    Returned to the host inside an AuthOutcome, never as an exception.
    """

    INVALID_TOKEN = "invalid-token"
    MALFORMED_REQUEST = "malformed-request"
    MISSING_IDENTITY = "missing-identity"
    MISSING_EMAIL = "missing-email"
    ORGANIZATION_NOT_ALLOWED = "organization-not-allowed"
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection-error"
    RESPONSE_PARSE_ERROR = "response-parse-error"
    PROVIDER_PROTOCOL_ERROR = "provider-protocol-error"
    ACCOUNT_CREATION_INVALID = "account-creation-invalid"
    ACCOUNT_NOT_FOUND = "account-not-found"
    ACCOUNT_CONFLICT = "account-conflict"
    REGISTRATION_DISABLED = "registration-disabled"
    UNEXPECTED_ERROR = "unexpected-error"


class Username(RootValueObject[str]):
    """Local account username.

    3-20 characters, lowercase alphanumerics plus ``_`` and ``-``,
    starting and ending with an alphanumeric.
    Examples: 'zhangsan', 'dingtalk_3f2a9c', 'zhang_san_123'
    """

    @field_validator("root")
    @classmethod
    def validate_username_format(cls, v: str) -> str:
        """Validate username format."""
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must be 3-20 characters of a-z, 0-9, '_' or '-', "
                "starting and ending with a letter or digit"
            )
        return v


class ProviderToken(ValueObject):
    """Result of the authorization-code exchange.

    Consumed once by the login pipeline and never persisted.
    """

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    organization_id: str | None = None  # DingTalk corpId
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "ProviderToken":
        """Build a token from DingTalk's camelCase JSON response."""
        return cls(
            access_token=data.get("accessToken") or "",
            refresh_token=data.get("refreshToken"),
            expires_in=data.get("expireIn"),
            organization_id=data.get("corpId") or data.get("corp_id"),
            raw=dict(data),
        )


class ProviderProfile(ValueObject):
    """Raw user profile returned by ``/v1.0/contact/users/me``.

    An empty profile is a legitimate value: profile fetch failures degrade
    to it instead of failing the login.
    """

    union_id: str | None = None
    open_id: str | None = None
    nick: str | None = None
    name: str | None = None
    email: str | None = None
    mobile: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "ProviderProfile":
        """Build a profile from DingTalk's camelCase JSON response."""
        return cls(
            union_id=data.get("unionId"),
            open_id=data.get("openId"),
            nick=data.get("nick"),
            name=data.get("name"),
            email=data.get("email"),
            mobile=data.get("mobile"),
            raw=dict(data),
        )

    @classmethod
    def empty(cls) -> "ProviderProfile":
        """Profile used when the provider returned nothing usable."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.union_id, self.open_id, self.nick, self.name, self.email, self.mobile)
        )


class ResolvedIdentity(ValueObject):
    """Normalized identity derived deterministically from a ProviderProfile."""

    external_id: str  # unionId, or openId when unionId is absent
    open_id: str | None = None
    organization_id: str | None = None
    username: Username
    display_name: str
    email: str
    mobile: str | None = None
    # False for synthesized (virtual) emails trusted through SSO
    email_is_authoritative: bool = False
