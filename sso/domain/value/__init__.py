"""Domain value objects for DingTalk SSO."""

from sso.domain.value.identifiers import ExternalLinkId, MembershipId, UserId
from sso.domain.value.types import (
    USERNAME_PATTERN,
    AuthProvider,
    FailureKind,
    ProviderProfile,
    ProviderToken,
    ResolvedIdentity,
    Username,
)

__all__ = [
    # Identifiers
    "UserId",
    "ExternalLinkId",
    "MembershipId",
    # Types
    "USERNAME_PATTERN",
    "AuthProvider",
    "FailureKind",
    "ProviderProfile",
    "ProviderToken",
    "ResolvedIdentity",
    "Username",
]
