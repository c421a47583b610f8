"""Domain services for DingTalk SSO."""

from .access_policy import AccessPolicyEvaluator
from .account_linker import AccountLinker, LinkAction, LinkResult
from .auth_service import AuthService, OAuthClient
from .base import Service
from .identity_normalizer import IdentityNormalizer, sanitize_username
from .organization_tracker import OrganizationTracker

__all__ = [
    "AccessPolicyEvaluator",
    "AccountLinker",
    "AuthService",
    "IdentityNormalizer",
    "LinkAction",
    "LinkResult",
    "OAuthClient",
    "OrganizationTracker",
    "Service",
    "sanitize_username",
]
