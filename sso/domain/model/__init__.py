"""Domain model entities for DingTalk SSO."""

from sso.domain.model.account import Account
from sso.domain.model.external_link import ExternalLink
from sso.domain.model.membership import OrganizationMembership

__all__ = [
    "Account",
    "ExternalLink",
    "OrganizationMembership",
]
