"""Repository interfaces for the SSO domain.

Interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from sso.domain.repository.account import AccountRepository
from sso.domain.repository.external_link import ExternalLinkRepository
from sso.domain.repository.membership import MembershipRepository
from sso.domain.repository.unit_of_work import UnitOfWork

__all__ = [
    "AccountRepository",
    "ExternalLinkRepository",
    "MembershipRepository",
    "UnitOfWork",
]
