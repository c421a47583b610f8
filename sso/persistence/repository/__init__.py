"""PostgreSQL repository implementations."""

from sso.persistence.repository.account import PostgresAccountRepository
from sso.persistence.repository.external_link import PostgresExternalLinkRepository
from sso.persistence.repository.membership import PostgresMembershipRepository
from sso.persistence.repository.unit_of_work import PostgresUnitOfWork

__all__ = [
    "PostgresAccountRepository",
    "PostgresExternalLinkRepository",
    "PostgresMembershipRepository",
    "PostgresUnitOfWork",
]
