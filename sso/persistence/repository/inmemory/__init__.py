"""In-memory repository implementations for testing."""

from .account import InMemoryAccountRepository
from .external_link import InMemoryExternalLinkRepository
from .membership import InMemoryMembershipRepository
from .store import InMemoryStore
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryExternalLinkRepository",
    "InMemoryMembershipRepository",
    "InMemoryStore",
    "InMemoryUnitOfWork",
]
