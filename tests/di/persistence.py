"""Mock persistence providers for testing."""

from dishka import Scope, provide

from sso.domain.repository import (
    AccountRepository,
    ExternalLinkRepository,
    MembershipRepository,
    UnitOfWork,
)
from sso.persistence.repository.inmemory import (
    InMemoryAccountRepository,
    InMemoryExternalLinkRepository,
    InMemoryMembershipRepository,
    InMemoryStore,
    InMemoryUnitOfWork,
)
from sso.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    The store is APP-scoped: each test builds its own container, so data is
    isolated per test but shared between the requests of one test.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_store(self) -> InMemoryStore:
        """Provide the in-memory tables."""
        return InMemoryStore()

    @provide(scope=Scope.REQUEST)
    def get_account_repository(self, store: InMemoryStore) -> AccountRepository:
        """Provide in-memory account repository."""
        return InMemoryAccountRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_external_link_repository(
        self, store: InMemoryStore
    ) -> ExternalLinkRepository:
        """Provide in-memory external link repository."""
        return InMemoryExternalLinkRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_membership_repository(self, store: InMemoryStore) -> MembershipRepository:
        """Provide in-memory membership repository."""
        return InMemoryMembershipRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_unit_of_work(self, store: InMemoryStore) -> UnitOfWork:
        """Provide snapshot-based unit of work."""
        return InMemoryUnitOfWork(store)
