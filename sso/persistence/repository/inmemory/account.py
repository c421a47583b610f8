"""In-memory account repository for testing."""

from typing import Optional

from sso.domain.error import DuplicateRecordError
from sso.domain.model import Account
from sso.domain.repository import AccountRepository
from sso.domain.value import AuthProvider, UserId, Username

from .store import InMemoryStore


class InMemoryAccountRepository(AccountRepository):
    """In-memory implementation of AccountRepository for testing.

    Enforces the same unique constraints as the accounts table.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_id(self, user_id: UserId) -> Optional[Account]:
        """Find an account by ID."""
        return self.store.accounts.get(user_id)

    async def find_by_email(self, email: str) -> Optional[Account]:
        """Find an account by email, ignoring case."""
        for account in self.store.accounts.values():
            if account.email.lower() == email.lower():
                return account
        return None

    async def find_by_username(self, username: Username) -> Optional[Account]:
        """Find an account by username."""
        for account in self.store.accounts.values():
            if account.username == username:
                return account
        return None

    async def find_by_external_link(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[Account]:
        """Find the account linked to a provider identity."""
        for link in self.store.links.values():
            if link.provider == provider and link.external_id == external_id:
                return self.store.accounts.get(link.user_id)
        return None

    def _check_unique(self, account: Account) -> None:
        for other in self.store.accounts.values():
            if other.id == account.id:
                continue
            if other.email.lower() == account.email.lower():
                raise DuplicateRecordError("Account", "email", account.email)
            if other.username == account.username:
                raise DuplicateRecordError(
                    "Account", "username", account.username.root
                )

    async def create(self, account: Account) -> Account:
        """Insert a new account."""
        if account.id in self.store.accounts:
            raise DuplicateRecordError("Account", "id", str(account.id))
        self._check_unique(account)
        self.store.accounts[account.id] = account
        return account

    async def update(self, account: Account) -> Account:
        """Replace an existing account, keeping its custom fields."""
        self._check_unique(account)
        current = self.store.accounts.get(account.id)
        if current:
            account = account.model_copy(
                update={"custom_fields": current.custom_fields}
            )
        self.store.accounts[account.id] = account
        return account

    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Set a custom field on an account."""
        account = self.store.accounts.get(user_id)
        if account:
            self.store.accounts[user_id] = account.model_copy(
                update={"custom_fields": {**account.custom_fields, name: value}}
            )

    async def delete_custom_field(self, user_id: UserId, name: str) -> None:
        """Remove a custom field from an account."""
        account = self.store.accounts.get(user_id)
        if account and name in account.custom_fields:
            fields = {k: v for k, v in account.custom_fields.items() if k != name}
            self.store.accounts[user_id] = account.model_copy(
                update={"custom_fields": fields}
            )
