"""Account repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from sso.domain.model.account import Account
from sso.domain.value import AuthProvider, UserId, Username


class AccountRepository(ABC):
    """Repository for the host's Account aggregate.

    This is the narrow storage contract the login pipeline relies on.
    Implementations must enforce uniqueness of email and username and
    report clashes as DuplicateRecordError.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[Account]:
        """Find an account by ID.

        Args:
            user_id: The account's unique identifier

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Account]:
        """Find an account by email (case-insensitive).

        Args:
            email: Email address

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_username(self, username: Username) -> Optional[Account]:
        """Find an account by username.

        Args:
            username: Username

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_external_link(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[Account]:
        """Find the account currently holding an external identity.

        Args:
            provider: Identity provider
            external_id: Provider identifier (unionId)

        Returns:
            The linked account if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Insert a new account.

        Args:
            account: Account to insert

        Returns:
            The created account

        Raises:
            DuplicateRecordError: If email or username is already taken
            AccountValidationError: If the host rejects the account data
        """
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Update an existing account.

        Args:
            account: Account with updated fields

        Returns:
            The updated account
        """
        pass

    @abstractmethod
    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Set a custom field on an account.

        Args:
            user_id: Account ID
            name: Field name
            value: Field value
        """
        pass

    @abstractmethod
    async def delete_custom_field(self, user_id: UserId, name: str) -> None:
        """Remove a custom field from an account (no-op if absent).

        Args:
            user_id: Account ID
            name: Field name
        """
        pass
