"""PostgreSQL implementation of Account repository."""

from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sso.domain.model import Account
from sso.domain.repository import AccountRepository
from sso.domain.value import AuthProvider, UserId, Username
from sso.persistence.mappers import account_to_dict, row_to_account
from sso.persistence.repository.errors import duplicate_from_integrity_error
from sso.persistence.tables import (
    account_custom_fields_table,
    accounts_table,
    external_identity_links_table,
)


class PostgresAccountRepository(AccountRepository):
    """PostgreSQL implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _first(self, stmt: Any) -> Optional[Account]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        custom_fields = await self._custom_fields(row["id"])
        return row_to_account(dict(row), custom_fields)

    async def _custom_fields(self, user_id: UserId) -> dict[str, str]:
        stmt = select(
            account_custom_fields_table.c.name, account_custom_fields_table.c.value
        ).where(account_custom_fields_table.c.user_id == user_id)
        result = await self.session.execute(stmt)
        return {name: value for name, value in result.all()}

    async def find_by_id(self, user_id: UserId) -> Optional[Account]:
        """Find an account by ID.

        Args:
            user_id: Account ID to look up

        Returns:
            Account if found, None otherwise
        """
        return await self._first(
            select(accounts_table).where(accounts_table.c.id == user_id)
        )

    async def find_by_email(self, email: str) -> Optional[Account]:
        """Find an account by email, ignoring case.

        Args:
            email: Email to search for

        Returns:
            Account if found, None otherwise
        """
        return await self._first(
            select(accounts_table).where(
                func.lower(accounts_table.c.email) == email.lower()
            )
        )

    async def find_by_username(self, username: Username) -> Optional[Account]:
        """Find an account by username.

        Args:
            username: Username to search for

        Returns:
            Account if found, None otherwise
        """
        return await self._first(
            select(accounts_table).where(accounts_table.c.username == username.root)
        )

    async def find_by_external_link(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[Account]:
        """Find the account linked to a provider identity.

        Args:
            provider: Identity provider
            external_id: Provider identifier

        Returns:
            Account if found, None otherwise
        """
        stmt = (
            select(accounts_table)
            .select_from(
                accounts_table.join(
                    external_identity_links_table,
                    accounts_table.c.id == external_identity_links_table.c.user_id,
                )
            )
            .where(external_identity_links_table.c.provider == provider.value)
            .where(external_identity_links_table.c.external_id == external_id)
        )
        return await self._first(stmt)

    async def create(self, account: Account) -> Account:
        """Insert an account and its custom fields.

        Args:
            account: Account to insert

        Returns:
            The created account

        Raises:
            DuplicateRecordError: If email or username is taken
        """
        stmt = accounts_table.insert().values(**account_to_dict(account))
        try:
            await self.session.execute(stmt)
        except IntegrityError as e:
            raise duplicate_from_integrity_error(
                e,
                "Account",
                {
                    "uq_accounts_email_lower": ("email", account.email),
                    "uq_accounts_username": ("username", account.username.root),
                },
            ) from e

        for name, value in account.custom_fields.items():
            await self.set_custom_field(account.id, name, value)

        await self.session.flush()
        return account

    async def update(self, account: Account) -> Account:
        """Update an account's columns (custom fields are left alone).

        Args:
            account: Account with updated fields

        Returns:
            The updated account

        Raises:
            DuplicateRecordError: If the new email or username is taken
        """
        values = account_to_dict(account)
        values.pop("id")
        stmt = (
            accounts_table.update()
            .where(accounts_table.c.id == account.id)
            .values(**values)
        )
        try:
            await self.session.execute(stmt)
        except IntegrityError as e:
            raise duplicate_from_integrity_error(
                e,
                "Account",
                {
                    "uq_accounts_email_lower": ("email", account.email),
                    "uq_accounts_username": ("username", account.username.root),
                },
            ) from e
        await self.session.flush()
        return account

    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Set a custom field (insert or overwrite).

        Args:
            user_id: Account ID
            name: Field name
            value: Field value
        """
        stmt = insert(account_custom_fields_table).values(
            user_id=user_id, name=name, value=value
        )
        stmt = stmt.on_conflict_do_update(
            constraint="pk_account_custom_fields", set_={"value": value}
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def delete_custom_field(self, user_id: UserId, name: str) -> None:
        """Delete a custom field if present.

        Args:
            user_id: Account ID
            name: Field name
        """
        stmt = delete(account_custom_fields_table).where(
            account_custom_fields_table.c.user_id == user_id,
            account_custom_fields_table.c.name == name,
        )
        await self.session.execute(stmt)
        await self.session.flush()
