"""ExternalLink repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sso.domain.model import ExternalLink
from sso.domain.repository import ExternalLinkRepository
from sso.domain.value import AuthProvider, ExternalLinkId, UserId
from sso.persistence.mappers import external_link_to_dict, row_to_external_link
from sso.persistence.repository.errors import duplicate_from_integrity_error
from sso.persistence.tables import external_identity_links_table


class PostgresExternalLinkRepository(ExternalLinkRepository):
    """PostgreSQL implementation of ExternalLinkRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _find_by_id(self, link_id: ExternalLinkId) -> Optional[ExternalLink]:
        stmt = select(external_identity_links_table).where(
            external_identity_links_table.c.id == link_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_link(dict(row)) if row else None

    async def find_by_external_id(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[ExternalLink]:
        """Get the link for a provider identity.

        Args:
            provider: Identity provider
            external_id: Provider identifier

        Returns:
            ExternalLink if found, None otherwise
        """
        stmt = select(external_identity_links_table).where(
            external_identity_links_table.c.provider == provider.value,
            external_identity_links_table.c.external_id == external_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_link(dict(row)) if row else None

    async def find_by_user_id(
        self, provider: AuthProvider, user_id: UserId
    ) -> Optional[ExternalLink]:
        """Get the link an account holds for a provider.

        Args:
            provider: Identity provider
            user_id: Account ID

        Returns:
            ExternalLink if found, None otherwise
        """
        stmt = select(external_identity_links_table).where(
            external_identity_links_table.c.provider == provider.value,
            external_identity_links_table.c.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_link(dict(row)) if row else None

    async def save(self, link: ExternalLink) -> ExternalLink:
        """Save a link (create or update).

        Args:
            link: ExternalLink to save

        Returns:
            Saved ExternalLink

        Raises:
            DuplicateRecordError: If the identity or the account is already linked
        """
        link_dict = external_link_to_dict(link)
        existing = await self._find_by_id(link.id)

        if existing:
            stmt = (
                external_identity_links_table.update()
                .where(external_identity_links_table.c.id == link.id)
                .values(**link_dict)
            )
        else:
            stmt = external_identity_links_table.insert().values(**link_dict)

        try:
            await self.session.execute(stmt)
        except IntegrityError as e:
            raise duplicate_from_integrity_error(
                e,
                "ExternalLink",
                {
                    "uq_external_link_identity": ("external_id", link.external_id),
                    "uq_external_link_user": ("user_id", str(link.user_id)),
                },
            ) from e

        await self.session.flush()
        return link

    async def delete(self, link_id: ExternalLinkId) -> None:
        """Delete a link.

        Args:
            link_id: Link ID
        """
        stmt = delete(external_identity_links_table).where(
            external_identity_links_table.c.id == link_id
        )
        await self.session.execute(stmt)
        await self.session.flush()
