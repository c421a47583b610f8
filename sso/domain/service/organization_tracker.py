"""Organization membership tracking domain service."""

from datetime import datetime, timezone
from uuid import uuid4

import logfire

from sso.config import DingtalkSettings
from sso.domain.model.membership import OrganizationMembership
from sso.domain.repository import MembershipRepository, UnitOfWork
from sso.domain.value import MembershipId, UserId
from sso.util.logging import StructuredLogger

from .base import Service


class OrganizationTracker(Service):
    """Records which DingTalk organizations each account logs in from.

    One person can belong to several organizations under the same unionId;
    every (account, organization) pair gets its own membership row.
    """

    def __init__(
        self,
        membership_repository: MembershipRepository,
        unit_of_work: UnitOfWork,
        settings: DingtalkSettings,
        log: StructuredLogger = logfire,
    ) -> None:
        """Initialize organization tracker.

        Args:
            membership_repository: Membership repository
            unit_of_work: Transaction boundary for the upsert
            settings: DingTalk settings (track_organizations)
            log: Structured logger
        """
        self.membership_repository = membership_repository
        self.unit_of_work = unit_of_work
        self.settings = settings
        self.log = log

    async def track(
        self,
        user_id: UserId,
        organization_id: str | None,
        external_id: str,
        open_id: str | None = None,
    ) -> OrganizationMembership | None:
        """Upsert the membership for (user_id, organization_id).

        Never raises: a tracking failure must not fail a successful login.

        Args:
            user_id: Account that just logged in
            organization_id: corpId from the token exchange
            external_id: DingTalk unionId
            open_id: DingTalk openId (organization scoped)

        Returns:
            The saved membership, or None when tracking is disabled, no
            organization was disclosed, or the write failed
        """
        if not self.settings.track_organizations or not organization_id:
            return None

        with self.log.span(
            "organization_tracker.track",
            user_id=str(user_id),
            organization_id=organization_id,
        ):
            try:
                async with self.unit_of_work.transaction():
                    return await self._upsert(
                        user_id, organization_id, external_id, open_id
                    )
            except Exception as e:
                self.log.error(
                    "Failed to track org association",
                    user_id=str(user_id),
                    organization_id=organization_id,
                    error=str(e),
                )
                return None

    async def _upsert(
        self,
        user_id: UserId,
        organization_id: str,
        external_id: str,
        open_id: str | None,
    ) -> OrganizationMembership:
        now = datetime.now(timezone.utc)
        existing = await self.membership_repository.find_by_user_and_organization(
            user_id, organization_id
        )

        if existing:
            membership = existing.model_copy(
                update={
                    "external_id": external_id,
                    "open_id": open_id,
                    "last_seen_at": now,
                    "updated_at": now,
                }
            )
            saved = await self.membership_repository.save(membership)
            self.log.info(
                "Organization membership refreshed",
                user_id=str(user_id),
                organization_id=organization_id,
            )
            return saved

        membership = OrganizationMembership(
            id=MembershipId(uuid4()),
            user_id=user_id,
            organization_id=organization_id,
            external_id=external_id,
            open_id=open_id,
            first_seen_at=now,
            last_seen_at=now,
            created_at=now,
            updated_at=now,
        )
        saved = await self.membership_repository.save(membership)
        self.log.info(
            "Organization membership created",
            user_id=str(user_id),
            organization_id=organization_id,
        )
        return saved

    async def organizations_for_user(
        self, user_id: UserId
    ) -> list[OrganizationMembership]:
        """Memberships of an account, most recently seen first."""
        return await self.membership_repository.find_all_by_user_id(user_id)

    async def members_of_organization(
        self, organization_id: str
    ) -> list[OrganizationMembership]:
        """Memberships within an organization, most recently seen first."""
        return await self.membership_repository.find_all_by_organization_id(
            organization_id
        )

    async def organization_ids(self) -> list[str]:
        """Every organization at least one account has logged in from."""
        return await self.membership_repository.all_organization_ids()

    async def organization_user_counts(self) -> dict[str, int]:
        """Number of accounts seen per organization."""
        return await self.membership_repository.organization_user_counts()
