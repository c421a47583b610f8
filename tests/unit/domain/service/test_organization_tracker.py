"""Unit tests for OrganizationTracker."""

from uuid import uuid4

import pytest

from sso.config import DingtalkSettings
from sso.domain.service import OrganizationTracker
from sso.domain.value import UserId
from sso.persistence.repository.inmemory import (
    InMemoryMembershipRepository,
    InMemoryStore,
    InMemoryUnitOfWork,
)
from tests.helpers import RecordingLogger


class FailingMembershipRepository(InMemoryMembershipRepository):
    """Membership repository whose writes always fail."""

    async def save(self, membership):
        raise RuntimeError("connection reset by peer")


def make_tracker(
    repository_class=InMemoryMembershipRepository, **overrides
) -> tuple[OrganizationTracker, RecordingLogger]:
    store = InMemoryStore()
    log = RecordingLogger()
    tracker = OrganizationTracker(
        membership_repository=repository_class(store),
        unit_of_work=InMemoryUnitOfWork(store),
        settings=DingtalkSettings(**overrides),
        log=log,
    )
    return tracker, log


class TestTrack:
    """Tests for OrganizationTracker.track()."""

    @pytest.mark.asyncio
    async def test_first_login_creates_membership(self):
        # Arrange
        tracker, log = make_tracker()
        user_id = UserId(uuid4())

        # Act
        membership = await tracker.track(user_id, "corp_a", "union_1", "open_1")

        # Assert
        assert membership is not None
        assert membership.organization_id == "corp_a"
        assert membership.external_id == "union_1"
        assert membership.open_id == "open_1"
        assert membership.first_seen_at == membership.last_seen_at
        assert "Organization membership created" in log.messages("info")

    @pytest.mark.asyncio
    async def test_repeat_login_keeps_first_seen(self):
        """first_seen_at never changes, last_seen_at moves forward."""
        tracker, log = make_tracker()
        user_id = UserId(uuid4())

        first = await tracker.track(user_id, "corp_a", "union_1", "open_1")
        second = await tracker.track(user_id, "corp_a", "union_1", "open_2")

        assert second.id == first.id
        assert second.first_seen_at == first.first_seen_at
        assert second.last_seen_at >= first.last_seen_at
        assert second.open_id == "open_2"
        assert "Organization membership refreshed" in log.messages("info")
        assert len(await tracker.organizations_for_user(user_id)) == 1

    @pytest.mark.asyncio
    async def test_one_membership_per_organization(self):
        """The same person in two corps gets two memberships."""
        tracker, _ = make_tracker()
        user_id = UserId(uuid4())

        await tracker.track(user_id, "corp_a", "union_1")
        await tracker.track(user_id, "corp_b", "union_1")

        memberships = await tracker.organizations_for_user(user_id)
        assert {m.organization_id for m in memberships} == {"corp_a", "corp_b"}
        # Latest first
        assert memberships[0].organization_id == "corp_b"

    @pytest.mark.asyncio
    async def test_skips_without_organization(self):
        tracker, _ = make_tracker()

        assert await tracker.track(UserId(uuid4()), None, "union_1") is None
        assert await tracker.organization_ids() == []

    @pytest.mark.asyncio
    async def test_skips_when_tracking_disabled(self):
        tracker, _ = make_tracker(track_organizations=False)

        assert await tracker.track(UserId(uuid4()), "corp_a", "union_1") is None
        assert await tracker.organization_ids() == []

    @pytest.mark.asyncio
    async def test_storage_failure_is_logged_not_raised(self):
        """A tracking failure must not fail the login."""
        tracker, log = make_tracker(repository_class=FailingMembershipRepository)

        result = await tracker.track(UserId(uuid4()), "corp_a", "union_1")

        assert result is None
        assert "Failed to track org association" in log.messages("error")


class TestReads:
    """Tests for the membership read operations."""

    @pytest.mark.asyncio
    async def test_members_and_counts(self):
        tracker, _ = make_tracker()
        alice, bob = UserId(uuid4()), UserId(uuid4())
        await tracker.track(alice, "corp_a", "union_alice")
        await tracker.track(bob, "corp_a", "union_bob")
        await tracker.track(bob, "corp_b", "union_bob")

        members = await tracker.members_of_organization("corp_a")

        assert {m.user_id for m in members} == {alice, bob}
        assert await tracker.organization_ids() == ["corp_a", "corp_b"]
        assert await tracker.organization_user_counts() == {"corp_a": 2, "corp_b": 1}
