"""Organization membership entity.

Records which DingTalk organizations (corps) a local account has logged in
from. One person may belong to several corps under the same unionId.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from sso.domain.model.common import DomainModel
from sso.domain.value import MembershipId, UserId


class OrganizationMembership(DomainModel):
    """Per-(account, organization) login history.

    ``first_seen_at`` never changes after creation; ``last_seen_at`` moves on
    every login from that organization.
    """

    id: MembershipId
    user_id: UserId
    organization_id: str = Field(max_length=100)  # DingTalk corpId
    external_id: str = Field(max_length=100)
    open_id: Optional[str] = Field(default=None, max_length=100)
    first_seen_at: datetime
    last_seen_at: datetime
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
