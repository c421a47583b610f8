"""Local account entity.

The account itself belongs to the host application. The login pipeline only
creates accounts and touches a handful of fields on them.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from sso.domain.model.common import DomainModel
from sso.domain.value import UserId, Username


class Account(DomainModel):
    """Local user account."""

    id: UserId
    username: Username
    name: Optional[str] = None  # Full/display name
    email: str
    active: bool = False
    approved: bool = False
    email_verified: bool = False
    custom_fields: dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
