"""External identity link entity.

Associates a provider identity (DingTalk unionId) with a local account.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from sso.domain.model.common import DomainModel
from sso.domain.value import AuthProvider, ExternalLinkId, UserId


class ExternalLink(DomainModel):
    """Provider identity linked to a local account.

    At most one link exists per (provider, external_id); relinking moves the
    link to another account instead of creating a second one.
    """

    id: ExternalLinkId
    user_id: UserId
    provider: AuthProvider = AuthProvider.DINGTALK
    external_id: str  # unionId (stable across organizations)
    info: dict[str, Any] = Field(default_factory=dict)  # name, nickname, email
    extra: dict[str, Any] = Field(default_factory=dict)  # union/open/corp id, mobile
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    last_used_at: Optional[datetime] = None
