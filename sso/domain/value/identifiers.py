"""Strongly typed identifiers for SSO domain entities."""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
ExternalLinkId = NewType("ExternalLinkId", UUID)
MembershipId = NewType("MembershipId", UUID)
