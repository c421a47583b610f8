"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from sso.domain.model import Account, ExternalLink, OrganizationMembership
from sso.domain.value import (
    AuthProvider,
    ExternalLinkId,
    MembershipId,
    UserId,
    Username,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_account(
    row: Dict[str, Any], custom_fields: Dict[str, str] | None = None
) -> Account:
    """Convert database row to Account domain model.

    Args:
        row: Database row as dict
        custom_fields: Rows of account_custom_fields as name -> value

    Returns:
        Account domain model
    """
    return Account(
        id=UserId(_uuid(row["id"])),
        username=Username(row["username"]),
        name=row.get("name"),
        email=row["email"],
        active=row["active"],
        approved=row["approved"],
        email_verified=row["email_verified"],
        custom_fields=custom_fields or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def account_to_dict(account: Account) -> Dict[str, Any]:
    """Convert Account to a dict for the accounts table (custom fields excluded)."""
    return account.model_dump(exclude={"custom_fields"})


def row_to_external_link(row: Dict[str, Any]) -> ExternalLink:
    """Convert database row to ExternalLink domain model.

    Args:
        row: Database row as dict

    Returns:
        ExternalLink domain model
    """
    return ExternalLink(
        id=ExternalLinkId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        external_id=row["external_id"],
        info=row.get("info") or {},
        extra=row.get("extra") or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_used_at=row.get("last_used_at"),
    )


def external_link_to_dict(link: ExternalLink) -> Dict[str, Any]:
    """Convert ExternalLink to a dict for the external_identity_links table."""
    data = link.model_dump()
    data["provider"] = link.provider.value
    return data


def row_to_membership(row: Dict[str, Any]) -> OrganizationMembership:
    """Convert database row to OrganizationMembership domain model.

    Args:
        row: Database row as dict

    Returns:
        OrganizationMembership domain model
    """
    return OrganizationMembership(
        id=MembershipId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        organization_id=row["organization_id"],
        external_id=row["external_id"],
        open_id=row.get("open_id"),
        first_seen_at=row["first_seen_at"],
        last_seen_at=row["last_seen_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def membership_to_dict(membership: OrganizationMembership) -> Dict[str, Any]:
    """Convert OrganizationMembership to a dict for its table."""
    return membership.model_dump()
