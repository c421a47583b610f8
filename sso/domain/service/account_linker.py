"""Account linking domain service.

Decides which local account a resolved DingTalk identity belongs to, and
creates, links or reuses it. Account creation and link establishment run
in one transaction; a unique-constraint clash during creation is treated
as a concurrent login for the same person and recovered by re-reading the
account that now exists.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

import logfire

from sso.config import DingtalkSettings
from sso.domain.error import (
    AccountConflictError,
    AccountValidationError,
    DuplicateRecordError,
    NotFoundError,
    RegistrationDisabledError,
)
from sso.domain.model.account import Account
from sso.domain.model.external_link import ExternalLink
from sso.domain.repository import (
    AccountRepository,
    ExternalLinkRepository,
    UnitOfWork,
)
from sso.domain.value import (
    AuthProvider,
    ExternalLinkId,
    ResolvedIdentity,
    UserId,
    Username,
)
from sso.domain.value.common import ValueObject
from sso.util.logging import StructuredLogger

from .base import Service
from .identity_normalizer import IdentityNormalizer

MOBILE_CUSTOM_FIELD = "dingtalk_mobile"

# describe_link shows ids longer than this as first3...last3
_OBFUSCATE_ABOVE = 8


class LinkAction(str, Enum):
    """How the account behind a successful login was obtained."""

    CREATED = "created"
    LINKED = "linked"  # link created or moved to this account
    REUSED = "reused"  # link already pointed at this account


class LinkResult(ValueObject):
    """Account chosen for a login and how it was obtained."""

    account: Account
    action: LinkAction


class AccountLinker(Service):
    """Domain service matching DingTalk identities to local accounts."""

    def __init__(
        self,
        account_repository: AccountRepository,
        external_link_repository: ExternalLinkRepository,
        unit_of_work: UnitOfWork,
        identity_normalizer: IdentityNormalizer,
        settings: DingtalkSettings,
        log: StructuredLogger = logfire,
    ) -> None:
        """Initialize account linker.

        Args:
            account_repository: Host account storage
            external_link_repository: External identity link storage
            unit_of_work: Transaction boundary
            identity_normalizer: Source of username candidates
            settings: DingTalk settings (signup, approval, auto-fill, email)
            log: Structured logger
        """
        self.account_repository = account_repository
        self.external_link_repository = external_link_repository
        self.unit_of_work = unit_of_work
        self.identity_normalizer = identity_normalizer
        self.settings = settings
        self.log = log

    async def match(
        self, identity: ResolvedIdentity, existing_account_id: UserId | None = None
    ) -> Account | None:
        """Find the account a login should land on.

        A caller-identified account (connect flow) is authoritative and
        skips every other lookup. Otherwise the existing link wins over an
        email match, and only a real provider email is matched: virtual
        addresses are derived from a truncated id and may collide.

        Args:
            identity: Resolved DingTalk identity
            existing_account_id: Account the caller already identified

        Returns:
            The matched account, or None when nothing matched

        Raises:
            NotFoundError: If existing_account_id does not exist
        """
        if existing_account_id is not None:
            account = await self.account_repository.find_by_id(existing_account_id)
            if not account:
                raise NotFoundError("Account", str(existing_account_id))
            return account

        link = await self.external_link_repository.find_by_external_id(
            AuthProvider.DINGTALK, identity.external_id
        )
        if link:
            account = await self.account_repository.find_by_id(link.user_id)
            if account:
                return account
            self.log.warn(
                "External link points at a missing account",
                external_id=identity.external_id,
                user_id=str(link.user_id),
            )

        if not identity.email_is_authoritative:
            return None
        return await self.account_repository.find_by_email(identity.email)

    async def link(
        self, identity: ResolvedIdentity, existing_account_id: UserId | None = None
    ) -> LinkResult:
        """Match, link or create the account for a resolved identity.

        Args:
            identity: Resolved DingTalk identity
            existing_account_id: Account the caller already identified

        Returns:
            The account and how it was obtained

        Raises:
            NotFoundError: If existing_account_id does not exist
            RegistrationDisabledError: If nothing matched and signup is off
            AccountValidationError: If the host rejected the new account
            AccountConflictError: If the matched account belongs to another
                DingTalk identity
        """
        connect_flow = existing_account_id is not None
        with self.log.span(
            "account_linker.link",
            external_id=identity.external_id,
            connect_flow=connect_flow,
        ):
            account = await self.match(identity, existing_account_id)
            if account:
                return await self.attach(account, identity, connect_flow=connect_flow)

            if not self.settings.authorize_signup:
                raise RegistrationDisabledError(identity.external_id)

            return await self.create(identity)

    async def attach(
        self, account: Account, identity: ResolvedIdentity, connect_flow: bool = False
    ) -> LinkResult:
        """Point the identity's link at ``account``, moving it if needed.

        Args:
            account: Target account
            identity: Resolved DingTalk identity
            connect_flow: Whether the caller identified the account

        Returns:
            The (possibly updated) account and LINKED or REUSED

        Raises:
            AccountConflictError: If the account already holds a link to a
                different identity and the caller did not pick the account
        """
        now = datetime.now(timezone.utc)
        async with self.unit_of_work.transaction():
            link = await self.external_link_repository.find_by_external_id(
                AuthProvider.DINGTALK, identity.external_id
            )
            action = (
                LinkAction.REUSED
                if link and link.user_id == account.id
                else LinkAction.LINKED
            )

            if link and link.user_id != account.id:
                self.log.info(
                    "External identity re-associated",
                    external_id=identity.external_id,
                    from_user_id=str(link.user_id),
                    to_user_id=str(account.id),
                )

            # One DingTalk link per account. Only a caller-identified account
            # may have its link to another identity replaced.
            held = await self.external_link_repository.find_by_user_id(
                AuthProvider.DINGTALK, account.id
            )
            if held and held.external_id != identity.external_id:
                if not connect_flow:
                    self.log.warn(
                        "Refusing to take over account linked to another identity",
                        user_id=str(account.id),
                        external_id=identity.external_id,
                        linked_external_id=held.external_id,
                    )
                    raise AccountConflictError(
                        str(account.id), identity.external_id, held.external_id
                    )
                await self.external_link_repository.delete(held.id)
                self.log.info(
                    "Replaced previous DingTalk link",
                    user_id=str(account.id),
                    previous_external_id=held.external_id,
                )

            await self.external_link_repository.save(
                self._build_link(account.id, identity, link, now)
            )

            if connect_flow and self.settings.auto_fill_user_name and not account.name:
                account = await self.account_repository.update(
                    account.model_copy(
                        update={"name": identity.display_name, "updated_at": now}
                    )
                )
                self.log.info(f"Auto-filled user name for {account.username}")

        if not connect_flow and self.settings.overrides_email:
            account = await self._refresh_email(account, identity)

        return LinkResult(account=account, action=action)

    async def create(self, identity: ResolvedIdentity) -> LinkResult:
        """Create an account plus its link, recovering from creation races.

        Username candidates already taken are skipped. A duplicate raised by
        storage means another login created the account first; that account
        is re-read and reused.

        Args:
            identity: Resolved DingTalk identity

        Returns:
            The created (or recovered) account

        Raises:
            AccountValidationError: If the host rejected the account, or no
                username candidate was available
        """
        for username in self.identity_normalizer.username_candidates(identity):
            if await self.account_repository.find_by_username(username):
                continue

            try:
                account = await self._create_account(identity, username)
            except DuplicateRecordError as e:
                self.log.warn(
                    "Concurrent account creation detected",
                    external_id=identity.external_id,
                    field=e.field,
                    value=e.value,
                )
                recovered = await self._recover(identity, username)
                if recovered:
                    result = await self.attach(recovered, identity)
                    return LinkResult(account=result.account, action=LinkAction.REUSED)
                if e.field != "username":
                    raise AccountValidationError([str(e)]) from e
                continue

            return LinkResult(account=account, action=LinkAction.CREATED)

        raise AccountValidationError(
            [f"No available username for {identity.username.root}"]
        )

    async def _create_account(
        self, identity: ResolvedIdentity, username: Username
    ) -> Account:
        now = datetime.now(timezone.utc)
        account = Account(
            id=UserId(uuid4()),
            username=username,
            name=identity.display_name,
            email=identity.email,
            active=True,
            approved=not self.settings.must_approve_users,
            email_verified=True,
            created_at=now,
            updated_at=now,
        )

        async with self.unit_of_work.transaction():
            created = await self.account_repository.create(account)
            await self.external_link_repository.save(
                self._build_link(created.id, identity, None, now)
            )
            if identity.mobile:
                await self.account_repository.set_custom_field(
                    created.id, MOBILE_CUSTOM_FIELD, identity.mobile
                )
                created = created.model_copy(
                    update={
                        "custom_fields": {
                            **created.custom_fields,
                            MOBILE_CUSTOM_FIELD: identity.mobile,
                        }
                    }
                )

        self.log.info(
            "DingTalk user created",
            user_id=str(created.id),
            username=created.username.root,
            external_id=identity.external_id,
        )
        return created

    async def _recover(
        self, identity: ResolvedIdentity, username: Username
    ) -> Account | None:
        """Re-read the account a concurrent login created.

        Looks up by email, then by username, then by external link. A
        username match only counts when that account already holds this
        identity's link.
        """
        account = await self.account_repository.find_by_email(identity.email)
        if account:
            self.log.info(
                "Recovered concurrently created account by email",
                user_id=str(account.id),
                external_id=identity.external_id,
            )
            return account

        account = await self.account_repository.find_by_username(username)
        if account:
            link = await self.external_link_repository.find_by_user_id(
                AuthProvider.DINGTALK, account.id
            )
            if link and link.external_id == identity.external_id:
                self.log.info(
                    "Recovered concurrently created account by username",
                    user_id=str(account.id),
                    external_id=identity.external_id,
                )
                return account

        account = await self.account_repository.find_by_external_link(
            AuthProvider.DINGTALK, identity.external_id
        )
        if account:
            self.log.info(
                "Recovered concurrently created account by external link",
                user_id=str(account.id),
                external_id=identity.external_id,
            )
        return account

    async def _refresh_email(
        self, account: Account, identity: ResolvedIdentity
    ) -> Account:
        """Update a matched account's email from an authoritative provider email."""
        if not identity.email_is_authoritative:
            return account
        if account.email.lower() == identity.email.lower():
            return account

        try:
            async with self.unit_of_work.transaction():
                updated = await self.account_repository.update(
                    account.model_copy(
                        update={
                            "email": identity.email,
                            "updated_at": datetime.now(timezone.utc),
                        }
                    )
                )
        except DuplicateRecordError:
            self.log.warn(
                "Email override skipped, address belongs to another account",
                user_id=str(account.id),
                email=identity.email,
            )
            return account

        self.log.info(
            "Account email overridden from DingTalk",
            user_id=str(account.id),
        )
        return updated

    def _build_link(
        self,
        user_id: UserId,
        identity: ResolvedIdentity,
        existing: ExternalLink | None,
        now: datetime,
    ) -> ExternalLink:
        info: dict[str, Any] = {
            "name": identity.display_name,
            "nickname": identity.username.root,
            "email": identity.email,
        }
        extra: dict[str, Any] = {
            "dingtalk_union_id": identity.external_id,
            "dingtalk_open_id": identity.open_id,
            "dingtalk_corp_id": identity.organization_id,
            "dingtalk_mobile": identity.mobile,
        }
        if existing:
            return existing.model_copy(
                update={
                    "user_id": user_id,
                    "info": info,
                    "extra": extra,
                    "updated_at": now,
                    "last_used_at": now,
                }
            )
        return ExternalLink(
            id=ExternalLinkId(uuid4()),
            user_id=user_id,
            provider=AuthProvider.DINGTALK,
            external_id=identity.external_id,
            info=info,
            extra=extra,
            created_at=now,
            updated_at=now,
            last_used_at=now,
        )

    async def revoke(self, user_id: UserId) -> bool:
        """Remove an account's DingTalk link and the mobile custom field.

        Idempotent: returns True even when no link existed.

        Args:
            user_id: Account ID

        Returns:
            Always True
        """
        with self.log.span("account_linker.revoke", user_id=str(user_id)):
            link = await self.external_link_repository.find_by_user_id(
                AuthProvider.DINGTALK, user_id
            )
            if not link:
                self.log.info("No DingTalk link to revoke", user_id=str(user_id))
                return True

            async with self.unit_of_work.transaction():
                await self.external_link_repository.delete(link.id)
                await self.account_repository.delete_custom_field(
                    user_id, MOBILE_CUSTOM_FIELD
                )

            self.log.info(
                "DingTalk auth revoked",
                user_id=str(user_id),
                external_id=link.external_id,
            )
            return True

    async def describe(self, user_id: UserId) -> str:
        """Human-readable summary of an account's DingTalk link.

        Args:
            user_id: Account ID

        Returns:
            ``"<name>_$<obfuscated id>"``, ``"Connected"`` when the link
            carries no data, or ``""`` when there is no link
        """
        link = await self.external_link_repository.find_by_user_id(
            AuthProvider.DINGTALK, user_id
        )
        if not link:
            return ""
        if not link.info and not link.extra:
            return "Connected"

        name = link.info.get("name") or link.info.get("nickname") or ""
        external_id = link.extra.get("dingtalk_union_id") or link.external_id
        return f"{name}_${obfuscate_external_id(external_id)}"


def obfuscate_external_id(external_id: str) -> str:
    """Show ids longer than 8 characters as ``first3...last3``."""
    if len(external_id) > _OBFUSCATE_ABOVE:
        return f"{external_id[:3]}...{external_id[-3:]}"
    return external_id
