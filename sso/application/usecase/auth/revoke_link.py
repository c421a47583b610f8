"""Revoke link use case."""

import logfire

from sso.domain.service import AccountLinker
from sso.domain.value import UserId


class RevokeLinkUseCase:
    """Use case removing an account's DingTalk link."""

    def __init__(self, account_linker: AccountLinker) -> None:
        self.account_linker = account_linker

    async def execute(self, account_id: UserId) -> bool:
        """Delete the link and the dingtalk_mobile custom field.

        Idempotent; returns True even when nothing was linked.
        """
        with logfire.span("revoke_link.execute", user_id=str(account_id)):
            return await self.account_linker.revoke(account_id)
