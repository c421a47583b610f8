"""Describe link use case."""

from sso.domain.service import AccountLinker
from sso.domain.value import UserId


class DescribeLinkUseCase:
    """Use case producing a short description of an account's DingTalk link."""

    def __init__(self, account_linker: AccountLinker) -> None:
        self.account_linker = account_linker

    async def execute(self, account_id: UserId) -> str:
        """Return ``"<name>_$<obfuscated id>"``, ``"Connected"`` or ``""``."""
        return await self.account_linker.describe(account_id)
