"""Transaction boundary interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class UnitOfWork(ABC):
    """Transaction boundary the login pipeline can request from storage.

    Writes made inside ``transaction()`` are applied atomically: any
    exception leaving the block undoes them and leaves earlier committed
    state untouched.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Open a (possibly nested) transaction.

        Usage:
            async with unit_of_work.transaction():
                await account_repository.create(account)
                await link_repository.save(link)
        """
        pass
