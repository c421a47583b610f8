"""Base use case."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
OutcomeT = TypeVar("OutcomeT")


class BaseUseCase(ABC, Generic[RequestT, OutcomeT]):
    """Use case that turns a request into an outcome value.

    Login pipelines report failures through the outcome rather than by
    raising, so callers only ever see the returned value.
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> OutcomeT:
        pass
