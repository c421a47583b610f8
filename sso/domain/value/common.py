"""Base classes for value objects."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel


class ValueObject(BaseModel):
    """Immutable value compared by its fields."""

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )


T = TypeVar("T")


class RootValueObject(RootModel[T], Generic[T]):
    """Value object wrapping a single primitive (accessed via ``.root``).

    ``model_dump()`` returns the primitive itself, so these serialize
    transparently into table rows and API responses.
    """

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.root)
