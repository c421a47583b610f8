"""Translation of database constraint violations into domain errors."""

from sqlalchemy.exc import IntegrityError

from sso.domain.error import DuplicateRecordError


def duplicate_from_integrity_error(
    error: IntegrityError,
    resource: str,
    constraints: dict[str, tuple[str, str]],
) -> DuplicateRecordError:
    """Build a DuplicateRecordError naming the violated field.

    Args:
        error: The IntegrityError raised by the driver
        resource: Resource name for the error message
        constraints: Constraint name -> (field, value) for each unique
            constraint the statement could violate; the first entry is used
            when the driver message names none of them

    Returns:
        The domain error to raise in place of ``error``
    """
    message = str(error.orig)
    for constraint_name, (field, value) in constraints.items():
        if constraint_name in message:
            return DuplicateRecordError(resource, field, value)
    field, value = next(iter(constraints.values()))
    return DuplicateRecordError(resource, field, value)
