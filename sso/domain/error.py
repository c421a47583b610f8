"""Domain layer errors."""

from sso.domain.value import FailureKind


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class IdentityResolutionError(DomainError):
    """Provider profile could not be turned into a local identity."""

    def __init__(self, kind: FailureKind, message: str):
        self.kind = kind
        super().__init__(message)


class DuplicateRecordError(DomainError):
    """A unique constraint rejected a write.

    Raised by repositories for both account fields (email, username) and
    external identity links. During account creation this is the expected
    signal of a concurrent login for the same person.
    """

    def __init__(self, resource: str, field: str, value: str):
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}={value!r} already exists")


class AccountValidationError(ValidationError):
    """The host rejected account data (other than a uniqueness clash)."""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__("; ".join(messages))


class RegistrationDisabledError(DomainError):
    """No account matched and automatic registration is turned off."""

    def __init__(self, external_id: str):
        self.external_id = external_id
        super().__init__(
            f"No account linked to {external_id} and registration is disabled"
        )


class AccountConflictError(DomainError):
    """The matched account is already linked to another DingTalk identity."""

    def __init__(self, user_id: str, external_id: str, linked_external_id: str):
        self.user_id = user_id
        self.external_id = external_id
        self.linked_external_id = linked_external_id
        super().__init__(
            f"Account {user_id} is linked to another DingTalk identity; "
            f"refusing to attach {external_id}"
        )
