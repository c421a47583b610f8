"""Infrastructure layer errors."""

from sso.domain.value import FailureKind


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class ProviderError(AdapterError):
    """External provider error."""

    pass


class TokenExchangeError(ProviderError):
    """Authorization code could not be exchanged for an access token.

    ``kind`` is one of the transport or protocol failure kinds; retries have
    already been spent by the time this is raised.
    """

    def __init__(self, kind: FailureKind, message: str):
        self.kind = kind
        super().__init__(message)
