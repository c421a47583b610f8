"""Authentication use cases."""

from .authenticate import (
    AuthenticateRequest,
    AuthenticateUseCase,
    AuthOutcome,
    AuthState,
)
from .describe_link import DescribeLinkUseCase
from .login import LoginRequest, LoginUseCase
from .revoke_link import RevokeLinkUseCase

__all__ = [
    "AuthenticateRequest",
    "AuthenticateUseCase",
    "AuthOutcome",
    "AuthState",
    "DescribeLinkUseCase",
    "LoginRequest",
    "LoginUseCase",
    "RevokeLinkUseCase",
]
