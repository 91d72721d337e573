"""Identity providers and the role gate."""

from quizbank.identity.provider import (
    IdentityProvider,
    IdentityToolkitProvider,
    LocalIdentityProvider,
    Principal,
)
from quizbank.identity.resolver import resolve_principal
from quizbank.identity.roles import Role, RolePolicy

__all__ = [
    "IdentityProvider",
    "IdentityToolkitProvider",
    "LocalIdentityProvider",
    "Principal",
    "Role",
    "RolePolicy",
    "resolve_principal",
]
