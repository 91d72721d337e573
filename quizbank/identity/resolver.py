"""One-shot identity resolution at startup."""

from __future__ import annotations

from loguru import logger

from quizbank.errors import AuthError
from quizbank.identity.provider import IdentityProvider, Principal


def resolve_principal(provider: IdentityProvider, initial_token: str | None = None) -> Principal:
    """
    Make sure the process is signed in before any store access.

    Reuses an existing principal; otherwise signs in with ``initial_token``
    when one is given, or anonymously. There is no retry loop: a failure is
    logged and surfaced as AuthError.

    Raises:
        AuthError: If sign-in fails
    """
    if provider.current_principal is not None:
        return provider.current_principal

    try:
        if initial_token and initial_token.strip():
            return provider.sign_in_with_token(initial_token)
        return provider.sign_in_anonymous()
    except AuthError as exc:
        logger.error("Authentication error: {}", exc)
        raise
    except Exception as exc:
        logger.error("Authentication error: {}", exc)
        raise AuthError(f"Unable to authenticate user: {exc}") from exc
