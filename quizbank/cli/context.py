"""
Dependency container for CLI commands.

Builds the store, identity provider and role policy from settings on first
use. Commands call ``close()`` when they are done.
"""

from __future__ import annotations

from loguru import logger

from config import Settings, get_settings
from quizbank.bank.conductor import ConductorService
from quizbank.bank.sync import QuestionBankSync
from quizbank.bank.uploader import BatchUploader
from quizbank.errors import AuthError
from quizbank.identity.provider import IdentityProvider, IdentityToolkitProvider, LocalIdentityProvider, Principal
from quizbank.identity.resolver import resolve_principal
from quizbank.identity.roles import RolePolicy
from quizbank.store.sql_store import SqlDocumentStore


class CLIContext:
    """Lazily initialized services for one command invocation."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._store: SqlDocumentStore | None = None
        self._identity: IdentityProvider | None = None

    @property
    def collection_path(self) -> str:
        return self.settings.questions_collection_path

    @property
    def store(self) -> SqlDocumentStore:
        """Lazy load the SQL document store."""
        if self._store is None:
            self._store = SqlDocumentStore(
                self.settings.database_url,
                poll_interval=self.settings.sync_poll_interval_seconds,
            )
        return self._store

    @property
    def identity(self) -> IdentityProvider:
        """Lazy load the configured identity provider."""
        if self._identity is None:
            if self.settings.identity_backend == "identity_toolkit":
                if not self.settings.identity_api_key:
                    raise AuthError("IDENTITY_API_KEY is required for the identity_toolkit backend")
                self._identity = IdentityToolkitProvider(
                    api_key=self.settings.identity_api_key,
                    base_url=self.settings.identity_base_url,
                    timeout=self.settings.identity_timeout_seconds,
                )
            else:
                self._identity = LocalIdentityProvider()
        return self._identity

    @property
    def role_policy(self) -> RolePolicy:
        return RolePolicy(self.settings.conductor_secret)

    def sign_in(self) -> Principal:
        """Resolve the current user before any store access."""
        return resolve_principal(self.identity, self.settings.initial_auth_token)

    def conductor_service(self) -> ConductorService:
        uploader = BatchUploader(
            self.store,
            self.collection_path,
            chunk_size=self.settings.upload_chunk_size,
        )
        return ConductorService(uploader)

    def question_sync(self) -> QuestionBankSync:
        return QuestionBankSync(self.store, self.collection_path)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            logger.debug("Store closed")
            self._store = None
