"""
Identity providers.

A provider signs the current process in (anonymously or with a custom token)
and tells listeners whenever the signed-in principal changes.

- LocalIdentityProvider: offline, for local stores and tests
- IdentityToolkitProvider: REST client for the hosted identity service
  (accounts:signUp / accounts:signInWithCustomToken / accounts:lookup)
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from quizbank.errors import AuthError
from quizbank.store.base import auto_id

DEFAULT_IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1"
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = [500, 502, 503, 504]

AuthStateCallback = Callable[["Principal | None"], None]


@dataclass(frozen=True)
class Principal:
    """A signed-in identity."""

    uid: str
    is_anonymous: bool
    id_token: str | None = None


class IdentityProvider(ABC):
    """Base provider with auth-state listener bookkeeping."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._principal: Principal | None = None
        self._listeners: dict[int, AuthStateCallback] = {}
        self._next_token = 0

    @property
    def current_principal(self) -> Principal | None:
        return self._principal

    @abstractmethod
    def sign_in_anonymous(self) -> Principal:
        """Sign in as a fresh anonymous principal."""

    @abstractmethod
    def sign_in_with_token(self, token: str) -> Principal:
        """Sign in with a custom token issued by the hosting environment."""

    def sign_out(self) -> None:
        self._set_principal(None)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        """
        Listen for principal changes.

        The callback fires right away with the current principal, then on
        every change. Returns a function that removes the listener.
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._listeners[token] = callback

        callback(self._principal)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    def _set_principal(self, principal: Principal | None) -> None:
        with self._lock:
            self._principal = principal
            listeners = list(self._listeners.values())
        for callback in listeners:
            try:
                callback(principal)
            except Exception as exc:
                logger.warning("Auth state listener failed: {}", exc)


class LocalIdentityProvider(IdentityProvider):
    """Offline provider: anonymous ids are minted locally, tokens are taken as uids."""

    def sign_in_anonymous(self) -> Principal:
        principal = Principal(uid=auto_id(), is_anonymous=True)
        self._set_principal(principal)
        logger.debug("Signed in anonymously as {}", principal.uid)
        return principal

    def sign_in_with_token(self, token: str) -> Principal:
        if not token or not token.strip():
            raise AuthError("Sign-in token is empty")
        principal = Principal(uid=token.strip(), is_anonymous=False, id_token=token.strip())
        self._set_principal(principal)
        logger.debug("Signed in with token as {}", principal.uid)
        return principal


class IdentityToolkitProvider(IdentityProvider):
    """
    REST client for the hosted identity service.

    Anonymous sign-in posts to accounts:signUp; token sign-in exchanges the
    custom token for an id token and then looks up the account's uid.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_IDENTITY_URL,
        timeout: float = 10.0,
        retries: int = DEFAULT_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ) -> None:
        """
        Initialize the REST client with retry logic.

        Args:
            api_key: Web API key of the identity project
            base_url: Service base URL
            timeout: Request timeout in seconds
            retries: Retry attempts on 5xx responses
            backoff_factor: Exponential backoff factor between retries
        """
        super().__init__()
        if not api_key:
            raise ValueError("IdentityToolkitProvider requires an api_key")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        retry_strategy = Retry(
            total=retries,
            backoff_factor=backoff_factor,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/accounts:{endpoint}"
        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthError(f"Identity request {endpoint} failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400 or "error" in data:
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            message = message or f"HTTP {response.status_code}"
            raise AuthError(f"Identity request {endpoint} rejected: {message}")

        return data

    def sign_in_anonymous(self) -> Principal:
        data = self._post("signUp", {"returnSecureToken": True})
        uid = data.get("localId")
        if not uid:
            raise AuthError("Anonymous sign-up returned no account id")
        principal = Principal(uid=uid, is_anonymous=True, id_token=data.get("idToken"))
        self._set_principal(principal)
        logger.info("Signed in anonymously as {}", uid)
        return principal

    def sign_in_with_token(self, token: str) -> Principal:
        if not token or not token.strip():
            raise AuthError("Sign-in token is empty")

        data = self._post("signInWithCustomToken", {"token": token.strip(), "returnSecureToken": True})
        id_token = data.get("idToken")
        if not id_token:
            raise AuthError("Custom token sign-in returned no id token")

        lookup = self._post("lookup", {"idToken": id_token})
        users = lookup.get("users") or []
        if not users or not users[0].get("localId"):
            raise AuthError("Account lookup returned no user")

        principal = Principal(uid=users[0]["localId"], is_anonymous=False, id_token=id_token)
        self._set_principal(principal)
        logger.info("Signed in with custom token as {}", principal.uid)
        return principal
