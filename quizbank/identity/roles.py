"""
Role gate between student and conductor.

The conductor credential is supplied by configuration, never embedded.
Without a configured credential nobody can become a conductor.
"""

from __future__ import annotations

import hmac
from enum import Enum

from quizbank.errors import RoleDeniedError


class Role(str, Enum):
    STUDENT = "student"
    CONDUCTOR = "conductor"


class RolePolicy:
    """Decides which role a user may take."""

    def __init__(self, conductor_secret: str | None) -> None:
        self._conductor_secret = (conductor_secret or "").strip()

    @property
    def conductor_enabled(self) -> bool:
        return bool(self._conductor_secret)

    def select_role(self, want_conductor: bool, secret: str | None = None) -> Role:
        """
        Resolve the requested role.

        Raises:
            RoleDeniedError: If conductor is requested with a wrong or missing secret
        """
        if not want_conductor:
            return Role.STUDENT

        supplied = (secret or "").strip()
        if not self.conductor_enabled or not hmac.compare_digest(
            supplied.encode("utf-8"), self._conductor_secret.encode("utf-8")
        ):
            raise RoleDeniedError("Invalid secret phrase for Exam Conductor.")
        return Role.CONDUCTOR
