"""Exception hierarchy shared by every quizbank component."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quizbank.models import QuestionDraft


class QuizBankError(Exception):
    """Base class for all quizbank errors."""


class CsvValidationError(QuizBankError):
    """Parsed CSV cannot be uploaded (bad header, row errors, or no rows)."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        header_valid: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])
        self.header_valid = header_valid


class CommitError(QuizBankError):
    """A document store could not commit an atomic batch."""


class UploadError(QuizBankError):
    """
    A chunk commit failed partway through an upload.

    Chunks committed before the failure stay persisted; ``partial_count``
    says how many records made it, ``remaining`` holds the drafts that did not.
    """

    def __init__(
        self,
        partial_count: int,
        remaining: list[QuestionDraft] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.partial_count = partial_count
        self.remaining = list(remaining or [])
        self.cause = cause
        message = f"Upload failed after {partial_count} question(s) were committed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class AuthError(QuizBankError):
    """Identity resolution failed."""


class SubscriptionError(QuizBankError):
    """The live change stream for a collection failed."""


class InvalidStateError(QuizBankError):
    """An exam session operation was called from the wrong state."""


class RoleDeniedError(QuizBankError):
    """The conductor role was requested without a valid credential."""
