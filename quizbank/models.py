"""
Question records.

QuestionDraft is what CSV ingestion produces; Question is what the store
hands back once a draft has been persisted (id, timestamp, and author added).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

OPTION_COUNT = 4


@dataclass(frozen=True)
class QuestionDraft:
    """A validated, not-yet-persisted question."""

    subject: str
    difficulty: str
    question: str
    options: tuple[str, str, str, str]
    correct_answer_index: int

    def to_document(self, doc_id: str, author_id: str, created_at: Any) -> dict[str, Any]:
        """Build the persisted record for this draft."""
        return {
            "id": doc_id,
            "subject": self.subject,
            "difficulty": self.difficulty,
            "question": self.question,
            "options": list(self.options),
            "correctAnswerIndex": self.correct_answer_index,
            "createdAt": created_at,
            "authorId": author_id,
        }


@dataclass(frozen=True)
class Question:
    """A persisted question as seen through the question bank view."""

    id: str
    subject: str
    difficulty: str
    question: str
    options: tuple[str, ...]
    correct_answer_index: int
    created_at: datetime | None = None
    author_id: str | None = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Question:
        """
        Map a stored document to a Question.

        The store does no schema validation, so anything that does not look
        like a question record raises ValueError.
        """
        options = data.get("options")
        if not isinstance(options, (list, tuple)) or len(options) != OPTION_COUNT:
            raise ValueError(f"document {doc_id} does not have {OPTION_COUNT} options")

        correct = data.get("correctAnswerIndex")
        if isinstance(correct, bool) or not isinstance(correct, int):
            raise ValueError(f"document {doc_id} has a non-integer correctAnswerIndex")

        return cls(
            id=doc_id,
            subject=str(data.get("subject") or ""),
            difficulty=str(data.get("difficulty") or ""),
            question=str(data.get("question") or ""),
            options=tuple("" if opt is None else str(opt) for opt in options),
            correct_answer_index=correct,
            created_at=_parse_timestamp(data.get("createdAt")),
            author_id=data.get("authorId"),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None
