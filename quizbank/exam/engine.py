"""
Exam session engine.

Runs one student's exam against the question bank view:

    Idle --start_exam--> Active --answer (last question)--> Completed --reset--> Idle

- start_exam filters the pool by exact subject and difficulty, copies and
  shuffles the matches, and fixes that order for the whole session
- answer records the chosen option for the current question and advances
- score counts answers equal to each question's correct index

The session keeps its own snapshot of the questions, so live updates to the
bank never reach an exam in progress.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from loguru import logger

from quizbank.errors import InvalidStateError
from quizbank.models import Question


class ExamStatus(str, Enum):
    """Exam session states."""

    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Score:
    """Final result of a completed exam."""

    correct: int
    total: int

    @property
    def percent(self) -> float:
        return 100.0 * self.correct / self.total if self.total else 0.0


def shuffle_in_place(items: list, rng: random.Random) -> list:
    """Uniform shuffle: walk from the last index down, swapping with a random earlier-or-equal slot."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


class ExamSessionEngine:
    """State machine for a single student's exam session."""

    def __init__(self, rng: random.Random | None = None) -> None:
        """
        Initialize an idle engine.

        Args:
            rng: Random source for shuffling (seed it for reproducible order)
        """
        self._rng = rng or random.Random()
        self._clear()

    def _clear(self) -> None:
        self._status = ExamStatus.IDLE
        self._questions: tuple[Question, ...] = ()
        self._current_index = 0
        self._answers: dict[str, int] = {}
        self._subject: str | None = None
        self._difficulty: str | None = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def status(self) -> ExamStatus:
        return self._status

    @property
    def ordered_questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def answers(self) -> Mapping[str, int]:
        return MappingProxyType(self._answers)

    @property
    def subject(self) -> str | None:
        return self._subject

    @property
    def difficulty(self) -> str | None:
        return self._difficulty

    @property
    def current_question(self) -> Question | None:
        """The question awaiting an answer, or None outside Active."""
        if self._status is not ExamStatus.ACTIVE:
            return None
        return self._questions[self._current_index]

    @property
    def progress(self) -> tuple[int, int]:
        """(1-based position of the current question, total questions)."""
        return self._current_index + 1, len(self._questions)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def start_exam(
        self,
        pool: Mapping[str, Question] | Iterable[Question],
        subject: str,
        difficulty: str,
    ) -> bool:
        """
        Start a session with every pool question matching subject and difficulty.

        Args:
            pool: Question bank view (id -> Question) or any iterable of questions
            subject: Exact subject to match
            difficulty: Exact difficulty to match

        Returns:
            True if a session started; False if nothing matched (engine stays Idle)

        Raises:
            InvalidStateError: If a session is already active or completed
        """
        if self._status is not ExamStatus.IDLE:
            raise InvalidStateError(f"Cannot start an exam while {self._status.value}; reset first")

        questions = pool.values() if isinstance(pool, Mapping) else pool
        filtered = [q for q in questions if q.subject == subject and q.difficulty == difficulty]
        if not filtered:
            logger.debug("No questions for subject={} difficulty={}", subject, difficulty)
            return False

        self._questions = tuple(shuffle_in_place(list(filtered), self._rng))
        self._current_index = 0
        self._answers = {}
        self._subject = subject
        self._difficulty = difficulty
        self._status = ExamStatus.ACTIVE

        logger.debug("Exam started: {} questions ({} / {})", len(self._questions), subject, difficulty)
        return True

    def answer(self, selected_index: int) -> None:
        """
        Record an answer for the current question and advance.

        Raises:
            InvalidStateError: If no session is active
            ValueError: If selected_index is not one of the question's options
        """
        if self._status is not ExamStatus.ACTIVE:
            raise InvalidStateError(f"Cannot answer while {self._status.value}")

        question = self._questions[self._current_index]
        if isinstance(selected_index, bool) or not 0 <= selected_index < len(question.options):
            raise ValueError(
                f"Answer must be between 0 and {len(question.options) - 1}, got {selected_index!r}"
            )

        self._answers[question.id] = selected_index
        self._current_index += 1

        if self._current_index == len(self._questions):
            self._status = ExamStatus.COMPLETED
            logger.debug("Exam completed: {} answers", len(self._answers))

    def score(self) -> Score:
        """
        Count correct answers over the session's questions.

        A question without a recorded answer counts as incorrect.

        Raises:
            InvalidStateError: If the session has not completed
        """
        if self._status is not ExamStatus.COMPLETED:
            raise InvalidStateError(f"Score is only available once completed, not {self._status.value}")

        correct = sum(
            1 for q in self._questions if self._answers.get(q.id) == q.correct_answer_index
        )
        return Score(correct=correct, total=len(self._questions))

    def reset(self) -> None:
        """Clear the session and return to Idle (valid from any state)."""
        self._clear()
