"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quizbank.models import Question, QuestionDraft
from quizbank.store.config import question_collection_path
from quizbank.store.memory import InMemoryDocumentStore

SAMPLE_HEADER = "subject,difficulty,question,option1,option2,option3,option4,correctAnswerIndex"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def collection_path():
    """Question collection path for the default tenant."""
    return question_collection_path("default_app")


@pytest.fixture
def memory_store():
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


def make_draft(n: int = 0, subject: str = "Math", difficulty: str = "Easy", correct: int = 0) -> QuestionDraft:
    return QuestionDraft(
        subject=subject,
        difficulty=difficulty,
        question=f"Question {n}?",
        options=(f"a{n}", f"b{n}", f"c{n}", f"d{n}"),
        correct_answer_index=correct,
    )


def make_question(
    qid: str,
    subject: str = "Math",
    difficulty: str = "Easy",
    correct: int = 0,
) -> Question:
    return Question(
        id=qid,
        subject=subject,
        difficulty=difficulty,
        question=f"What is {qid}?",
        options=("A", "B", "C", "D"),
        correct_answer_index=correct,
    )


@pytest.fixture
def sample_drafts():
    """Provide drafts spread over two subjects and two difficulties."""
    return [
        make_draft(0, "Math", "Easy", 1),
        make_draft(1, "Math", "Hard", 2),
        make_draft(2, "Science", "Easy", 0),
        make_draft(3, "Science", "Easy", 3),
    ]


@pytest.fixture
def sample_questions():
    """Provide a small question pool keyed by id."""
    questions = [
        make_question("q1", "Math", "Easy", 0),
        make_question("q2", "Math", "Easy", 2),
        make_question("q3", "Math", "Easy", 1),
        make_question("q4", "Math", "Hard", 3),
        make_question("q5", "Science", "Easy", 0),
    ]
    return {q.id: q for q in questions}


@pytest.fixture
def sample_csv():
    """Provide a valid three-row CSV text."""
    return "\n".join([
        SAMPLE_HEADER,
        "Math,Easy,What is 2 + 2?,3,4,5,22,1",
        'Math,Hard,"What is 1,000 / 10?",10,100,"1,000",0.1,1',
        'History,Medium,"Who wrote ""The Republic""?",Aristotle,Plato,Socrates,Homer,1',
    ])


@pytest.fixture
def draft_factory():
    """Factory for QuestionDraft objects."""
    return make_draft


@pytest.fixture
def question_factory():
    """Factory for Question objects."""
    return make_question
