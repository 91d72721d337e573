"""
quizbank: dual-role multiple-choice quiz platform.

Conductors bulk-load questions from CSV; students take randomized,
filtered exams against a live view of the question bank.

Subpackages:
- ingest/: CSV parsing and validation into question drafts
- store/: document store clients (in-memory, SQL)
- bank/: chunked upload, live question bank sync, conductor workflow
- exam/: exam session state machine
- identity/: sign-in providers and the role gate
- cli/: Typer command-line shell
"""

__version__ = "1.0.0"
