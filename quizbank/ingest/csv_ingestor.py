"""
CSV ingestion for conductor question uploads.

Turns pasted CSV text into validated question drafts. The grammar is strict:

    subject,difficulty,question,option1,option2,option3,option4,correctAnswerIndex

- The header must match the expected columns (case-insensitive, same count
  and order); otherwise no data row is evaluated.
- Fields may be wrapped in double quotes; a doubled quote inside a quoted
  span is a literal quote.
- Every row is checked and every problem collected, so the conductor sees
  all errors at once.

Pure and deterministic: no I/O, same input gives the same result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from quizbank.models import QuestionDraft

EXPECTED_HEADER = (
    "subject",
    "difficulty",
    "question",
    "option1",
    "option2",
    "option3",
    "option4",
    "correctAnswerIndex",
)
EXPECTED_HEADER_LINE = ",".join(EXPECTED_HEADER)

_LEADING_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class ParseResult:
    """Outcome of parsing one CSV text."""

    header_valid: bool
    rows: list[QuestionDraft] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when the header matched, no row failed, and at least one row parsed."""
        return self.header_valid and not self.errors and bool(self.rows)


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields, honouring double-quote spans."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return [f.strip() for f in fields]


def header_matches(fields: list[str]) -> bool:
    """Check header fields against EXPECTED_HEADER, ignoring case."""
    if len(fields) != len(EXPECTED_HEADER):
        return False
    return all(got.lower() == want.lower() for got, want in zip(fields, EXPECTED_HEADER))


def _parse_index(raw: str) -> int | None:
    """Read the leading ASCII base-10 integer; trailing text is ignored ("2x" -> 2)."""
    match = _LEADING_INTEGER.match(raw.strip())
    if match is None:
        return None
    return int(match.group(), 10)


class CsvIngestor:
    """Parser for conductor CSV uploads."""

    def parse(self, text: str) -> ParseResult:
        """
        Parse CSV text into question drafts.

        Args:
            text: Raw CSV text (any line ending style)

        Returns:
            ParseResult with header flag, accepted rows and line-numbered errors
        """
        normalized = text.replace("\r\n", "\n").replace("\r", "\n")
        lines = [line for line in normalized.split("\n") if line.strip()]

        if not lines:
            return ParseResult(header_valid=False, errors=["CSV content is empty."])

        if not header_matches(split_csv_line(lines[0])):
            return ParseResult(header_valid=False)

        result = ParseResult(header_valid=True)
        for idx in range(1, len(lines)):
            line_number = idx + 1
            draft = self._parse_row(lines[idx], line_number, result.errors)
            if draft is not None:
                result.rows.append(draft)

        return result

    def _parse_row(self, line: str, line_number: int, errors: list[str]) -> QuestionDraft | None:
        parts = split_csv_line(line)
        if len(parts) != len(EXPECTED_HEADER):
            errors.append(
                f"Line {line_number}: expected {len(EXPECTED_HEADER)} fields, got {len(parts)}."
            )
            return None

        subject, difficulty, question, opt1, opt2, opt3, opt4, raw_index = parts
        if not subject or not difficulty or not question:
            errors.append(f"Line {line_number}: subject, difficulty, and question are required.")
            return None

        correct = _parse_index(raw_index)
        if correct is None or not 0 <= correct <= 3:
            errors.append(
                f"Line {line_number}: correctAnswerIndex must be an integer between 0 and 3."
            )
            return None

        return QuestionDraft(
            subject=subject,
            difficulty=difficulty,
            question=question,
            options=(opt1, opt2, opt3, opt4),
            correct_answer_index=correct,
        )


def parse_csv(text: str) -> ParseResult:
    """Parse CSV text with a default ingestor."""
    return CsvIngestor().parse(text)
