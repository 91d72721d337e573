"""CSV ingestion."""

from quizbank.ingest.csv_ingestor import (
    EXPECTED_HEADER,
    EXPECTED_HEADER_LINE,
    CsvIngestor,
    ParseResult,
    header_matches,
    parse_csv,
    split_csv_line,
)

__all__ = [
    "EXPECTED_HEADER",
    "EXPECTED_HEADER_LINE",
    "CsvIngestor",
    "ParseResult",
    "header_matches",
    "parse_csv",
    "split_csv_line",
]
