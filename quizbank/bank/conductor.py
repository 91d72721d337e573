"""
Conductor upload workflow: parse, gate on validation, then upload.

A single bad row blocks the whole upload; the conductor fixes the CSV and
resubmits.
"""

from __future__ import annotations

from loguru import logger

from quizbank.bank.uploader import BatchUploader, UploadResult
from quizbank.errors import CsvValidationError
from quizbank.ingest.csv_ingestor import EXPECTED_HEADER_LINE, CsvIngestor, ParseResult


class ConductorService:
    """Turns pasted CSV text into uploaded questions."""

    def __init__(self, uploader: BatchUploader, ingestor: CsvIngestor | None = None) -> None:
        self.uploader = uploader
        self.ingestor = ingestor or CsvIngestor()

    def preview(self, text: str) -> ParseResult:
        """Parse without uploading."""
        return self.ingestor.parse(text)

    def validate(self, text: str) -> ParseResult:
        """
        Parse and require an uploadable result.

        Raises:
            CsvValidationError: On a bad header, any row error, or zero rows
        """
        result = self.ingestor.parse(text)

        if not result.header_valid:
            raise CsvValidationError(
                f"CSV header is invalid. Expected: {EXPECTED_HEADER_LINE}",
                errors=result.errors,
                header_valid=False,
            )
        if result.errors:
            raise CsvValidationError(
                f"Fix CSV issues before upload. First error: {result.errors[0]}",
                errors=result.errors,
            )
        if not result.rows:
            raise CsvValidationError("No valid rows to upload.")

        return result

    def upload_csv(self, text: str, author_id: str) -> UploadResult:
        """
        Validate CSV text and upload every row.

        Raises:
            CsvValidationError: If the CSV is not uploadable
            UploadError: If a chunk commit fails
        """
        result = self.validate(text)
        logger.info("CSV validated: {} questions ready for upload", len(result.rows))
        return self.uploader.upload(result.rows, author_id)
