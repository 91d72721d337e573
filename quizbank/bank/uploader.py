"""
Chunked question upload.

Persists validated drafts to the question collection:
- Drafts are split into consecutive chunks (400 by default) to stay under the
  store's per-commit write ceiling
- Each chunk is one atomic commit, issued strictly in sequence
- A failed chunk stops the upload; earlier chunks stay committed and the
  caller gets an UploadError with the committed count

Uploads are chunk-atomic, not upload-atomic. There is no dedup: uploading the
same drafts twice creates duplicate questions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from quizbank.errors import UploadError
from quizbank.models import QuestionDraft
from quizbank.store.base import SERVER_TIMESTAMP, DocumentStore
from quizbank.store.config import DEFAULT_CHUNK_SIZE, MAX_COMMIT_WRITES


@dataclass
class UploadResult:
    """Outcome of a fully successful upload."""

    uploaded_count: int = 0
    chunk_count: int = 0
    document_ids: list[str] = field(default_factory=list)


def chunk_drafts(drafts: Sequence[QuestionDraft], chunk_size: int) -> list[Sequence[QuestionDraft]]:
    """Split drafts into consecutive chunks of at most ``chunk_size``."""
    return [drafts[start : start + chunk_size] for start in range(0, len(drafts), chunk_size)]


class BatchUploader:
    """Writes question drafts to a collection in sequential atomic chunks."""

    def __init__(
        self,
        store: DocumentStore,
        collection_path: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """
        Initialize uploader.

        Args:
            store: Document store client
            collection_path: Tenant-scoped question collection path
            chunk_size: Max drafts per atomic commit (1..MAX_COMMIT_WRITES)
        """
        if not 1 <= chunk_size <= MAX_COMMIT_WRITES:
            raise ValueError(f"chunk_size must be between 1 and {MAX_COMMIT_WRITES}, got {chunk_size}")
        self.store = store
        self.collection_path = collection_path
        self.chunk_size = chunk_size

    def upload(self, drafts: Sequence[QuestionDraft], uploader_id: str) -> UploadResult:
        """
        Upload drafts chunk by chunk.

        Args:
            drafts: Validated drafts (callers reject empty input upstream)
            uploader_id: Identity of the uploading principal, stored as authorId

        Returns:
            UploadResult with the total committed count

        Raises:
            UploadError: If a chunk commit fails; carries the committed count
        """
        result = UploadResult()
        chunks = chunk_drafts(drafts, self.chunk_size)

        logger.info(
            "Uploading {} questions to {} in {} chunk(s) of up to {}",
            len(drafts),
            self.collection_path,
            len(chunks),
            self.chunk_size,
        )

        for chunk_idx, chunk in enumerate(chunks):
            writes = []
            for draft in chunk:
                doc_id = self.store.new_document_id(self.collection_path)
                writes.append((doc_id, draft.to_document(doc_id, uploader_id, SERVER_TIMESTAMP)))

            try:
                self.store.commit_batch(self.collection_path, writes)
            except Exception as exc:
                logger.error(
                    "Chunk {}/{} failed after {} committed: {}",
                    chunk_idx + 1,
                    len(chunks),
                    result.uploaded_count,
                    exc,
                )
                remaining = list(drafts[result.uploaded_count :])
                raise UploadError(result.uploaded_count, remaining=remaining, cause=exc) from exc

            result.uploaded_count += len(chunk)
            result.chunk_count += 1
            result.document_ids.extend(doc_id for doc_id, _ in writes)
            logger.debug("Chunk {}/{} committed ({} questions)", chunk_idx + 1, len(chunks), len(chunk))

        logger.info("Upload complete: {} questions", result.uploaded_count)
        return result
