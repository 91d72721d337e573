"""Question bank: chunked upload, live sync, and the conductor workflow."""

from quizbank.bank.conductor import ConductorService
from quizbank.bank.sync import QuestionBankSync, QuestionBankView
from quizbank.bank.uploader import BatchUploader, UploadResult, chunk_drafts

__all__ = [
    "BatchUploader",
    "ConductorService",
    "QuestionBankSync",
    "QuestionBankView",
    "UploadResult",
    "chunk_drafts",
]
