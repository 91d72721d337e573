"""
Document store constants and collection addressing.

Centralizes store limits and path layout so upload and sync agree.
"""

from __future__ import annotations

# =============================================================================
# Commit Limits
# =============================================================================
# Hard ceiling on writes in one atomic commit
MAX_COMMIT_WRITES = 500

# Upload chunk size, kept under MAX_COMMIT_WRITES with margin
DEFAULT_CHUNK_SIZE = 400

# =============================================================================
# Collection Layout
# =============================================================================
QUESTIONS_COLLECTION = "exams_questions"
COLLECTION_PATH_TEMPLATE = "artifacts/{tenant_id}/public/data/{collection}"

# Auto-generated document ids
AUTO_ID_LENGTH = 20
AUTO_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"


def question_collection_path(tenant_id: str) -> str:
    """
    Get the tenant-scoped path of the question collection.

    Args:
        tenant_id: Tenant (app) identifier supplied by the hosting environment

    Returns:
        Path like "artifacts/default_app/public/data/exams_questions"
    """
    if not tenant_id or "/" in tenant_id:
        raise ValueError(f"Invalid tenant id: {tenant_id!r}")
    return COLLECTION_PATH_TEMPLATE.format(tenant_id=tenant_id, collection=QUESTIONS_COLLECTION)
