#!/usr/bin/env python3
"""
Seed the question bank from a CSV file.

Loads a question CSV into the configured SQL store under the configured
tenant, using the same validation and chunked upload as the conductor
workflow. No role check: this is an operator script.

Usage:
    python scripts/seed_questions.py data/sample_questions.csv
    python scripts/seed_questions.py questions.csv --author seed-script --chunk-size 200
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from config import get_settings
from quizbank.bank.conductor import ConductorService
from quizbank.bank.uploader import BatchUploader
from quizbank.errors import CsvValidationError, UploadError
from quizbank.store.sql_store import SqlDocumentStore


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the question bank from a CSV file")
    parser.add_argument("csv_file", type=Path, help="Question CSV file")
    parser.add_argument("--author", default="seed-script", help="authorId stamped on every question")
    parser.add_argument("--chunk-size", type=int, default=None, help="Questions per commit")
    args = parser.parse_args()

    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level="INFO", format="<level>{message}</level>")

    if not args.csv_file.exists():
        logger.error("File not found: {}", args.csv_file)
        return 1

    store = SqlDocumentStore(settings.database_url)
    uploader = BatchUploader(
        store,
        settings.questions_collection_path,
        chunk_size=args.chunk_size or settings.upload_chunk_size,
    )
    service = ConductorService(uploader)

    try:
        result = service.upload_csv(args.csv_file.read_text(encoding="utf-8-sig"), args.author)
    except CsvValidationError as exc:
        logger.error(exc.message)
        for error in exc.errors:
            logger.error("  {}", error)
        return 1
    except UploadError as exc:
        logger.error(str(exc))
        return 1
    finally:
        store.close()

    logger.info(
        "Seeded {} questions into {} ({} commit(s))",
        result.uploaded_count,
        settings.questions_collection_path,
        result.chunk_count,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
