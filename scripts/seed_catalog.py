#!/usr/bin/env python3
"""
Catalog Seeding Script.

Populates an empty database with the default titles and stocks copies
for each of them. Does nothing if the catalog already has titles.

Usage:
    python -m scripts.seed_catalog --db-path data/library.db --copies 2
"""

import argparse
import logging
import sys
from pathlib import Path

from library_backend.domain.errors import LibraryError
from library_backend.domain.services import CatalogService
from library_backend.infrastructure.db import SqliteLibraryStore
from library_backend.seed_data import DEFAULT_BOOKS

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data/library.db")


def main(db_path: Path = DEFAULT_DB_PATH, copies: int = 1) -> int:
    """
    Main entry point for the seeding script.

    Args:
        db_path: SQLite database file (created if missing)
        copies: Copies to stock per title

    Returns:
        Number of copies stocked (0 if the catalog was already populated)
    """
    logger.info(f"Seeding catalog: db_path={db_path}, copies={copies}")

    try:
        service = CatalogService(store=SqliteLibraryStore(db_path))
        summary = service.seed_if_empty(DEFAULT_BOOKS, copies_per_book=copies)
    except LibraryError as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)

    if summary.skipped:
        logger.info("Catalog already has titles; nothing inserted")
    else:
        logger.info(f"Inserted {summary.n_books} titles and {summary.n_copies} copies")
    return summary.n_copies


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the library catalog with default titles")
    parser.add_argument(
        "--db-path", "-d",
        type=Path,
        default=DEFAULT_DB_PATH,
        help=f"SQLite database file (default: {DEFAULT_DB_PATH})"
    )
    parser.add_argument(
        "--copies", "-c",
        type=int,
        default=1,
        help="Copies to stock per title (default: 1)"
    )

    args = parser.parse_args()
    main(args.db_path, args.copies)
