# Database infrastructure package
"""
SQLite adapters for the domain ports.

This package contains:
- SqliteLibraryStore: transaction boundary (LibraryStore port)
- SqliteCatalogRepository, SqliteInventoryRepository, SqliteLoanLedger,
  SqliteUserRepository, SqliteSessionRepository: repositories bound to one
  open transaction
"""

from .sqlite_library_store import SqliteLibraryStore, SqliteLibraryTransaction

__all__ = ["SqliteLibraryStore", "SqliteLibraryTransaction"]
