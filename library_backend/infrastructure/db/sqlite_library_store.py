"""
SQLite implementation of the LibraryStore port.

=============================================================================
NOTES: How borrow/return are serialized
=============================================================================

Every transaction gets its own connection (no connection is shared across
threads). Connections run in autocommit mode and transactions are started
explicitly:

- write(): BEGIN IMMEDIATE takes the database RESERVED lock before the
  first read. A second writer blocks in BEGIN IMMEDIATE (up to the busy
  timeout) until the first one commits or rolls back, so a precondition
  read inside write() still holds when its writes are applied. The lock
  is wider than one copy, which is correct but coarser than necessary.

- read(): BEGIN DEFERRED. In WAL mode readers see a snapshot of committed
  data and never block writers.

The partial unique index on open loans is the storage-level backstop in
case some other client writes without going through write().

Any sqlite3.Error escaping a transaction block rolls the transaction back
and is re-raised as StorageError.
=============================================================================
"""

import logging
import sqlite3
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Iterator, Union

from library_backend.domain.errors import StorageError
from library_backend.domain.ports import LibraryStore, LibraryTransaction
from library_backend.infrastructure.db.sqlite_catalog_repository import SqliteCatalogRepository
from library_backend.infrastructure.db.sqlite_inventory_repository import SqliteInventoryRepository
from library_backend.infrastructure.db.sqlite_loan_ledger import SqliteLoanLedger
from library_backend.infrastructure.db.sqlite_schema import SCHEMA
from library_backend.infrastructure.db.sqlite_user_repository import (
    SqliteSessionRepository,
    SqliteUserRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class SqliteLibraryTransaction(LibraryTransaction):
    """All repositories bound to one connection and one transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.catalog = SqliteCatalogRepository(conn)
        self.inventory = SqliteInventoryRepository(conn)
        self.ledger = SqliteLoanLedger(conn)
        self.users = SqliteUserRepository(conn)
        self.sessions = SqliteSessionRepository(conn)


class SqliteLibraryStore(LibraryStore):
    """
    File-backed SQLite storage for catalog, inventory, ledger and identity.

    The database file and its parent directory are created on first use.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds a transaction waits for the write lock before
                failing with StorageError
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout = timeout
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get an autocommit connection with row factory and foreign keys on."""
        conn = sqlite3.connect(
            str(self._db_path),
            timeout=self._timeout,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        try:
            conn = self._get_connection()
            try:
                conn.execute("PRAGMA journal_mode = WAL")
                conn.executescript(SCHEMA)
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Could not initialize database at {self._db_path}: {e}") from e

        logger.info(f"SQLite library store ready at {self._db_path}")

    @contextmanager
    def _transaction(self, begin_statement: str) -> Iterator[SqliteLibraryTransaction]:
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database: {e}") from e

        try:
            try:
                conn.execute(begin_statement)
            except sqlite3.Error as e:
                raise StorageError(f"Could not start transaction: {e}") from e

            try:
                yield SqliteLibraryTransaction(conn)
            except sqlite3.Error as e:
                self._rollback(conn)
                raise StorageError(f"Database error: {e}") from e
            except BaseException:
                self._rollback(conn)
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback(conn)
                raise StorageError(f"Could not commit transaction: {e}") from e
        finally:
            conn.close()

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                # Closing the connection discards the transaction anyway.
                logger.warning(f"Rollback failed: {e}")

    def write(self) -> AbstractContextManager[SqliteLibraryTransaction]:
        return self._transaction("BEGIN IMMEDIATE")

    def read(self) -> AbstractContextManager[SqliteLibraryTransaction]:
        return self._transaction("BEGIN DEFERRED")

    def is_ready(self) -> bool:
        try:
            with self.read() as tx:
                tx.catalog.count()
            return True
        except StorageError as e:
            logger.warning(f"Storage health check failed: {e}")
            return False
