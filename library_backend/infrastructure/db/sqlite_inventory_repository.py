"""
SQLite implementation of the InventoryRepository port.

Each row of the copies table is one lendable copy. The status column is a
projection of the loan ledger and is only written inside the same
transaction as the corresponding loan_records write.
"""

import sqlite3
from typing import Dict, List, Optional, Tuple

from library_backend.domain.entities import Copy, CopyStatus
from library_backend.domain.errors import StorageError
from library_backend.domain.ports import InventoryRepository
from library_backend.infrastructure.db.sqlite_schema import format_timestamp, parse_timestamp


class SqliteInventoryRepository(InventoryRepository):
    """Copies and their lending status, bound to one open connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _row_to_copy(self, row: sqlite3.Row) -> Copy:
        """Convert a database row to a Copy entity."""
        return Copy(
            copy_id=row["copy_id"],
            isbn=row["isbn"],
            status=CopyStatus(row["status"]),
            stored_at=parse_timestamp(row["stored_at"]),
        )

    def add(self, copy: Copy) -> Copy:
        try:
            cursor = self._conn.execute(
                "INSERT INTO copies (isbn, status, stored_at) VALUES (?, ?, ?)",
                (copy.isbn, copy.status.value, format_timestamp(copy.stored_at)),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Copy violates inventory constraints: {e}") from e

        return Copy(
            copy_id=cursor.lastrowid,
            isbn=copy.isbn,
            status=copy.status,
            stored_at=copy.stored_at,
        )

    def get(self, copy_id: int) -> Optional[Copy]:
        row = self._conn.execute(
            "SELECT * FROM copies WHERE copy_id = ?",
            (copy_id,),
        ).fetchone()

        if row is None:
            return None

        return self._row_to_copy(row)

    def set_status(self, copy_id: int, status: CopyStatus) -> None:
        cursor = self._conn.execute(
            "UPDATE copies SET status = ? WHERE copy_id = ?",
            (status.value, copy_id),
        )
        if cursor.rowcount != 1:
            raise StorageError(f"Copy {copy_id} vanished while updating its status")

    def list_by_status(self, status: CopyStatus) -> List[Copy]:
        rows = self._conn.execute(
            "SELECT * FROM copies WHERE status = ? ORDER BY copy_id",
            (status.value,),
        ).fetchall()
        return [self._row_to_copy(row) for row in rows]

    def list_by_isbn(self, isbn: str) -> List[Copy]:
        rows = self._conn.execute(
            "SELECT * FROM copies WHERE isbn = ? ORDER BY copy_id",
            (isbn,),
        ).fetchall()
        return [self._row_to_copy(row) for row in rows]

    def counts_by_isbn(self) -> Dict[str, Tuple[int, int]]:
        rows = self._conn.execute(
            """
            SELECT isbn,
                   COUNT(*) AS total,
                   SUM(CASE WHEN status = ? THEN 1 ELSE 0 END) AS available
            FROM copies
            GROUP BY isbn
            """,
            (CopyStatus.AVAILABLE.value,),
        ).fetchall()
        return {row["isbn"]: (row["total"], row["available"]) for row in rows}
