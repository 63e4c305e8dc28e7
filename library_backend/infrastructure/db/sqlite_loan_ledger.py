"""
SQLite implementation of the LoanLedger port.

The partial unique index ux_loans_open_per_copy rejects a second open
record for the same copy at insert time; the repository reports that as a
ValueError so the borrowing service can map it to a conflict.
"""

import sqlite3
from datetime import datetime
from typing import List, Optional

from library_backend.domain.entities import LoanRecord
from library_backend.domain.ports import LoanLedger
from library_backend.infrastructure.db.sqlite_schema import format_timestamp, parse_timestamp


class SqliteLoanLedger(LoanLedger):
    """Append-mostly loan log, bound to one open connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _row_to_record(self, row: sqlite3.Row) -> LoanRecord:
        """Convert a database row to a LoanRecord entity."""
        return LoanRecord(
            record_id=row["record_id"],
            user_id=row["user_id"],
            copy_id=row["copy_id"],
            borrowed_at=parse_timestamp(row["borrowed_at"]),
            returned_at=parse_timestamp(row["returned_at"]),
        )

    def open_loan(self, user_id: int, copy_id: int, borrowed_at: datetime) -> LoanRecord:
        try:
            cursor = self._conn.execute(
                """
                INSERT INTO loan_records (user_id, copy_id, borrowed_at, returned_at)
                VALUES (?, ?, ?, NULL)
                """,
                (user_id, copy_id, format_timestamp(borrowed_at)),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Loan violates ledger constraints: {e}") from e

        return LoanRecord(
            record_id=cursor.lastrowid,
            user_id=user_id,
            copy_id=copy_id,
            borrowed_at=borrowed_at,
        )

    def close_loan(self, record: LoanRecord) -> None:
        if record.returned_at is None:
            raise ValueError(f"Loan record {record.record_id} has no return timestamp")

        cursor = self._conn.execute(
            """
            UPDATE loan_records
            SET returned_at = ?
            WHERE record_id = ? AND returned_at IS NULL
            """,
            (format_timestamp(record.returned_at), record.record_id),
        )
        if cursor.rowcount != 1:
            raise ValueError(f"Loan record {record.record_id} is not open")

    def find_open_by_copy(self, copy_id: int) -> Optional[LoanRecord]:
        row = self._conn.execute(
            "SELECT * FROM loan_records WHERE copy_id = ? AND returned_at IS NULL",
            (copy_id,),
        ).fetchone()
        return self._row_to_record(row) if row is not None else None

    def find_open(self, user_id: int, copy_id: int) -> Optional[LoanRecord]:
        row = self._conn.execute(
            """
            SELECT * FROM loan_records
            WHERE user_id = ? AND copy_id = ? AND returned_at IS NULL
            """,
            (user_id, copy_id),
        ).fetchone()
        return self._row_to_record(row) if row is not None else None

    def list_by_user(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[LoanRecord]:
        # LIMIT -1 means "no limit" in SQLite
        rows = self._conn.execute(
            """
            SELECT * FROM loan_records
            WHERE user_id = ?
            ORDER BY borrowed_at DESC, record_id DESC
            LIMIT ? OFFSET ?
            """,
            (user_id, -1 if limit is None else limit, offset),
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def list_open_by_user(self, user_id: int) -> List[LoanRecord]:
        rows = self._conn.execute(
            """
            SELECT * FROM loan_records
            WHERE user_id = ? AND returned_at IS NULL
            ORDER BY borrowed_at DESC, record_id DESC
            """,
            (user_id,),
        ).fetchall()
        return [self._row_to_record(row) for row in rows]
