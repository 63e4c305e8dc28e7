"""
SQLite implementations of the UserRepository and SessionRepository ports.
"""

import sqlite3
from datetime import datetime
from typing import Optional

from library_backend.domain.entities import Session, User
from library_backend.domain.ports import SessionRepository, UserRepository
from library_backend.infrastructure.db.sqlite_schema import format_timestamp, parse_timestamp


class SqliteUserRepository(UserRepository):
    """Registered users, bound to one open connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            user_id=row["user_id"],
            phone_number=row["phone_number"],
            user_name=row["user_name"],
            password_hash=row["password_hash"],
            salt=row["salt"],
            registered_at=parse_timestamp(row["registered_at"]),
            last_login_at=parse_timestamp(row["last_login_at"]),
        )

    def add(self, user: User) -> User:
        try:
            cursor = self._conn.execute(
                """
                INSERT INTO users
                (phone_number, user_name, password_hash, salt, registered_at, last_login_at)
                VALUES (?, ?, ?, ?, ?, NULL)
                """,
                (
                    user.phone_number,
                    user.user_name,
                    user.password_hash,
                    user.salt,
                    format_timestamp(user.registered_at),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"User violates constraints: {e}") from e

        return User(
            user_id=cursor.lastrowid,
            phone_number=user.phone_number,
            user_name=user.user_name,
            password_hash=user.password_hash,
            salt=user.salt,
            registered_at=user.registered_at,
        )

    def get(self, user_id: int) -> Optional[User]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return self._row_to_user(row) if row is not None else None

    def get_by_phone(self, phone_number: str) -> Optional[User]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE phone_number = ?",
            (phone_number,),
        ).fetchone()
        return self._row_to_user(row) if row is not None else None

    def exists(self, user_id: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM users WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return row is not None

    def touch_login(self, user_id: int, at: datetime) -> None:
        self._conn.execute(
            "UPDATE users SET last_login_at = ? WHERE user_id = ?",
            (format_timestamp(at), user_id),
        )


class SqliteSessionRepository(SessionRepository):
    """Issued login tokens, bound to one open connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add(self, session: Session) -> None:
        self._conn.execute(
            "INSERT INTO sessions (token, user_id, issued_at, expires_at) VALUES (?, ?, ?, ?)",
            (
                session.token,
                session.user_id,
                format_timestamp(session.issued_at),
                format_timestamp(session.expires_at),
            ),
        )

    def get(self, token: str) -> Optional[Session]:
        row = self._conn.execute(
            "SELECT * FROM sessions WHERE token = ?",
            (token,),
        ).fetchone()

        if row is None:
            return None

        return Session(
            token=row["token"],
            user_id=row["user_id"],
            issued_at=parse_timestamp(row["issued_at"]),
            expires_at=parse_timestamp(row["expires_at"]),
        )

    def delete(self, token: str) -> bool:
        cursor = self._conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
        return cursor.rowcount > 0

    def delete_expired(self, now: datetime) -> int:
        cursor = self._conn.execute(
            "DELETE FROM sessions WHERE expires_at <= ?",
            (format_timestamp(now),),
        )
        return cursor.rowcount
