"""
SQLite schema and timestamp helpers shared by the repositories.
"""

from datetime import datetime, UTC
from typing import Optional

SCHEMA = """
CREATE TABLE IF NOT EXISTS books (
    isbn TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    description TEXT,
    image_url TEXT
);

CREATE TABLE IF NOT EXISTS copies (
    copy_id INTEGER PRIMARY KEY AUTOINCREMENT,
    isbn TEXT NOT NULL REFERENCES books(isbn),
    status TEXT NOT NULL CHECK (status IN ('Available', 'Borrowed')),
    stored_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_copies_isbn ON copies(isbn);
CREATE INDEX IF NOT EXISTS idx_copies_status ON copies(status);

CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    phone_number TEXT NOT NULL UNIQUE,
    user_name TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    salt TEXT NOT NULL,
    registered_at TEXT NOT NULL,
    last_login_at TEXT
);

CREATE TABLE IF NOT EXISTS loan_records (
    record_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(user_id),
    copy_id INTEGER NOT NULL REFERENCES copies(copy_id),
    borrowed_at TEXT NOT NULL,
    returned_at TEXT,
    CHECK (returned_at IS NULL OR returned_at >= borrowed_at)
);

CREATE INDEX IF NOT EXISTS idx_loans_user ON loan_records(user_id, borrowed_at);

-- At most one open loan per copy, enforced by storage.
CREATE UNIQUE INDEX IF NOT EXISTS ux_loans_open_per_copy
    ON loan_records(copy_id) WHERE returned_at IS NULL;

CREATE TABLE IF NOT EXISTS sessions (
    token TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(user_id),
    issued_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_expires ON sessions(expires_at);
"""


def format_timestamp(value: datetime) -> str:
    """
    Serialize a datetime as fixed-width UTC ISO-8601 text.

    Fixed width (always microseconds, always +00:00) keeps lexicographic
    order equal to chronological order, which ORDER BY relies on.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse text written by format_timestamp (None passes through)."""
    if value is None:
        return None
    return datetime.fromisoformat(value)
