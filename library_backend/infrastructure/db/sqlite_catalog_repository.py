"""
SQLite implementation of the CatalogRepository port.
"""

import sqlite3
from typing import List, Optional

from library_backend.domain.entities import CatalogBook
from library_backend.domain.ports import CatalogRepository


class SqliteCatalogRepository(CatalogRepository):
    """Catalog titles keyed by ISBN, bound to one open connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _row_to_book(self, row: sqlite3.Row) -> CatalogBook:
        """Convert a database row to a CatalogBook entity."""
        return CatalogBook(
            isbn=row["isbn"],
            title=row["title"],
            author=row["author"],
            description=row["description"],
            image_url=row["image_url"],
        )

    def add(self, book: CatalogBook) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO books (isbn, title, author, description, image_url)
                VALUES (:isbn, :title, :author, :description, :image_url)
                """,
                {
                    "isbn": book.isbn,
                    "title": book.title,
                    "author": book.author,
                    "description": book.description,
                    "image_url": book.image_url,
                },
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Book violates catalog constraints: {e}") from e

    def get(self, isbn: str) -> Optional[CatalogBook]:
        row = self._conn.execute(
            "SELECT * FROM books WHERE isbn = ?",
            (isbn,),
        ).fetchone()

        if row is None:
            return None

        return self._row_to_book(row)

    def find_by_title(self, title: str) -> List[CatalogBook]:
        rows = self._conn.execute(
            "SELECT * FROM books WHERE title = ? COLLATE NOCASE ORDER BY isbn",
            (title,),
        ).fetchall()
        return [self._row_to_book(row) for row in rows]

    def find_by_author(self, author: str) -> List[CatalogBook]:
        rows = self._conn.execute(
            "SELECT * FROM books WHERE author = ? COLLATE NOCASE ORDER BY isbn",
            (author,),
        ).fetchall()
        return [self._row_to_book(row) for row in rows]

    def list_all(self) -> List[CatalogBook]:
        rows = self._conn.execute("SELECT * FROM books ORDER BY isbn").fetchall()
        return [self._row_to_book(row) for row in rows]

    def count(self) -> int:
        result = self._conn.execute("SELECT COUNT(*) AS cnt FROM books").fetchone()
        return result["cnt"]
