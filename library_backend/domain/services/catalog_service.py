"""
Domain service for the book catalog and stock-in of copies.
"""

import logging
from datetime import datetime, UTC
from typing import List, Optional, Sequence

from library_backend.domain.entities import CatalogBook, Copy, CopyStatus
from library_backend.domain.errors import BookAlreadyExists, BookNotFound, InvalidInput
from library_backend.domain.ports import LibraryStore
from library_backend.domain.value_objects import BookInventory, SeedSummary

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Manages catalog titles and the copies stocked for them.

    Copies created here always start Available; their status is changed
    only by the BorrowingService afterwards.
    """

    def __init__(self, store: LibraryStore) -> None:
        self._store = store

    def add_book(
        self,
        isbn: str,
        title: str,
        author: str,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> CatalogBook:
        """
        Add a new title to the catalog.

        Raises:
            InvalidInput: If isbn, title or author is blank, or isbn is too long
            BookAlreadyExists: If the ISBN is already in the catalog
        """
        try:
            book = CatalogBook(
                isbn=(isbn or "").strip(),
                title=(title or "").strip(),
                author=(author or "").strip(),
                description=description,
                image_url=image_url,
            )
        except ValueError as e:
            raise InvalidInput(str(e)) from e

        with self._store.write() as tx:
            if tx.catalog.get(book.isbn) is not None:
                raise BookAlreadyExists(book.isbn)
            try:
                tx.catalog.add(book)
            except ValueError as e:
                raise BookAlreadyExists(book.isbn) from e

        logger.info(f"Added book: isbn={book.isbn}, title='{book.title}'")
        return book

    def stock_copy(self, isbn: str) -> Copy:
        """
        Stock in one new Available copy of a catalog title.

        Raises:
            BookNotFound: If the ISBN is not in the catalog
        """
        with self._store.write() as tx:
            if tx.catalog.get(isbn) is None:
                raise BookNotFound(isbn)
            copy = tx.inventory.add(
                Copy(copy_id=None, isbn=isbn, status=CopyStatus.AVAILABLE, stored_at=datetime.now(UTC))
            )

        logger.info(f"Stocked copy: copy_id={copy.copy_id}, isbn={isbn}")
        return copy

    def get_book(self, isbn: str) -> CatalogBook:
        """
        Retrieve a title by ISBN.

        Raises:
            BookNotFound: If the ISBN is not in the catalog
        """
        with self._store.read() as tx:
            book = tx.catalog.get(isbn)
        if book is None:
            raise BookNotFound(isbn)
        return book

    def find_by_title(self, title: str) -> List[CatalogBook]:
        with self._store.read() as tx:
            return tx.catalog.find_by_title(title.strip())

    def find_by_author(self, author: str) -> List[CatalogBook]:
        with self._store.read() as tx:
            return tx.catalog.find_by_author(author.strip())

    def list_books_with_inventory(self) -> List[BookInventory]:
        """Return every title with its total and available copy counts."""
        with self._store.read() as tx:
            books = tx.catalog.list_all()
            counts = tx.inventory.counts_by_isbn()

        result = []
        for book in books:
            total, available = counts.get(book.isbn, (0, 0))
            result.append(BookInventory(
                isbn=book.isbn,
                title=book.title,
                author=book.author,
                description=book.description,
                image_url=book.image_url,
                total_copies=total,
                available_copies=available,
            ))
        return result

    def seed_if_empty(
        self,
        books: Sequence[CatalogBook],
        copies_per_book: int = 1,
    ) -> SeedSummary:
        """
        Insert default titles, each with Available copies.

        Does nothing if the catalog already holds at least one title. The
        whole seed runs in one transaction.

        Args:
            books: Titles to insert
            copies_per_book: Number of copies to stock per title

        Raises:
            InvalidInput: If copies_per_book is negative
            BookAlreadyExists: If an ISBN appears twice in books (nothing
                is inserted)
        """
        if copies_per_book < 0:
            raise InvalidInput(f"copies_per_book cannot be negative, got {copies_per_book}")

        with self._store.write() as tx:
            if tx.catalog.count() > 0:
                logger.info("Catalog already populated, skipping seed")
                return SeedSummary(n_books=0, n_copies=0, skipped=True)

            now = datetime.now(UTC)
            for book in books:
                try:
                    tx.catalog.add(book)
                except ValueError as e:
                    raise BookAlreadyExists(book.isbn) from e
                for _ in range(copies_per_book):
                    tx.inventory.add(Copy(copy_id=None, isbn=book.isbn, stored_at=now))

        n_copies = len(books) * copies_per_book
        logger.info(f"Seeded catalog with {len(books)} books and {n_copies} copies")
        return SeedSummary(n_books=len(books), n_copies=n_copies)
