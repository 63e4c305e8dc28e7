"""
Domain service for the borrow/return workflow.

=============================================================================
NOTES: The borrowing state machine
=============================================================================

Each copy is in one of two states:

    Available --(borrow)--> Borrowed --(return by the borrower)--> Available

No other transition exists. The copy status is a cached projection of the
loan ledger (Borrowed iff an open loan references the copy), so the status
write and the ledger write always happen in the same write transaction,
together with every precondition check they depend on:

    BEGIN (serialized per copy)
      check user, copy, status, open loans
      write ledger + write status
    COMMIT

A failed precondition raises before any write and the transaction rolls
back, so a refused borrow/return leaves the state untouched.

=============================================================================
"""

import logging
from datetime import datetime, UTC
from typing import Callable, Dict, List, Optional

from library_backend.domain.entities import CatalogBook, Copy, CopyStatus, LoanRecord, is_valid_id
from library_backend.domain.errors import (
    AlreadyBorrowedByOther,
    AlreadyBorrowedBySelf,
    CopyNotAvailable,
    CopyNotFound,
    LibraryError,
    NoActiveLoan,
    NotBorrower,
    UserNotFound,
)
from library_backend.domain.ports import LibraryStore, LibraryTransaction
from library_backend.domain.value_objects import AvailableCopy, LoanView

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BorrowingService:
    """
    Orchestrates borrow and return against the inventory and the loan ledger.

    The service enforces:
    - at most one open loan per copy
    - copy status Borrowed iff an open loan exists for it
    - at most one open loan per (user, copy)
    - only the borrower may close a loan
    - borrowed_at <= returned_at

    Business-rule failures are raised as typed LibraryError subclasses and are
    never retried here. Storage failures surface as StorageError and are the
    caller's decision to retry.

    Usage:
        service = BorrowingService(store=sqlite_store)
        record = service.borrow(user_id=1, copy_id=42)
        service.return_copy(user_id=1, copy_id=42)
    """

    def __init__(
        self,
        store: LibraryStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the borrowing service.

        Args:
            store: Transactional access to inventory, ledger and users
            clock: Source of "now" for loan timestamps (defaults to UTC wall clock)
        """
        self._store = store
        self._clock = clock or _utcnow

    # -------------------------------------------------------------------------
    # State-changing operations
    # -------------------------------------------------------------------------

    def borrow(self, user_id: int, copy_id: int) -> LoanRecord:
        """
        Check out a copy for a user.

        Preconditions are checked in order, each failing fast:
        1. the user exists
        2. the copy exists
        3. the copy is Available
        4. the user has no open loan on this copy
        5. nobody has an open loan on this copy

        Args:
            user_id: The authenticated caller
            copy_id: The copy to borrow

        Returns:
            The newly opened loan record

        Raises:
            UserNotFound: Step 1 failed
            CopyNotFound: Step 2 failed
            CopyNotAvailable: Step 3 failed (message carries the current status)
            AlreadyBorrowedBySelf: Step 4 failed
            AlreadyBorrowedByOther: Step 5 failed, or the ledger rejected a
                second open loan for the copy
            StorageError: If the storage layer fails
        """
        try:
            with self._store.write() as tx:
                self._check_can_borrow(tx, user_id, copy_id)

                try:
                    record = tx.ledger.open_loan(user_id, copy_id, self._clock())
                except ValueError as e:
                    raise AlreadyBorrowedByOther(copy_id) from e

                tx.inventory.set_status(copy_id, CopyStatus.BORROWED)
        except LibraryError as e:
            logger.warning(
                f"Borrow refused: user_id={user_id}, copy_id={copy_id}, code={e.code}"
            )
            raise

        logger.info(
            f"Borrowed: record_id={record.record_id}, user_id={user_id}, copy_id={copy_id}"
        )
        return record

    def return_copy(self, user_id: int, copy_id: int) -> LoanRecord:
        """
        Close the caller's open loan on a copy.

        Args:
            user_id: The authenticated caller
            copy_id: The copy being returned

        Returns:
            The closed loan record

        Raises:
            NoActiveLoan: No open loan exists for the copy
            NotBorrower: The open loan belongs to another user
            StorageError: If the storage layer fails
        """
        try:
            if not is_valid_id(copy_id):
                raise NoActiveLoan(copy_id)

            with self._store.write() as tx:
                record = tx.ledger.find_open_by_copy(copy_id)
                if record is None:
                    raise NoActiveLoan(copy_id)

                if record.user_id != user_id:
                    raise NotBorrower(copy_id)

                closed = record.close(self._clock())
                try:
                    tx.ledger.close_loan(closed)
                except ValueError as e:
                    raise NoActiveLoan(copy_id) from e
                tx.inventory.set_status(copy_id, CopyStatus.AVAILABLE)
        except LibraryError as e:
            logger.warning(
                f"Return refused: user_id={user_id}, copy_id={copy_id}, code={e.code}"
            )
            raise

        logger.info(
            f"Returned: record_id={closed.record_id}, user_id={user_id}, copy_id={copy_id}"
        )
        return closed

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_history(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[LoanRecord]:
        """
        Return every loan of a user, newest borrowed_at first.

        Args:
            user_id: The borrower
            limit: Optional page size (None returns everything)
            offset: Number of records to skip
        """
        with self._store.read() as tx:
            return tx.ledger.list_by_user(user_id, limit=limit, offset=offset)

    def get_active_loans(self, user_id: int) -> List[LoanRecord]:
        """Return the open loans of a user."""
        with self._store.read() as tx:
            return tx.ledger.list_open_by_user(user_id)

    def is_available(self, copy_id: int) -> bool:
        """
        Check whether a copy can be borrowed right now.

        An unknown copy_id returns False rather than raising: callers treat
        "unknown" the same as "not available". Ids outside the storable
        range are unknown by definition.
        """
        if not is_valid_id(copy_id):
            return False

        with self._store.read() as tx:
            copy = tx.inventory.get(copy_id)
        return copy is not None and copy.is_available()

    def list_available(self) -> List[Copy]:
        """Return all Available copies."""
        with self._store.read() as tx:
            return tx.inventory.list_by_status(CopyStatus.AVAILABLE)

    def list_available_details(self) -> List[AvailableCopy]:
        """Return all Available copies joined with their catalog metadata."""
        with self._store.read() as tx:
            copies = tx.inventory.list_by_status(CopyStatus.AVAILABLE)
            books = self._load_books(tx, {c.isbn for c in copies})

        result = []
        for copy in copies:
            book = books.get(copy.isbn)
            result.append(AvailableCopy(
                copy_id=copy.copy_id,
                isbn=copy.isbn,
                stored_at=copy.stored_at,
                title=book.title if book else None,
                author=book.author if book else None,
                description=book.description if book else None,
                image_url=book.image_url if book else None,
            ))
        return result

    def describe_loans(self, records: List[LoanRecord]) -> List[LoanView]:
        """
        Enrich loan records with the borrowed copy's catalog metadata.

        Missing copies or titles leave the corresponding fields as None.
        """
        if not records:
            return []

        with self._store.read() as tx:
            copies: Dict[int, Optional[Copy]] = {
                copy_id: tx.inventory.get(copy_id)
                for copy_id in {r.copy_id for r in records}
            }
            isbns = {c.isbn for c in copies.values() if c is not None}
            books = self._load_books(tx, isbns)

        views = []
        for record in records:
            copy = copies.get(record.copy_id)
            book = books.get(copy.isbn) if copy else None
            views.append(LoanView(
                record=record,
                isbn=copy.isbn if copy else None,
                title=book.title if book else None,
                author=book.author if book else None,
            ))
        return views

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_can_borrow(self, tx: LibraryTransaction, user_id: int, copy_id: int) -> None:
        if not is_valid_id(user_id) or not tx.users.exists(user_id):
            raise UserNotFound(user_id)

        if not is_valid_id(copy_id):
            raise CopyNotFound(copy_id)

        copy = tx.inventory.get(copy_id)
        if copy is None:
            raise CopyNotFound(copy_id)

        if not copy.is_available():
            raise CopyNotAvailable(copy_id, copy.status.value)

        if tx.ledger.find_open(user_id, copy_id) is not None:
            raise AlreadyBorrowedBySelf(copy_id)

        # Status and ledger should agree; this guards against a diverged row.
        if tx.ledger.find_open_by_copy(copy_id) is not None:
            raise AlreadyBorrowedByOther(copy_id)

    @staticmethod
    def _load_books(tx: LibraryTransaction, isbns: set) -> Dict[str, CatalogBook]:
        books = {}
        for isbn in isbns:
            book = tx.catalog.get(isbn)
            if book is not None:
                books[isbn] = book
        return books
