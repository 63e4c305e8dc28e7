"""
Port interfaces (protocols) for the domain layer.

Ports define the contracts between the domain and infrastructure layers.
They are implemented by adapters in the infrastructure layer, allowing
the domain to remain independent of technical details.

Following Hexagonal Architecture principles, the domain layer depends only
on these abstract protocols, never on concrete implementations.

The repositories below are bound to one storage transaction. Services never
instantiate them directly: they open a transaction on a LibraryStore and use
the repositories it exposes, so that every read and write of one use case
shares the same isolation scope.
"""

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol, List, Optional, Dict, Tuple

from .entities import CatalogBook, Copy, CopyStatus, LoanRecord, User, Session


class CatalogRepository(Protocol):
    """
    Port for book metadata keyed by ISBN.

    The catalog is read-mostly and is a leaf dependency of the inventory:
    copies reference catalog titles by ISBN.
    """

    def add(self, book: CatalogBook) -> None:
        """
        Insert a new title.

        Args:
            book: The title to persist

        Raises:
            ValueError: If a title with the same ISBN already exists
            StorageError: If a database error occurs
        """
        ...

    def get(self, isbn: str) -> Optional[CatalogBook]:
        """
        Retrieve a title by ISBN.

        Returns:
            The CatalogBook if found, None otherwise
        """
        ...

    def find_by_title(self, title: str) -> List[CatalogBook]:
        """Return titles whose title matches exactly, ignoring case."""
        ...

    def find_by_author(self, author: str) -> List[CatalogBook]:
        """Return titles whose author matches exactly, ignoring case."""
        ...

    def list_all(self) -> List[CatalogBook]:
        """Return every title ordered by ISBN."""
        ...

    def count(self) -> int:
        """Get the total number of titles in the catalog."""
        ...


class InventoryRepository(Protocol):
    """
    Port for lendable copies and their status.

    One row per physical copy. The status column is owned by the borrowing
    service; stocking creates copies but never changes existing ones.
    """

    def add(self, copy: Copy) -> Copy:
        """
        Stock in a new copy.

        Args:
            copy: The copy to persist (copy_id is ignored and assigned)

        Returns:
            The persisted copy with its assigned copy_id

        Raises:
            ValueError: If the copy references an unknown ISBN
            StorageError: If a database error occurs
        """
        ...

    def get(self, copy_id: int) -> Optional[Copy]:
        """
        Retrieve a copy by id.

        Returns:
            The Copy if found, None otherwise
        """
        ...

    def set_status(self, copy_id: int, status: CopyStatus) -> None:
        """
        Overwrite the status of a copy.

        Only the borrowing service calls this, inside the same write
        transaction as the matching ledger write.

        Raises:
            StorageError: If the copy row does not exist or the write fails
        """
        ...

    def list_by_status(self, status: CopyStatus) -> List[Copy]:
        """Return all copies in the given status, ordered by copy_id."""
        ...

    def list_by_isbn(self, isbn: str) -> List[Copy]:
        """Return all copies of a title, ordered by copy_id."""
        ...

    def counts_by_isbn(self) -> Dict[str, Tuple[int, int]]:
        """
        Aggregate inventory per title.

        Returns:
            Mapping of ISBN to (total copies, available copies). Titles with
            no copies are absent from the mapping.
        """
        ...


class LoanLedger(Protocol):
    """
    Port for the append-mostly log of borrow transactions.

    Implementations must guarantee that at most one open record exists per
    copy (returned_at IS NULL); a second open record for the same copy must
    be rejected at insert time.
    """

    def open_loan(self, user_id: int, copy_id: int, borrowed_at: datetime) -> LoanRecord:
        """
        Insert a new open loan record.

        Args:
            user_id: The borrower
            copy_id: The borrowed copy
            borrowed_at: Checkout timestamp

        Returns:
            The persisted record with its assigned record_id

        Raises:
            ValueError: If an open record for copy_id already exists
            StorageError: If a database error occurs
        """
        ...

    def close_loan(self, record: LoanRecord) -> None:
        """
        Persist the return timestamp of a record.

        Args:
            record: A record whose returned_at has been set

        Raises:
            ValueError: If the record is not open in storage
            StorageError: If a database error occurs
        """
        ...

    def find_open_by_copy(self, copy_id: int) -> Optional[LoanRecord]:
        """Return the open record for a copy, or None."""
        ...

    def find_open(self, user_id: int, copy_id: int) -> Optional[LoanRecord]:
        """Return the open record of this user for this copy, or None."""
        ...

    def list_by_user(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[LoanRecord]:
        """
        Return all records of a user, open and closed.

        Records are ordered newest borrowed_at first (ties broken by
        record_id, newest first).

        Args:
            user_id: The borrower
            limit: Optional maximum number of records
            offset: Number of records to skip
        """
        ...

    def list_open_by_user(self, user_id: int) -> List[LoanRecord]:
        """Return the open records of a user."""
        ...


class UserRepository(Protocol):
    """Port for registered users."""

    def add(self, user: User) -> User:
        """
        Insert a user and return it with its assigned user_id.

        Raises:
            ValueError: If the phone number is already registered
        """
        ...

    def get(self, user_id: int) -> Optional[User]:
        ...

    def get_by_phone(self, phone_number: str) -> Optional[User]:
        ...

    def exists(self, user_id: int) -> bool:
        ...

    def touch_login(self, user_id: int, at: datetime) -> None:
        """Record a successful login."""
        ...


class SessionRepository(Protocol):
    """Port for issued login tokens."""

    def add(self, session: Session) -> None:
        ...

    def get(self, token: str) -> Optional[Session]:
        ...

    def delete(self, token: str) -> bool:
        """Remove a token. Returns True if it existed."""
        ...

    def delete_expired(self, now: datetime) -> int:
        """Remove expired tokens. Returns the number removed."""
        ...


class LibraryTransaction(Protocol):
    """
    Repositories bound to one storage transaction.

    Everything done through one LibraryTransaction commits or rolls back
    together.
    """

    catalog: CatalogRepository
    inventory: InventoryRepository
    ledger: LoanLedger
    users: UserRepository
    sessions: SessionRepository


class LibraryStore(Protocol):
    """
    Port for opening transactions on the library's persistent state.

    The write transaction is the critical section of the borrowing state
    machine: implementations must serialize write transactions that touch
    the same copy, so that a check performed inside the transaction still
    holds when the transaction's writes are applied. Read transactions may
    use a weaker isolation level (snapshot/read-committed).
    """

    def write(self) -> AbstractContextManager[LibraryTransaction]:
        """
        Open a serializable write transaction.

        The transaction commits when the block exits normally and rolls back
        when the block raises; the exception propagates unchanged.

        Raises:
            StorageError: If the transaction cannot be started or committed
                (e.g., lock wait timeout)
        """
        ...

    def read(self) -> AbstractContextManager[LibraryTransaction]:
        """Open a read-only transaction over committed state."""
        ...

    def is_ready(self) -> bool:
        """
        Check if the storage is reachable.

        Used for health checks.
        """
        ...
