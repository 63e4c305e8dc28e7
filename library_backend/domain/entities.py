"""
Domain entities for the library lending system.

Entities are objects with a unique identity that runs through time and
different representations. They are the core building blocks of the domain.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from enum import Enum
from typing import Optional

# Largest id a copy, user or loan record can have (signed 64-bit row id)
MAX_ID = 2**63 - 1


def is_valid_id(value: int) -> bool:
    """Check that an id is within the range storage can hold."""
    return 1 <= value <= MAX_ID


class CopyStatus(str, Enum):
    """Lending state of a physical copy."""

    AVAILABLE = "Available"
    BORROWED = "Borrowed"


@dataclass
class CatalogBook:
    """
    Represents a title in the catalog.

    A title is identified by its ISBN. Lendable units of a title are
    tracked separately as Copy entities.
    """

    isbn: str
    """International Standard Book Number (catalog key)"""

    title: str
    """Book title"""

    author: str
    """Author name as printed on the cover"""

    description: Optional[str] = None
    """Short introduction/summary"""

    image_url: Optional[str] = None
    """URL to the cover image"""

    def __post_init__(self) -> None:
        """Validate book data."""
        if not self.isbn or not self.isbn.strip():
            raise ValueError("Book isbn cannot be empty")

        if len(self.isbn) > 13:
            raise ValueError(f"isbn cannot exceed 13 characters, got '{self.isbn}'")

        if not self.title or not self.title.strip():
            raise ValueError("Book title cannot be empty")

        if not self.author or not self.author.strip():
            raise ValueError("Book author cannot be empty")

    def __eq__(self, other: object) -> bool:
        """Two books are equal if they have the same ISBN."""
        if not isinstance(other, CatalogBook):
            return NotImplemented
        return self.isbn == other.isbn

    def __hash__(self) -> int:
        return hash(self.isbn)


@dataclass
class Copy:
    """
    One lendable physical unit of a catalog title.

    The status is a projection of the loan ledger: it is Borrowed exactly
    when an open LoanRecord references this copy. Only the borrowing
    service changes it, in the same transaction as the ledger write.
    """

    copy_id: Optional[int]
    """Inventory identifier (None until persisted)"""

    isbn: str
    """ISBN of the catalog title this copy belongs to"""

    status: CopyStatus = CopyStatus.AVAILABLE
    """Current lending status"""

    stored_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    """When the copy was stocked in"""

    def is_available(self) -> bool:
        return self.status == CopyStatus.AVAILABLE

    def mark_borrowed(self) -> "Copy":
        return replace(self, status=CopyStatus.BORROWED)

    def mark_available(self) -> "Copy":
        return replace(self, status=CopyStatus.AVAILABLE)


@dataclass
class LoanRecord:
    """
    One borrow transaction in the loan ledger.

    A record is opened by a borrow (returned_at is None) and closed exactly
    once by the matching return. Records are never deleted.
    """

    record_id: Optional[int]
    """Ledger identifier (None until persisted)"""

    user_id: int
    """The borrower; only this user may close the loan"""

    copy_id: int
    """The borrowed copy"""

    borrowed_at: datetime
    """When the copy was checked out"""

    returned_at: Optional[datetime] = None
    """When the copy was returned (None while the loan is open)"""

    def __post_init__(self) -> None:
        """Validate timestamps."""
        if self.returned_at is not None and self.returned_at < self.borrowed_at:
            raise ValueError(
                f"returned_at ({self.returned_at.isoformat()}) cannot be earlier than "
                f"borrowed_at ({self.borrowed_at.isoformat()})"
            )

    def is_open(self) -> bool:
        """Check if the loan has not been returned yet."""
        return self.returned_at is None

    def close(self, at: datetime) -> "LoanRecord":
        """
        Return a closed copy of this record.

        The return timestamp is clamped to borrowed_at so that a clock
        stepping backwards never produces returned_at < borrowed_at.

        Raises:
            ValueError: If the loan is already closed
        """
        if not self.is_open():
            raise ValueError(f"Loan record {self.record_id} is already closed")
        return replace(self, returned_at=max(at, self.borrowed_at))


@dataclass
class User:
    """A registered library member."""

    user_id: Optional[int]
    phone_number: str
    user_name: str
    password_hash: str
    salt: str
    registered_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_login_at: Optional[datetime] = None


@dataclass
class Session:
    """An issued login token bound to a user."""

    token: str
    user_id: int
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
