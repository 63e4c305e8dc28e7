"""
Value objects for the domain layer.

Value objects are immutable objects that represent descriptive aspects
of the domain with no conceptual identity. Here they are mostly read
models: loan records and copies joined with catalog metadata for display.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .entities import CopyStatus, LoanRecord


@dataclass(frozen=True)
class LoanView:
    """
    A loan record enriched with the borrowed copy's catalog metadata.

    This is a read-side convenience; the ledger itself stores only ids.
    """

    record: LoanRecord
    """The underlying ledger record"""

    isbn: Optional[str] = None
    """ISBN of the borrowed copy (None if the copy row is missing)"""

    title: Optional[str] = None
    """Catalog title of the borrowed copy"""

    author: Optional[str] = None
    """Catalog author of the borrowed copy"""

    @property
    def is_open(self) -> bool:
        return self.record.is_open()


@dataclass(frozen=True)
class AvailableCopy:
    """An Available copy joined with its catalog entry."""

    copy_id: int
    isbn: str
    stored_at: datetime
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: CopyStatus = CopyStatus.AVAILABLE


@dataclass(frozen=True)
class BookInventory:
    """
    A catalog title with its inventory counts.

    Used for catalog listings that show how many copies can be borrowed.
    """

    isbn: str
    title: str
    author: str
    description: Optional[str]
    image_url: Optional[str]
    total_copies: int
    available_copies: int

    def __post_init__(self) -> None:
        """Validate count constraints."""
        if self.total_copies < 0:
            raise ValueError(f"total_copies cannot be negative, got {self.total_copies}")

        if not (0 <= self.available_copies <= self.total_copies):
            raise ValueError(
                f"available_copies must be between 0 and total_copies ({self.total_copies}), "
                f"got {self.available_copies}"
            )


@dataclass(frozen=True)
class SeedSummary:
    """Outcome of seeding the catalog with default titles."""

    n_books: int
    """Number of titles inserted"""

    n_copies: int
    """Number of copies stocked"""

    skipped: bool = False
    """True if the catalog already had titles and nothing was inserted"""
