"""
Domain layer - Core business logic and entities.

This layer contains the business entities, value objects, and defines
the ports (interfaces) that the infrastructure layer must implement.

It has NO dependencies on external frameworks, databases, or APIs.
"""

from .entities import CatalogBook, Copy, CopyStatus, LoanRecord, User, Session
from .value_objects import LoanView, AvailableCopy, BookInventory, SeedSummary

__all__ = [
    # Entities
    "CatalogBook",
    "Copy",
    "CopyStatus",
    "LoanRecord",
    "User",
    "Session",
    # Value Objects
    "LoanView",
    "AvailableCopy",
    "BookInventory",
    "SeedSummary",
]
