"""
Domain services package.

Services orchestrate domain logic that doesn't naturally belong to a single
entity. They coordinate between entities and ports to implement use cases.

Following Hexagonal Architecture principles, services depend only on domain
entities, value objects, and port protocols (never on concrete implementations).
"""

from .borrowing_service import BorrowingService
from .catalog_service import CatalogService
from .identity_service import IdentityService

__all__ = [
    "BorrowingService",
    "CatalogService",
    "IdentityService",
]
