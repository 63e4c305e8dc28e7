"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the store and services
for use with FastAPI's Depends() system, plus the bearer-token
dependency that resolves the caller's user id.

Note: We use module-level singletons instead of @lru_cache with Depends()
parameters, which is an antipattern that can cause unexpected behavior.
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from library_backend.domain.errors import InvalidToken
from library_backend.domain.ports import LibraryStore
from library_backend.domain.services import BorrowingService, CatalogService, IdentityService
from library_backend.infrastructure.db import SqliteLibraryStore

# Configuration from environment
DB_PATH = Path(os.getenv("DB_PATH", "data/library.db"))
SQLITE_TIMEOUT_SECONDS = float(os.getenv("SQLITE_TIMEOUT_SECONDS", "5.0"))
SESSION_TTL_MINUTES = int(os.getenv("SESSION_TTL_MINUTES", "1440"))

# Module-level singletons (initialized lazily)
_store: Optional[LibraryStore] = None
_borrowing_service: Optional[BorrowingService] = None
_catalog_service: Optional[CatalogService] = None
_identity_service: Optional[IdentityService] = None

_bearer = HTTPBearer(auto_error=False)


def get_store() -> LibraryStore:
    """Provide a singleton instance of the SQLite store."""
    global _store
    if _store is None:
        _store = SqliteLibraryStore(DB_PATH, timeout=SQLITE_TIMEOUT_SECONDS)
    return _store


def get_borrowing_service() -> BorrowingService:
    """Provide the Borrowing Service wired to the store."""
    global _borrowing_service
    if _borrowing_service is None:
        _borrowing_service = BorrowingService(store=get_store())
    return _borrowing_service


def get_catalog_service() -> CatalogService:
    """Provide the Catalog Service wired to the store."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService(store=get_store())
    return _catalog_service


def get_identity_service() -> IdentityService:
    """Provide the Identity Service wired to the store."""
    global _identity_service
    if _identity_service is None:
        _identity_service = IdentityService(
            store=get_store(),
            session_ttl=timedelta(minutes=SESSION_TTL_MINUTES),
        )
    return _identity_service


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    """Extract the bearer token, raising InvalidToken if absent."""
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Missing Authorization bearer token")
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_bearer_token),
    identity: IdentityService = Depends(get_identity_service),
) -> int:
    """Resolve the caller's user id from the bearer token."""
    return identity.authenticate(token)


def configure(store: LibraryStore, session_ttl: Optional[timedelta] = None) -> None:
    """
    Wire all services to an explicit store.

    Used by tests and by the application factory to replace the
    environment-configured database.
    """
    global _store, _borrowing_service, _catalog_service, _identity_service

    _store = store
    _borrowing_service = BorrowingService(store=store)
    _catalog_service = CatalogService(store=store)
    _identity_service = IdentityService(
        store=store,
        session_ttl=session_ttl or timedelta(minutes=SESSION_TTL_MINUTES),
    )


def reset_dependencies() -> None:
    """
    Reset all singletons. Useful for testing.

    This allows tests to inject other dependencies by resetting
    the module state between test cases.
    """
    global _store, _borrowing_service, _catalog_service, _identity_service

    _store = None
    _borrowing_service = None
    _catalog_service = None
    _identity_service = None
