"""
API endpoints for the catalog and stock-in of copies.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from library_backend.domain.errors import InvalidInput
from library_backend.domain.services import CatalogService
from library_backend.api.v1 import schemas as api
from library_backend.api.v1.converters import (
    domain_book_inventory_to_api,
    domain_book_to_api,
    domain_copy_to_api,
)
from library_backend.api.v1.dependencies import get_catalog_service, get_current_user_id

router = APIRouter(prefix="/books")


@router.get("", response_model=list[api.BookWithInventory])
def list_books(
    service: CatalogService = Depends(get_catalog_service),
) -> list[api.BookWithInventory]:
    """All catalog titles with their total and available copy counts."""
    return [domain_book_inventory_to_api(b) for b in service.list_books_with_inventory()]


@router.get("/search", response_model=list[api.Book], responses={400: {"model": api.ErrorResponse}})
def search_books(
    title: Optional[str] = Query(default=None, min_length=1),
    author: Optional[str] = Query(default=None, min_length=1),
    service: CatalogService = Depends(get_catalog_service),
) -> list[api.Book]:
    """
    Look up titles by exact title or exact author (case-insensitive).

    Exactly one of title/author must be given.
    """
    if (title is None) == (author is None):
        raise InvalidInput("Provide exactly one of 'title' or 'author'")

    books = service.find_by_title(title) if title is not None else service.find_by_author(author)
    return [domain_book_to_api(b) for b in books]


@router.get("/{isbn}", response_model=api.Book, responses={404: {"model": api.ErrorResponse}})
def get_book(
    isbn: str,
    service: CatalogService = Depends(get_catalog_service),
) -> api.Book:
    """Get a catalog title by ISBN."""
    return domain_book_to_api(service.get_book(isbn))


@router.post(
    "",
    response_model=api.Book,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": api.ErrorResponse}, 409: {"model": api.ErrorResponse}},
)
def add_book(
    request: api.AddBookRequest,
    user_id: int = Depends(get_current_user_id),
    service: CatalogService = Depends(get_catalog_service),
) -> api.Book:
    """Add a title to the catalog. Requires a logged-in user."""
    book = service.add_book(
        isbn=request.isbn,
        title=request.title,
        author=request.author,
        description=request.description,
        image_url=request.image_url,
    )
    return domain_book_to_api(book)


@router.post(
    "/{isbn}/copies",
    response_model=api.Copy,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": api.ErrorResponse}},
)
def stock_copy(
    isbn: str,
    user_id: int = Depends(get_current_user_id),
    service: CatalogService = Depends(get_catalog_service),
) -> api.Copy:
    """Stock in one new Available copy of a title. Requires a logged-in user."""
    return domain_copy_to_api(service.stock_copy(isbn))
