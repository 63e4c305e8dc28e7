"""
Converters between domain entities/value objects and API schemas.

This module centralizes all conversion logic between the domain layer
and the API layer, maintaining clean separation of concerns.
"""

from dataclasses import asdict

from library_backend.domain import entities as domain
from library_backend.domain import value_objects as domain_vo
from library_backend.api.v1 import schemas as api


def domain_user_to_api(user: domain.User) -> api.UserSummary:
    """Convert a domain User to its public summary (no credentials)."""
    return api.UserSummary(
        user_id=user.user_id,
        user_name=user.user_name,
        phone_number=user.phone_number,
        registered_at=user.registered_at,
        last_login_at=user.last_login_at,
    )


def domain_session_to_api(session: domain.Session, user: domain.User) -> api.LoginResponse:
    return api.LoginResponse(
        token=session.token,
        expires_at=session.expires_at,
        user=domain_user_to_api(user),
    )


def domain_loan_view_to_api(view: domain_vo.LoanView) -> api.LoanRecord:
    """
    Convert an enriched LoanView to an API LoanRecord.

    Args:
        view: Loan record joined with catalog metadata

    Returns:
        API LoanRecord model
    """
    record = view.record
    return api.LoanRecord(
        record_id=record.record_id,
        user_id=record.user_id,
        copy_id=record.copy_id,
        borrowed_at=record.borrowed_at,
        returned_at=record.returned_at,
        is_open=record.is_open(),
        isbn=view.isbn,
        title=view.title,
        author=view.author,
    )


def domain_loan_views_to_api(views: list[domain_vo.LoanView]) -> api.LoanList:
    loans = [domain_loan_view_to_api(v) for v in views]
    return api.LoanList(loans=loans, count=len(loans))


def domain_available_copy_to_api(copy: domain_vo.AvailableCopy) -> api.AvailableCopy:
    copy_dict = asdict(copy)
    copy_dict["status"] = copy.status.value
    return api.AvailableCopy(**copy_dict)


def domain_book_to_api(book: domain.CatalogBook) -> api.Book:
    """Convert a domain CatalogBook to an API Book model."""
    return api.Book(**asdict(book))


def domain_book_inventory_to_api(book: domain_vo.BookInventory) -> api.BookWithInventory:
    return api.BookWithInventory(**asdict(book))


def domain_copy_to_api(copy: domain.Copy) -> api.Copy:
    return api.Copy(
        copy_id=copy.copy_id,
        isbn=copy.isbn,
        status=copy.status.value,
        stored_at=copy.stored_at,
    )
