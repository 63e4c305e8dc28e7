"""
API endpoints for borrowing and returning copies.

This module defines the FastAPI routes of the borrow/return workflow. It
handles HTTP concerns (identity, request schemas, response models) and
delegates every decision to the BorrowingService. Domain failures propagate
as LibraryError and are turned into error responses by the handlers in
error_handlers.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from library_backend.domain.entities import MAX_ID
from library_backend.domain.services import BorrowingService
from library_backend.api.v1 import schemas as api
from library_backend.api.v1.converters import (
    domain_available_copy_to_api,
    domain_loan_view_to_api,
    domain_loan_views_to_api,
)
from library_backend.api.v1.dependencies import get_borrowing_service, get_current_user_id

router = APIRouter(prefix="/borrowing")

_ERRORS = {
    401: {"model": api.ErrorResponse},
    404: {"model": api.ErrorResponse},
    409: {"model": api.ErrorResponse},
}


@router.post(
    "/borrow",
    response_model=api.LoanRecord,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def borrow_copy(
    request: api.CopyRequest,
    user_id: int = Depends(get_current_user_id),
    service: BorrowingService = Depends(get_borrowing_service),
) -> api.LoanRecord:
    """
    Borrow a copy for the authenticated user.

    Returns:
        The opened loan record with the copy's catalog metadata

    Raises:
        404: User or copy not found
        409: Copy not available, or already on loan
    """
    record = service.borrow(user_id, request.copy_id)
    [view] = service.describe_loans([record])
    return domain_loan_view_to_api(view)


@router.post("/return", response_model=api.LoanRecord, responses=_ERRORS)
def return_copy(
    request: api.CopyRequest,
    user_id: int = Depends(get_current_user_id),
    service: BorrowingService = Depends(get_borrowing_service),
) -> api.LoanRecord:
    """
    Return a copy borrowed by the authenticated user.

    Raises:
        404: No active loan for the copy
        409: The active loan belongs to another user
    """
    record = service.return_copy(user_id, request.copy_id)
    [view] = service.describe_loans([record])
    return domain_loan_view_to_api(view)


@router.get("/history", response_model=api.LoanList, responses={401: {"model": api.ErrorResponse}})
def get_history(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0, le=MAX_ID),
    user_id: int = Depends(get_current_user_id),
    service: BorrowingService = Depends(get_borrowing_service),
) -> api.LoanList:
    """All loans of the authenticated user, newest first."""
    records = service.get_history(user_id, limit=limit, offset=offset)
    return domain_loan_views_to_api(service.describe_loans(records))


@router.get("/active", response_model=api.LoanList, responses={401: {"model": api.ErrorResponse}})
def get_active_loans(
    user_id: int = Depends(get_current_user_id),
    service: BorrowingService = Depends(get_borrowing_service),
) -> api.LoanList:
    """Loans of the authenticated user that have not been returned."""
    records = service.get_active_loans(user_id)
    return domain_loan_views_to_api(service.describe_loans(records))


@router.get("/available", response_model=api.AvailableCopyList)
def list_available_copies(
    service: BorrowingService = Depends(get_borrowing_service),
) -> api.AvailableCopyList:
    """All copies that can be borrowed right now. No identity required."""
    copies = [domain_available_copy_to_api(c) for c in service.list_available_details()]
    return api.AvailableCopyList(copies=copies, total_count=len(copies))


@router.get("/availability/{copy_id}", response_model=api.Availability)
def check_availability(
    copy_id: int = Path(ge=1, le=MAX_ID),
    service: BorrowingService = Depends(get_borrowing_service),
) -> api.Availability:
    """
    Check whether a copy can be borrowed.

    Unknown copy ids report is_available=false rather than 404. Ids outside
    the storable range are rejected by validation (422).
    """
    return api.Availability(copy_id=copy_id, is_available=service.is_available(copy_id))
