"""
Request and response models for the v1 API.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from library_backend.domain.entities import MAX_ID


class StrictRequest(BaseModel):
    """Base for request bodies: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


# -----------------------------------------------------------------------------
# Auth
# -----------------------------------------------------------------------------


class RegisterRequest(StrictRequest):
    """Request body for POST /auth/register."""

    phone_number: str = Field(description="Mobile number, 10 digits starting with 09")
    password: str = Field(description="At least 6 characters")
    user_name: str = Field(description="Display name, 2-20 characters")


class LoginRequest(StrictRequest):
    """Request body for POST /auth/login."""

    phone_number: str
    password: str


class UserSummary(BaseModel):
    user_id: int
    user_name: str
    phone_number: str
    registered_at: datetime
    last_login_at: datetime | None = None


class LoginResponse(BaseModel):
    token: str = Field(description="Send as 'Authorization: Bearer <token>'")
    token_type: Literal["bearer"] = "bearer"
    expires_at: datetime
    user: UserSummary


# -----------------------------------------------------------------------------
# Borrowing
# -----------------------------------------------------------------------------


class CopyRequest(StrictRequest):
    """
    Request body for POST /borrowing/borrow and /borrowing/return.

    The user is taken from the bearer token, never from the body.
    """

    copy_id: int = Field(ge=1, le=MAX_ID, description="Inventory id of the copy")


class LoanRecord(BaseModel):
    """A loan record enriched with catalog metadata."""

    record_id: int
    user_id: int
    copy_id: int
    borrowed_at: datetime
    returned_at: datetime | None = Field(default=None, description="None while the loan is open")
    is_open: bool
    isbn: str | None = None
    title: str | None = None
    author: str | None = None


class LoanList(BaseModel):
    loans: list[LoanRecord]
    count: int = Field(ge=0)


class AvailableCopy(BaseModel):
    copy_id: int
    isbn: str
    status: Literal["Available", "Borrowed"]
    stored_at: datetime
    title: str | None = None
    author: str | None = None
    description: str | None = None
    image_url: str | None = None


class AvailableCopyList(BaseModel):
    copies: list[AvailableCopy]
    total_count: int = Field(ge=0)


class Availability(BaseModel):
    copy_id: int
    is_available: bool


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------


class AddBookRequest(StrictRequest):
    """Request body for POST /books."""

    isbn: str = Field(min_length=1, max_length=13)
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    description: str | None = None
    image_url: str | None = None


class Book(BaseModel):
    isbn: str
    title: str
    author: str
    description: str | None = None
    image_url: str | None = None


class BookWithInventory(Book):
    total_copies: int = Field(ge=0)
    available_copies: int = Field(ge=0)


class Copy(BaseModel):
    copy_id: int
    isbn: str
    status: Literal["Available", "Borrowed"]
    stored_at: datetime


# -----------------------------------------------------------------------------
# Errors / health
# -----------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Body returned for every domain failure."""

    detail: str = Field(description="Human-readable message")
    code: str = Field(description="Stable machine-readable code, e.g. 'not_available'")
    category: Literal["NotFound", "Conflict", "Unauthorized", "Invalid", "Internal"]


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    storage: bool
