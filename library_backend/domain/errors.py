"""
Domain error taxonomy.

Every failure the domain reports to a caller is a LibraryError subclass
carrying a stable machine-readable ``code`` and a ``category``. The API
layer maps categories to HTTP status codes; the domain never does.

Categories:
    NotFound      - a referenced user, copy, book or loan does not exist
    Conflict      - the request is valid but clashes with current state
    Unauthorized  - missing or invalid identity
    Invalid       - malformed input rejected before touching state
    Internal      - storage/transport failure (caller may retry)
"""

from enum import Enum


class ErrorCategory(str, Enum):
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"
    INVALID = "Invalid"
    INTERNAL = "Internal"


class LibraryError(Exception):
    """Base class for all domain failures."""

    code: str = "library_error"
    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------


class NotFoundError(LibraryError):
    category = ErrorCategory.NOT_FOUND
    code = "not_found"


class UserNotFound(NotFoundError):
    code = "user_not_found"

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} does not exist")
        self.user_id = user_id


class CopyNotFound(NotFoundError):
    code = "copy_not_found"

    def __init__(self, copy_id: int) -> None:
        super().__init__(f"Copy {copy_id} does not exist")
        self.copy_id = copy_id


class BookNotFound(NotFoundError):
    code = "book_not_found"

    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with isbn '{isbn}' does not exist")
        self.isbn = isbn


class NoActiveLoan(NotFoundError):
    code = "no_active_loan"

    def __init__(self, copy_id: int) -> None:
        super().__init__(f"No active loan found for copy {copy_id}")
        self.copy_id = copy_id


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------


class ConflictError(LibraryError):
    category = ErrorCategory.CONFLICT
    code = "conflict"


class CopyNotAvailable(ConflictError):
    code = "not_available"

    def __init__(self, copy_id: int, status: str) -> None:
        super().__init__(f"Copy {copy_id} is not available (current status: {status})")
        self.copy_id = copy_id
        self.status = status


class AlreadyBorrowedBySelf(ConflictError):
    code = "already_borrowed_self"

    def __init__(self, copy_id: int) -> None:
        super().__init__(f"You have already borrowed copy {copy_id}")
        self.copy_id = copy_id


class AlreadyBorrowedByOther(ConflictError):
    code = "already_borrowed_other"

    def __init__(self, copy_id: int) -> None:
        super().__init__(f"Copy {copy_id} is already on loan")
        self.copy_id = copy_id


class NotBorrower(ConflictError):
    """Raised when someone other than the borrower tries to close a loan."""

    code = "not_borrower"

    def __init__(self, copy_id: int) -> None:
        # Deliberately does not include the actual borrower's id.
        super().__init__(f"You have not borrowed copy {copy_id}")
        self.copy_id = copy_id


class BookAlreadyExists(ConflictError):
    code = "book_exists"

    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with isbn '{isbn}' already exists")
        self.isbn = isbn


class PhoneNumberTaken(ConflictError):
    code = "phone_number_taken"

    def __init__(self) -> None:
        super().__init__("Phone number is already registered")


# ---------------------------------------------------------------------------
# Unauthorized
# ---------------------------------------------------------------------------


class UnauthorizedError(LibraryError):
    category = ErrorCategory.UNAUTHORIZED
    code = "unauthorized"


class InvalidCredentials(UnauthorizedError):
    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid phone number or password")


class InvalidToken(UnauthorizedError):
    code = "invalid_token"

    def __init__(self, message: str = "Missing or invalid token") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Invalid / Internal
# ---------------------------------------------------------------------------


class InvalidInput(LibraryError):
    category = ErrorCategory.INVALID
    code = "invalid_input"


class StorageError(LibraryError):
    """Storage or transport failure. Safe for the caller to retry."""

    category = ErrorCategory.INTERNAL
    code = "storage_error"
