"""
Mapping of domain failures to HTTP responses.

The domain raises LibraryError subclasses with a category and a stable code.
This module is the only place that knows which HTTP status each category
becomes.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from library_backend.domain.errors import ErrorCategory, LibraryError

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCategory.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.INTERNAL: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(exc: LibraryError) -> dict:
    return {
        "detail": exc.message,
        "code": exc.code,
        "category": exc.category.value,
    }


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    status_code = STATUS_BY_CATEGORY.get(exc.category, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if exc.category == ErrorCategory.INTERNAL:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
    else:
        logger.debug(f"{request.method} {request.url.path} -> {status_code} {exc.code}")

    headers = None
    if exc.category == ErrorCategory.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(status_code=status_code, content=error_body(exc), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Install the LibraryError handler on an application."""
    app.add_exception_handler(LibraryError, library_error_handler)
